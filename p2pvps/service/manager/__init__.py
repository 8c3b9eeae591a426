"""
The managers hold the long-lived state of the system, along with
the clients they need to reach the other marketplace services.
"""
