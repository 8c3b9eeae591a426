"""
.. autoclasstree:: p2pvps.service

The business logic of the marketplace backend, kept apart from the HTTP API.

- :mod:`~p2pvps.service.proration` splits payments between owner and renter
- :mod:`~p2pvps.service.manager` runs the payment and listing flows
- :mod:`~p2pvps.service.clients` talks to the other marketplace services
- :mod:`~p2pvps.service.access` reads and writes the models
"""
