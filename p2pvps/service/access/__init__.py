"""
Small async functions over the tortoise models, so that the views
and managers never build queries themselves.
"""
