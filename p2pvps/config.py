import os
from datetime import timedelta

server_mode = os.getenv("SERVER_MODE", "development")
"""The operational mode of the server."""

database_url = os.getenv("DATABASE_URL", "sqlite://db.sqlite3")
"""The tortoise connection string for the document store."""

api_root = "/api"
"""The base url for the api."""

jwt_secret = os.getenv("JWT_SECRET", "development-secret")
"""The key used to sign the issued JWTs."""

jwt_lifetime = timedelta(hours=int(os.getenv("JWT_LIFETIME_HOURS", "24")))
"""How long an issued JWT stays valid."""

rental_period = timedelta(hours=int(os.getenv("RENTAL_PERIOD_HOURS", "24")))
"""The length of time a single rental payment covers."""

listing_price = int(os.getenv("LISTING_PRICE", "3"))
"""The price set on new marketplace listings."""

listing_lifetime = timedelta(days=30)
"""How long a new market listing stays up for."""

renewal_listing_lifetime = timedelta(hours=1)
"""How long a renewal listing stays up for."""

auth_url = os.getenv("AUTH_URL", "http://localhost:5000")
"""The base url of the auth service the admin logs in to."""

obcontract_url = os.getenv("OBCONTRACT_URL", "http://localhost:5000/obcontract")
"""The base url of the ob-contract service."""

openbazaar_url = os.getenv("OPENBAZAAR_URL", "http://localhost:3000/api/ob")
"""The base url of the OpenBazaar integration."""

port_control_url = os.getenv("PORT_CONTROL_URL", "http://localhost:3000/api/portcontrol")
"""The base url of the port control allocator."""

admin_username = os.getenv("ADMIN_USERNAME")
"""The system admin username."""

admin_password = os.getenv("ADMIN_PASSWORD")
"""The system admin password."""

client_timeout = float(os.getenv("CLIENT_TIMEOUT", "10"))
"""Total timeout (in seconds) for calls to the other services."""

breaker_fail_max = int(os.getenv("BREAKER_FAIL_MAX", "5"))
"""Consecutive failures before a service's circuit opens."""

breaker_reset_timeout = timedelta(seconds=int(os.getenv("BREAKER_RESET_SECONDS", "60")))
"""How long an open circuit waits before letting a call through."""

sentry_dsn = os.getenv("SENTRY_DSN")
"""The sentry DSN. Exception tracking is disabled when unset."""
