"""
Signals
-------

Defines a number of signals that the aiohttp server uses
to set up and tear down the resources of the app.

Each signal must accept an the ``app`` argument.
"""

from aiohttp.abc import Application
from tortoise import Tortoise, connections

from p2pvps import logger


async def initialize_database(app: Application):
    """Initializes and generates the schema for our database."""
    await Tortoise.init(
        db_url=app['database_uri'],
        modules={'models': ['p2pvps.models']},
        use_tz=True,
    )
    await Tortoise.generate_schemas(safe=True)
    logger.info("Connected to %s", app['database_uri'])


async def close_database_connections(app: Application):
    """Closes the open database connections."""
    await connections.close_all()


async def close_service_clients(app: Application):
    """Closes the sessions held open to the other marketplace services."""
    await app['listing_manager'].close()


def register_signals(app, init_database=True):
    """Registers all the signals at the appropriate hooks."""
    if init_database:
        app.on_startup.append(initialize_database)
        app.on_cleanup.append(close_database_connections)

    app.on_cleanup.append(close_service_clients)
