"""
.. autoclasstree:: p2pvps.views

The HTTP API of the marketplace backend.

Resources
---------

- ``/auth`` exchanges a username and password for a token
- ``/users`` are the people who own and rent devices
- ``/devices`` are the machines put up for rent, along with their
  payments (``/payments``), check in (``/register``), and market
  listing (``/listing``)

Every response other than a 204 is JSend formatted JSON. A token is
given as ``Authorization: Bearer $TOKEN``.
"""

import aiohttp_cors
from aiohttp.abc import Application

from p2pvps import logger
from .auth import AuthView
from .base import ALLOW_ALL
from .devices import (
    DevicesView, DeviceView, DevicePaymentsView, DeviceRegisterView, DeviceListingView, DeviceRenewalListingView
)
from .users import UserView, UsersView

views = [
    AuthView,
    UsersView, UserView,
    DevicesView, DeviceView, DevicePaymentsView, DeviceRegisterView, DeviceListingView, DeviceRenewalListingView,
]


def register_views(app: Application, base: str):
    """
    Registers all the API views onto the given app at a specific root url.

    :param app: The app to register the views to.
    :param base: The base URL.
    """
    cors = aiohttp_cors.setup(app, defaults={"*": ALLOW_ALL})

    for view in views:
        view.register_route(app, base)
        view.enable_cors(cors)
        logger.debug("Registered %s at %s", view.__name__, base + view.url)
