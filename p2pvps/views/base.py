"""
Base
------------------------

The base view for the API. Views are registered on the app with
:meth:`BaseView.register_route`, which also hands them the managers
stored on the app.
"""

from typing import Optional

from aiohttp.abc import Application
from aiohttp.web import View, AbstractRoute
from aiohttp_cors import CorsConfig, CorsViewMixin, ResourceOptions

from p2pvps.service.manager.listing_manager import ListingManager
from p2pvps.service.manager.payment_manager import PaymentManager
from p2pvps.service.verify_token import JWTVerifier

ALLOW_ALL = ResourceOptions(
    allow_credentials=True,
    expose_headers="*",
    allow_headers="*",
    allow_methods="*",
)


class ViewConfigurationError(Exception):
    """
    Raised if the view is registered without a URL, or has CORS enabled before it is registered.
    """


class BaseView(View, CorsViewMixin):

    url: str
    """The url of the view, relative to the api root."""

    name: Optional[str]
    route: AbstractRoute

    payment_manager: PaymentManager
    listing_manager: ListingManager
    token_verifier: JWTVerifier

    cors_config = {"*": ALLOW_ALL}

    @classmethod
    def register_route(cls, app: Application, base: Optional[str] = None):
        """
        Adds the view to the app's router under ``base``.

        :raises ViewConfigurationError: If the URL hasn't been set on the given view.
        """
        if not hasattr(cls, "url"):
            raise ViewConfigurationError(f"{cls.__name__} has no URL!")

        url = cls.url if base is None else base + cls.url
        name = getattr(cls, "name", None)

        cls.route = app.router.add_view(url, cls, name=name)
        cls.payment_manager = app["payment_manager"]
        cls.listing_manager = app["listing_manager"]
        cls.token_verifier = app["token_verifier"]

    @classmethod
    def enable_cors(cls, cors: CorsConfig):
        """Enables CORS on the view."""
        if not hasattr(cls, "route"):
            raise ViewConfigurationError("No route assigned. Please register the route first.")
        cors.add(cls.route)
