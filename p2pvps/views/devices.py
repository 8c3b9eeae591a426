"""
Device Related Views
-------------------------

Handles the devices, their payments, and their market listings.

Anything that talks to the other marketplace services responds with a JSend
error (and a 502) when one of those services fails, so the device can simply
try again later.
"""
from http import HTTPStatus

from aiohttp import web
from aiohttp_apispec import docs
from marshmallow.fields import String

from p2pvps import logger
from p2pvps.models import DevicePublicData, User
from p2pvps.permissions import UserIsAdmin, UserOwnsDevice, requires
from p2pvps.serializer import JSendSchema, JSendStatus
from p2pvps.serializer.decorators import expects, returns
from p2pvps.serializer.models import (
    DeviceSchema, PaymentSchema, PaymentCreateSchema, LedgerSchema, RegistrationSchema
)
from p2pvps.service.access.devices import get_device_public, get_device_private, create_device, set_device_login
from p2pvps.service.access.users import get_user
from p2pvps.service.clients import ServiceError
from p2pvps.service.manager.listing_manager import ListingError
from p2pvps.views.base import BaseView
from p2pvps.views.decorators import match_getter, GetFrom

with_device = match_getter(get_device_public, 'device', device_id='id')
unavailable = (JSendSchema(), HTTPStatus.BAD_GATEWAY)


def service_failure(error):
    return "unavailable", {
        "status": JSendStatus.ERROR,
        "data": {"errors": [str(error)]},
        "message": "One of the marketplace services could not complete the request. Please try again later."
    }


class DevicesView(BaseView):
    """
    Adds to the list of devices.
    """
    url = "/devices"
    name = "devices"
    with_user = match_getter(get_user, 'user', user_id=GetFrom.AUTH_HEADER)

    @with_user
    @docs(summary="Create A Device")
    @expects(DeviceSchema(only=('device_name', 'device_desc')))
    @returns(JSendSchema.of(device=DeviceSchema()), HTTPStatus.CREATED)
    async def post(self, user: User):
        """Registers a new device, owned by the current user."""
        device = await create_device(user, **self.request["data"])
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"device": device.serialize()}
        }


class DeviceView(BaseView):
    """
    Gets the public data of a device.
    """
    url = "/devices/{id}"
    name = "device"

    @with_device
    @docs(summary="Get A Device")
    @expects(None)
    @returns(JSendSchema.of(device=DeviceSchema()))
    async def get(self, device: DevicePublicData):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"device": device.serialize()}
        }


class DevicePaymentsView(BaseView):
    """
    Gets or adds to the payments made for a device.
    """
    url = "/devices/{id}/payments"
    name = "device_payments"

    @with_device
    @docs(summary="Get The Ledger For A Device")
    @requires(UserOwnsDevice() | UserIsAdmin())
    @expects(None)
    @returns(JSendSchema.of(ledger=LedgerSchema()))
    async def get(self, device: DevicePublicData):
        private_data = await get_device_private(device.id)
        account = await self.payment_manager.get_account(private_data.id)
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"ledger": {
                "device_id": device.id,
                "money_owed": account.amount_owed_to_lessor,
                "payments": account.payments,
            }}
        }

    @with_device
    @docs(summary="Add A Payment For A Device")
    @requires(UserIsAdmin())
    @expects(PaymentCreateSchema())
    @returns(JSendSchema.of(payment=PaymentSchema()), HTTPStatus.CREATED)
    async def post(self, device: DevicePublicData):
        """
        Records a payment for a rental period of the device, starting at the purchase time.
        The stored payment is due at the end of that period.
        """
        private_data = await get_device_private(device.id)
        payment = await self.payment_manager.record_payment(private_data.id, **self.request["data"])
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"payment": payment}
        }


class DeviceRegisterView(BaseView):
    """
    Checks a device in with the marketplace.
    """
    url = "/devices/{id}/register"
    name = "device_register"

    @with_device
    @docs(summary="Register A Device")
    @requires(UserOwnsDevice() | UserIsAdmin())
    @expects(None)
    @returns(
        registered=JSendSchema.of(registration=RegistrationSchema()),
        unavailable=unavailable
    )
    async def post(self, device: DevicePublicData):
        """
        Called by a device when it (re)connects. Ends the current rental, refunding the
        renter for any unused time, then issues the device a fresh login and lists it
        on the market again.
        """
        private_data = await get_device_private(device.id)

        try:
            outcome = await self.payment_manager.process_payments(private_data.id)
            login = await self.listing_manager.get_login()
            await set_device_login(private_data, login)
            contract_id = await self.listing_manager.create_market_listing(device)
        except (ServiceError, ListingError) as error:
            logger.warning("Could not register %s: %s", device, error)
            return service_failure(error)

        logger.info("Registered %s on port %s (payments: %s)", device, login.port, outcome.value)
        return "registered", {
            "status": JSendStatus.SUCCESS,
            "data": {"registration": {
                "device": device.serialize(),
                "login": login,
                "payments": outcome,
                "ob_contract": contract_id,
            }}
        }


class DeviceListingView(BaseView):
    """
    Creates or removes the market listing of a device.
    """
    url = "/devices/{id}/listing"
    name = "device_listing"

    @with_device
    @docs(summary="List A Device")
    @requires(UserOwnsDevice() | UserIsAdmin())
    @expects(None)
    @returns(
        listed=(JSendSchema.of(ob_contract=String()), HTTPStatus.CREATED),
        unavailable=unavailable
    )
    async def post(self, device: DevicePublicData):
        try:
            contract_id = await self.listing_manager.create_market_listing(device)
        except (ServiceError, ListingError) as error:
            return service_failure(error)

        return "listed", {
            "status": JSendStatus.SUCCESS,
            "data": {"ob_contract": contract_id}
        }

    @with_device
    @docs(summary="Remove The Listing Of A Device")
    @requires(UserOwnsDevice() | UserIsAdmin())
    @returns(unavailable=unavailable)
    async def delete(self, device: DevicePublicData):
        try:
            await self.listing_manager.remove_listing(device)
        except (ServiceError, ListingError) as error:
            return service_failure(error)

        raise web.HTTPNoContent


class DeviceRenewalListingView(BaseView):
    """
    Creates a renewal listing for a rented device.
    """
    url = "/devices/{id}/listing/renewal"
    name = "device_renewal_listing"

    @with_device
    @docs(summary="List A Renewal For A Device")
    @requires(UserOwnsDevice() | UserIsAdmin())
    @expects(None)
    @returns(
        listed=(JSendSchema.of(ob_contract=String()), HTTPStatus.CREATED),
        unavailable=unavailable
    )
    async def post(self, device: DevicePublicData):
        try:
            contract_id = await self.listing_manager.create_renewal_listing(device)
        except (ServiceError, ListingError) as error:
            return service_failure(error)

        return "listed", {
            "status": JSendStatus.SUCCESS,
            "data": {"ob_contract": contract_id}
        }
