"""
OpenBazaar Client
-----------------

Wraps the OpenBazaar integration, which manages the store listings
and sends refunds to renters.
"""
from marshmallow import ValidationError

from p2pvps.models.listing import ObContract
from p2pvps.serializer.services import ObContractEnvelope, RefundRequestSchema
from .base import ServiceClient, ServiceError


class OpenBazaarClient(ServiceClient):
    service_name = "openbazaar"
    envelope = ObContractEnvelope()
    refund_schema = RefundRequestSchema()

    async def create_store_listing(self, contract: ObContract) -> ObContract:
        """
        Lists the contract on the store.

        :return: The contract, updated with the listing details.
        """
        body = await self.request("POST", "/listings", json=self.envelope.dump({"ob_contract": contract}))
        try:
            return self.envelope.load(body)["ob_contract"]
        except ValidationError as error:
            raise ServiceError(f"Unexpected response from the openbazaar service: {error.messages}") from error

    async def remove_store_listing(self, slug: str):
        """
        :raises ServiceNotFoundError: When the listing does not exist.
        """
        await self.request("DELETE", f"/listings/{slug}")

    async def refund(self, address: str, amount: int, payment_id: str = None):
        """
        Sends the amount back to the given address.

        :param payment_id: Identifies the refund, so that it is only sent once.
        :raises ServiceNotFoundError: When the integration has nothing to refund (it was already sent).
        """
        data = {"addr": address, "qty": amount}
        if payment_id is not None:
            data["payment_id"] = payment_id
        await self.request("POST", "/refunds", json=self.refund_schema.dump(data))
