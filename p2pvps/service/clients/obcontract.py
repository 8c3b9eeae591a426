"""
Ob-Contract Client
------------------

Creates, fetches, updates, and removes the contracts that back
the store listings. Changing a contract requires an admin token.
"""
from marshmallow import ValidationError

from p2pvps.models.listing import ObContract
from p2pvps.serializer.services import ObContractEnvelope
from .base import ServiceClient, ServiceError


class ObContractClient(ServiceClient):
    service_name = "ob-contract"
    envelope = ObContractEnvelope()

    def _load(self, body) -> ObContract:
        try:
            return self.envelope.load(body)["ob_contract"]
        except ValidationError as error:
            raise ServiceError(f"Unexpected response from the ob-contract service: {error.messages}") from error

    async def create_contract(self, token: str, contract: ObContract) -> ObContract:
        body = await self.request("POST", "", token=token, json=self.envelope.dump({"ob_contract": contract}))
        return self._load(body)

    async def get_contract(self, contract_id: str) -> ObContract:
        """
        :raises ServiceNotFoundError: When there is no contract with the given id.
        """
        return self._load(await self.request("GET", f"/{contract_id}"))

    async def update_contract(self, token: str, contract: ObContract) -> ObContract:
        body = await self.request("PUT", f"/{contract.id}", token=token,
                                  json=self.envelope.dump({"ob_contract": contract}))
        return self._load(body)

    async def remove_contract(self, token: str, contract_id: str):
        """
        :raises ServiceNotFoundError: When there is no contract with the given id.
        """
        await self.request("DELETE", f"/{contract_id}", token=token)
