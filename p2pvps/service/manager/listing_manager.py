"""
Listing Manager
---------------

Puts devices up for rent on the OpenBazaar store.

A listing is made of two parts: an ob-contract describing the rental, and the
store listing created from it. Only the system admin may change the contracts,
so the manager logs in with the admin credentials it is given for each change.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from p2pvps import logger
from p2pvps.config import listing_price, listing_lifetime, renewal_listing_lifetime
from p2pvps.models import DevicePublicData
from p2pvps.models.listing import ObContract, ListingState, DeviceLogin
from p2pvps.service.access.devices import set_device_contract
from p2pvps.service.clients import (
    AuthClient, AdminCredentials, ObContractClient, OpenBazaarClient, PortControlClient, ServiceNotFoundError
)


class ListingError(Exception):
    """Raised when a listing can not be changed."""


RENEWAL_NOTICE = (
    "This is a renewal listing for {name}. "
    "Purchasing this listing will renew the contract for the existing renter. "
)


class ListingManager:
    """
    Handles the lifecycle of the market listings of devices.
    """

    def __init__(self, auth_client: AuthClient, obcontract_client: ObContractClient,
                 openbazaar_client: OpenBazaarClient, port_control_client: PortControlClient,
                 credentials: Optional[AdminCredentials], *, price: int = listing_price):
        self.auth_client = auth_client
        self.obcontract_client = obcontract_client
        self.openbazaar_client = openbazaar_client
        self.port_control_client = port_control_client
        self.credentials = credentials
        self.price = price

    async def close(self):
        """Closes the connections to the other services."""
        for client in (self.auth_client, self.obcontract_client, self.openbazaar_client, self.port_control_client):
            await client.close()

    async def get_login(self) -> DeviceLogin:
        """Gets a new login, password, and SSH port for a device."""
        return await self.port_control_client.create_login()

    async def create_market_listing(self, device: DevicePublicData, now: datetime = None) -> str:
        """
        Lists the device for rent.

        :return: The id of the new ob-contract.
        """
        contract = self._contract_for(
            device, device.device_name, device.device_desc, listing_lifetime, now
        )
        return await self.submit_to_market(device, contract)

    async def create_renewal_listing(self, device: DevicePublicData, now: datetime = None) -> str:
        """
        Lists a short-lived renewal of the device, so that the current renter can extend their rental.

        :return: The id of the new ob-contract.
        """
        contract = self._contract_for(
            device,
            f"Renewal - {device.device_name}",
            RENEWAL_NOTICE.format(name=device.device_name) + device.device_desc,
            renewal_listing_lifetime,
            now
        )
        return await self.submit_to_market(device, contract)

    async def submit_to_market(self, device: DevicePublicData, contract: ObContract) -> str:
        """
        Creates an ob-contract and a store listing for it, replacing the device's current listing.

        :return: The id of the new ob-contract.
        :raises ListingError: When there are no admin credentials.
        :raises ServiceError: When one of the services fails.
        """
        if device.ob_contract:
            await self.remove_listing(device)
            logger.info("Listing for %s removed.", device)

        token = await self._admin_token()

        logger.debug("Creating new ob-contract for %s", device)
        contract = await self.obcontract_client.create_contract(token, contract)

        logger.debug("Creating store listing for %s", device)
        contract = await self.openbazaar_client.create_store_listing(contract)

        logger.debug("Updating ob-contract %s", contract.id)
        await self.obcontract_client.update_contract(token, contract)

        await set_device_contract(device, contract.id)
        return contract.id

    async def remove_listing(self, device: DevicePublicData):
        """
        Removes the device's store listing and its ob-contract.

        Anything that no longer exists is considered removed already.
        """
        contract_id = device.ob_contract
        if not contract_id:
            return

        try:
            contract = await self.obcontract_client.get_contract(contract_id)
        except ServiceNotFoundError:
            logger.info("Ob-contract %s for %s is already gone.", contract_id, device)
            await set_device_contract(device, None)
            return

        try:
            await self.openbazaar_client.remove_store_listing(contract.listing_slug)
        except ServiceNotFoundError:
            logger.info("Store listing %s is already gone.", contract.listing_slug)

        token = await self._admin_token()

        try:
            await self.obcontract_client.remove_contract(token, contract_id)
        except ServiceNotFoundError:
            logger.info("Ob-contract %s is already gone.", contract_id)

        await set_device_contract(device, None)

    async def _admin_token(self) -> str:
        if self.credentials is None:
            raise ListingError("No admin credentials are configured, so listings can not be changed.")
        return await self.auth_client.login(self.credentials)

    def _contract_for(self, device: DevicePublicData, title: str, description: str,
                      lifetime: timedelta, now: Optional[datetime]) -> ObContract:
        now = now if now is not None else datetime.now(timezone.utc)
        return ObContract(
            client_device=str(device.id),
            owner_user=str(device.owner_id),
            renter_user="",
            price=self.price,
            expiration=now + lifetime,
            title=title,
            description=description,
            listing_state=ListingState.LISTED,
            created_at=now,
            updated_at=now,
        )
