from datetime import datetime, timezone, timedelta

import pytest

from p2pvps.models import DevicePublicData
from p2pvps.service.clients import AuthClient, ObContractClient, PortControlClient
from p2pvps.service.manager.listing_manager import ListingManager, ListingError

NOW = datetime(2019, 3, 1, tzinfo=timezone.utc)


class TestListingManager:

    async def test_get_login(self, listing_manager):
        login = await listing_manager.get_login()
        assert login.username and login.password
        assert isinstance(login.port, int)

    async def test_create_market_listing(self, listing_manager, random_device, fake_market):
        """Assert that listing a device creates a contract and a store listing for it."""
        contract_id = await listing_manager.create_market_listing(random_device, NOW)

        contract = fake_market.contracts[contract_id]
        assert contract["clientDevice"] == str(random_device.id)
        assert contract["ownerUser"] == str(random_device.owner_id)
        assert contract["price"] == 3
        assert contract["title"] == random_device.device_name
        assert contract["listingState"] == "Listed"
        assert contract["listingSlug"] in fake_market.listings
        assert datetime.fromisoformat(contract["experation"]) == NOW + timedelta(days=30)

        device = await DevicePublicData.get(id=random_device.id)
        assert device.ob_contract == contract_id

    async def test_create_renewal_listing(self, listing_manager, random_device, fake_market):
        contract_id = await listing_manager.create_renewal_listing(random_device, NOW)

        contract = fake_market.contracts[contract_id]
        assert contract["title"] == f"Renewal - {random_device.device_name}"
        assert contract["description"].startswith("This is a renewal listing")
        assert datetime.fromisoformat(contract["experation"]) == NOW + timedelta(hours=1)

    async def test_relisting_replaces_the_old_listing(self, listing_manager, random_device, fake_market):
        """Assert that listing a device again removes its previous listing."""
        first = await listing_manager.create_market_listing(random_device, NOW)
        second = await listing_manager.create_market_listing(random_device, NOW)

        assert first != second
        assert list(fake_market.contracts) == [second]
        assert len(fake_market.listings) == 1

    async def test_remove_listing(self, listing_manager, random_device, fake_market):
        await listing_manager.create_market_listing(random_device, NOW)

        await listing_manager.remove_listing(random_device)

        assert fake_market.contracts == {}
        assert fake_market.listings == {}
        assert random_device.ob_contract is None
        assert (await DevicePublicData.get(id=random_device.id)).ob_contract is None

    async def test_remove_without_listing(self, listing_manager, random_device, fake_market):
        """Assert that removing a listing from an unlisted device does nothing."""
        await listing_manager.remove_listing(random_device)
        assert fake_market.requests == []

    async def test_remove_missing_contract(self, listing_manager, random_device, fake_market):
        """Assert that a contract that no longer exists is considered removed."""
        contract_id = await listing_manager.create_market_listing(random_device, NOW)
        del fake_market.contracts[contract_id]

        await listing_manager.remove_listing(random_device)

        assert random_device.ob_contract is None

    async def test_remove_missing_store_listing(self, listing_manager, random_device, fake_market):
        """Assert that a missing store listing does not stop the contract being removed."""
        contract_id = await listing_manager.create_market_listing(random_device, NOW)
        fake_market.listings.clear()

        await listing_manager.remove_listing(random_device)

        assert contract_id not in fake_market.contracts
        assert random_device.ob_contract is None

    async def test_no_credentials(self, market_url, openbazaar_client, random_device):
        manager = ListingManager(
            AuthClient(market_url),
            ObContractClient(f"{market_url}/obcontract"),
            openbazaar_client,
            PortControlClient(f"{market_url}/portcontrol"),
            None,
        )
        with pytest.raises(ListingError):
            await manager.create_market_listing(random_device, NOW)
        await manager.close()
