import asyncio
from datetime import datetime, timedelta, timezone
from http import HTTPStatus

import pytest
from aiobreaker import CircuitBreaker
from aiohttp import web

from p2pvps.models.listing import ObContract, ListingState
from p2pvps.service.clients import (
    AuthClient, AdminCredentials, ObContractClient, PortControlClient, ServiceClient, ServiceError, ServiceNotFoundError,
    ServiceRequestError
)
from tests.fakemarket import ADMIN_USERNAME, ADMIN_PASSWORD, ADMIN_TOKEN


@pytest.fixture
async def status_server(aiohttp_server):
    """A server that responds to /{status} with that status."""
    calls = []

    async def respond(request):
        calls.append(request.path)
        status = int(request.match_info["status"])
        if status == HTTPStatus.NO_CONTENT:
            return web.Response(status=status)
        return web.json_response({"status": status}, status=status)

    async def slow(request):
        calls.append(request.path)
        await asyncio.sleep(2)
        return web.json_response({})

    app = web.Application()
    app.router.add_get("/slow", slow)
    app.router.add_get("/{status}", respond)
    server = await aiohttp_server(app)
    server.calls = calls
    return server


@pytest.fixture
async def service_client(status_server):
    client = ServiceClient(str(status_server.make_url("/")), breaker=CircuitBreaker(fail_max=2))
    yield client
    await client.close()


class TestServiceClient:

    async def test_success(self, service_client):
        assert await service_client.request("GET", "/200") == {"status": 200}

    async def test_no_content(self, service_client):
        assert await service_client.request("GET", "/204") == {}

    async def test_not_found(self, service_client):
        with pytest.raises(ServiceNotFoundError) as error:
            await service_client.request("GET", "/404")
        assert error.value.status == HTTPStatus.NOT_FOUND

    async def test_error(self, service_client):
        with pytest.raises(ServiceError) as error:
            await service_client.request("GET", "/500")
        assert not isinstance(error.value, ServiceNotFoundError)
        assert error.value.status == HTTPStatus.INTERNAL_SERVER_ERROR

    async def test_breaker_opens(self, service_client, status_server):
        """Assert that a failing service is no longer called once the circuit opens."""
        for _ in range(2):
            with pytest.raises(ServiceError):
                await service_client.request("GET", "/500")

        with pytest.raises(ServiceError) as error:
            await service_client.request("GET", "/200")

        assert "unavailable" in error.value.message
        assert status_server.calls == ["/500", "/500"]

    async def test_not_found_does_not_open_breaker(self, service_client):
        for _ in range(3):
            with pytest.raises(ServiceNotFoundError):
                await service_client.request("GET", "/404")

        assert await service_client.request("GET", "/200") == {"status": 200}

    async def test_refused_does_not_open_breaker(self, service_client, status_server):
        """Assert that requests the service refuses are not counted as the service failing."""
        for _ in range(3):
            with pytest.raises(ServiceRequestError) as error:
                await service_client.request("GET", "/401")
            assert error.value.status == HTTPStatus.UNAUTHORIZED

        assert await service_client.request("GET", "/200") == {"status": 200}
        assert status_server.calls == ["/401", "/401", "/401", "/200"]

    async def test_timeout(self, status_server):
        """Assert that a service that is too slow to respond fails like any other."""
        client = ServiceClient(str(status_server.make_url("/")), timeout=0.2)
        with pytest.raises(ServiceError) as error:
            await client.request("GET", "/slow")
        await client.close()

        assert "timed out" in error.value.message

    async def test_unreachable(self):
        client = ServiceClient("http://127.0.0.1:1", timeout=1)
        with pytest.raises(ServiceError):
            await client.request("GET", "/")
        await client.close()


class TestAuthClient:

    async def test_login(self, market_url):
        client = AuthClient(market_url)
        assert await client.login(AdminCredentials(ADMIN_USERNAME, ADMIN_PASSWORD)) == ADMIN_TOKEN
        await client.close()

    async def test_bad_login(self, market_url):
        client = AuthClient(market_url)
        with pytest.raises(ServiceError):
            await client.login(AdminCredentials(ADMIN_USERNAME, "wrong"))
        await client.close()


class TestObContractClient:

    @pytest.fixture
    async def client(self, market_url):
        client = ObContractClient(f"{market_url}/obcontract")
        yield client
        await client.close()

    @pytest.fixture
    def contract(self):
        now = datetime(2019, 3, 1, tzinfo=timezone.utc)
        return ObContract(
            client_device="1", owner_user="2", price=3, expiration=now + timedelta(days=30),
            title="Raspberry Pi", description="A pi", listing_state=ListingState.LISTED,
            created_at=now, updated_at=now,
        )

    async def test_create_and_get(self, client, contract, fake_market):
        """Assert that a contract is sent in the camelCased envelope and comes back with an id."""
        created = await client.create_contract(ADMIN_TOKEN, contract)

        assert created.id in fake_market.contracts
        stored = fake_market.contracts[created.id]
        assert stored["clientDevice"] == "1"
        assert stored["listingState"] == "Listed"
        assert "experation" in stored

        fetched = await client.get_contract(created.id)
        assert fetched.title == "Raspberry Pi"
        assert fetched.expiration == contract.expiration

    async def test_get_missing(self, client):
        with pytest.raises(ServiceNotFoundError):
            await client.get_contract("nope")

    async def test_remove(self, client, contract, fake_market):
        created = await client.create_contract(ADMIN_TOKEN, contract)
        await client.remove_contract(ADMIN_TOKEN, created.id)
        assert created.id not in fake_market.contracts

        with pytest.raises(ServiceNotFoundError):
            await client.remove_contract(ADMIN_TOKEN, created.id)

    async def test_create_requires_admin(self, client, contract):
        with pytest.raises(ServiceError):
            await client.create_contract("not-admin", contract)


async def test_port_control(market_url):
    client = PortControlClient(f"{market_url}/portcontrol")
    login = await client.create_login()
    await client.close()
    assert login.username.startswith("user")
    assert login.port > 6000
