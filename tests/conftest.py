from datetime import timedelta
from itertools import count

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer
from faker import Faker
from tortoise import Tortoise, connections

from p2pvps.middleware import validate_token_middleware
from p2pvps.models import User, UserType, DevicePublicData
from p2pvps.service.access.devices import create_device
from p2pvps.service.access.users import create_user
from p2pvps.service.clients import (
    AuthClient, AdminCredentials, ObContractClient, OpenBazaarClient, PortControlClient
)
from p2pvps.service.manager.listing_manager import ListingManager
from p2pvps.service.manager.payment_manager import PaymentManager
from p2pvps.service.payment import DummyRefundDispatcher
from p2pvps.service.verify_token import JWTVerifier
from p2pvps.signals import register_signals
from p2pvps.store import DatabaseLedgerStore
from p2pvps.views import register_views
from tests.fakemarket import FakeMarket, ADMIN_USERNAME, ADMIN_PASSWORD

fake = Faker()

PERIOD = timedelta(hours=24)


@pytest.fixture
async def database():
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={'models': ['p2pvps.models']},
        use_tz=True,
    )
    await Tortoise.generate_schemas()
    yield
    await connections.close_all()


@pytest.fixture
def random_user_factory(database):
    user_id = count(1)

    async def create_random_user(is_admin=False, password="password"):
        return await create_user(
            username=f"{fake.user_name()}{next(user_id)}", password=password, name=fake.name(),
            type=UserType.ADMIN if is_admin else UserType.USER
        )

    return create_random_user


@pytest.fixture
async def random_user(random_user_factory) -> User:
    """Creates a random user in the database."""
    return await random_user_factory()


@pytest.fixture
async def random_admin(random_user_factory) -> User:
    return await random_user_factory(True)


@pytest.fixture
async def random_device(random_user) -> DevicePublicData:
    """Creates a random device, owned by the random user."""
    return await create_device(random_user, fake.hostname(), fake.sentence())


@pytest.fixture
def token_verifier():
    return JWTVerifier("test-secret")


@pytest.fixture
def auth_header(token_verifier):
    """Makes the Authorization header for the given user."""

    def make_header(user: User):
        return {"Authorization": f"Bearer {token_verifier.issue_token(user)}"}

    return make_header


@pytest.fixture
def fake_market():
    return FakeMarket()


@pytest.fixture
async def market_server(aiohttp_server, fake_market) -> TestServer:
    """Serves the fake marketplace services."""
    return await aiohttp_server(fake_market.app())


@pytest.fixture
def market_url(market_server):
    return str(market_server.make_url("/")).rstrip("/")


@pytest.fixture
async def openbazaar_client(market_url):
    client = OpenBazaarClient(f"{market_url}/ob")
    yield client
    await client.close()


@pytest.fixture
async def listing_manager(market_url, openbazaar_client):
    manager = ListingManager(
        AuthClient(market_url),
        ObContractClient(f"{market_url}/obcontract"),
        openbazaar_client,
        PortControlClient(f"{market_url}/portcontrol"),
        AdminCredentials(ADMIN_USERNAME, ADMIN_PASSWORD),
    )
    yield manager
    await manager.close()


@pytest.fixture
def refund_dispatcher():
    return DummyRefundDispatcher()


@pytest.fixture
def payment_manager(database, refund_dispatcher):
    return PaymentManager(DatabaseLedgerStore(), refund_dispatcher, PERIOD)


@pytest.fixture
async def client(
    aiohttp_client, database, payment_manager, listing_manager, token_verifier
) -> TestClient:
    app = web.Application(middlewares=[validate_token_middleware])

    app['payment_manager'] = payment_manager
    app['listing_manager'] = listing_manager
    app['token_verifier'] = token_verifier

    register_signals(app, init_database=False)  # we get the database from a fixture
    register_views(app, "/api")

    return await aiohttp_client(app)
