import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_billing, get_completion, get_identity, get_settings_dep, get_store
from app.config import Settings
from core.billing import BillingService
from core.identity import VerifiedIdentity
from db.trek_store import TrekStore
from fakes import FakeCompletion, FakeIdentity, FakeStore, FakeStripe
from main import app
from sample_replies import LOOSE_REPLY

HIKER = VerifiedIdentity(uid="uid-hiker", email="hiker@example.com", display_name="Ada Hiker")
OTHER_HIKER = VerifiedIdentity(uid="uid-other", email="other@example.com", display_name="Bo Other")


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        database_url="sqlite+aiosqlite:///:memory:",
        firebase_credentials_file="service-account.json",
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret="whsec_123",
        stripe_pro_plan_monthly_id="price_pro_monthly",
        stripe_pro_plan_annual_id="price_pro_annual",
        frontend_url="https://trek.example.com",
        free_monthly_generations=2,
    )


@pytest.fixture
async def trek_store(tmp_path):
    store = TrekStore(f"sqlite+aiosqlite:///{tmp_path / 'trek.db'}")
    await store.db_init()
    yield store
    await store.close()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def identity():
    return FakeIdentity({"hiker-token": HIKER, "other-token": OTHER_HIKER})


@pytest.fixture
def completion():
    return FakeCompletion(itinerary=LOOSE_REPLY)


@pytest.fixture
def fake_stripe():
    return FakeStripe()


@pytest.fixture
def client(settings, fake_store, identity, completion, fake_stripe):
    billing = BillingService(settings, fake_store, client=fake_stripe)
    app.dependency_overrides.update({
        get_settings_dep: lambda: settings,
        get_store: lambda: fake_store,
        get_identity: lambda: identity,
        get_completion: lambda: completion,
        get_billing: lambda: billing,
    })
    # no context manager: the lifespan would connect to real providers
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    return {"Authorization": "Bearer hiker-token"}


@pytest.fixture
def other_auth():
    return {"Authorization": "Bearer other-token"}
