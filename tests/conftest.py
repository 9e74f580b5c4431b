import httpx
import pytest
from fastapi.testclient import TestClient

from fakes import ALICE, ALICE_TOKEN, ASTRIA_BASE, BOB, BOB_TOKEN, AstriaStub, FakeSupabase
from headshots.config.settings import settings
from headshots.core.rate_limit import limiter
from headshots.core.session_store import session_store
from headshots.database.supabase_client import get_auth_client_factory, get_supabase
from headshots.main import app
from headshots.modules.astria.client import AstriaClient
from headshots.modules.astria.routes import get_astria_client
from headshots.modules.training import registry as training_registry


@pytest.fixture
def supabase():
    return FakeSupabase({ALICE_TOKEN: ALICE, BOB_TOKEN: BOB})


@pytest.fixture
def auth_clients():
    """Every client handed out for a sign-up or sign-in, in order."""
    return []


@pytest.fixture
def astria():
    return AstriaStub()


@pytest.fixture
def astria_client(astria):
    return AstriaClient("test-key", ASTRIA_BASE, transport=httpx.MockTransport(astria))


@pytest.fixture
def client(supabase, auth_clients, astria_client, monkeypatch):
    def make_auth_client():
        auth_client = FakeSupabase({ALICE_TOKEN: ALICE, BOB_TOKEN: BOB})
        auth_clients.append(auth_client)
        return auth_client

    monkeypatch.setattr(settings, "training_poll_enabled", False)
    app.dependency_overrides[get_supabase] = lambda: supabase
    app.dependency_overrides[get_auth_client_factory] = lambda: make_auth_client
    app.dependency_overrides[get_astria_client] = lambda: astria_client
    session_store.clear()
    training_registry.reset()
    limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    session_store.clear()


@pytest.fixture
def alice_headers():
    return {"Authorization": f"Bearer {ALICE_TOKEN}"}


@pytest.fixture
def bob_headers():
    return {"Authorization": f"Bearer {BOB_TOKEN}"}
