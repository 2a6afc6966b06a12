import pytest
import pytest_asyncio

from community_hub.config import Settings
from community_hub.db.database import DataBase
from community_hub.web.services.identity import ClerkClient
from community_hub.web.services.moderation import ModerationService
from community_hub.web.services.profile import ProfileService
from community_hub.web.services.webhooks import ClerkWebhookService

from factories import FakeClerk

SINGLETON_SERVICES = (ProfileService, ModerationService, ClerkWebhookService, ClerkClient)


@pytest.fixture(autouse=True)
def settings(monkeypatch):
    s = Settings()
    monkeypatch.setattr(s, "app_env", "test")
    monkeypatch.setattr(s, "clerk_secret_key", "sk_test_dummy")
    monkeypatch.setattr(s, "clerk_webhook_secret", None)
    monkeypatch.setattr(s, "admin_user_ids", set())
    return s


@pytest_asyncio.fixture
async def db(tmp_path):
    DataBase._instance = None
    database = DataBase(url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await database.create_all()
    yield database
    await database.dispose()
    DataBase._instance = None


@pytest.fixture
def clerk():
    return FakeClerk()


@pytest.fixture(autouse=True)
def services(clerk):
    for cls in SINGLETON_SERVICES:
        cls._instance = None
    ProfileService(identity=clerk)
    ModerationService(identity=clerk)
    yield
    for cls in SINGLETON_SERVICES:
        cls._instance = None
