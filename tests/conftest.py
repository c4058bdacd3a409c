import os
import sys
from datetime import datetime, timedelta
from pathlib import Path

import httpx
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# expat_hub.main builds a module-level app from the environment on import
os.environ.setdefault("EXPAT_HUB_LOG_TO_FILE", "false")

from expat_hub.config import Settings  # noqa: E402
from expat_hub.models.db import Database  # noqa: E402
from expat_hub.models.user_account import utcnow  # noqa: E402
from expat_hub.services.auth_service import AuthService  # noqa: E402
from expat_hub.services.session_store import SessionStore  # noqa: E402
from expat_hub.services.user_admin_service import UserAdminService  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-pass-1"


class FakeClock:
    """Settable clock for session expiry tests."""

    def __init__(self, start: datetime = None):
        self.now = start or utcnow()

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingSender:
    def __init__(self):
        self.sent = []

    def send_verification_email(self, user, code):
        self.sent.append((user.email, code))

    def last_code_for(self, email):
        for sent_email, code in reversed(self.sent):
            if sent_email == email:
                return code
        return None


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        env="test",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        log_dir=tmp_path / "logs",
        log_to_file=False,
        cors_origins=["http://localhost:3000"],
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def database(settings):
    db = Database(settings.database_url)
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sessions(database, clock):
    return SessionStore(database, clock=clock)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def auth_service(database, sessions, sender):
    return AuthService(database, sessions, verification_sender=sender)


@pytest.fixture
def admin_service(database, sessions):
    return UserAdminService(database, sessions)


@pytest.fixture
def app(settings, sender):
    from expat_hub.main import create_app

    app = create_app(settings)
    app.state.auth_service.verification_sender = sender
    # ASGITransport does not run startup handlers
    app.state.database.init_db()
    app.state.auth_service.ensure_default_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
    yield app
    app.state.database.dispose()


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    )


@pytest.fixture
async def api_client(app):
    async with _client(app) as client:
        yield client


@pytest.fixture
async def admin_client(app):
    async with _client(app) as client:
        resp = await client.post(
            "/api/auth/login",
            json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
        )
        assert resp.status_code == 200, resp.text
        yield client


@pytest.fixture
def make_client(app):
    """Extra independent clients (separate cookie jars)."""
    return lambda: _client(app)
