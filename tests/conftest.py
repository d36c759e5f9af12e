"""
Shared fixtures: every test gets a fresh in-memory SQLite database, and the
FastAPI app is pointed at it by overriding the get_session dependency.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from airdrop.core.config import settings
from airdrop.core.database import get_session
from airdrop.core.models import Task, User
from airdrop.main import app
from airdrop.services import IdentityResolver, TaskCatalog


SAMPLE_TASKS = [
    dict(title="Follow on X", description="Follow our X account", reward=50, type="social",
         category="twitter", icon="fab fa-twitter", action_url="https://x.com/example", sort_order=2),
    dict(title="Join Telegram", description="Join the channel", reward=100, type="social",
         category="telegram", icon="fab fa-telegram", action_url="https://t.me/example", sort_order=1),
    dict(title="Big Quest", description="Worth a level", reward=1500, type="custom",
         category="daily", icon="fas fa-star", action_url=None, sort_order=3),
    dict(title="Retired", description="No longer offered", reward=10, type="social",
         category="twitter", icon="fab fa-twitter", is_active=False, sort_order=0),
]


@pytest.fixture(autouse=True)
def plain_settings(monkeypatch):
    monkeypatch.setattr(settings, "bot_token", None)
    monkeypatch.setattr(settings, "dev_mode", False)
    monkeypatch.setattr(settings, "admin_password", None)
    return settings


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def tasks(session):
    """The sample catalog keyed by title."""
    return {task.title: task for task in TaskCatalog(session).seed(SAMPLE_TASKS)}


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make_user(username=None, telegram_id=None, referral_code=None) -> User:
        counter["n"] += 1
        n = counter["n"]
        user, _ = IdentityResolver(session).resolve(
            telegram_id=telegram_id or str(1000 + n),
            username=username or f"user{n}",
            referral_code=referral_code,
        )
        return user

    return _make_user
