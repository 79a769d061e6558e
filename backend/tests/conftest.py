import itertools

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from taskboard.api.v1.auth import create_access_token
from taskboard.config import Settings, get_settings
from taskboard.db.base import Base
from taskboard.db.session import Database, create_session_factory
from taskboard.db.store import Store
from taskboard.main import create_app
from taskboard.models import User
from taskboard.services import ActivityService, ProjectService, TaskService

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def database():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield Database(engine=engine, session_factory=create_session_factory(engine))
    await engine.dispose()


# -- service-level fixtures: one session shared by the whole test -------------


@pytest.fixture
async def store(database: Database):
    async with database.session() as session:
        yield Store(session)


@pytest.fixture
def activity(store: Store) -> ActivityService:
    return ActivityService(store)


@pytest.fixture
def project_service(store: Store, activity: ActivityService) -> ProjectService:
    return ProjectService(store, activity)


@pytest.fixture
def task_service(store: Store, activity: ActivityService) -> TaskService:
    return TaskService(store, activity)


@pytest.fixture
def make_user(store: Store):
    counter = itertools.count(1)

    async def _make_user(name: str | None = None, email: str | None = None) -> User:
        n = next(counter)
        name = name or f"User {n}"
        email = email or f"user{n}@acme.io"
        return await store.add_user(User(name=name, email=email, is_active=True))

    return _make_user


# -- API fixtures: every request opens its own session ------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        database_url=TEST_DATABASE_URL,
        jwt_secret_key="test-secret",
        log_level="WARNING",
    )


@pytest.fixture
def app(settings: Settings, database: Database):
    app = create_app(settings)
    app.state.database = database
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def register_user(database: Database, settings: Settings):
    """Insert a committed user and return it with bearer auth headers."""

    async def _register(name: str, email: str, is_active: bool = True):
        async with database.session() as session:
            user = User(name=name, email=email, is_active=is_active)
            session.add(user)
            await session.commit()
        token = create_access_token(user.id, settings=settings)
        return user, {"Authorization": f"Bearer {token}"}

    return _register
