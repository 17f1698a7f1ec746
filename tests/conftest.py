import os
import uuid
from contextlib import contextmanager
from typing import AsyncGenerator, Optional

# Settings are read at import time by libs.db.config; point them at SQLite
# before anything from libs is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./propath-test.db")
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("CRM_API_KEY", None)
os.environ.pop("NOTIFICATIONS_URL", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.session import get_async_db
from services.bookings_service import models as _booking_models  # noqa: F401
from services.training_service import models as _training_models  # noqa: F401
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

get_settings.cache_clear()

DEFAULT_USER_ID = "member-test-user"


def make_member_user(
    user_id: Optional[str] = None,
    email: str = "member@test.com",
    name: str = "Test Member",
    role: str = "authenticated",
) -> AuthUser:
    return AuthUser(
        user_id=user_id or f"member-{uuid.uuid4().hex[:8]}",
        email=email,
        name=name,
        role=role,
    )


@contextmanager
def override_auth(app, user: AuthUser):
    """Temporarily authenticate requests to ``app`` as ``user``."""
    previous = app.dependency_overrides.get(get_current_user)
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield user
    finally:
        if previous is None:
            app.dependency_overrides.pop(get_current_user, None)
        else:
            app.dependency_overrides[get_current_user] = previous


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    A fresh SQLite database file per test, so sessions opened from separate
    connections (see ``session_factory``) see each other's commits.

    Set TEST_DATABASE_URL to run against Postgres instead; tables are
    created and dropped around each test.
    """
    db_url = os.environ.get("TEST_DATABASE_URL")
    if db_url:
        db_url = db_url.replace("postgresql://", "postgresql+psycopg://", 1)
        engine = create_async_engine(db_url)
    else:
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except OperationalError:
        await engine.dispose()
        pytest.skip("Database not available for tests")

    yield engine

    if db_url:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Factory for independent sessions, e.g. to race two bookings."""
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def bookings_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient for the bookings app, authenticated as ``DEFAULT_USER_ID``.
    """
    from services.bookings_service.app.main import app

    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = lambda: make_member_user(
        user_id=DEFAULT_USER_ID
    )

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def training_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient for the training app, authenticated as ``DEFAULT_USER_ID``.
    """
    from services.training_service.app.main import app

    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = lambda: make_member_user(
        user_id=DEFAULT_USER_ID
    )

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
