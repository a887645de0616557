import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("MAIL_FROM", "support@physiome.test")
os.environ.setdefault("NODE_ENV", "test")
os.environ.setdefault("FRONTEND_URL", "https://app.physiome.test")

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from physiome.config import get_settings
from physiome.database import Base, get_db
from physiome.main import app
from physiome.services.email_renderer import EmailRenderer
from physiome.services.notification_service import NotificationService, get_notification_service
from tests.factories import FakeTransport, make_user


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def renderer(settings):
    return EmailRenderer(admin_address=settings.mail_from, frontend_url=settings.frontend_url)


@pytest.fixture
def notifier(transport, renderer, settings):
    return NotificationService(transport=transport, renderer=renderer, settings=settings)


@pytest.fixture
async def engine():
    import physiome.models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory, notifier):
    async def override_get_db():
        session = session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_service] = lambda: notifier
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def admin(db):
    return await make_user(db, role="admin", name="Admin", email="admin@physiome.test")
