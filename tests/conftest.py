import os

# Settings are read at import time
os.environ["ENABLE_TRACING"] = "false"
os.environ["JSON_LOGS"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTO_CREATE_TABLES"] = "false"

from typing import AsyncGenerator, Dict  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from storefront.db.session import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.services.auth import AuthService  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-password"
USER_EMAIL = "shopper@example.com"
USER_PASSWORD = "shopper-password"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    test_async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with test_async_session() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        try:
            yield db_session
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides = {}


@pytest_asyncio.fixture(scope="function")
async def admin_token(db_session: AsyncSession) -> str:
    service = AuthService(db_session)
    await service.create_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
    _, token = await service.sign_in(ADMIN_EMAIL, ADMIN_PASSWORD)
    return token


@pytest_asyncio.fixture(scope="function")
async def user_token(db_session: AsyncSession) -> str:
    _, token = await AuthService(db_session).sign_up(USER_EMAIL, USER_PASSWORD)
    return token


@pytest_asyncio.fixture(scope="function")
async def admin_headers(admin_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest_asyncio.fixture(scope="function")
async def user_headers(user_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {user_token}"}
