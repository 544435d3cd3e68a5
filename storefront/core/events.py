"""
Application lifecycle event handlers.

Startup handlers run in list order inside the FastAPI lifespan; a failing
handler aborts startup.
"""

from typing import Awaitable, Callable, List

from loguru import logger
from sqlalchemy import text

from storefront.core.config import settings
from storefront.db.session import Base, async_session_factory, engine
from storefront.services.auth import AuthService


async def connect_to_db() -> None:
    """
    Fail fast when the database is unreachable.
    """
    logger.info(f"Connecting to {engine.dialect.name} database...")
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise
    logger.info("Database connection verified")


async def create_tables() -> None:
    """
    Create missing tables when AUTO_CREATE_TABLES is enabled.
    """
    if not settings.AUTO_CREATE_TABLES:
        return

    # Register every model on Base.metadata
    import storefront.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Ensured {len(Base.metadata.tables)} tables")


async def seed_admin() -> None:
    """
    Create the first admin account from FIRST_ADMIN_EMAIL / FIRST_ADMIN_PASSWORD.

    Does nothing when either is unset or the account already exists.
    """
    if not (settings.FIRST_ADMIN_EMAIL and settings.FIRST_ADMIN_PASSWORD):
        return

    async with async_session_factory() as session:
        service = AuthService(session)
        if await service.get_user_by_email(settings.FIRST_ADMIN_EMAIL):
            logger.debug("Admin account already present")
            return
        await service.create_admin(settings.FIRST_ADMIN_EMAIL, settings.FIRST_ADMIN_PASSWORD)


async def close_db_connection() -> None:
    logger.info("Closing database connections...")
    try:
        await engine.dispose()
    except Exception as e:
        logger.error(f"Error closing database connections: {e}")
        return
    logger.info("Database connections closed")


startup_event_handlers: List[Callable[[], Awaitable[None]]] = [
    connect_to_db,
    create_tables,
    seed_admin,
]

shutdown_event_handlers: List[Callable[[], Awaitable[None]]] = [
    close_db_connection,
]
