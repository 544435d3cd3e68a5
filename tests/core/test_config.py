import pytest
from pydantic import ValidationError

from storefront.core.config import Settings


def test_database_uri_is_assembled_from_parts():
    config = Settings(
        DATABASE_URI=None,
        POSTGRES_SERVER="db",
        POSTGRES_USER="shop",
        POSTGRES_PASSWORD="pw",
        POSTGRES_DB="catalog",
        POSTGRES_PORT="6543",
    )

    assert config.DATABASE_URI == "postgresql+asyncpg://shop:pw@db:6543/catalog"


def test_explicit_database_uri_wins():
    config = Settings(DATABASE_URI="sqlite+aiosqlite:///./local.db")

    assert config.DATABASE_URI == "sqlite+aiosqlite:///./local.db"


def test_cors_origins():
    assert Settings(CORS_ORIGINS_STR="*").cors_origins == ["*"]
    assert Settings(CORS_ORIGINS_STR="http://a.test, http://b.test,").cors_origins == [
        "http://a.test",
        "http://b.test",
    ]


def test_session_ttl_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(SESSION_TTL_DAYS=0)


def test_defaults():
    config = Settings()

    assert config.SESSION_TTL_DAYS == 7
    assert config.API_PREFIX == "/api"
