"""
Application configuration.
"""

from typing import Any, Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # Core Settings
    PROJECT_NAME: str = "Storefront Catalog"
    PROJECT_DESCRIPTION: str = "Catalog and storefront REST API"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # API Settings
    API_PREFIX: str = "/api"
    CORS_ORIGINS_STR: str = "http://localhost:5173"

    # Database Settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "storefront"
    POSTGRES_PORT: str = "5432"
    DATABASE_URI: Optional[str] = Field(default=None, validate_default=True)
    AUTO_CREATE_TABLES: bool = True

    @field_validator("DATABASE_URI", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        if isinstance(v, str) and v:
            return v

        data = info.data
        if not data:
            raise ValueError("Missing data for DATABASE_URI")

        return (
            f"postgresql+asyncpg://{data.get('POSTGRES_USER')}:{data.get('POSTGRES_PASSWORD')}"
            f"@{data.get('POSTGRES_SERVER')}:{int(data.get('POSTGRES_PORT', 5432))}/{data.get('POSTGRES_DB') or ''}"
        )

    # Authentication Settings
    SESSION_TTL_DAYS: int = 7
    PASSWORD_MIN_LENGTH: int = 6
    BCRYPT_ROUNDS: int = 10
    FIRST_ADMIN_EMAIL: Optional[str] = None
    FIRST_ADMIN_PASSWORD: Optional[str] = None

    @field_validator("SESSION_TTL_DAYS")
    @classmethod
    def validate_session_ttl(cls, v: int) -> int:
        if v < 1:
            raise ValueError("SESSION_TTL_DAYS must be at least 1")
        return v

    # Sentry Settings
    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    # Prometheus Metrics
    ENABLE_METRICS: bool = True

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Tracing Settings
    ENABLE_TRACING: bool = False
    OTLP_ENDPOINT: Optional[str] = None
    TRACES_SAMPLE_RATE: float = Field(default=0.1, ge=0.0, le=1.0)

    @property
    def cors_origins(self) -> list[str]:
        if self.CORS_ORIGINS_STR == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS_STR.split(",") if origin.strip()]


settings = Settings()
