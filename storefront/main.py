"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from storefront.api.errors import register_exception_handlers
from storefront.api.middleware import RequestContextMiddleware
from storefront.api.responses import Tags
from storefront.api.routes.v1.auth import router as auth_router
from storefront.api.routes.v1.categories import router as categories_router
from storefront.api.routes.v1.endpoints.health import router as health_router
from storefront.api.routes.v1.products import router as products_router
from storefront.api.routes.v1.subcategories import router as subcategories_router
from storefront.api.routes.v1.subsubcategories import router as subsubcategories_router
from storefront.core.config import settings
from storefront.core.events import shutdown_event_handlers, startup_event_handlers
from storefront.core.logging import configure_logging
from storefront.core.metrics import setup_metrics
from storefront.core.tracing import setup_tracing


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan event handler for startup and shutdown events.
    """
    if settings.SENTRY_DSN:
        sentry_logging = LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            integrations=[
                FastApiIntegration(),
                sentry_logging,
            ],
            environment=settings.ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            release=f"{settings.PROJECT_NAME}@{settings.VERSION}",
        )
        logger.info("Sentry initialized")

    for handler in startup_event_handlers:
        await handler()

    yield

    for handler in shutdown_event_handlers:
        await handler()


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    configure_logging()

    application = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.PROJECT_DESCRIPTION,
        version=settings.VERSION,
        docs_url="/api/docs" if not settings.ENVIRONMENT == "production" else None,
        redoc_url="/api/redoc" if not settings.ENVIRONMENT == "production" else None,
        openapi_url="/api/openapi.json" if not settings.ENVIRONMENT == "production" else None,
        lifespan=lifespan,
        openapi_tags=[
            {"name": Tags.HEALTH, "description": "Health check and readiness endpoints"},
            {"name": Tags.AUTH, "description": "Sign-up, sign-in and session endpoints"},
            {"name": Tags.CATEGORIES, "description": "Category tree endpoints"},
            {"name": Tags.SUBCATEGORIES, "description": "Subcategory management endpoints"},
            {"name": Tags.SUBSUBCATEGORIES, "description": "Sub-subcategory management endpoints"},
            {"name": Tags.PRODUCTS, "description": "Product catalog endpoints"},
        ],
    )

    register_exception_handlers(application)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    application.add_middleware(RequestContextMiddleware)

    if settings.ENABLE_METRICS:
        setup_metrics(application)
        logger.info("Prometheus metrics enabled")

    if settings.ENABLE_TRACING:
        setup_tracing(application)
        logger.info("OpenTelemetry tracing enabled")

    prefix = settings.API_PREFIX
    application.include_router(health_router, prefix=f"{prefix}/health", tags=[Tags.HEALTH])
    application.include_router(auth_router, prefix=f"{prefix}/auth", tags=[Tags.AUTH])
    application.include_router(categories_router, prefix=f"{prefix}/categories", tags=[Tags.CATEGORIES])
    application.include_router(subcategories_router, prefix=f"{prefix}/subcategories", tags=[Tags.SUBCATEGORIES])
    application.include_router(
        subsubcategories_router, prefix=f"{prefix}/subsubcategories", tags=[Tags.SUBSUBCATEGORIES]
    )
    application.include_router(products_router, prefix=f"{prefix}/products", tags=[Tags.PRODUCTS])

    return application


app = create_application()
