"""
Liveness and readiness probes.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response, status
from loguru import logger
from pydantic import BaseModel, ConfigDict
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.db.models import Category, Product
from storefront.db.session import get_db

router = APIRouter()


class HealthStatus(BaseModel):
    status: str
    version: str
    environment: str

    model_config = ConfigDict(
        json_schema_extra={"example": {"status": "ok", "version": "0.1.0", "environment": "development"}}
    )


class ComponentStatus(BaseModel):
    name: str
    status: str
    details: Optional[Dict[str, Any]] = None


class ReadinessStatus(HealthStatus):
    components: List[ComponentStatus]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "ok",
                "version": "0.1.0",
                "environment": "development",
                "components": [
                    {"name": "database", "status": "healthy", "details": {"type": "postgresql"}},
                    {"name": "catalog", "status": "healthy", "details": {"categories": 12, "products": 340}},
                ],
            }
        }
    )


async def check_database(db: AsyncSession) -> ComponentStatus:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return ComponentStatus(name="database", status="unhealthy", details={"error": str(e)})
    return ComponentStatus(name="database", status="healthy", details={"type": db.get_bind().dialect.name})


async def check_catalog(db: AsyncSession) -> ComponentStatus:
    """The catalog tables exist and can be counted."""
    try:
        categories = (await db.execute(select(func.count(Category.id)))).scalar() or 0
        products = (await db.execute(select(func.count(Product.id)))).scalar() or 0
    except Exception as e:
        logger.error(f"Catalog health check failed: {e}")
        return ComponentStatus(name="catalog", status="unhealthy", details={"error": str(e)})
    return ComponentStatus(name="catalog", status="healthy", details={"categories": categories, "products": products})


@router.get(
    "",
    response_model=HealthStatus,
    summary="Liveness probe",
    responses={200: {"description": "Service is running"}},
)
async def health_check() -> HealthStatus:
    return HealthStatus(status="ok", version=settings.VERSION, environment=settings.ENVIRONMENT)


@router.get(
    "/ready",
    response_model=ReadinessStatus,
    summary="Readiness probe",
    description="Checks the database connection and the catalog tables.",
    responses={200: {"description": "Service is ready"}, 503: {"description": "Service is not ready"}},
)
async def readiness_check(response: Response, db: AsyncSession = Depends(get_db)) -> ReadinessStatus:
    components = [await check_database(db)]
    if components[0].status == "healthy":
        components.append(await check_catalog(db))

    ready = all(component.status == "healthy" for component in components)
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessStatus(
        status="ok" if ready else "degraded",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        components=components,
    )
