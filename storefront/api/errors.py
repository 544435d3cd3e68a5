"""
Exception handlers.

Every error leaves the API as ``{"detail": "<message>"}``. Domain errors carry
their own status code; request validation failures are reported as 400.
"""

from typing import Any, Dict, Mapping, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from storefront.api.middleware import get_request_id
from storefront.core.exceptions import AuthenticationError, StorefrontError


def create_error_response(detail: str) -> Dict[str, str]:
    return {"detail": detail}


def error_json(status_code: int, detail: str, headers: Optional[Mapping[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=create_error_response(detail), headers=headers)


def flatten_error(err: Mapping[str, Any]) -> str:
    """``body.slug: String should match pattern ...``"""
    location = ".".join(str(part) for part in err.get("loc", ()))
    return f"{location}: {err.get('msg', 'Validation error')}"


def _where(request: Request) -> str:
    return f"{request.method} {request.url.path} [{get_request_id() or '-'}]"


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    logger.warning(f"{type(exc).__name__} on {_where(request)}: {exc.detail}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return error_json(exc.status_code, exc.detail, headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [flatten_error(err) for err in exc.errors()]
    logger.warning(f"Validation failed on {_where(request)}: {messages}")
    return error_json(status.HTTP_400_BAD_REQUEST, " | ".join(messages))


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    # Reached only when a concurrent write beats the service-level checks
    logger.error(f"Integrity error on {_where(request)}: {exc.orig}")
    return error_json(status.HTTP_409_CONFLICT, "Database constraint violated")


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error on {_where(request)}: {exc}")
    return error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(f"Unhandled {type(exc).__name__} on {_where(request)}")
    return error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers for the FastAPI application.

    Handlers are looked up along the exception's MRO, so ``IntegrityError``
    gets its own handler ahead of the generic ``SQLAlchemyError`` one.
    """
    app.add_exception_handler(StorefrontError, storefront_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, database_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
