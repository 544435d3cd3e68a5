"""
Shared response models and OpenAPI error declarations.
"""

from typing import Any

from fastapi import status
from pydantic import BaseModel, Field


class ErrorResponseModel(BaseModel):
    """Base model for error responses."""

    detail: str = Field(..., description="Additional error details")


class Tags:
    """API route tags for documentation grouping."""

    HEALTH = "Health"
    AUTH = "Auth"
    CATEGORIES = "Categories"
    SUBCATEGORIES = "Subcategories"
    SUBSUBCATEGORIES = "Subsubcategories"
    PRODUCTS = "Products"


# Errors every public route can return
default_error_responses: dict[int | str, dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {
        "model": ErrorResponseModel,
        "description": "Bad Request – Invalid input or logic error",
    },
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "model": ErrorResponseModel,
        "description": "Internal Error – Unexpected server failure",
    },
}

# Errors of admin routes that address a single row
admin_error_responses: dict[int | str, dict[str, Any]] = {
    **default_error_responses,
    status.HTTP_401_UNAUTHORIZED: {
        "model": ErrorResponseModel,
        "description": "Unauthorized – Invalid or missing session token",
    },
    status.HTTP_403_FORBIDDEN: {
        "model": ErrorResponseModel,
        "description": "Forbidden – Admin role required",
    },
    status.HTTP_404_NOT_FOUND: {
        "model": ErrorResponseModel,
        "description": "Not Found – No row with this ID",
    },
    status.HTTP_409_CONFLICT: {
        "model": ErrorResponseModel,
        "description": "Conflict – Duplicate slug or reference, or dependent rows exist",
    },
}
