from typing import Any

from fastapi import APIRouter, Depends, Query, status

from storefront.api.dependencies import get_category_service, get_current_admin
from storefront.api.responses import admin_error_responses, default_error_responses
from storefront.db.models import User
from storefront.schemas.catalog import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeResponse,
    CategoryUpdate,
    ReorderRequest,
    SuccessResponse,
)
from storefront.services.categories import CategoryService

router = APIRouter()


@router.get(
    "",
    response_model=CategoryTreeResponse,
    summary="List the category tree.",
    responses=default_error_responses,
)
async def list_categories(
    service: CategoryService = Depends(get_category_service),
) -> Any:
    """Every category with its subcategories and sub-subcategories, ordered by order_index."""
    return CategoryTreeResponse(categories=await service.get_tree())


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category.",
    responses=admin_error_responses,
)
async def create_category(
    category_in: CategoryCreate,
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    return await service.create_category(category_in)


@router.post(
    "/reorder",
    response_model=SuccessResponse,
    summary="Reorder categories.",
    responses=admin_error_responses,
)
async def reorder_categories(
    payload: ReorderRequest,
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    """Set each category's order_index to its position in ``orderedIds``."""
    await service.reorder_categories(payload.ordered_ids)
    return SuccessResponse()


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Update a category.",
    responses=admin_error_responses,
)
async def update_category(
    category_id: str,
    category_in: CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    """Only the fields present in the body change; updated_at is always refreshed."""
    return await service.update_category(category_id, category_in)


@router.delete(
    "/{category_id}",
    response_model=SuccessResponse,
    summary="Delete a category.",
    responses=admin_error_responses,
)
async def delete_category(
    category_id: str,
    cascade: bool = Query(False, description="Also delete subcategories and sub-subcategories"),
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    await service.delete_category(category_id, cascade=cascade)
    return SuccessResponse()
