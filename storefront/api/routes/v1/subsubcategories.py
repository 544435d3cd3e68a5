from typing import Any

from fastapi import APIRouter, Depends, status

from storefront.api.dependencies import get_category_service, get_current_admin
from storefront.api.responses import admin_error_responses
from storefront.db.models import User
from storefront.schemas.catalog import (
    SubsubcategoryCreate,
    SubsubcategoryReorderRequest,
    SubsubcategoryResponse,
    SubsubcategoryUpdate,
    SuccessResponse,
)
from storefront.services.categories import CategoryService

router = APIRouter()


@router.post(
    "",
    response_model=SubsubcategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a sub-subcategory.",
    responses=admin_error_responses,
)
async def create_subsubcategory(
    subsubcategory_in: SubsubcategoryCreate,
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    return await service.create_subsubcategory(subsubcategory_in)


@router.post(
    "/reorder",
    response_model=SuccessResponse,
    summary="Reorder the sub-subcategories of one subcategory.",
    responses=admin_error_responses,
)
async def reorder_subsubcategories(
    payload: SubsubcategoryReorderRequest,
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    await service.reorder_subsubcategories(payload.subcategory_id, payload.ordered_ids)
    return SuccessResponse()


@router.put(
    "/{subsubcategory_id}",
    response_model=SubsubcategoryResponse,
    summary="Update a sub-subcategory.",
    responses=admin_error_responses,
)
async def update_subsubcategory(
    subsubcategory_id: str,
    subsubcategory_in: SubsubcategoryUpdate,
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    return await service.update_subsubcategory(subsubcategory_id, subsubcategory_in)


@router.delete(
    "/{subsubcategory_id}",
    response_model=SuccessResponse,
    summary="Delete a sub-subcategory.",
    responses=admin_error_responses,
)
async def delete_subsubcategory(
    subsubcategory_id: str,
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    """Products placed in this sub-subcategory keep their category and subcategory."""
    await service.delete_subsubcategory(subsubcategory_id)
    return SuccessResponse()
