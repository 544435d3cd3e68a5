from typing import Any

from fastapi import APIRouter, Depends, Query, status

from storefront.api.dependencies import get_category_service, get_current_admin
from storefront.api.responses import admin_error_responses
from storefront.db.models import User
from storefront.schemas.catalog import (
    SubcategoryCreate,
    SubcategoryReorderRequest,
    SubcategoryResponse,
    SubcategoryUpdate,
    SuccessResponse,
)
from storefront.services.categories import CategoryService

router = APIRouter()


@router.post(
    "",
    response_model=SubcategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a subcategory.",
    responses=admin_error_responses,
)
async def create_subcategory(
    subcategory_in: SubcategoryCreate,
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    return await service.create_subcategory(subcategory_in)


@router.post(
    "/reorder",
    response_model=SuccessResponse,
    summary="Reorder the subcategories of one category.",
    responses=admin_error_responses,
)
async def reorder_subcategories(
    payload: SubcategoryReorderRequest,
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    await service.reorder_subcategories(payload.category_id, payload.ordered_ids)
    return SuccessResponse()


@router.put(
    "/{subcategory_id}",
    response_model=SubcategoryResponse,
    summary="Update a subcategory.",
    responses=admin_error_responses,
)
async def update_subcategory(
    subcategory_id: str,
    subcategory_in: SubcategoryUpdate,
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    return await service.update_subcategory(subcategory_id, subcategory_in)


@router.delete(
    "/{subcategory_id}",
    response_model=SuccessResponse,
    summary="Delete a subcategory.",
    responses=admin_error_responses,
)
async def delete_subcategory(
    subcategory_id: str,
    cascade: bool = Query(False, description="Also delete sub-subcategories"),
    service: CategoryService = Depends(get_category_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    await service.delete_subcategory(subcategory_id, cascade=cascade)
    return SuccessResponse()
