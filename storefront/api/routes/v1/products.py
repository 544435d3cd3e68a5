from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, status

from storefront.api.dependencies import get_current_admin, get_product_service
from storefront.api.responses import admin_error_responses, default_error_responses
from storefront.db.models import User
from storefront.schemas.catalog import SuccessResponse
from storefront.schemas.products import ProductCreate, ProductFilter, ProductResponse, ProductUpdate
from storefront.services.products import ProductService

router = APIRouter()


@router.get(
    "",
    response_model=List[ProductResponse],
    summary="List products, newest first.",
    responses=default_error_responses,
)
async def list_products(
    category_id: Optional[str] = Query(None, description="Filter by category"),
    subcategory_id: Optional[str] = Query(None, description="Filter by subcategory"),
    subsubcategory_id: Optional[str] = Query(None, description="Filter by sub-subcategory"),
    available: Optional[bool] = Query(None, description="Filter by availability"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: ProductService = Depends(get_product_service),
) -> Any:
    filters = ProductFilter(
        category_id=category_id,
        subcategory_id=subcategory_id,
        subsubcategory_id=subsubcategory_id,
        available=available,
    )
    return await service.get_products(filters, skip=skip, limit=limit)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get a product.",
    responses={**default_error_responses, **{404: admin_error_responses[404]}},
)
async def get_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> Any:
    return await service.get_product(product_id)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product.",
    responses=admin_error_responses,
)
async def create_product(
    product_in: ProductCreate,
    service: ProductService = Depends(get_product_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    return await service.create_product(product_in)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product.",
    responses=admin_error_responses,
)
async def update_product(
    product_id: str,
    product_in: ProductUpdate,
    service: ProductService = Depends(get_product_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    """Only the fields present in the body change; updated_at is always refreshed."""
    return await service.update_product(product_id, product_in)


@router.delete(
    "/{product_id}",
    response_model=SuccessResponse,
    summary="Delete a product.",
    responses=admin_error_responses,
)
async def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
    current_admin: User = Depends(get_current_admin),
) -> Any:
    await service.delete_product(product_id)
    return SuccessResponse()
