"""
Pydantic schemas for the products resource.
"""

from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from storefront.schemas.catalog import PartialUpdate


class ProductBase(BaseModel):
    """
    Base schema for product data.
    """

    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    reference: str = Field(..., min_length=1, max_length=100, description="Unique product reference code")
    category_id: str = Field(..., description="Category ID")
    subcategory_id: Optional[str] = Field(None, description="Subcategory ID")
    subsubcategory_id: Optional[str] = Field(None, description="Sub-subcategory ID")
    description: Optional[str] = Field(None, description="Product description")
    price_ht: float = Field(0.0, ge=0, description="Price excluding tax")
    price_ttc: float = Field(0.0, ge=0, description="Price including tax")
    images: List[str] = Field(default_factory=list, description="Image URLs")
    technical_specs: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("technical_specs", "technicalSpecs"),
        description="Free-form technical specification",
    )
    technical_doc_url: Optional[str] = Field(None, max_length=500, description="Technical document URL")
    video_url: Optional[str] = Field(None, max_length=500, description="Video URL")
    stock: int = Field(0, ge=0, description="Units in stock")
    is_available: bool = Field(True, description="Whether the product can be ordered")


class ProductCreate(ProductBase):
    """
    Schema for creating a new product.
    """

    pass


class ProductUpdate(PartialUpdate):
    """
    Schema for updating an existing product.
    """

    not_nullable: ClassVar[tuple] = (
        "name",
        "reference",
        "category_id",
        "price_ht",
        "price_ttc",
        "images",
        "technical_specs",
        "stock",
        "is_available",
    )

    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Product name")
    reference: Optional[str] = Field(None, min_length=1, max_length=100, description="Unique product reference code")
    category_id: Optional[str] = Field(None, description="Category ID")
    subcategory_id: Optional[str] = Field(None, description="Subcategory ID")
    subsubcategory_id: Optional[str] = Field(None, description="Sub-subcategory ID")
    description: Optional[str] = Field(None, description="Product description")
    price_ht: Optional[float] = Field(None, ge=0, description="Price excluding tax")
    price_ttc: Optional[float] = Field(None, ge=0, description="Price including tax")
    images: Optional[List[str]] = Field(None, description="Image URLs")
    technical_specs: Optional[Dict[str, Any]] = Field(
        None,
        validation_alias=AliasChoices("technical_specs", "technicalSpecs"),
        description="Free-form technical specification",
    )
    technical_doc_url: Optional[str] = Field(None, max_length=500, description="Technical document URL")
    video_url: Optional[str] = Field(None, max_length=500, description="Video URL")
    stock: Optional[int] = Field(None, ge=0, description="Units in stock")
    is_available: Optional[bool] = Field(None, description="Whether the product can be ordered")


class ProductResponse(ProductBase):
    """
    Schema for product response.
    """

    id: str = Field(..., description="Product ID")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "examples": [
                {
                    "id": "5f0c6a8e-3d1b-4e0e-9a53-3c1f0f5a2b11",
                    "name": "Cordless drill",
                    "reference": "DRL-18V-001",
                    "category_id": "0b7e4f0a-8f43-4a39-9d68-5b1f1f8f9e21",
                    "price_ht": 99.0,
                    "price_ttc": 118.8,
                    "images": ["https://cdn.example.com/drill.jpg"],
                    "technical_specs": {"voltage": "18V"},
                    "stock": 12,
                    "is_available": True,
                    "created_at": "2024-01-01T00:00:00",
                    "updated_at": "2024-01-01T00:00:00",
                }
            ]
        },
    )


class ProductFilter(BaseModel):
    """
    Schema for filtering products.
    """

    category_id: Optional[str] = Field(None, description="Filter by category")
    subcategory_id: Optional[str] = Field(None, description="Filter by subcategory")
    subsubcategory_id: Optional[str] = Field(None, description="Filter by sub-subcategory")
    available: Optional[bool] = Field(None, description="Filter by availability")
