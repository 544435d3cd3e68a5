"""
Pydantic schemas for categories, subcategories and sub-subcategories.
"""

from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class PartialUpdate(BaseModel):
    """
    Base schema for sparse updates.

    Fields listed in ``not_nullable`` may be omitted but may not be sent as null.
    """

    not_nullable: ClassVar[tuple] = ()

    # Server-managed; a sent value is dropped. Other record fields such as id stay forbidden
    updated_at: Optional[datetime] = Field(None, exclude=True, description="Ignored, set by the server")

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def reject_null_for_required_columns(self) -> "PartialUpdate":
        for field_name in self.not_nullable:
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class NodeBase(BaseModel):
    """
    Shared fields of every level of the category tree.
    """

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    slug: str = Field(..., min_length=1, max_length=120, pattern=SLUG_PATTERN, description="URL-safe identifier")
    order_index: int = Field(0, ge=0, description="Sort key among siblings")


class NodeUpdate(PartialUpdate):
    not_nullable: ClassVar[tuple] = ("name", "slug", "order_index")

    name: Optional[str] = Field(None, min_length=1, max_length=100, description="Display name")
    slug: Optional[str] = Field(None, min_length=1, max_length=120, pattern=SLUG_PATTERN, description="URL-safe identifier")
    order_index: Optional[int] = Field(None, ge=0, description="Sort key among siblings")


class CategoryCreate(NodeBase):
    """
    Schema for creating a new category.
    """

    pass


class CategoryUpdate(NodeUpdate):
    """
    Schema for updating an existing category.
    """

    pass


class CategoryResponse(NodeBase):
    id: str = Field(..., description="Category ID")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


class SubcategoryCreate(NodeBase):
    category_id: str = Field(..., description="Owning category ID")


class SubcategoryUpdate(NodeUpdate):
    not_nullable: ClassVar[tuple] = ("name", "slug", "order_index", "category_id")

    category_id: Optional[str] = Field(None, description="Move under another category")


class SubcategoryResponse(NodeBase):
    id: str = Field(..., description="Subcategory ID")
    category_id: str = Field(..., description="Owning category ID")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


class SubsubcategoryCreate(NodeBase):
    subcategory_id: str = Field(..., description="Owning subcategory ID")


class SubsubcategoryUpdate(NodeUpdate):
    not_nullable: ClassVar[tuple] = ("name", "slug", "order_index", "subcategory_id")

    subcategory_id: Optional[str] = Field(None, description="Move under another subcategory")


class SubsubcategoryResponse(NodeBase):
    id: str = Field(..., description="Sub-subcategory ID")
    subcategory_id: str = Field(..., description="Owning subcategory ID")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


# Nested tree returned by GET /categories. Slugs are not re-validated here
# because rows come straight from storage.


class SubsubcategoryNode(BaseModel):
    id: str
    name: str
    slug: str
    order_index: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubcategoryNode(BaseModel):
    id: str
    name: str
    slug: str
    order_index: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    subsubcategories: List[SubsubcategoryNode] = Field(default_factory=list)


class CategoryNode(BaseModel):
    id: str
    name: str
    slug: str
    order_index: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    subcategories: List[SubcategoryNode] = Field(default_factory=list)


class CategoryTreeResponse(BaseModel):
    categories: List[CategoryNode] = Field(default_factory=list)


class ReorderRequest(BaseModel):
    """
    Ordered list of sibling IDs; each ID gets its list position as order_index.
    """

    ordered_ids: List[str] = Field(..., alias="orderedIds", description="Sibling IDs in display order")

    model_config = ConfigDict(populate_by_name=True)


class SubcategoryReorderRequest(ReorderRequest):
    category_id: str = Field(..., alias="categoryId", description="Parent category ID")


class SubsubcategoryReorderRequest(ReorderRequest):
    subcategory_id: str = Field(..., alias="subcategoryId", description="Parent subcategory ID")


class SuccessResponse(BaseModel):
    success: bool = True
