"""Business logic for products."""

from typing import List, Optional

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import ConflictError, InvalidReferenceError, NotFoundError
from storefront.core.metrics import record_business_event
from storefront.db.models import Category, Product, Subcategory, Subsubcategory
from storefront.schemas.products import ProductCreate, ProductFilter, ProductUpdate
from storefront.services.updates import PRODUCT_UPDATABLE_FIELDS, build_sparse_update

PLACEMENT_FIELDS = ("category_id", "subcategory_id", "subsubcategory_id")


class ProductService:
    """Service for product-related operations."""

    def __init__(self, db: AsyncSession):
        """Initialize with database session."""
        self.db = db

    async def get_products(
        self,
        filters: Optional[ProductFilter] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Product]:
        """Get products, newest first, with optional filtering."""
        query = select(Product).order_by(Product.created_at.desc(), Product.id).offset(skip).limit(limit)

        if filters is not None:
            if filters.category_id:
                query = query.where(Product.category_id == filters.category_id)
            if filters.subcategory_id:
                query = query.where(Product.subcategory_id == filters.subcategory_id)
            if filters.subsubcategory_id:
                query = query.where(Product.subsubcategory_id == filters.subsubcategory_id)
            if filters.available is not None:
                query = query.where(Product.is_available == filters.available)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_product(self, product_id: str) -> Product:
        """Get a specific product by ID."""
        result = await self.db.execute(select(Product).where(Product.id == product_id))
        product = result.scalar_one_or_none()

        if not product:
            logger.warning(f"Product with ID {product_id} not found")
            raise NotFoundError("Product", product_id)

        return product

    async def _ensure_unique_reference(self, reference: str, exclude_id: Optional[str] = None) -> None:
        query = select(Product.id).where(Product.reference == reference)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        if result.scalar_one_or_none() is not None:
            raise ConflictError(f"Product with reference '{reference}' already exists")

    async def validate_placement(
        self,
        category_id: str,
        subcategory_id: Optional[str] = None,
        subsubcategory_id: Optional[str] = None,
    ) -> None:
        """
        Check that the product's category references form one branch of the tree.

        The subcategory, when given, must belong to the category, and the
        sub-subcategory, when given, must belong to the subcategory.
        """
        category = await self.db.get(Category, category_id)
        if category is None:
            raise InvalidReferenceError(f"Category with ID {category_id} does not exist")

        if subsubcategory_id is not None and subcategory_id is None:
            raise InvalidReferenceError("subsubcategory_id requires subcategory_id")

        if subcategory_id is not None:
            subcategory = await self.db.get(Subcategory, subcategory_id)
            if subcategory is None:
                raise InvalidReferenceError(f"Subcategory with ID {subcategory_id} does not exist")
            if subcategory.category_id != category_id:
                raise InvalidReferenceError(
                    f"Subcategory with ID {subcategory_id} does not belong to category {category_id}"
                )

        if subsubcategory_id is not None:
            subsubcategory = await self.db.get(Subsubcategory, subsubcategory_id)
            if subsubcategory is None:
                raise InvalidReferenceError(f"Subsubcategory with ID {subsubcategory_id} does not exist")
            if subsubcategory.subcategory_id != subcategory_id:
                raise InvalidReferenceError(
                    f"Subsubcategory with ID {subsubcategory_id} does not belong to subcategory {subcategory_id}"
                )

    async def create_product(self, product_data: ProductCreate) -> Product:
        """Create a new product."""
        await self.validate_placement(
            product_data.category_id, product_data.subcategory_id, product_data.subsubcategory_id
        )
        await self._ensure_unique_reference(product_data.reference)

        product = Product(**product_data.model_dump())

        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)

        logger.info(f"Created new product with ID {product.id}")
        record_business_event("product_created")
        return product

    async def update_product(self, product_id: str, product_data: ProductUpdate) -> Product:
        """Update only the supplied fields of an existing product."""
        product = await self.get_product(product_id)
        changes = build_sparse_update(product_data.changes(), product_id, PRODUCT_UPDATABLE_FIELDS)

        if any(name in changes.assignments for name in PLACEMENT_FIELDS):
            placement = {name: changes.assignments.get(name, getattr(product, name)) for name in PLACEMENT_FIELDS}
            await self.validate_placement(**placement)
        if "reference" in changes.assignments:
            await self._ensure_unique_reference(changes.assignments["reference"], exclude_id=product_id)

        await self.db.execute(update(Product).where(Product.id == product_id).values(**changes.assignments))
        await self.db.commit()
        await self.db.refresh(product)

        logger.info(f"Updated product with ID {product_id}: {', '.join(changes.fields)}")
        record_business_event("product_updated")
        return product

    async def delete_product(self, product_id: str) -> None:
        """Delete a product."""
        product = await self.get_product(product_id)

        await self.db.delete(product)
        await self.db.commit()

        logger.info(f"Deleted product with ID {product_id}")
        record_business_event("product_deleted")
