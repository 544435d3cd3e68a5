"""Business logic for the category tree."""

from typing import Any, FrozenSet, List, Optional, Sequence, Tuple, Type

from loguru import logger
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import ConflictError, InvalidReferenceError, NotFoundError
from storefront.core.metrics import observe_tree_build, record_business_event
from storefront.core.tracing import get_tracer
from storefront.db.models import Category, Product, Subcategory, Subsubcategory
from storefront.schemas.catalog import (
    CategoryCreate,
    CategoryNode,
    CategoryUpdate,
    SubcategoryCreate,
    SubcategoryUpdate,
    SubsubcategoryCreate,
    SubsubcategoryUpdate,
)
from storefront.services.category_tree import build_category_tree, fetch_category_rows
from storefront.services.updates import (
    CATEGORY_UPDATABLE_FIELDS,
    SUBCATEGORY_UPDATABLE_FIELDS,
    SUBSUBCATEGORY_UPDATABLE_FIELDS,
    SparseUpdate,
    build_sparse_update,
)

LABELS = {
    Category: "Category",
    Subcategory: "Subcategory",
    Subsubcategory: "Subsubcategory",
}


class CategoryService:
    """Service for category, subcategory and sub-subcategory operations."""

    def __init__(self, db: AsyncSession):
        """Initialize with database session."""
        self.db = db

    # Shared helpers

    async def _get(self, model: Type[Any], entity_id: str) -> Any:
        result = await self.db.execute(select(model).where(model.id == entity_id))
        entity = result.scalar_one_or_none()
        if entity is None:
            logger.warning(f"{LABELS[model]} with ID {entity_id} not found")
            raise NotFoundError(LABELS[model], entity_id)
        return entity

    async def _count(self, column: Any, value: Any) -> int:
        result = await self.db.execute(select(func.count()).where(column == value))
        return result.scalar() or 0

    async def _ensure_unique_slug(
        self,
        model: Type[Any],
        slug: str,
        parent_column: Optional[Any] = None,
        parent_id: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> None:
        query = select(model.id).where(model.slug == slug)
        if parent_column is not None:
            query = query.where(parent_column == parent_id)
        if exclude_id is not None:
            query = query.where(model.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        if result.scalar_one_or_none() is not None:
            raise ConflictError(f"{LABELS[model]} with slug '{slug}' already exists")

    async def _apply(self, model: Type[Any], changes: SparseUpdate) -> Any:
        await self.db.execute(update(model).where(model.id == changes.entity_id).values(**changes.assignments))
        await self.db.commit()
        entity = await self._get(model, changes.entity_id)
        await self.db.refresh(entity)
        logger.info(f"Updated {LABELS[model].lower()} {changes.entity_id}: {', '.join(changes.fields)}")
        record_business_event(f"{LABELS[model].lower()}_updated")
        return entity

    async def _build_update(
        self, model: Type[Any], entity_id: str, data: Any, allowed: FrozenSet[str]
    ) -> Tuple[Any, SparseUpdate]:
        # Existence check first so an empty body on a missing row is still a 404
        entity = await self._get(model, entity_id)
        return entity, build_sparse_update(data.changes(), entity_id, allowed)

    async def _reorder(
        self,
        model: Type[Any],
        ordered_ids: Sequence[str],
        allowed: FrozenSet[str],
        parent_column: Optional[Any] = None,
        parent_id: Optional[str] = None,
    ) -> int:
        """Set each id's order_index to its position; ids under another parent are skipped."""
        touched = 0
        for position, entity_id in enumerate(ordered_ids):
            changes = build_sparse_update({"order_index": position}, entity_id, allowed)
            stmt = update(model).where(model.id == entity_id)
            if parent_column is not None:
                stmt = stmt.where(parent_column == parent_id)
            result = await self.db.execute(stmt.values(**changes.assignments))
            if result.rowcount:
                touched += result.rowcount
            else:
                logger.warning(f"Reorder skipped {LABELS[model].lower()} {entity_id}")
        await self.db.commit()
        logger.info(f"Reordered {touched}/{len(ordered_ids)} {LABELS[model].lower()} rows")
        return touched

    async def _add(self, entity: Any) -> Any:
        self.db.add(entity)
        await self.db.commit()
        await self.db.refresh(entity)
        logger.info(f"Created new {LABELS[type(entity)].lower()} with ID {entity.id}")
        record_business_event(f"{LABELS[type(entity)].lower()}_created")
        return entity

    async def _detach_products(self, column: Any, ids: Sequence[str]) -> None:
        if ids:
            await self.db.execute(update(Product).where(column.in_(ids)).values(**{column.key: None}))

    # Tree

    async def get_tree(self) -> List[CategoryNode]:
        """Get every category with nested subcategories and sub-subcategories."""
        with get_tracer().start_as_current_span("category_tree.build") as span:
            rows = await fetch_category_rows(self.db)
            tree = build_category_tree(rows)
            span.set_attribute("catalog.rows", len(rows))
            span.set_attribute("catalog.categories", len(tree))
        observe_tree_build(len(rows))
        logger.debug(f"Built category tree with {len(tree)} categories from {len(rows)} rows")
        return tree

    # Categories

    async def create_category(self, data: CategoryCreate) -> Category:
        await self._ensure_unique_slug(Category, data.slug)
        return await self._add(Category(**data.model_dump()))

    async def update_category(self, category_id: str, data: CategoryUpdate) -> Category:
        _, changes = await self._build_update(Category, category_id, data, CATEGORY_UPDATABLE_FIELDS)
        if "slug" in changes.assignments:
            await self._ensure_unique_slug(Category, changes.assignments["slug"], exclude_id=category_id)
        return await self._apply(Category, changes)

    async def delete_category(self, category_id: str, cascade: bool = False) -> None:
        """
        Delete a category.

        Products always block the delete. Subcategories block it unless
        ``cascade`` is set, in which case the whole subtree goes with it.
        """
        await self._get(Category, category_id)

        if await self._count(Product.category_id, category_id):
            raise ConflictError(f"Category with ID {category_id} still has products")

        result = await self.db.execute(select(Subcategory.id).where(Subcategory.category_id == category_id))
        subcategory_ids = list(result.scalars().all())
        if subcategory_ids and not cascade:
            raise ConflictError(f"Category with ID {category_id} has subcategories; pass cascade=true to delete them")

        if subcategory_ids:
            result = await self.db.execute(
                select(Subsubcategory.id).where(Subsubcategory.subcategory_id.in_(subcategory_ids))
            )
            leaf_ids = list(result.scalars().all())
            await self._detach_products(Product.subsubcategory_id, leaf_ids)
            await self._detach_products(Product.subcategory_id, subcategory_ids)
            await self.db.execute(delete(Subsubcategory).where(Subsubcategory.subcategory_id.in_(subcategory_ids)))
            await self.db.execute(delete(Subcategory).where(Subcategory.category_id == category_id))

        await self.db.execute(delete(Category).where(Category.id == category_id))
        await self.db.commit()

        logger.info(f"Deleted category with ID {category_id} (cascade={cascade})")
        record_business_event("category_deleted")

    async def reorder_categories(self, ordered_ids: Sequence[str]) -> int:
        return await self._reorder(Category, ordered_ids, CATEGORY_UPDATABLE_FIELDS)

    # Subcategories

    async def get_subcategory(self, subcategory_id: str) -> Subcategory:
        return await self._get(Subcategory, subcategory_id)

    async def _require_category(self, category_id: str) -> None:
        try:
            await self._get(Category, category_id)
        except NotFoundError:
            raise InvalidReferenceError(f"Category with ID {category_id} does not exist") from None

    async def _require_subcategory(self, subcategory_id: str) -> None:
        try:
            await self._get(Subcategory, subcategory_id)
        except NotFoundError:
            raise InvalidReferenceError(f"Subcategory with ID {subcategory_id} does not exist") from None

    async def create_subcategory(self, data: SubcategoryCreate) -> Subcategory:
        await self._require_category(data.category_id)
        await self._ensure_unique_slug(Subcategory, data.slug, Subcategory.category_id, data.category_id)
        return await self._add(Subcategory(**data.model_dump()))

    async def update_subcategory(self, subcategory_id: str, data: SubcategoryUpdate) -> Subcategory:
        current, changes = await self._build_update(Subcategory, subcategory_id, data, SUBCATEGORY_UPDATABLE_FIELDS)
        parent_id = changes.assignments.get("category_id", current.category_id)

        if "category_id" in changes.assignments:
            await self._require_category(parent_id)
            if parent_id != current.category_id and await self._count(Product.subcategory_id, subcategory_id):
                raise ConflictError(f"Subcategory with ID {subcategory_id} has products; move them first")
        if "slug" in changes.assignments or "category_id" in changes.assignments:
            slug = changes.assignments.get("slug", current.slug)
            await self._ensure_unique_slug(
                Subcategory, slug, Subcategory.category_id, parent_id, exclude_id=subcategory_id
            )
        return await self._apply(Subcategory, changes)

    async def delete_subcategory(self, subcategory_id: str, cascade: bool = False) -> None:
        await self._get(Subcategory, subcategory_id)

        result = await self.db.execute(
            select(Subsubcategory.id).where(Subsubcategory.subcategory_id == subcategory_id)
        )
        leaf_ids = list(result.scalars().all())
        if leaf_ids and not cascade:
            raise ConflictError(
                f"Subcategory with ID {subcategory_id} has sub-subcategories; pass cascade=true to delete them"
            )

        if leaf_ids:
            await self._detach_products(Product.subsubcategory_id, leaf_ids)
            await self.db.execute(delete(Subsubcategory).where(Subsubcategory.subcategory_id == subcategory_id))
        await self._detach_products(Product.subcategory_id, [subcategory_id])

        await self.db.execute(delete(Subcategory).where(Subcategory.id == subcategory_id))
        await self.db.commit()

        logger.info(f"Deleted subcategory with ID {subcategory_id} (cascade={cascade})")
        record_business_event("subcategory_deleted")

    async def reorder_subcategories(self, category_id: str, ordered_ids: Sequence[str]) -> int:
        return await self._reorder(
            Subcategory, ordered_ids, SUBCATEGORY_UPDATABLE_FIELDS, Subcategory.category_id, category_id
        )

    # Sub-subcategories

    async def create_subsubcategory(self, data: SubsubcategoryCreate) -> Subsubcategory:
        await self._require_subcategory(data.subcategory_id)
        await self._ensure_unique_slug(Subsubcategory, data.slug, Subsubcategory.subcategory_id, data.subcategory_id)
        return await self._add(Subsubcategory(**data.model_dump()))

    async def update_subsubcategory(self, subsubcategory_id: str, data: SubsubcategoryUpdate) -> Subsubcategory:
        current, changes = await self._build_update(
            Subsubcategory, subsubcategory_id, data, SUBSUBCATEGORY_UPDATABLE_FIELDS
        )
        parent_id = changes.assignments.get("subcategory_id", current.subcategory_id)

        if "subcategory_id" in changes.assignments:
            await self._require_subcategory(parent_id)
            if parent_id != current.subcategory_id and await self._count(
                Product.subsubcategory_id, subsubcategory_id
            ):
                raise ConflictError(f"Subsubcategory with ID {subsubcategory_id} has products; move them first")
        if "slug" in changes.assignments or "subcategory_id" in changes.assignments:
            slug = changes.assignments.get("slug", current.slug)
            await self._ensure_unique_slug(
                Subsubcategory, slug, Subsubcategory.subcategory_id, parent_id, exclude_id=subsubcategory_id
            )
        return await self._apply(Subsubcategory, changes)

    async def delete_subsubcategory(self, subsubcategory_id: str) -> None:
        await self._get(Subsubcategory, subsubcategory_id)

        await self._detach_products(Product.subsubcategory_id, [subsubcategory_id])
        await self.db.execute(delete(Subsubcategory).where(Subsubcategory.id == subsubcategory_id))
        await self.db.commit()

        logger.info(f"Deleted subsubcategory with ID {subsubcategory_id}")
        record_business_event("subsubcategory_deleted")

    async def reorder_subsubcategories(self, subcategory_id: str, ordered_ids: Sequence[str]) -> int:
        return await self._reorder(
            Subsubcategory,
            ordered_ids,
            SUBSUBCATEGORY_UPDATABLE_FIELDS,
            Subsubcategory.subcategory_id,
            subcategory_id,
        )
