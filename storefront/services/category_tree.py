"""
Nesting of the flat category join into a category tree.

``fetch_category_rows`` runs the categories LEFT JOIN subcategories LEFT JOIN subsubcategories
join ordered by ``order_index`` at every level, ties broken by creation time
and id. ``build_category_tree`` folds those rows into nested nodes in a single
pass. It only deduplicates and nests; ordering comes from the query.
"""

from typing import Any, Dict, Iterable, List, Mapping, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.models import Category, Subcategory, Subsubcategory
from storefront.schemas.catalog import CategoryNode, SubcategoryNode, SubsubcategoryNode

ROW_KEYS = (
    "category_id",
    "category_name",
    "category_slug",
    "category_order",
    "category_created",
    "category_updated",
    "sub_id",
    "sub_name",
    "sub_slug",
    "sub_order",
    "sub_created",
    "sub_updated",
    "subsub_id",
    "subsub_name",
    "subsub_slug",
    "subsub_order",
    "subsub_created",
    "subsub_updated",
)


def category_rows_query() -> Any:
    """Left join of the three tree tables, labelled with the flat row keys."""
    return (
        select(
            Category.id.label("category_id"),
            Category.name.label("category_name"),
            Category.slug.label("category_slug"),
            Category.order_index.label("category_order"),
            Category.created_at.label("category_created"),
            Category.updated_at.label("category_updated"),
            Subcategory.id.label("sub_id"),
            Subcategory.name.label("sub_name"),
            Subcategory.slug.label("sub_slug"),
            Subcategory.order_index.label("sub_order"),
            Subcategory.created_at.label("sub_created"),
            Subcategory.updated_at.label("sub_updated"),
            Subsubcategory.id.label("subsub_id"),
            Subsubcategory.name.label("subsub_name"),
            Subsubcategory.slug.label("subsub_slug"),
            Subsubcategory.order_index.label("subsub_order"),
            Subsubcategory.created_at.label("subsub_created"),
            Subsubcategory.updated_at.label("subsub_updated"),
        )
        .select_from(Category)
        .outerjoin(Subcategory, Subcategory.category_id == Category.id)
        .outerjoin(Subsubcategory, Subsubcategory.subcategory_id == Subcategory.id)
        # Equal order_index siblings fall back to creation order, then id
        .order_by(
            Category.order_index,
            Category.created_at,
            Category.id,
            Subcategory.order_index,
            Subcategory.created_at,
            Subcategory.id,
            Subsubcategory.order_index,
            Subsubcategory.created_at,
            Subsubcategory.id,
        )
    )


async def fetch_category_rows(db: AsyncSession) -> List[Mapping[str, Any]]:
    result = await db.execute(category_rows_query())
    return list(result.mappings().all())


def _order(value: Any) -> int:
    return value if value is not None else 0


def build_category_tree(rows: Iterable[Mapping[str, Any]]) -> List[CategoryNode]:
    """
    Fold left-join rows into categories → subcategories → sub-subcategories.

    Every level keeps first-seen order. Rows whose ``sub_id`` is null add no
    subcategory, and a ``subsub_id`` whose subcategory was never registered for
    the row's category is dropped without raising.
    """
    categories: Dict[Any, CategoryNode] = {}
    subcategories: Dict[Any, Dict[Any, SubcategoryNode]] = {}
    leaves: Dict[Any, Set[Any]] = {}

    for row in rows:
        category_id = row.get("category_id")
        if category_id is None:
            continue

        category = categories.get(category_id)
        if category is None:
            category = CategoryNode(
                id=category_id,
                name=row.get("category_name") or "",
                slug=row.get("category_slug") or "",
                order_index=_order(row.get("category_order")),
                created_at=row.get("category_created"),
                updated_at=row.get("category_updated"),
            )
            categories[category_id] = category
            subcategories[category_id] = {}

        registered = subcategories[category_id]
        sub_id = row.get("sub_id")
        if sub_id is not None and sub_id not in registered:
            subcategory = SubcategoryNode(
                id=sub_id,
                name=row.get("sub_name") or "",
                slug=row.get("sub_slug") or "",
                order_index=_order(row.get("sub_order")),
                created_at=row.get("sub_created"),
                updated_at=row.get("sub_updated"),
            )
            registered[sub_id] = subcategory
            leaves[(category_id, sub_id)] = set()
            category.subcategories.append(subcategory)

        subsub_id = row.get("subsub_id")
        if subsub_id is None:
            continue

        parent = registered.get(sub_id) if sub_id is not None else None
        if parent is None:
            # Orphan leaf
            continue
        if subsub_id in leaves[(category_id, sub_id)]:
            continue
        leaves[(category_id, sub_id)].add(subsub_id)

        parent.subsubcategories.append(
            SubsubcategoryNode(
                id=subsub_id,
                name=row.get("subsub_name") or "",
                slug=row.get("subsub_slug") or "",
                order_index=_order(row.get("subsub_order")),
                created_at=row.get("subsub_created"),
                updated_at=row.get("subsub_updated"),
            )
        )

    return list(categories.values())


def flatten_category_tree(categories: Iterable[CategoryNode]) -> List[Dict[str, Any]]:
    """
    Inverse of ``build_category_tree``: one row per leaf, in the join's row shape.

    A category without subcategories, or a subcategory without leaves, yields
    a single row with null child columns, as the left join does.
    """
    rows: List[Dict[str, Any]] = []

    for category in categories:
        category_part = {
            "category_id": category.id,
            "category_name": category.name,
            "category_slug": category.slug,
            "category_order": category.order_index,
            "category_created": category.created_at,
            "category_updated": category.updated_at,
        }
        if not category.subcategories:
            rows.append({**dict.fromkeys(ROW_KEYS), **category_part})
            continue

        for subcategory in category.subcategories:
            sub_part = {
                "sub_id": subcategory.id,
                "sub_name": subcategory.name,
                "sub_slug": subcategory.slug,
                "sub_order": subcategory.order_index,
                "sub_created": subcategory.created_at,
                "sub_updated": subcategory.updated_at,
            }
            if not subcategory.subsubcategories:
                rows.append({**dict.fromkeys(ROW_KEYS), **category_part, **sub_part})
                continue

            for leaf in subcategory.subsubcategories:
                rows.append(
                    {
                        **category_part,
                        **sub_part,
                        "subsub_id": leaf.id,
                        "subsub_name": leaf.name,
                        "subsub_slug": leaf.slug,
                        "subsub_order": leaf.order_index,
                        "subsub_created": leaf.created_at,
                        "subsub_updated": leaf.updated_at,
                    }
                )

    return rows
