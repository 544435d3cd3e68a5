"""Sparse UPDATE construction against per-entity allow-lists."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from storefront.core.exceptions import EmptyUpdateError, UnknownFieldError
from storefront.core.time_utils import utcnow

TIMESTAMP_FIELD = "updated_at"

CATEGORY_UPDATABLE_FIELDS: FrozenSet[str] = frozenset({"name", "slug", "order_index"})

SUBCATEGORY_UPDATABLE_FIELDS: FrozenSet[str] = CATEGORY_UPDATABLE_FIELDS | {"category_id"}

SUBSUBCATEGORY_UPDATABLE_FIELDS: FrozenSet[str] = CATEGORY_UPDATABLE_FIELDS | {"subcategory_id"}

PRODUCT_UPDATABLE_FIELDS: FrozenSet[str] = frozenset(
    {
        "name",
        "reference",
        "category_id",
        "subcategory_id",
        "subsubcategory_id",
        "description",
        "price_ht",
        "price_ttc",
        "images",
        "technical_specs",
        "technical_doc_url",
        "video_url",
        "stock",
        "is_available",
    }
)


@dataclass
class SparseUpdate:
    """
    Assignment clauses for one row.

    ``values`` lines up with ``clauses`` and ends with the entity id used by
    the ``WHERE id = ?`` predicate.
    """

    entity_id: Any
    clauses: List[str] = field(default_factory=list)
    values: List[Any] = field(default_factory=list)
    assignments: Dict[str, Any] = field(default_factory=dict)

    @property
    def fields(self) -> List[str]:
        return [name for name in self.assignments if name != TIMESTAMP_FIELD]

    def set_clause(self) -> str:
        return ", ".join(self.clauses)


def build_sparse_update(
    changes: Mapping[str, Any],
    entity_id: Any,
    allowed_fields: FrozenSet[str],
    now: Optional[datetime] = None,
) -> SparseUpdate:
    """
    Build ``field = ?`` assignments for the supplied fields only.

    ``updated_at`` is always appended last with ``now`` (current UTC time by
    default), whether or not the caller sent one.

    Raises:
        EmptyUpdateError: nothing to change
        UnknownFieldError: a key is not in ``allowed_fields``
    """
    requested = {key: value for key, value in changes.items() if key != TIMESTAMP_FIELD}
    if not requested:
        raise EmptyUpdateError()

    unknown = set(requested) - allowed_fields
    if unknown:
        raise UnknownFieldError(unknown)

    timestamp = now if now is not None else utcnow()
    update = SparseUpdate(entity_id=entity_id)

    for name, value in requested.items():
        update.clauses.append(f"{name} = ?")
        update.values.append(value)
        update.assignments[name] = value

    update.clauses.append(f"{TIMESTAMP_FIELD} = ?")
    update.values.append(timestamp)
    update.assignments[TIMESTAMP_FIELD] = timestamp
    update.values.append(entity_id)

    return update
