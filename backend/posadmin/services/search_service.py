# backend/posadmin/services/search_service.py
"""
Search and filtering for category listings.

These functions work on whatever the caller is listing: CategoryRecord
values, built CategoryNode values, a CategoryGraph, or raw category dicts.
Dicts are parsed only for matching; results are the caller's own items,
in input order unless a sort is asked for.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..models import CategoryNode, CategoryRecord
from ..validation import ValidationError, coerce_bool, coerce_text
from .graph_service import CategoryGraph


SORT_KEYS = {"name", "sort_order", "created_at", "updated_at", "product_count"}
SORT_DIRECTIONS = {"asc", "desc"}


def _entries(categories) -> list[tuple[Any, CategoryRecord]]:
    """Pairs each caller item with the record view used for matching."""
    if isinstance(categories, CategoryGraph):
        return [(record, record) for record in categories.records]
    return [(item, _record(item)) for item in categories]


def _record(item) -> CategoryRecord:
    if isinstance(item, CategoryNode):
        return item.record
    if isinstance(item, Mapping):
        return CategoryRecord.from_dict(item)
    return item


def _level(item, record: CategoryRecord) -> int:
    level = item.level if isinstance(item, CategoryNode) else record.level
    return level if level is not None else 0


def matches(record: CategoryRecord, term: str) -> bool:
    """Case-insensitive substring match on name, description or any tag."""
    needle = term.strip().casefold()
    if needle in record.name.casefold():
        return True
    if needle in record.description.casefold():
        return True
    return any(needle in tag.casefold() for tag in record.tags)


def search(categories, term: str | None) -> list:
    """
    Items whose name, description or tags contain `term`.

    The caller's own items come back (dicts stay dicts). Blank terms return
    every item unchanged, in the same order.
    """
    entries = _entries(categories)
    if term is None or not term.strip():
        return [item for item, _ in entries]
    return [item for item, record in entries if matches(record, term)]


def by_level(categories, level: int) -> list:
    """Categories at a given level; a missing level counts as 0 (root)."""
    return [item for item, record in _entries(categories) if _level(item, record) == level]


@dataclass(frozen=True)
class CategoryFilters:
    """
    Listing filters for the category admin screens.

    parent_category_id="" selects root categories only; None disables the
    parent filter. tags keeps categories carrying any of the given tags.
    """
    search: str | None = None
    is_active: bool | None = None
    parent_category_id: str | None = None
    display_on_main_screen: bool | None = None
    tags: tuple[str, ...] = ()
    has_products: bool | None = None
    has_subcategories: bool | None = None
    sort_by: str | None = None
    sort_direction: str = "asc"

    def __post_init__(self):
        if self.sort_by is not None and self.sort_by not in SORT_KEYS:
            raise ValidationError(f"sort_by must be one of: {', '.join(sorted(SORT_KEYS))}")
        if self.sort_direction not in SORT_DIRECTIONS:
            raise ValidationError("sort_direction must be 'asc' or 'desc'")

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "CategoryFilters":
        """Build filters from query-string style arguments (all values may be strings)."""
        def flag(key: str) -> bool | None:
            raw = args.get(key)
            if raw is None or raw == "":
                return None
            return coerce_bool(key, raw)

        raw_tags = args.get("tags") or ()
        if isinstance(raw_tags, str):
            raw_tags = raw_tags.split(",")
        tags = tuple(t for t in (coerce_text(tag) for tag in raw_tags) if t)

        parent = args.get("parent_category_id")
        if parent is not None:
            parent = str(parent).strip()

        return cls(
            search=coerce_text(args.get("search")),
            is_active=flag("is_active"),
            parent_category_id=parent,
            display_on_main_screen=flag("display_on_main_screen"),
            tags=tags,
            has_products=flag("has_products"),
            has_subcategories=flag("has_subcategories"),
            sort_by=coerce_text(args.get("sort_by")),
            sort_direction=(coerce_text(args.get("sort_direction")) or "asc").lower(),
        )


def _sort_value(record: CategoryRecord, sort_by: str):
    if sort_by == "name":
        return record.name.casefold()
    return getattr(record, sort_by)


def filter_categories(categories, filters: CategoryFilters) -> list:
    entries = _entries(categories)
    parent_ids = {record.parent_category_id for _, record in entries}

    def keep(record: CategoryRecord) -> bool:
        if filters.search and not matches(record, filters.search):
            return False
        if filters.is_active is not None and record.is_active != filters.is_active:
            return False
        if filters.parent_category_id is not None:
            if filters.parent_category_id == "":
                # Root categories only
                if record.parent_category_id is not None:
                    return False
            elif record.parent_category_id != filters.parent_category_id:
                return False
        if (
            filters.display_on_main_screen is not None
            and record.display_on_main_screen != filters.display_on_main_screen
        ):
            return False
        if filters.tags and not any(tag in record.tags for tag in filters.tags):
            return False
        if filters.has_products is not None and (record.product_count > 0) != filters.has_products:
            return False
        if (
            filters.has_subcategories is not None
            and (record.category_id in parent_ids) != filters.has_subcategories
        ):
            return False
        return True

    result = [(item, record) for item, record in entries if keep(record)]
    if filters.sort_by is None:
        return [item for item, _ in result]

    # Missing values (e.g. no updated_at) always sort last
    present = [e for e in result if _sort_value(e[1], filters.sort_by) is not None]
    missing = [e for e in result if _sort_value(e[1], filters.sort_by) is None]
    present.sort(
        key=lambda e: _sort_value(e[1], filters.sort_by),
        reverse=filters.sort_direction == "desc",
    )
    return [item for item, _ in present + missing]
