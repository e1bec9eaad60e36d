from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from ..time_utils import format_category_timestamp
from ..validation import (
    ValidationError,
    coerce_bool,
    coerce_datetime,
    coerce_int,
    coerce_text,
    enforce_rules_category,
)


# Keys consumed by CategoryRecord.from_dict; anything else is kept in `extra`.
# "children" is derived by the tree builder and never read back from input.
RECORD_FIELDS = {
    "category_id",
    "name",
    "description",
    "parent_category_id",
    "sort_order",
    "tags",
    "productCount",
    "product_count",
    "level",
    "is_active",
    "display_on_main_screen",
    "icon_url",
    "image_url",
    "properties",
    "created_at",
    "updated_at",
    "children",
}


def _parse_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        raise ValidationError("tags must be a list of strings")
    try:
        items = list(value)
    except TypeError:
        raise ValidationError("tags must be a list of strings")
    tags = []
    for item in items:
        text = coerce_text(item)
        if text:
            tags.append(text)
    return tuple(tags)


def _flag(payload: Mapping[str, Any], key: str, default: bool) -> bool:
    value = payload.get(key)
    return default if value is None else coerce_bool(key, value)


@dataclass(frozen=True)
class CategoryRecord:
    """
    One node of the category hierarchy as supplied by the category service.

    Records are read-only snapshots: the hierarchy services never create,
    mutate or delete them. Display metadata (icon, image, properties and
    anything unrecognised in `extra`) is passed through untouched.
    """
    category_id: str
    name: str
    description: str = ""
    parent_category_id: str | None = None
    sort_order: int = 0
    tags: tuple[str, ...] = ()
    product_count: int = 0
    level: int | None = None
    is_active: bool = True
    display_on_main_screen: bool = False
    icon_url: str | None = None
    image_url: str | None = None
    properties: Mapping[str, Any] = field(default_factory=dict, compare=False)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __repr__(self) -> str:
        return f"<CategoryRecord id={self.category_id!r} name={self.name!r}>"

    @property
    def is_root(self) -> bool:
        return self.parent_category_id is None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CategoryRecord":
        """
        Validates + normalizes one category object from the category service.

        - category_id and name are required and cannot be blank
        - a blank parent_category_id means "root"
        - sort_order / productCount / level must be plain integers
        - productCount accepts either `productCount` or `product_count`
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("Category must be a JSON object")

        category_id = coerce_text(payload.get("category_id"))
        if not category_id:
            raise ValidationError("category_id is required")

        name = coerce_text(payload.get("name"))
        if not name:
            raise ValidationError(f"name is required (category {category_id})")

        raw_count = payload.get("productCount", payload.get("product_count"))
        product_count = coerce_int("productCount", raw_count) if raw_count is not None else 0
        enforce_rules_category(product_count=product_count)

        raw_sort = payload.get("sort_order")
        sort_order = coerce_int("sort_order", raw_sort) if raw_sort is not None else 0

        raw_level = payload.get("level")
        level = coerce_int("level", raw_level) if raw_level is not None else None

        properties = payload.get("properties") or {}
        if not isinstance(properties, Mapping):
            raise ValidationError("properties must be an object")

        return cls(
            category_id=category_id,
            name=name,
            description=coerce_text(payload.get("description")) or "",
            parent_category_id=coerce_text(payload.get("parent_category_id")),
            sort_order=sort_order,
            tags=_parse_tags(payload.get("tags")),
            product_count=product_count,
            level=level,
            is_active=_flag(payload, "is_active", True),
            display_on_main_screen=_flag(payload, "display_on_main_screen", False),
            icon_url=coerce_text(payload.get("icon_url")),
            image_url=coerce_text(payload.get("image_url")),
            properties=dict(properties),
            created_at=coerce_datetime("created_at", payload.get("created_at")),
            updated_at=coerce_datetime("updated_at", payload.get("updated_at")),
            extra={k: v for k, v in payload.items() if k not in RECORD_FIELDS},
        )

    def to_dict(self) -> dict:
        data = {
            "category_id": self.category_id,
            "name": self.name,
            "description": self.description,
            "parent_category_id": self.parent_category_id,
            "sort_order": self.sort_order,
            "tags": list(self.tags),
            "productCount": self.product_count,
            "is_active": self.is_active,
            "display_on_main_screen": self.display_on_main_screen,
            "icon_url": self.icon_url,
            "image_url": self.image_url,
            "properties": dict(self.properties),
            "created_at": format_category_timestamp(self.created_at),
            "updated_at": format_category_timestamp(self.updated_at),
        }
        if self.level is not None:
            data["level"] = self.level
        data.update(self.extra)
        return data


@dataclass
class CategoryNode:
    """Tree node synthesized by the tree builder; owns its children, never the record."""
    record: CategoryRecord
    level: int = 0
    children: list["CategoryNode"] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"<CategoryNode id={self.category_id!r} level={self.level} children={len(self.children)}>"

    @property
    def category_id(self) -> str:
        return self.record.category_id

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def sort_order(self) -> int:
        return self.record.sort_order

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["level"] = self.level
        data["children"] = [child.to_dict() for child in self.children]
        return data
