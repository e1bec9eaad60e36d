# Overview: Per-snapshot category index shared by every hierarchy query.

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Union

from ..models import CategoryRecord


class HierarchyError(ValueError):
    """Raised when a category snapshot cannot be treated as a forest."""


class DuplicateCategoryError(HierarchyError):
    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Duplicate category_id: {category_id}")


class OrphanedCategoryError(HierarchyError):
    def __init__(self, orphan_ids: list[str]):
        self.orphan_ids = list(orphan_ids)
        super().__init__(
            f"{len(self.orphan_ids)} categories reference a missing parent: {', '.join(self.orphan_ids)}"
        )


@dataclass(frozen=True, eq=False)
class CategoryGraph:
    """
    Immutable index over one snapshot of category records.

    Build it once per request with `from_records` and hand it to the
    hierarchy, tree, aggregate and search services. No state survives
    between snapshots.
    """
    records: tuple[CategoryRecord, ...]
    by_id: Mapping[str, CategoryRecord]
    children_by_parent: Mapping[str, tuple[CategoryRecord, ...]]

    @classmethod
    def from_records(cls, records: Iterable[Union[CategoryRecord, Mapping[str, Any]]]) -> "CategoryGraph":
        parsed: list[CategoryRecord] = []
        by_id: dict[str, CategoryRecord] = {}
        children: dict[str, list[CategoryRecord]] = {}

        for item in records:
            record = item if isinstance(item, CategoryRecord) else CategoryRecord.from_dict(item)
            if record.category_id in by_id:
                raise DuplicateCategoryError(record.category_id)
            by_id[record.category_id] = record
            parsed.append(record)
            if record.parent_category_id is not None:
                children.setdefault(record.parent_category_id, []).append(record)

        return cls(
            records=tuple(parsed),
            by_id=MappingProxyType(by_id),
            children_by_parent=MappingProxyType({k: tuple(v) for k, v in children.items()}),
        )

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self.by_id

    def get(self, category_id: str | None) -> CategoryRecord | None:
        if category_id is None:
            return None
        return self.by_id.get(category_id)

    def parent_of(self, record: CategoryRecord) -> CategoryRecord | None:
        return self.get(record.parent_category_id)

    def children_of(self, category_id: str) -> tuple[CategoryRecord, ...]:
        return self.children_by_parent.get(category_id, ())

    def is_orphan(self, record: CategoryRecord) -> bool:
        """True when the record names a parent that is not in this snapshot."""
        return record.parent_category_id is not None and record.parent_category_id not in self.by_id


CategorySource = Union[CategoryGraph, Iterable[Union[CategoryRecord, Mapping[str, Any]]]]


def as_graph(categories: CategorySource) -> CategoryGraph:
    if isinstance(categories, CategoryGraph):
        return categories
    return CategoryGraph.from_records(categories)
