# Overview: Assembles a flat category snapshot into an ordered forest with computed levels.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from flask import current_app, has_app_context

from ..models import CategoryNode, CategoryRecord
from ..validation import coerce_bool
from .graph_service import CategorySource, OrphanedCategoryError, as_graph


ORPHAN_SURFACE = "surface"
ORPHAN_PROMOTE = "promote"
ORPHAN_REJECT = "reject"
ORPHAN_POLICIES = {ORPHAN_SURFACE, ORPHAN_PROMOTE, ORPHAN_REJECT}


@dataclass
class CategoryTree:
    """
    Result of build_tree().

    Every input record ends up in exactly one place:
    - in the forest under `roots`
    - in `orphans` when its parent_category_id does not resolve
      (also listed there when the promote policy placed it as a root)
    - in `detached` when it hangs below a surfaced orphan or on a parent loop
    """
    roots: list[CategoryNode] = field(default_factory=list)
    orphans: list[CategoryRecord] = field(default_factory=list)
    detached: list[CategoryRecord] = field(default_factory=list)

    def __iter__(self):
        return iter(self.roots)

    def __len__(self) -> int:
        return len(self.roots)

    @property
    def node_count(self) -> int:
        return sum(1 for _ in walk_nodes(self.roots))

    def to_dict(self) -> dict:
        return {
            "roots": [node.to_dict() for node in self.roots],
            "orphans": [record.to_dict() for record in self.orphans],
            "detached": [record.to_dict() for record in self.detached],
        }


def _resolve_orphan_policy(orphan_policy: str | None) -> str:
    if orphan_policy is None:
        if has_app_context():
            orphan_policy = current_app.config.get("CATEGORY_ORPHAN_POLICY", ORPHAN_SURFACE)
        else:
            orphan_policy = ORPHAN_SURFACE
    policy = str(orphan_policy).strip().lower()
    if policy not in ORPHAN_POLICIES:
        raise ValueError(f"Unknown orphan policy: {orphan_policy}")
    return policy


def _resolve_sort_children(sort_children: bool | None) -> bool:
    if sort_children is not None:
        return sort_children
    if has_app_context():
        return coerce_bool("CATEGORY_SORT_CHILDREN", current_app.config.get("CATEGORY_SORT_CHILDREN", True))
    return True


def _by_sort_order(nodes: list[CategoryNode]) -> list[CategoryNode]:
    # sorted() is stable: equal sort_order keeps collection order
    return sorted(nodes, key=lambda n: n.sort_order)


def build_tree(
    categories: CategorySource,
    *,
    orphan_policy: str | None = None,
    sort_children: bool | None = None,
) -> CategoryTree:
    """
    Build the category forest.

    Roots are ordered by sort_order. Children are ordered by sort_order too
    unless sort_children=False, which keeps collection order. Levels come
    from the parent chain: 0 for roots, parent level + 1 below.

    orphan_policy decides what happens to records whose parent is missing:
    "surface" (default) leaves them out of the forest and reports them,
    "promote" turns them into roots, "reject" raises OrphanedCategoryError.
    """
    graph = as_graph(categories)
    policy = _resolve_orphan_policy(orphan_policy)
    sort_nested = _resolve_sort_children(sort_children)

    orphans = [record for record in graph if graph.is_orphan(record)]
    if orphans and policy == ORPHAN_REJECT:
        raise OrphanedCategoryError([record.category_id for record in orphans])

    nodes = {record.category_id: CategoryNode(record=record) for record in graph}

    roots: list[CategoryNode] = []
    for record in graph:
        node = nodes[record.category_id]
        if record.parent_category_id is None:
            roots.append(node)
        elif record.parent_category_id in nodes:
            nodes[record.parent_category_id].children.append(node)
        elif policy == ORPHAN_PROMOTE:
            roots.append(node)

    roots = _by_sort_order(roots)

    # Walk down from the roots: assigns levels and finds what the forest holds.
    placed: set[str] = set()
    stack = [(node, 0) for node in roots]
    while stack:
        node, level = stack.pop()
        if node.category_id in placed:
            continue
        placed.add(node.category_id)
        node.level = level
        if sort_nested:
            node.children = _by_sort_order(node.children)
        stack.extend((child, level + 1) for child in node.children)

    orphan_ids = {record.category_id for record in orphans}
    detached = [
        record for record in graph
        if record.category_id not in placed and record.category_id not in orphan_ids
    ]

    return CategoryTree(roots=roots, orphans=orphans, detached=detached)


def walk_nodes(roots: list[CategoryNode]) -> Iterator[CategoryNode]:
    """Nodes of a built forest in pre-order (parent before its children)."""
    stack = list(reversed(roots))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def flatten_tree(roots: list[CategoryNode]) -> list[CategoryRecord]:
    return [node.record for node in walk_nodes(roots)]
