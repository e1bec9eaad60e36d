# backend/posadmin/services/hierarchy_service.py
"""
Category hierarchy queries: ancestry, descendants, breadcrumbs and
re-parenting checks over one snapshot of category records.

Every function takes the snapshot as an argument (a CategoryGraph or any
iterable of records) and returns a new value. Unknown ids yield empty
results, never exceptions.

Traversal is iterative and tracks visited ids, so corrupted cyclic data
(e.g. rows imported straight into the category store) cannot loop forever.
Use find_cycles() to report such data.
"""
from __future__ import annotations

from dataclasses import dataclass

from ..models import CategoryRecord
from .graph_service import CategorySource, as_graph


DEFAULT_PATH_SEPARATOR = " > "


@dataclass(frozen=True)
class ParentOption:
    """One entry of a parent-category picker."""
    category_id: str
    label: str
    description: str | None
    level: int
    path: str
    record: CategoryRecord


def ancestors(category_id: str, categories: CategorySource) -> list[CategoryRecord]:
    """Ancestors of a category from the root down to its immediate parent."""
    graph = as_graph(categories)
    current = graph.get(category_id)
    if current is None:
        return []

    chain: list[CategoryRecord] = []
    seen = {current.category_id}
    while current.parent_category_id is not None:
        parent = graph.get(current.parent_category_id)
        if parent is None or parent.category_id in seen:
            break
        seen.add(parent.category_id)
        chain.append(parent)
        current = parent

    chain.reverse()
    return chain


def descendants(category_id: str, categories: CategorySource) -> list[CategoryRecord]:
    """
    All transitive children in pre-order: each child is emitted right
    before its own children. Siblings keep collection order.
    """
    graph = as_graph(categories)
    if category_id not in graph:
        return []

    result: list[CategoryRecord] = []
    seen = {category_id}
    stack = list(reversed(graph.children_of(category_id)))
    while stack:
        node = stack.pop()
        if node.category_id in seen:
            continue
        seen.add(node.category_id)
        result.append(node)
        stack.extend(reversed(graph.children_of(node.category_id)))

    return result


def root(category_id: str, categories: CategorySource) -> CategoryRecord | None:
    """
    Top of the parent chain.

    A chain that ends on a missing parent returns the highest record that
    does resolve. A chain that loops back on itself has no root (None).
    """
    graph = as_graph(categories)
    current = graph.get(category_id)
    if current is None:
        return None

    seen = {current.category_id}
    while current.parent_category_id is not None:
        parent = graph.get(current.parent_category_id)
        if parent is None:
            break
        if parent.category_id in seen:
            return None
        seen.add(parent.category_id)
        current = parent

    return current


def path(category_id: str, categories: CategorySource) -> list[CategoryRecord]:
    graph = as_graph(categories)
    node = graph.get(category_id)
    if node is None:
        return []
    return ancestors(category_id, graph) + [node]


def breadcrumb(category_id: str, categories: CategorySource) -> list[CategoryRecord]:
    """Clickable breadcrumb segments, root first, ending on the category itself."""
    return path(category_id, categories)


def path_string(
    category_id: str,
    categories: CategorySource,
    separator: str = DEFAULT_PATH_SEPARATOR,
) -> str:
    """Display breadcrumb, e.g. "Electronics > Phones > iPhone"."""
    return separator.join(record.name for record in path(category_id, categories))


def depth(category_id: str, categories: CategorySource) -> int:
    return len(ancestors(category_id, categories))


def is_descendant(child_id: str, parent_id: str, categories: CategorySource) -> bool:
    """True if child_id sits anywhere below parent_id."""
    return any(d.category_id == child_id for d in descendants(parent_id, categories))


def validate_parent(
    category_id: str,
    proposed_parent_id: str | None,
    categories: CategorySource,
) -> bool:
    """
    Check a proposed re-parenting before it is sent to the category service.

    - moving to the root level (no parent) is always allowed
    - a category cannot be its own parent
    - a category cannot move under one of its own descendants

    Unknown ids are permissive: existence checks belong to the caller.
    An id missing from the snapshot has no descendants here, even when
    some record still names it as parent_category_id.
    """
    if proposed_parent_id is None:
        return True
    if category_id == proposed_parent_id:
        return False
    return not is_descendant(proposed_parent_id, category_id, categories)


def parent_options(
    category_id: str | None,
    categories: CategorySource,
    *,
    separator: str = DEFAULT_PATH_SEPARATOR,
) -> list[ParentOption]:
    """
    Records that may become the parent of `category_id`, sorted by name.

    When editing, the category itself and its whole subtree are excluded
    so the picker can never offer a cycle. Pass None for a new category.
    """
    graph = as_graph(categories)

    excluded: set[str] = set()
    if category_id is not None:
        excluded.add(category_id)
        excluded.update(d.category_id for d in descendants(category_id, graph))

    options = []
    for record in graph:
        if record.category_id in excluded:
            continue
        options.append(
            ParentOption(
                category_id=record.category_id,
                label=record.name,
                description=record.description or None,
                level=depth(record.category_id, graph),
                path=path_string(record.category_id, graph, separator),
                record=record,
            )
        )

    options.sort(key=lambda o: o.label.casefold())
    return options


def find_cycles(categories: CategorySource) -> list[list[str]]:
    """
    Every loop in the parent graph, as category ids in child -> parent order.

    A valid snapshot returns []. Each record has at most one parent, so
    each cycle is found exactly once.
    """
    graph = as_graph(categories)
    done: set[str] = set()
    cycles: list[list[str]] = []

    for record in graph:
        walk: list[str] = []
        position: dict[str, int] = {}
        current: CategoryRecord | None = record
        while current is not None and current.category_id not in done:
            if current.category_id in position:
                cycles.append(walk[position[current.category_id]:])
                break
            position[current.category_id] = len(walk)
            walk.append(current.category_id)
            current = graph.parent_of(current)
        done.update(walk)

    return cycles
