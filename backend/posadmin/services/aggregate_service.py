# Overview: Product-count roll-ups and summary statistics over a category snapshot.

from __future__ import annotations

from dataclasses import dataclass, asdict

from .graph_service import CategorySource, as_graph
from .hierarchy_service import descendants


@dataclass(frozen=True)
class CategoryStats:
    total_categories: int
    active_categories: int
    inactive_categories: int
    root_categories: int
    avg_products_per_category: float
    categories_with_products: int
    categories_without_products: int

    def to_dict(self) -> dict:
        return asdict(self)


def total_product_count(category_id: str, categories: CategorySource) -> int:
    """Products assigned to the category itself plus every category below it."""
    graph = as_graph(categories)
    category = graph.get(category_id)
    if category is None:
        return 0
    return category.product_count + sum(d.product_count for d in descendants(category_id, graph))


def category_stats(categories: CategorySource) -> CategoryStats:
    graph = as_graph(categories)
    total = len(graph)
    active = sum(1 for r in graph if r.is_active)
    with_products = sum(1 for r in graph if r.product_count > 0)
    products = sum(r.product_count for r in graph)

    return CategoryStats(
        total_categories=total,
        active_categories=active,
        inactive_categories=total - active,
        root_categories=sum(1 for r in graph if r.is_root),
        avg_products_per_category=round(products / total, 2) if total else 0.0,
        categories_with_products=with_products,
        categories_without_products=total - with_products,
    )
