"""
Pytest fixtures for the category hierarchy tests.

Provides the Flask app (for config and CLI tests), a small sample catalog,
and helpers that write snapshots to disk the way the category service
exports them.
"""

import json

import pytest

from posadmin import create_app
from posadmin.models import CategoryRecord
from posadmin.services.graph_service import CategoryGraph


# Electronics (2)            5 products
#   Phones (2)               3
#     iPhone (1)             2
#   Laptops (1)              4
# Clothing (1, inactive)     0
#   Jackets (1)              7
CATALOG = [
    {
        "category_id": "electronics",
        "name": "Electronics",
        "description": "Devices and gadgets",
        "sort_order": 2,
        "tags": ["tech"],
        "productCount": 5,
    },
    {
        "category_id": "phones",
        "name": "Phones",
        "description": "Mobile handsets",
        "parent_category_id": "electronics",
        "sort_order": 2,
        "tags": ["mobile"],
        "productCount": 3,
    },
    {
        "category_id": "iphone",
        "name": "iPhone",
        "parent_category_id": "phones",
        "sort_order": 1,
        "productCount": 2,
    },
    {
        "category_id": "laptops",
        "name": "Laptops",
        "parent_category_id": "electronics",
        "sort_order": 1,
        "productCount": 4,
    },
    {
        "category_id": "clothing",
        "name": "Clothing",
        "description": "Apparel and fashion",
        "sort_order": 1,
        "tags": ["Seasonal", "fashion"],
        "productCount": 0,
        "is_active": False,
    },
    {
        "category_id": "jackets",
        "name": "Jackets",
        "parent_category_id": "clothing",
        "sort_order": 1,
        "productCount": 7,
        "display_on_main_screen": True,
    },
]


def make_records(rows):
    return [CategoryRecord.from_dict(row) for row in rows]


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'CATEGORY_ORPHAN_POLICY': 'surface',
        'CATEGORY_PATH_SEPARATOR': ' > ',
        'CATEGORY_SORT_CHILDREN': True,
    })
    yield app


@pytest.fixture(scope='function')
def runner(app):
    """CLI runner bound to the test app."""
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def catalog():
    """Sample catalog as parsed records, in snapshot order."""
    return make_records(CATALOG)


@pytest.fixture(scope='function')
def graph(catalog):
    return CategoryGraph.from_records(catalog)


@pytest.fixture(scope='function')
def chain():
    """Three-level chain Electronics > Phones > iPhone with 5/3/2 products."""
    return make_records([
        {"category_id": "1", "name": "Electronics", "parent_category_id": None, "sort_order": 1, "productCount": 5},
        {"category_id": "2", "name": "Phones", "parent_category_id": "1", "sort_order": 1, "productCount": 3},
        {"category_id": "3", "name": "iPhone", "parent_category_id": "2", "sort_order": 1, "productCount": 2},
    ])


@pytest.fixture(scope='function')
def orphaned():
    """'2' points at a parent that is not in the snapshot; '3' hangs below it."""
    return make_records([
        {"category_id": "1", "name": "Food", "sort_order": 1},
        {"category_id": "2", "name": "Snacks", "parent_category_id": "missing", "sort_order": 0},
        {"category_id": "3", "name": "Chips", "parent_category_id": "2", "sort_order": 1},
    ])


@pytest.fixture(scope='function')
def cyclic():
    """Corrupted data: A and B are each other's parent, C sits below A."""
    return make_records([
        {"category_id": "A", "name": "Alpha", "parent_category_id": "B"},
        {"category_id": "B", "name": "Beta", "parent_category_id": "A"},
        {"category_id": "C", "name": "Gamma", "parent_category_id": "A"},
    ])


@pytest.fixture(scope='function')
def write_snapshot(tmp_path):
    """Write a snapshot payload to a JSON file and return its path."""
    def _write(payload, name="categories.json"):
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)
    return _write
