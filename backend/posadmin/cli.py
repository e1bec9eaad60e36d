# Overview: Flask CLI command group for inspecting category snapshots exported from the category service.

# backend/posadmin/cli.py
# Commands Legend:
# Prereqs:
# - Activate your virtualenv and install the project (pip install -e .).
# - Use: flask --app posadmin categories <command> SNAPSHOT.json [args]
#   The snapshot is a JSON list of categories, or {"categories": [...]}.
#
# Hierarchy views:
# - flask --app posadmin categories tree snapshot.json [--orphan-policy promote] [--legacy-order] [--json]
#   Print the category forest with levels, then any orphaned/detached categories.
# - flask --app posadmin categories path snapshot.json CATEGORY_ID
#   Print the breadcrumb, e.g. "Electronics > Phones > iPhone".
# - flask --app posadmin categories ancestors snapshot.json CATEGORY_ID
# - flask --app posadmin categories descendants snapshot.json CATEGORY_ID
# - flask --app posadmin categories count snapshot.json CATEGORY_ID
#   Total products in the category and everything below it.
#
# Re-parenting:
# - flask --app posadmin categories validate-parent snapshot.json CATEGORY_ID PARENT_ID
#   PASS/FAIL (exit code 1) for a proposed parent. Use "-" as PARENT_ID to move to the root level.
# - flask --app posadmin categories parents snapshot.json [CATEGORY_ID]
#   List legal parent choices (omit CATEGORY_ID for a new category).
#
# Listing:
# - flask --app posadmin categories search snapshot.json TERM
# - flask --app posadmin categories level snapshot.json LEVEL
# - flask --app posadmin categories filter snapshot.json [--search T] [--active/--inactive] [--roots] [--tag T] [--sort-by name] [--desc]
# - flask --app posadmin categories stats snapshot.json
#
# Integrity:
# - flask --app posadmin categories check snapshot.json
#   Report orphans (missing parent) and parent loops; exit code 1 if any are found.

import json
import sys

import click
from flask import current_app
from flask.cli import with_appcontext

from .validation import ValidationError
from .services.graph_service import CategoryGraph, HierarchyError
from .services.snapshot_service import SnapshotError, load_snapshot
from .services import aggregate_service
from .services import hierarchy_service
from .services import search_service
from .services import tree_service


ROOT_PARENT = "-"


def _load(snapshot) -> CategoryGraph:
    try:
        graph = load_snapshot(snapshot)
    except (SnapshotError, HierarchyError) as e:
        current_app.logger.error("Failed to load category snapshot %s: %s", snapshot, e)
        click.echo(f"FAIL Error: {str(e)}", err=True)
        sys.exit(1)
    current_app.logger.info("Loaded %d categories from %s", len(graph), snapshot)
    return graph


def _build_tree(graph, **options) -> tree_service.CategoryTree:
    try:
        tree = tree_service.build_tree(graph, **options)
    except HierarchyError as e:
        current_app.logger.warning("Category tree rejected: %s", e)
        click.echo(f"FAIL Error: {str(e)}", err=True)
        sys.exit(1)

    if tree.orphans:
        current_app.logger.warning(
            "%d categories reference a missing parent: %s",
            len(tree.orphans), ", ".join(r.category_id for r in tree.orphans),
        )
    return tree


def _separator() -> str:
    return current_app.config.get("CATEGORY_PATH_SEPARATOR", hierarchy_service.DEFAULT_PATH_SEPARATOR)


def _echo_records(records, graph) -> None:
    if not records:
        click.echo("No categories found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<20} {'Name':<30} {'Products':<10} {'Path'}")
    click.echo("="*100)
    for record in records:
        record = getattr(record, "record", record)
        path = hierarchy_service.path_string(record.category_id, graph, _separator())
        click.echo(f"{record.category_id:<20} {record.name:<30} {record.product_count:<10} {path}")
    click.echo("="*100 + "\n")


snapshot_argument = click.argument(
    'snapshot', type=click.Path(exists=True, dir_okay=False, readable=True)
)


@click.group('categories')
def categories_group():
    """Category hierarchy inspection commands."""


@categories_group.command('tree')
@snapshot_argument
@click.option('--orphan-policy', type=click.Choice(sorted(tree_service.ORPHAN_POLICIES)),
              help='Override CATEGORY_ORPHAN_POLICY')
@click.option('--legacy-order', is_flag=True, help='Keep children in snapshot order (only roots are sorted)')
@click.option('--json', 'as_json', is_flag=True, help='Print the tree as JSON')
@with_appcontext
def tree_cli(snapshot, orphan_policy, legacy_order, as_json):
    """Print the category forest."""
    graph = _load(snapshot)
    tree = _build_tree(
        graph,
        orphan_policy=orphan_policy,
        sort_children=False if legacy_order else None,
    )

    if as_json:
        click.echo(json.dumps(tree.to_dict(), indent=2, ensure_ascii=False))
        return

    for node in tree_service.walk_nodes(tree.roots):
        click.echo(
            f"{'  ' * node.level}{node.name} ({node.category_id}) "
            f"[level {node.level}, sort {node.sort_order}, products {node.record.product_count}]"
        )

    if tree.orphans:
        click.echo("\nWARN  Orphaned categories (parent not found):")
        for record in tree.orphans:
            click.echo(f"  {record.name} ({record.category_id}) -> missing parent {record.parent_category_id}")
    if tree.detached:
        click.echo("\nWARN  Detached categories (below an orphan or on a parent loop):")
        for record in tree.detached:
            click.echo(f"  {record.name} ({record.category_id})")


@categories_group.command('path')
@snapshot_argument
@click.argument('category_id')
@with_appcontext
def path_cli(snapshot, category_id):
    """Print the breadcrumb path of a category."""
    graph = _load(snapshot)
    if category_id not in graph:
        click.echo(f"FAIL Category '{category_id}' not found")
        sys.exit(1)
    click.echo(hierarchy_service.path_string(category_id, graph, _separator()))


@categories_group.command('ancestors')
@snapshot_argument
@click.argument('category_id')
@with_appcontext
def ancestors_cli(snapshot, category_id):
    """List ancestors from the root down to the immediate parent."""
    graph = _load(snapshot)
    _echo_records(hierarchy_service.ancestors(category_id, graph), graph)


@categories_group.command('descendants')
@snapshot_argument
@click.argument('category_id')
@with_appcontext
def descendants_cli(snapshot, category_id):
    """List every category below CATEGORY_ID."""
    graph = _load(snapshot)
    _echo_records(hierarchy_service.descendants(category_id, graph), graph)


@categories_group.command('count')
@snapshot_argument
@click.argument('category_id')
@with_appcontext
def count_cli(snapshot, category_id):
    """Total products in a category including its subcategories."""
    graph = _load(snapshot)
    total = aggregate_service.total_product_count(category_id, graph)
    click.echo(f"{category_id}: {total} products")


@categories_group.command('validate-parent')
@snapshot_argument
@click.argument('category_id')
@click.argument('parent_id')
@with_appcontext
def validate_parent_cli(snapshot, category_id, parent_id):
    """Check a proposed parent before sending the update to the category service."""
    graph = _load(snapshot)
    proposed = None if parent_id == ROOT_PARENT else parent_id

    if hierarchy_service.validate_parent(category_id, proposed, graph):
        target = "the root level" if proposed is None else f"'{proposed}'"
        click.echo(f"PASS '{category_id}' can move under {target}")
        return

    if category_id == proposed:
        click.echo(f"FAIL '{category_id}' cannot be its own parent")
    else:
        click.echo(f"FAIL '{proposed}' is a descendant of '{category_id}' (would create a cycle)")
    sys.exit(1)


@categories_group.command('parents')
@snapshot_argument
@click.argument('category_id', required=False)
@with_appcontext
def parents_cli(snapshot, category_id):
    """List categories that may become the parent of CATEGORY_ID."""
    graph = _load(snapshot)
    options = hierarchy_service.parent_options(category_id, graph, separator=_separator())
    if not options:
        click.echo("No parent choices available.")
        return
    for option in options:
        click.echo(f"{'  ' * option.level}{option.label} ({option.category_id})  {option.path}")


@categories_group.command('search')
@snapshot_argument
@click.argument('term')
@with_appcontext
def search_cli(snapshot, term):
    """Search names, descriptions and tags (case-insensitive)."""
    graph = _load(snapshot)
    _echo_records(search_service.search(graph, term), graph)


@categories_group.command('level')
@snapshot_argument
@click.argument('level', type=int)
@with_appcontext
def level_cli(snapshot, level):
    """List categories at a tree level (0 = root)."""
    graph = _load(snapshot)
    tree = _build_tree(graph)
    nodes = list(tree_service.walk_nodes(tree.roots))
    _echo_records(search_service.by_level(nodes, level), graph)


@categories_group.command('filter')
@snapshot_argument
@click.option('--search', 'term', help='Search term')
@click.option('--active/--inactive', 'is_active', default=None, help='Filter by status')
@click.option('--roots', is_flag=True, help='Root categories only')
@click.option('--parent', 'parent_id', help='Direct children of this category')
@click.option('--main-screen', is_flag=True, default=None, help='Only categories shown on the main screen')
@click.option('--tag', 'tags', multiple=True, help='Keep categories carrying any of these tags')
@click.option('--sort-by', type=click.Choice(sorted(search_service.SORT_KEYS)))
@click.option('--desc', is_flag=True, help='Sort descending')
@with_appcontext
def filter_cli(snapshot, term, is_active, roots, parent_id, main_screen, tags, sort_by, desc):
    """Filter and sort the category listing."""
    graph = _load(snapshot)
    try:
        filters = search_service.CategoryFilters(
            search=term,
            is_active=is_active,
            parent_category_id="" if roots else parent_id,
            display_on_main_screen=True if main_screen else None,
            tags=tuple(tags),
            sort_by=sort_by,
            sort_direction="desc" if desc else "asc",
        )
    except ValidationError as e:
        click.echo(f"FAIL Error: {str(e)}", err=True)
        sys.exit(1)
    _echo_records(search_service.filter_categories(graph, filters), graph)


@categories_group.command('stats')
@snapshot_argument
@with_appcontext
def stats_cli(snapshot):
    """Summary statistics for the snapshot."""
    graph = _load(snapshot)
    stats = aggregate_service.category_stats(graph)
    for key, value in stats.to_dict().items():
        click.echo(f"{key:<30} {value}")


@categories_group.command('check')
@snapshot_argument
@with_appcontext
def check_cli(snapshot):
    """Report orphaned categories and parent loops."""
    graph = _load(snapshot)
    orphans = [record for record in graph if graph.is_orphan(record)]
    cycles = hierarchy_service.find_cycles(graph)

    for record in orphans:
        current_app.logger.warning(
            "Category %s references missing parent %s", record.category_id, record.parent_category_id
        )
        click.echo(f"FAIL Orphan: '{record.category_id}' -> missing parent '{record.parent_category_id}'")
    for cycle in cycles:
        current_app.logger.warning("Parent loop detected: %s", " -> ".join(cycle))
        click.echo(f"FAIL Cycle: {' -> '.join(cycle + cycle[:1])}")

    if orphans or cycles:
        sys.exit(1)
    click.echo(f"PASS {len(graph)} categories form a valid forest")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(categories_group)
