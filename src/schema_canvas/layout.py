from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping, Sequence

from grandalf.graphs import Vertex, Edge, Graph

from .types import (
    DatabaseSchema,
    LayoutNode,
    LayoutOptions,
    Note,
    Point,
    Relationship,
    Table,
)
from .ids import sanitize_id, find_id_collisions

logger = logging.getLogger(__name__)

# ============================================================================
# Layered layout engine
#
# Ranks tables by foreign-key depth and stacks the ranks as rows:
#
#   row 0: tables that reference nothing (Users, Tags)
#   row 1: tables referencing only row 0 (Posts)
#   row 2: ...                           (Comments)
#
# Each row is centered on x = 0; rows advance down by the tallest table in
# the row plus vertical spacing. No randomness and no external state, so the
# same schema always lays out to the same coordinates.
# ============================================================================


def estimate_height(table: Table, options: LayoutOptions | None = None) -> float:
    """Height of a table node before the renderer has measured it."""
    opts = options or LayoutOptions()
    return opts.header_height + len(table.columns) * opts.row_height + opts.node_padding


# ============================================================================
# Ranking
# ============================================================================


def _dependency_graph(
    table_names: Sequence[str],
    relationships: Iterable[Relationship],
) -> tuple[dict[str, Vertex], Graph]:
    """Build a grandalf graph with an edge child -> parent per FK dependency.

    Self-references and references to unknown tables add no dependency.
    """
    vertices: dict[str, Vertex] = {}
    for name in table_names:
        if name not in vertices:
            vertices[name] = Vertex(name)

    seen: set[tuple[str, str]] = set()
    edges_list: list[Edge] = []
    for rel in relationships:
        if rel.from_table == rel.to_table:
            continue
        if rel.from_table not in vertices or rel.to_table not in vertices:
            continue
        key = (rel.from_table, rel.to_table)
        if key in seen:
            continue
        seen.add(key)
        edges_list.append(Edge(vertices[rel.from_table], vertices[rel.to_table]))

    return vertices, Graph(list(vertices.values()), edges_list)


def compute_levels(
    tables: Sequence[Table],
    relationships: Iterable[Relationship],
) -> dict[str, int]:
    """Assign each table name its rank in the dependency graph.

    Bounded relaxation: at most len(tables) + 1 passes, stopping early once
    a pass changes nothing. On a cyclic graph the cap ends the loop and the
    levels of the cycle's members are only an approximation.
    """
    table_names = [t.name for t in tables]
    # Building the Graph attaches each Edge to its two vertices
    vertices, _graph = _dependency_graph(table_names, relationships)

    parents: dict[str, list[str]] = {
        name: [p.data for p in v.N(+1)] for name, v in vertices.items()
    }
    levels = {name: 0 for name in vertices}

    max_iterations = len(table_names) + 1
    for _ in range(max_iterations):
        changed = False
        for name in vertices:
            deps = parents[name]
            if not deps:
                continue
            max_parent_level = max(levels[p] for p in deps)
            if levels[name] <= max_parent_level:
                levels[name] = max_parent_level + 1
                changed = True
        if not changed:
            break
    else:
        logger.debug("Level relaxation hit the iteration cap; schema has FK cycles")

    return levels


# ============================================================================
# Main layout functions
# ============================================================================


def layout_tables(
    schema: DatabaseSchema,
    options: LayoutOptions | None = None,
) -> list[LayoutNode]:
    """Position every table of ``schema``; returns nodes row by row."""
    opts = options or LayoutOptions()
    if not schema.tables:
        return []

    for node_id, names in find_id_collisions(schema.tables).items():
        logger.warning("Tables %s all map to node id %r", names, node_id)

    # 1. Rank tables
    levels = compute_levels(schema.tables, schema.relationships)

    # 2. Group into rows, keeping schema order within a row
    rows: dict[int, list[Table]] = {}
    for table in schema.tables:
        rows.setdefault(levels[table.name], []).append(table)

    # 3. Assign coordinates
    nodes: list[LayoutNode] = []
    current_y = opts.origin_y
    step_x = opts.node_width + opts.horizontal_spacing

    for level in sorted(rows):
        row = rows[level]
        row_width = len(row) * opts.node_width + (len(row) - 1) * opts.horizontal_spacing
        start_x = -(row_width / 2)

        max_row_height = 0.0
        for col_index, table in enumerate(row):
            h = estimate_height(table, opts)
            if h > max_row_height:
                max_row_height = h
            nodes.append(
                LayoutNode(
                    id=sanitize_id(table.name),
                    type="table",
                    position=Point(x=start_x + col_index * step_x, y=current_y),
                    data=table,
                    height=h,
                )
            )

        current_y += max_row_height + opts.vertical_spacing

    return nodes


def layout_notes(notes: Iterable[Note]) -> list[LayoutNode]:
    """Notes are not auto-laid-out; they sit where the user put them."""
    return [
        LayoutNode(id=note.id, type="note", position=Point(x=note.x, y=note.y), data=note)
        for note in notes
    ]


def build_nodes(
    schema: DatabaseSchema,
    options: LayoutOptions | None = None,
) -> list[LayoutNode]:
    """All diagram nodes: laid-out tables first, then notes."""
    return layout_tables(schema, options) + layout_notes(schema.notes)


def apply_node_positions(
    nodes: Sequence[LayoutNode],
    positions: Mapping[str, tuple[float, float]] | None = None,
    widths: Mapping[str, float] | None = None,
) -> list[LayoutNode]:
    """Overlay dragged positions and/or measured widths reported by the renderer."""
    out: list[LayoutNode] = []
    for node in nodes:
        changes: dict[str, object] = {}
        moved = (positions or {}).get(node.id)
        if moved is not None:
            changes["position"] = Point(x=float(moved[0]), y=float(moved[1]))
        measured = (widths or {}).get(node.id)
        if measured is not None:
            changes["width"] = float(measured)
        out.append(dataclasses.replace(node, **changes) if changes else node)
    return out
