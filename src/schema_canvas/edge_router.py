from __future__ import annotations

import logging
from collections.abc import Sequence

from .types import (
    EdgeDescriptor,
    EdgeStyle,
    LayoutNode,
    LayoutOptions,
    Point,
    Relationship,
    Side,
)
from .ids import sanitize_id
from .theme import VisualConfig, resolve_relationship_color
from .geometry import anchor_point, bracket_path, step_path

logger = logging.getLogger(__name__)

# ============================================================================
# Edge router -- smart handle selection
#
# Picks which side of each table a connector leaves from and arrives at:
#
#   tables in distinct columns    (|dx| >  width + margin)
#     target to the right:  source right -> target left
#     target to the left:   source left  -> target right
#   tables stacked in a column    (|dx| <= width + margin)
#     source right -> target right  ("bracket", keeps left sides clear)
#
# If either node cannot be resolved the edge keeps the default
# right -> left flow and carries no path.
#
# Routing is a total rebuild: edge ids are positional
# (e-{from}-{to}-{index}), so the same relationship list always yields the
# same ids.
# ============================================================================

DEFAULT_SIDES: tuple[Side, Side] = ("right", "left")


def choose_sides(
    source: LayoutNode | None,
    target: LayoutNode | None,
    options: LayoutOptions | None = None,
) -> tuple[Side, Side]:
    """Return (source_side, target_side) for a connector."""
    if source is None or target is None:
        return DEFAULT_SIDES

    opts = options or LayoutOptions()
    dx = target.position.x - source.position.x
    width = source.width or opts.fallback_node_width

    if abs(dx) > width + opts.column_gap_margin:
        if dx > 0:
            return ("right", "left")
        return ("left", "right")
    return ("right", "right")


def format_edge_label(rel: Relationship) -> str:
    if rel.label:
        return f"{rel.label} ({rel.type})"
    return rel.type


def handle_id(role: str, side: Side, column_name: str) -> str:
    """Anchor id the renderer exposes per column row, e.g. source-right-user_id."""
    return f"{role}-{side}-{sanitize_id(column_name)}"


def _edge_points(
    rel: Relationship,
    source: LayoutNode,
    target: LayoutNode,
    sides: tuple[Side, Side],
    opts: LayoutOptions,
) -> list[Point]:
    start = anchor_point(
        source,
        sides[0],
        rel.from_column,
        source.width or opts.fallback_node_width,
        opts.header_height,
        opts.row_height,
    )
    end = anchor_point(
        target,
        sides[1],
        rel.to_column,
        target.width or opts.fallback_node_width,
        opts.header_height,
        opts.row_height,
    )
    if sides[0] == sides[1]:
        return bracket_path(start, end, opts.bracket_offset)
    return step_path(start, end)


def route_edges(
    relationships: Sequence[Relationship],
    visual_config: VisualConfig,
    nodes: Sequence[LayoutNode],
    options: LayoutOptions | None = None,
) -> list[EdgeDescriptor]:
    """Build one connector per relationship against the given node positions.

    Relationships whose nodes are not in ``nodes`` (dangling, or nothing laid
    out yet) still get an edge, with the default sides and no path.
    """
    opts = options or LayoutOptions()
    node_map = {n.id: n for n in nodes}

    edges: list[EdgeDescriptor] = []
    for index, rel in enumerate(relationships):
        source_id = sanitize_id(rel.from_table)
        target_id = sanitize_id(rel.to_table)
        source = node_map.get(source_id)
        target = node_map.get(target_id)

        sides = choose_sides(source, target, opts)
        if source is None or target is None:
            logger.debug(
                "Edge %s.%s -> %s.%s has no node to attach to; using default sides",
                rel.from_table, rel.from_column, rel.to_table, rel.to_column,
            )
            points: list[Point] = []
        else:
            points = _edge_points(rel, source, target, sides, opts)

        color = resolve_relationship_color(visual_config, rel.type)
        edges.append(
            EdgeDescriptor(
                id=f"e-{source_id}-{target_id}-{index}",
                source=source_id,
                target=target_id,
                source_handle=handle_id("source", sides[0], rel.from_column),
                target_handle=handle_id("target", sides[1], rel.to_column),
                label=format_edge_label(rel),
                color=color,
                style=EdgeStyle(stroke=color, offset=opts.bracket_offset),
                relationship=rel,
                points=tuple(points),
            )
        )

    return edges
