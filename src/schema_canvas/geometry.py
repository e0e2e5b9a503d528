from __future__ import annotations

from .types import LayoutNode, Point, Side, Table

# ============================================================================
# Connector geometry -- anchor coordinates and orthogonal paths
#
# Anchors sit on the left or right border of a table node, vertically
# centered on the referenced column's row:
#
#   +-----------------+
#   | header          |
#   +-----------------+
#   o id              o   <- header_height + 0 * row_height + row_height / 2
#   o user_id         o   <- header_height + 1 * row_height + row_height / 2
#   +-----------------+
# ============================================================================


def anchor_point(
    node: LayoutNode,
    side: Side,
    column_name: str,
    width: float,
    header_height: float,
    row_height: float,
) -> Point:
    """Absolute coordinates of a column anchor on one side of a node."""
    x = node.position.x + (width if side == "right" else 0)

    index = node.data.column_index(column_name) if isinstance(node.data, Table) else None
    if index is None:
        # Unknown column (dangling reference): attach at the node's middle
        y = node.position.y + node.height / 2
    else:
        y = node.position.y + header_height + index * row_height + row_height / 2
    return Point(x=x, y=y)


def step_path(start: Point, end: Point) -> list[Point]:
    """Horizontal-vertical-horizontal path between anchors on facing sides."""
    mid_x = (start.x + end.x) / 2
    return _remove_collinear([
        start,
        Point(x=mid_x, y=start.y),
        Point(x=mid_x, y=end.y),
        end,
    ])


def bracket_path(start: Point, end: Point, offset: float) -> list[Point]:
    """Right-to-right "bracket" path that loops around the outside of stacked nodes."""
    out_x = max(start.x, end.x) + offset
    return _remove_collinear([
        start,
        Point(x=out_x, y=start.y),
        Point(x=out_x, y=end.y),
        end,
    ])


def _remove_collinear(pts: list[Point]) -> list[Point]:
    """Remove middle points from three-in-a-row collinear sequences."""
    if len(pts) < 3:
        return pts
    out: list[Point] = [pts[0]]
    for i in range(1, len(pts) - 1):
        a = out[-1]
        b = pts[i]
        c = pts[i + 1]
        same_x = abs(a.x - b.x) < 1 and abs(b.x - c.x) < 1
        same_y = abs(a.y - b.y) < 1 and abs(b.y - c.y) < 1
        if same_x or same_y:
            continue
        out.append(b)
    out.append(pts[-1])
    return out
