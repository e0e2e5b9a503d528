from __future__ import annotations

import re
from collections.abc import Iterable

from .types import Table

# ============================================================================
# Node / anchor identity
#
# Table and column names become renderer ids by replacing every character
# outside [A-Za-z0-9_-] with "_". Layout, routing and the renderer's anchor
# points all go through sanitize_id, so they always agree.
# ============================================================================

_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_id(name: str | None) -> str:
    """Map a table or column name to a renderer-safe id."""
    if name is None:
        return ""
    return _UNSAFE_ID_CHARS.sub("_", str(name))


def find_id_collisions(tables: Iterable[Table]) -> dict[str, list[str]]:
    """Return sanitized ids that more than one distinct table name maps to.

    e.g. "order items" and "order.items" both map to "order_items".
    """
    names_by_id: dict[str, list[str]] = {}
    for table in tables:
        names = names_by_id.setdefault(sanitize_id(table.name), [])
        if table.name not in names:
            names.append(table.name)
    return {node_id: names for node_id, names in names_by_id.items() if len(names) > 1}
