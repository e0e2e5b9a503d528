"""schema-canvas -- Turn relational schemas into auto-arranged diagrams with routed connectors."""

from __future__ import annotations

from .types import (
    Column,
    Table,
    Relationship,
    Note,
    DatabaseSchema,
    Point,
    LayoutNode,
    EdgeStyle,
    EdgeDescriptor,
    LayoutOptions,
)
from .theme import VisualConfig, DEFAULT_VISUAL_CONFIG, visual_config_from_mapping
from .ids import sanitize_id
from .relationships import extract_relationships, with_derived_relationships, find_malformed_references
from .layout import compute_levels, layout_tables, build_nodes, apply_node_positions
from .edge_router import route_edges, choose_sides
from .scheduler import AfterTimerLoop, RefreshScheduler, compute_fingerprint
from .history import HistoryManager
from .schema_io import schema_from_mapping
from .session import DiagramSession

__all__ = [
    "Column",
    "Table",
    "Relationship",
    "Note",
    "DatabaseSchema",
    "Point",
    "LayoutNode",
    "EdgeStyle",
    "EdgeDescriptor",
    "LayoutOptions",
    "VisualConfig",
    "DEFAULT_VISUAL_CONFIG",
    "visual_config_from_mapping",
    "sanitize_id",
    "extract_relationships",
    "with_derived_relationships",
    "find_malformed_references",
    "compute_levels",
    "layout_tables",
    "build_nodes",
    "apply_node_positions",
    "route_edges",
    "choose_sides",
    "RefreshScheduler",
    "AfterTimerLoop",
    "compute_fingerprint",
    "HistoryManager",
    "schema_from_mapping",
    "DiagramSession",
]
