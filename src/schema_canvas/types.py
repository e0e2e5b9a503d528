from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

# ============================================================================
# Schema model -- what the editor authors
#
# Every value is a frozen dataclass holding tuples, so a committed schema
# can never be mutated in place. Edits build a new value with
# dataclasses.replace(), sharing every untouched Table/Column/Note with the
# previous snapshot.
# ============================================================================

RelationType = Literal["1:1", "1:N", "N:M"]

DEFAULT_RELATION_TYPE: RelationType = "1:N"


@dataclass(frozen=True, slots=True)
class Column:
    """A single column of a table."""

    name: str
    # Free-form SQL type, e.g. VARCHAR(255)
    type: str
    is_primary_key: bool = False
    is_foreign_key: bool = False
    is_unique: bool = False
    nullable: bool = True
    # Foreign key target in "Table.Column" form
    references: str | None = None
    # Unrecognised types are kept and drawn in the default color
    relation_type: str | None = None
    relation_label: str | None = None
    check_constraint: str | None = None
    comment: str | None = None
    on_delete: str | None = None
    on_update: str | None = None


@dataclass(frozen=True, slots=True)
class Table:
    """A table definition. Column order drives display order."""

    name: str
    columns: tuple[Column, ...] = ()
    description: str | None = None

    def column_index(self, column_name: str) -> int | None:
        for i, col in enumerate(self.columns):
            if col.name == column_name:
                return i
        return None


@dataclass(frozen=True, slots=True)
class Relationship:
    """A foreign-key link derived from a column annotation."""

    from_table: str
    from_column: str
    to_table: str
    to_column: str
    type: str
    label: str | None = None


@dataclass(frozen=True, slots=True)
class Note:
    """A free-floating sticky note. Positioned by the user, not by layout."""

    id: str
    content: str = ""
    x: float = 0.0
    y: float = 0.0
    color: str | None = None


@dataclass(frozen=True, slots=True)
class DatabaseSchema:
    """Tables + notes, with relationships always derived from the tables.

    Build instances through ``with_derived_relationships`` (or
    ``schema_io.schema_from_mapping``) so ``relationships`` stays in sync.
    """

    tables: tuple[Table, ...] = ()
    relationships: tuple[Relationship, ...] = ()
    notes: tuple[Note, ...] = ()

    def table(self, name: str) -> Table | None:
        for t in self.tables:
            if t.name == name:
                return t
        return None

    def note(self, note_id: str) -> Note | None:
        for n in self.notes:
            if n.id == note_id:
                return n
        return None


# ============================================================================
# Diagram model -- derived, ephemeral output for the rendering collaborator
# ============================================================================

NodeType = Literal["table", "note"]
Side = Literal["left", "right"]


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class LayoutNode:
    """A positioned table or note.

    ``width`` is only known once the renderer has measured the node;
    ``height`` is the layout engine's estimate.
    """

    id: str
    type: NodeType
    position: Point
    data: Union[Table, Note]
    height: float = 0.0
    width: float | None = None


@dataclass(frozen=True, slots=True)
class EdgeStyle:
    stroke: str
    stroke_width: float = 2
    animated: bool = True
    path_type: str = "smoothstep"
    border_radius: float = 40
    offset: float = 80
    marker_end: str = "arrowclosed"


@dataclass(frozen=True, slots=True)
class EdgeDescriptor:
    """A routed connector between two column anchors."""

    id: str
    source: str
    target: str
    source_handle: str
    target_handle: str
    label: str
    color: str
    style: EdgeStyle
    relationship: Relationship
    # Orthogonal path from source anchor to target anchor; empty when either
    # node could not be resolved
    points: tuple[Point, ...] = ()


# ============================================================================
# Layout options -- user-facing configuration
# ============================================================================


@dataclass(frozen=True, slots=True)
class LayoutOptions:
    # Assumed table width used for row packing
    node_width: float = 320
    horizontal_spacing: float = 250
    vertical_spacing: float = 150
    # Height estimate: header + columns * row + padding
    header_height: float = 50
    row_height: float = 40
    node_padding: float = 20
    # y of the first row
    origin_y: float = 50
    # Width assumed for a node the renderer has not measured yet
    fallback_node_width: float = 320
    # Nodes further apart than width + margin count as separate columns
    column_gap_margin: float = 100
    # How far a right/right bracket connector steps out from the nodes
    bracket_offset: float = 80
    # Quiescence delay for edge refresh, in seconds
    refresh_delay: float = 0.12
