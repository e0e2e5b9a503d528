from __future__ import annotations

import dataclasses
import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from .types import (
    DatabaseSchema,
    EdgeDescriptor,
    LayoutNode,
    LayoutOptions,
    Note,
    Table,
)
from .theme import DEFAULT_VISUAL_CONFIG, VisualConfig
from .relationships import with_derived_relationships
from .layout import apply_node_positions, build_nodes
from .edge_router import route_edges
from .history import HistoryManager
from .scheduler import RefreshScheduler, TimerLoop

logger = logging.getLogger(__name__)

# ============================================================================
# Diagram session
#
# Wires the pipeline together behind explicit entry points the host calls
# after a confirmed change:
#
#   committed schema change  -> on_schema_committed()   relayout + reroute now
#   table/note dragged       -> on_nodes_dragged()      debounced reroute
#   colors changed           -> on_visual_config_changed()  reroute now
#
# Table positions are view state: dragging a table never touches history
# and any committed change lays the tables out afresh. Note positions and
# content, and all table/column edits, are committed and undoable.
# ============================================================================

DEFAULT_NOTE_COLOR = "#fef3c7"

EdgeListener = Callable[[list[EdgeDescriptor]], None]


class DiagramSession:
    """Owns the schema history and the derived nodes/edges of one diagram."""

    def __init__(
        self,
        schema: DatabaseSchema | None = None,
        visual_config: VisualConfig = DEFAULT_VISUAL_CONFIG,
        options: LayoutOptions | None = None,
        loop: TimerLoop | None = None,
        history_limit: int | None = None,
    ) -> None:
        """Lay out ``schema`` right away.

        ``loop`` supplies the drag-refresh timer. Without one the session
        must be built inside a running asyncio loop; otherwise construction
        raises RuntimeError.
        """
        self._options = options or LayoutOptions()
        self._visual_config = visual_config
        self._history: HistoryManager[DatabaseSchema] = HistoryManager(
            with_derived_relationships(schema or DatabaseSchema()),
            limit=history_limit,
        )
        self._nodes: list[LayoutNode] = []
        self._edges: list[EdgeDescriptor] = []
        self._listeners: list[EdgeListener] = []
        self._scheduler = RefreshScheduler(
            self._route,
            self._publish_edges,
            delay=self._options.refresh_delay,
            loop=loop,
        )
        self._relayout()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def schema(self) -> DatabaseSchema:
        return self._history.state

    @property
    def visual_config(self) -> VisualConfig:
        return self._visual_config

    @property
    def nodes(self) -> list[LayoutNode]:
        return list(self._nodes)

    @property
    def edges(self) -> list[EdgeDescriptor]:
        return list(self._edges)

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def on_edges_published(self, listener: EdgeListener) -> None:
        """Register a callback receiving every newly published edge list."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Committed (undoable) edits
    # ------------------------------------------------------------------

    def commit(self, schema: DatabaseSchema) -> DatabaseSchema:
        """Push a new snapshot (relationships re-derived) and relayout."""
        committed = self._history.set(with_derived_relationships(schema))
        logger.debug(
            "Committed schema: %d tables, %d relationships, %d notes",
            len(committed.tables), len(committed.relationships), len(committed.notes),
        )
        self.on_schema_committed()
        return committed

    def update_tables(self, tables: Iterable[Table]) -> DatabaseSchema:
        return self.commit(dataclasses.replace(self.schema, tables=tuple(tables)))

    def add_note(
        self,
        content: str = "",
        x: float = -100.0,
        y: float = 100.0,
        color: str = DEFAULT_NOTE_COLOR,
        note_id: str | None = None,
    ) -> Note:
        if note_id is None:
            note_id = self._new_note_id()
        note = Note(id=note_id, content=content, x=x, y=y, color=color)
        self.commit(dataclasses.replace(self.schema, notes=self.schema.notes + (note,)))
        return note

    def update_note(self, note_id: str, **changes: Any) -> Note:
        """Apply field changes (content, x, y, color) to a note and commit."""
        current = self._require_note(note_id)
        updated = dataclasses.replace(current, **changes)
        notes = tuple(updated if n.id == note_id else n for n in self.schema.notes)
        self.commit(dataclasses.replace(self.schema, notes=notes))
        return updated

    def move_note(self, note_id: str, x: float, y: float) -> Note:
        return self.update_note(note_id, x=x, y=y)

    def delete_note(self, note_id: str) -> None:
        self._require_note(note_id)
        notes = tuple(n for n in self.schema.notes if n.id != note_id)
        self.commit(dataclasses.replace(self.schema, notes=notes))

    def undo(self) -> DatabaseSchema:
        if self._history.can_undo:
            self._history.undo()
            self.on_schema_committed()
        return self.schema

    def redo(self) -> DatabaseSchema:
        if self._history.can_redo:
            self._history.redo()
            self.on_schema_committed()
        return self.schema

    # ------------------------------------------------------------------
    # Recompute entry points
    # ------------------------------------------------------------------

    def on_schema_committed(self) -> None:
        """The committed schema changed: lay everything out again."""
        self._relayout()

    def on_nodes_dragged(
        self,
        nodes: Sequence[LayoutNode],
        dragged_id: str | None = None,
    ) -> None:
        """The renderer moved nodes (drag stop).

        Dropping a note commits its new position; anything else only
        schedules a debounced edge refresh against the reported positions.
        """
        dragged = next((n for n in nodes if n.id == dragged_id), None)
        if dragged is not None and dragged.type == "note":
            self.move_note(dragged.id, dragged.position.x, dragged.position.y)
            return
        self._nodes = list(nodes)
        self._scheduler.trigger(self._nodes)

    def on_nodes_measured(self, widths: Mapping[str, float]) -> None:
        """The renderer reported measured node widths."""
        self._nodes = apply_node_positions(self._nodes, widths=widths)
        self._scheduler.trigger(self._nodes)

    def on_visual_config_changed(self, visual_config: VisualConfig) -> None:
        """Colors changed: reroute against the current positions right away."""
        self._visual_config = visual_config
        edges = self._route(self._nodes)
        self._scheduler.sync(self._nodes, edges)
        self._publish_edges(edges)

    def force_layout(self) -> None:
        """Discard manual table positions without touching history."""
        self._relayout()

    def dispose(self) -> None:
        self._scheduler.dispose()
        self._listeners.clear()

    # ------------------------------------------------------------------

    def _relayout(self) -> None:
        # Measured widths belong to the rendered node, not to its position
        widths = {n.id: n.width for n in self._nodes if n.width is not None}
        self._nodes = apply_node_positions(build_nodes(self.schema, self._options), widths=widths)
        edges = self._route(self._nodes)
        self._scheduler.sync(self._nodes, edges)
        self._publish_edges(edges)

    def _route(self, nodes: Sequence[LayoutNode]) -> list[EdgeDescriptor]:
        return route_edges(self.schema.relationships, self._visual_config, nodes, self._options)

    def _publish_edges(self, edges: list[EdgeDescriptor]) -> None:
        self._edges = edges
        for listener in list(self._listeners):
            listener(list(edges))

    def _require_note(self, note_id: str) -> Note:
        note = self.schema.note(note_id)
        if note is None:
            raise KeyError(f"unknown note id {note_id!r}")
        return note

    def _new_note_id(self) -> str:
        base = f"note-{time.time_ns() // 1_000_000}"
        note_id = base
        suffix = 1
        while self.schema.note(note_id) is not None:
            note_id = f"{base}-{suffix}"
            suffix += 1
        return note_id
