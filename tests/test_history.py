"""Tests for the undo/redo history manager."""
from __future__ import annotations

import pytest

from schema_canvas.history import HistoryManager


class TestHistory:
    def test_initial_state(self):
        h = HistoryManager("A")
        assert h.state == "A"
        assert not h.can_undo
        assert not h.can_redo
        assert len(h) == 1

    def test_undo_redo_walk(self):
        h = HistoryManager("A")
        h.set("B")
        h.set("C")
        assert h.undo() == "B"
        assert h.undo() == "A"
        assert h.redo() == "B"
        assert h.state == "B"

    def test_set_after_undo_discards_redo_branch(self):
        h = HistoryManager("A")
        h.set("B")
        h.set("C")
        h.undo()
        h.undo()
        h.redo()
        h.set("D")
        assert not h.can_redo
        assert h.redo() == "D"
        assert h.undo() == "B"
        assert h.undo() == "A"
        assert h.redo() == "B"
        assert h.redo() == "D"
        assert h.redo() == "D"

    def test_set_clears_can_redo_immediately(self):
        h = HistoryManager("A")
        h.set("B")
        h.undo()
        assert h.can_redo
        h.set("C")
        assert not h.can_redo
        assert h.can_undo

    def test_undo_at_start_is_a_no_op(self):
        h = HistoryManager("A")
        assert h.undo() == "A"
        assert h.state == "A"

    def test_redo_at_end_is_a_no_op(self):
        h = HistoryManager("A")
        h.set("B")
        assert h.redo() == "B"
        assert h.state == "B"

    def test_snapshots_are_kept_by_identity(self):
        first = ("tables",)
        second = ("tables", "more")
        h = HistoryManager(first)
        h.set(second)
        assert h.undo() is first
        assert h.redo() is second

    def test_limit_drops_oldest_snapshots(self):
        h = HistoryManager("A", limit=3)
        for s in "BCD":
            h.set(s)
        assert len(h) == 3
        assert h.undo() == "C"
        assert h.undo() == "B"
        assert not h.can_undo

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            HistoryManager("A", limit=0)

    def test_reset(self):
        h = HistoryManager("A")
        h.set("B")
        h.reset("Z")
        assert h.state == "Z"
        assert not h.can_undo
        assert not h.can_redo
