from __future__ import annotations

from typing import Generic, TypeVar

T = TypeVar("T")

# ============================================================================
# Undo/redo history
#
# An ordered list of snapshots plus a cursor:
#
#   [A, B, C]        set(D) after undo():   [A, B, D]
#          ^                                       ^
#
# set() drops everything after the cursor, so a new edit made after undoing
# permanently discards the old redo branch.
#
# Snapshots are stored as-is. Callers commit immutable values (the frozen
# schema dataclasses), so nothing here needs to copy them.
# ============================================================================


class HistoryManager(Generic[T]):
    """Linear undo/redo stack over immutable snapshots."""

    def __init__(self, initial: T, limit: int | None = None) -> None:
        if limit is not None and limit < 1:
            raise ValueError(f"history limit must be >= 1, got {limit}")
        self._snapshots: list[T] = [initial]
        self._cursor = 0
        self._limit = limit

    @property
    def state(self) -> T:
        return self._snapshots[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def __len__(self) -> int:
        return len(self._snapshots)

    def set(self, state: T) -> T:
        """Commit a new snapshot, discarding any redo branch."""
        del self._snapshots[self._cursor + 1:]
        self._snapshots.append(state)
        if self._limit is not None and len(self._snapshots) > self._limit:
            del self._snapshots[: len(self._snapshots) - self._limit]
        self._cursor = len(self._snapshots) - 1
        return state

    def undo(self) -> T:
        """Step back one snapshot; no-op at the oldest one."""
        if self.can_undo:
            self._cursor -= 1
        return self.state

    def redo(self) -> T:
        """Step forward one snapshot; no-op at the newest one."""
        if self.can_redo:
            self._cursor += 1
        return self.state

    def reset(self, state: T) -> None:
        """Forget all history and start over from ``state``."""
        self._snapshots = [state]
        self._cursor = 0
