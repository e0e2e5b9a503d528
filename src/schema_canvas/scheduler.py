from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from .types import EdgeDescriptor, LayoutNode

logger = logging.getLogger(__name__)

# ============================================================================
# Refresh scheduler -- trailing debounce for edge re-routing
#
# trigger() may fire on every frame of a drag. Each call cancels the pending
# refresh and arms a new one `delay` seconds out, so a burst collapses into
# a single recompute against the nodes of the *last* call.
#
# When the refresh runs, the result is fingerprinted (rounded positions +
# edge connectivity). If the fingerprint matches the last published one the
# result is dropped; otherwise it is published.
#
# The timer comes from an asyncio event loop (call_later), resolved when the
# scheduler is built. Anything with the same call_later/cancel shape can be
# injected instead; AfterTimerLoop adapts a toolkit after()/after_cancel().
# ============================================================================

DEFAULT_REFRESH_DELAY = 0.12


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerLoop(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


@dataclass(frozen=True)
class _AfterHandle:
    after_cancel: Callable[[Any], object]
    token: Any

    def cancel(self) -> None:
        self.after_cancel(self.token)


@dataclass(frozen=True)
class AfterTimerLoop:
    """call_later() on top of a GUI toolkit's after(ms, callback)/after_cancel(id).

    Lets hosts that do not run asyncio (Tk and friends) drive the scheduler
    from their own event loop.
    """

    after: Callable[..., Any]
    after_cancel: Callable[[Any], object]

    @classmethod
    def from_widget(cls, widget: object) -> "AfterTimerLoop":
        after_cb = getattr(widget, "after", None)
        cancel_cb = getattr(widget, "after_cancel", None)
        if not callable(after_cb) or not callable(cancel_cb):
            raise ValueError(
                "AfterTimerLoop requires after() and after_cancel() on the widget. "
                "Fix: pass a Tk widget, or inject an asyncio loop instead."
            )
        return cls(after=after_cb, after_cancel=cancel_cb)

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> _AfterHandle:
        delay_ms = max(0, int(round(delay * 1000)))
        token = self.after(delay_ms, lambda: callback(*args))
        return _AfterHandle(self.after_cancel, token)


def _resolve_loop(loop: TimerLoop | None) -> TimerLoop:
    if loop is not None:
        return loop
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        raise RuntimeError(
            "RefreshScheduler needs a timer loop. Fix: create it inside a running "
            "asyncio loop, or pass loop= (e.g. AfterTimerLoop.from_widget(root))."
        ) from None



def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_fingerprint(
    nodes: Sequence[LayoutNode],
    edges: Sequence[EdgeDescriptor],
) -> str:
    """Stable key over node positions and edge connectivity.

    Positions are rounded to whole pixels so sub-pixel drag jitter does not
    count as a change. Colors and labels are not part of the key.
    """
    nodes_key = "|".join(
        f"{n.id}@{_round_half_up(n.position.x)},{_round_half_up(n.position.y)}" for n in nodes
    )
    edges_key = "|".join(
        f"{e.id}:{e.source}->{e.target}:{e.source_handle}:{e.target_handle}" for e in edges
    )
    return f"{nodes_key}||{edges_key}"


class RefreshScheduler:
    """Debounces edge recomputation and suppresses redundant publishes.

    ``compute_edges`` maps a node list to its edges; ``publish`` receives a
    new edge list whenever it differs meaningfully from the previous one.
    """

    def __init__(
        self,
        compute_edges: Callable[[Sequence[LayoutNode]], list[EdgeDescriptor]],
        publish: Callable[[list[EdgeDescriptor]], None],
        delay: float = DEFAULT_REFRESH_DELAY,
        loop: TimerLoop | None = None,
    ) -> None:
        self._compute_edges = compute_edges
        self._publish = publish
        self._delay = delay
        self._loop = _resolve_loop(loop)
        self._handle: TimerHandle | None = None
        self._last_fingerprint = ""
        self._pending_nodes: list[LayoutNode] = []
        self._disposed = False

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def last_fingerprint(self) -> str:
        return self._last_fingerprint

    def trigger(self, nodes: Sequence[LayoutNode]) -> None:
        """Schedule a refresh against ``nodes``, superseding any pending one."""
        if self._disposed:
            raise RuntimeError("RefreshScheduler.trigger() called after dispose()")

        self._cancel_pending()
        self._pending_nodes = list(nodes)
        self._handle = self._loop.call_later(self._delay, self._run)

    def flush(self) -> bool:
        """Run a pending refresh immediately. Returns False if none was pending."""
        if self._handle is None:
            return False
        self._cancel_pending()
        nodes = self._pending_nodes
        self._pending_nodes = []
        self._refresh(nodes)
        return True

    def sync(self, nodes: Sequence[LayoutNode], edges: Sequence[EdgeDescriptor]) -> None:
        """Record a result published outside the scheduler.

        Cancels any pending refresh (it was computed from stale nodes) and
        makes the given result the baseline for change detection.
        """
        self._cancel_pending()
        self._last_fingerprint = compute_fingerprint(nodes, edges)

    def dispose(self) -> None:
        """Cancel any pending refresh; later triggers raise."""
        self._cancel_pending()
        self._disposed = True

    # ------------------------------------------------------------------

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _run(self) -> None:
        self._handle = None
        nodes = self._pending_nodes
        self._pending_nodes = []
        self._refresh(nodes)

    def _refresh(self, nodes: list[LayoutNode]) -> None:
        edges = self._compute_edges(nodes)
        fingerprint = compute_fingerprint(nodes, edges)
        if fingerprint == self._last_fingerprint:
            logger.debug("Edge refresh unchanged (%d edges); skipping publish", len(edges))
            return
        self._last_fingerprint = fingerprint
        logger.debug("Publishing %d refreshed edges", len(edges))
        self._publish(edges)
