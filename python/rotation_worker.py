"""
Two-phase rotation pipeline.

A tap rotates the tile immediately on the caller's thread; the neighbour-scoped
mismatch recompute runs afterwards on a background thread and publishes a new
open-connection snapshot. Recomputes run one at a time in tap order.

Usage:
    worker = RotationWorker(grid, open_connections, on_publish=print)
    worker.start()
    worker.tap(Position(2, 1))
    worker.wait_idle()
    worker.stop()
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable

from loopgrid import is_solved, recompute_around, rotate_tile
from loopgrid_types import Grid, OpenConnections, Position

logger = logging.getLogger(__name__)

PublishFn = Callable[[OpenConnections], None]


class RotationWorker:
    """
    Owns a board while it is being played.

    The grid and its open-connection set are single-writer: both phases take
    the same lock, so a tile rotation is always visible to the recompute that
    follows it.
    """

    def __init__(
        self,
        grid: Grid,
        open_connections: OpenConnections,
        on_publish: PublishFn | None = None,
    ) -> None:
        self.grid = grid
        self.on_publish = on_publish

        self._open_connections = frozenset(open_connections)
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._outstanding = 0
        self._pending: queue.Queue[Position | None] = queue.Queue()
        self._thread: threading.Thread | None = None
        self._error: Exception | None = None

    # ── Public API ─────────────────────────────────────────────

    @property
    def open_connections(self) -> OpenConnections:
        """Most recently published snapshot."""
        with self._lock:
            return self._open_connections

    @property
    def solved(self) -> bool:
        with self._idle:
            return self._outstanding == 0 and is_solved(self._open_connections)

    def start(self) -> None:
        """Launch the recompute thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name="rotation-worker", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """
        Finish every queued recompute, then end the thread.

        Taps queued while no thread was running are recomputed here, on the
        caller's thread.
        """
        if self._thread is None:
            self._drain()
            return
        self._pending.put(None)
        self._thread.join(timeout)
        self._thread = None

    def tap(self, position: Position) -> bool:
        """
        Rotate the tile at `position` now and schedule its recompute.

        Returns:
            False for an off-board position (nothing is rotated or queued)
        """
        with self._lock:
            if not rotate_tile(self.grid, position):
                return False
            self._outstanding += 1
        self._pending.put(position)
        return True

    def wait_idle(self, timeout: float | None = None) -> OpenConnections:
        """
        Block until every scheduled recompute has been published.

        Raises:
            TimeoutError: If recomputes are still outstanding after `timeout`
            Exception: The first error raised by a recompute, if any
        """
        with self._idle:
            if not self._idle.wait_for(lambda: self._outstanding == 0, timeout):
                raise TimeoutError(f"{self._outstanding} recompute(s) still pending")
            if self._error is not None:
                error, self._error = self._error, None
                raise error
            return self._open_connections

    def replace_board(self, grid: Grid, open_connections: OpenConnections) -> None:
        """Swap in a freshly generated board once pending work has drained."""
        self.wait_idle()
        with self._lock:
            self.grid = grid
            self._open_connections = frozenset(open_connections)

    # ── Internal ───────────────────────────────────────────────

    def _run(self) -> None:
        while True:
            position = self._pending.get()
            if position is None:
                break
            self._process(position)

    def _drain(self) -> None:
        while True:
            try:
                position = self._pending.get_nowait()
            except queue.Empty:
                return
            if position is not None:
                self._process(position)

    def _process(self, position: Position) -> None:
        """Recompute around one tap and publish the result."""
        try:
            with self._lock:
                snapshot = recompute_around(self.grid, position, self._open_connections)
                self._open_connections = snapshot
            logger.debug("published %d open connections after tap at %s", len(snapshot), position)
            if self.on_publish is not None:
                self.on_publish(snapshot)
        except Exception as e:
            logger.exception("recompute after tap at %s failed", position)
            with self._lock:
                if self._error is None:
                    self._error = e
        finally:
            with self._idle:
                self._outstanding -= 1
                self._idle.notify_all()
