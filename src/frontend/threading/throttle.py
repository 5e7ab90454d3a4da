from __future__ import annotations
import logging
import time
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QTimer

logger = logging.getLogger(__name__)


class HoverThrottle(QObject):
    """Deliver at most one event per interval; the latest event wins.

    The first event after a quiet period goes straight through. Events arriving
    inside the interval replace each other (nothing is queued) and the survivor
    is delivered by a single-shot timer when the interval ends.
    """

    def __init__(
        self,
        callback: Callable[[Any], None],
        interval_ms: int = 50,
        *,
        clock: Callable[[], float] = time.monotonic,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._callback = callback
        self._interval = max(0, int(interval_ms or 0)) / 1000.0
        self._clock = clock
        self._last_emit: Optional[float] = None
        self._pending: Any = None
        self._has_pending = False
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.flush)

    @property
    def has_pending(self) -> bool:
        return self._has_pending

    def submit(self, event: Any) -> None:
        now = self._clock()
        if not self._has_pending and (
            self._last_emit is None or (now - self._last_emit) >= self._interval
        ):
            self._deliver(event, now)
            return

        self._pending = event
        self._has_pending = True
        if not self._timer.isActive():
            elapsed = now - (self._last_emit if self._last_emit is not None else now)
            remaining_ms = max(0, int(round((self._interval - elapsed) * 1000)))
            self._timer.start(remaining_ms)

    def flush(self) -> None:
        """Deliver the pending event now, if there is one."""
        self._timer.stop()
        if not self._has_pending:
            return
        event = self._pending
        self._pending = None
        self._has_pending = False
        self._deliver(event, self._clock())

    def cancel(self) -> None:
        self._timer.stop()
        self._pending = None
        self._has_pending = False

    def _deliver(self, event: Any, now: float) -> None:
        self._last_emit = now
        self._callback(event)


class SelectionClearer(QObject):
    """Run an idempotent "clear selection" callback shortly after a zoom drag ends."""

    def __init__(
        self,
        clear_callback: Callable[[], None],
        delay_ms: int = 100,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._clear_callback = clear_callback
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(delay_ms)))
        self._timer.timeout.connect(self.clear_now)

    @property
    def pending(self) -> bool:
        return self._timer.isActive()

    def schedule(self) -> None:
        # Restarting an active timer keeps a single clear per drag.
        self._timer.start()

    def clear_now(self) -> None:
        self._timer.stop()
        self._clear_callback()

    def cancel(self) -> None:
        self._timer.stop()
