from __future__ import annotations
import logging
from collections import deque
from typing import Deque, List, Optional

from PySide6.QtCore import QObject, Signal

from backend.services.logging import LogEvent, LogService, get_log_service

logger = logging.getLogger(__name__)

__all__ = ["LogModel"]


class LogModel(QObject):
    """Qt model that exposes log messages emitted through LogService.

    Only events at or above ``min_level`` are kept. Events already in the
    service history are restored on construction, so a model created after a
    load still shows its warnings.
    """

    entry_added = Signal(object)
    cleared = Signal()

    def __init__(
        self,
        service: Optional[LogService] = None,
        *,
        min_level: int = logging.WARNING,
        max_entries: int = 500,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._service = service or get_log_service()
        self._service.ensure_installed()
        self._min_level = min_level
        self._entries: Deque[LogEvent] = deque(
            self._service.recent_events(min_level=min_level),
            maxlen=max(1, int(max_entries)),
        )
        self._listener = self._on_service_event
        self._service.add_listener(self._listener)
        self.destroyed.connect(self._detach_listener)

    # ------------------------------------------------------------------
    @property
    def min_level(self) -> int:
        return self._min_level

    def entries(self) -> List[LogEvent]:
        return list(self._entries)

    def errors(self) -> List[LogEvent]:
        return [e for e in self._entries if e.level >= logging.ERROR]

    def clear(self) -> None:
        if not self._entries:
            return
        self._entries.clear()
        self.cleared.emit()

    def detach(self) -> None:
        """Stop receiving events; entries collected so far are kept."""
        self._service.remove_listener(self._listener)

    # ------------------------------------------------------------------
    def _on_service_event(self, event: LogEvent) -> None:
        if event.level < self._min_level:
            return
        self._entries.append(event)
        self.entry_added.emit(event)

    def _detach_listener(self, *_args) -> None:
        try:
            self._service.remove_listener(self._listener)
        except Exception:  # pragma: no cover - interpreter shutdown
            logger.debug("Log listener already detached", exc_info=True)
