from __future__ import annotations
import logging
import sys
import threading
import traceback
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogEvent:
    """Container describing a single log entry destined for the UI."""

    message: str
    level: int
    logger_name: str
    created: float
    formatted: str


Listener = Callable[[LogEvent], None]


class LogService(logging.Handler):
    """Logging handler that relays log messages to registered listeners.

    The most recent events are kept in memory so a view attaching late can
    show what happened during the load that preceded it.
    """

    def __init__(self, history: int = 500) -> None:
        super().__init__(level=logging.NOTSET)
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        self._formatter = logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s", "%Y-%m-%d %H:%M:%S"
        )
        self._history: Deque[LogEvent] = deque(maxlen=max(1, int(history)))

    # ------------------------------------------------------------------
    def emit(self, record: logging.LogRecord) -> None:
        try:
            formatted = self._formatter.format(record)
        except Exception:  # pragma: no cover - mirrors logging.Handler
            self.handleError(record)
            return
        event = LogEvent(
            message=record.getMessage(),
            level=record.levelno,
            logger_name=record.name,
            created=record.created,
            formatted=formatted,
        )
        self._remember(event)
        self._notify(event)

    # ------------------------------------------------------------------
    def add_listener(self, listener: Listener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def install_on_logger(self, target: logging.Logger) -> None:
        """Attach the handler to the provided logger if not already present."""

        with self._lock:
            if self not in target.handlers:
                target.addHandler(self)

    def ensure_installed(self) -> None:
        """Attach to the root logger so every module logger reaches the service."""
        self.install_on_logger(logging.getLogger())

    def recent_events(self, *, min_level: int = logging.NOTSET) -> List[LogEvent]:
        with self._lock:
            return [e for e in self._history if e.level >= min_level]

    # ------------------------------------------------------------------
    def _remember(self, event: LogEvent) -> None:
        with self._lock:
            self._history.append(event)

    def _notify(self, event: LogEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                # A failing listener must not break logging for everyone else.
                _safe_print_exception()


def _safe_print_exception() -> None:  # pragma: no cover - best effort
    stream = getattr(sys, "__stderr__", None) or getattr(sys, "__stdout__", None)
    if stream is not None:
        traceback.print_exc(file=stream)


_service: Optional[LogService] = None


def get_log_service() -> LogService:
    global _service
    if _service is None:
        _service = LogService()
    return _service
