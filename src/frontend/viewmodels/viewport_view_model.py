from __future__ import annotations
import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from backend.errors import InvalidTimeRangeError
from backend.models import HoverEvent, TimeRange

logger = logging.getLogger(__name__)

ZoomListener = Callable[[Optional[TimeRange]], None]
HoverListener = Callable[[Optional[HoverEvent]], None]


class ViewportCoordinator(QObject):
    """Shared time window and hover cursor for every synchronized view.

    ``zoom_changed`` carries a :class:`TimeRange`, or ``None`` for the full
    extent. The current window is cached: :meth:`subscribe_zoom` replays it to
    a new subscriber. ``hover_changed`` is fire-and-forget and never replayed;
    ``None`` means the cursor left the data area.

    Connections are direct, so every slot has run before an ``emit_*`` call
    returns.
    """

    zoom_changed = Signal(object)
    hover_changed = Signal(object)
    bounds_changed = Signal(object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._data_bounds: Optional[TimeRange] = None
        self._window: Optional[TimeRange] = None

    # ------------------------------------------------------------------
    @property
    def data_bounds(self) -> Optional[TimeRange]:
        return self._data_bounds

    def set_data_bounds(self, bounds: Optional[TimeRange]) -> None:
        self._data_bounds = bounds
        self.bounds_changed.emit(bounds)

    def reset(self, bounds: Optional[TimeRange]) -> None:
        """Start over for a freshly loaded dataset."""
        self.set_data_bounds(bounds)
        self.clear_zoom()

    # ------------------------------------------------------------------
    def emit_zoom(self, time_range: TimeRange) -> TimeRange:
        """Clamp ``time_range`` to the data bounds, store it and broadcast it.

        An inverted range is swapped first. A range that does not overlap the
        data bounds at all raises :class:`InvalidTimeRangeError` and leaves the
        window unchanged.
        """
        requested = time_range.normalized()
        bounds = self._data_bounds
        if bounds is not None:
            if not requested.overlaps(bounds):
                raise InvalidTimeRangeError(
                    f"Zoom range {requested.start} - {requested.end} lies outside "
                    f"the data bounds {bounds.start} - {bounds.end}"
                )
            requested = requested.clamp(bounds)

        self._window = requested
        logger.debug("Zoom window set to %s - %s", requested.start, requested.end)
        self.zoom_changed.emit(requested)
        return requested

    def clear_zoom(self) -> None:
        self._window = None
        logger.debug("Zoom cleared to full extent")
        self.zoom_changed.emit(None)

    def get_current_zoom(self) -> Optional[TimeRange]:
        return self._window

    def effective_window(self) -> Optional[TimeRange]:
        """The current window, or the data bounds when showing the full extent."""
        return self._window if self._window is not None else self._data_bounds

    def zoom_out(self, factor: float = 0.5) -> Optional[TimeRange]:
        """Widen the current window by ``factor`` of its span on each side."""
        if self._window is None:
            return None
        return self.emit_zoom(self._window.expanded(factor))

    # ------------------------------------------------------------------
    def emit_hover(self, event: Optional[HoverEvent]) -> None:
        self.hover_changed.emit(event)

    # ------------------------------------------------------------------
    def subscribe_zoom(self, callback: ZoomListener) -> Callable[[], None]:
        """Connect ``callback`` and deliver the current window to it at once."""
        self.zoom_changed.connect(callback)
        callback(self._window)
        return lambda: self._disconnect(self.zoom_changed, callback)

    def subscribe_hover(self, callback: HoverListener) -> Callable[[], None]:
        self.hover_changed.connect(callback)
        return lambda: self._disconnect(self.hover_changed, callback)

    @staticmethod
    def _disconnect(signal, callback) -> None:
        try:
            signal.disconnect(callback)
        except (RuntimeError, TypeError):
            logger.debug("Callback %r was already disconnected", callback)
