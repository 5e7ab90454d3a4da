from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import logging

from PySide6.QtCore import QObject, Signal

from backend.importing import LoadResult, load_file, load_text
from backend.importing.utils import PathLike
from backend.models import (
    DEFAULT_COLORS,
    FieldDescriptor,
    HoverEvent,
    LoadOptions,
    Record,
    SegmentTrack,
    TimeRange,
    ViewOptions,
)
from backend.services.decimation_service import decimate_for_overview, decimate_for_window
from backend.services.nearest_point import NearestPointLocator
from backend.services.segment_service import SegmentEncoder

from ..threading import HoverThrottle, SelectionClearer
from ..viewmodels.viewport_view_model import ViewportCoordinator
from .log_model import LogModel

logger = logging.getLogger(__name__)


@dataclass
class _DerivedState:
    """Everything computed from one RecordStore; replaced together on reload."""

    result: LoadResult
    locator: NearestPointLocator
    encoder: SegmentEncoder
    overview: Optional[List[Record]] = None
    window_cache: Dict[Optional[TimeRange], List[Record]] = field(default_factory=dict)


class DatasetModel(QObject):
    """Owns the loaded dataset and every cache derived from it.

    A new load swaps the record store, the field descriptors and all derived
    caches in one assignment, then resets the viewport. Views read records,
    segments and decimated series from here and zoom/hover through
    :attr:`viewport`.
    """

    dataset_changed = Signal(object)   # LoadResult
    fields_changed = Signal(object)    # tuple[FieldDescriptor, ...]

    def __init__(
        self,
        viewport: Optional[ViewportCoordinator] = None,
        *,
        load_options: Optional[LoadOptions] = None,
        view_options: Optional[ViewOptions] = None,
        log_model: Optional[LogModel] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        # Load warnings and failures are collected here for the views.
        self.log_model = log_model if log_model is not None else LogModel(parent=self)
        self.viewport = viewport if viewport is not None else ViewportCoordinator(self)
        self.load_options = load_options or LoadOptions()
        self.view_options = view_options or ViewOptions()
        self._state: Optional[_DerivedState] = None
        self._fields: Tuple[FieldDescriptor, ...] = ()
        self.hover_throttle = HoverThrottle(
            self._on_hover_request,
            self.view_options.hover_interval_ms,
            parent=self,
        )
        self.viewport.zoom_changed.connect(self._on_zoom_changed)

    # ------------------------------------------------------------------
    def load_text(self, text: str) -> LoadResult:
        """Parse ``text`` and publish it; on failure the previous dataset stays."""
        try:
            result = load_text(text, self.load_options)
        except Exception:
            logger.exception("Failed to load dataset")
            raise
        self._publish(result)
        return result

    def load_file(self, path: PathLike) -> LoadResult:
        try:
            result = load_file(path, self.load_options)
        except Exception:
            logger.exception("Failed to load dataset from %s", path)
            raise
        self._publish(result)
        return result

    def _publish(self, result: LoadResult) -> None:
        # Pointer queries made against the old dataset must not land on the new one.
        self.hover_throttle.cancel()
        self._state = _DerivedState(
            result=result,
            locator=NearestPointLocator(result.store),
            encoder=SegmentEncoder(result.store),
        )
        self._fields = tuple(result.fields)
        self.viewport.reset(result.store.extent)
        self.viewport.emit_hover(None)
        self.dataset_changed.emit(result)
        self.fields_changed.emit(self._fields)

    # ------------------------------------------------------------------
    @property
    def result(self) -> Optional[LoadResult]:
        return self._state.result if self._state is not None else None

    @property
    def records(self) -> Tuple[Record, ...]:
        return self._state.result.store.records if self._state is not None else ()

    def has_data(self) -> bool:
        return self._state is not None and bool(self._state.result.store)

    # ------------------------------------------------------------------
    def overview_series(self) -> List[Record]:
        state = self._state
        if state is None:
            return []
        if state.overview is None:
            state.overview = decimate_for_overview(
                state.result.store.records, self.view_options.overview_target
            )
        return state.overview

    def window_series(self, window: Optional[TimeRange] = None) -> List[Record]:
        """Decimated records for ``window`` (default: the current zoom).

        Full extent returns the overview series.
        """
        state = self._state
        if state is None:
            return []
        if window is None:
            window = self.viewport.get_current_zoom()
        if window is None:
            return self.overview_series()
        cached = state.window_cache.get(window)
        if cached is None:
            cached = decimate_for_window(
                state.result.store, window, self.view_options.window_target
            )
            # Only the latest window is kept.
            state.window_cache = {window: cached}
        return cached

    def segments(self, field_name: str) -> SegmentTrack:
        if self._state is None:
            return SegmentTrack(field=field_name)
        return self._state.encoder.track(field_name)

    def state_colors(self, field_name: str) -> Dict[object, str]:
        if self._state is None:
            return {}
        return self._state.encoder.colors(field_name)

    def numeric_extent(self, field_name: str) -> Optional[Tuple[float, float]]:
        """Value range of ``field_name`` inside the current window."""
        if self._state is None:
            return None
        return self._state.result.store.numeric_extent(
            field_name, self.viewport.get_current_zoom()
        )

    def path_for_current_window(self) -> List[Tuple[float, float]]:
        if self._state is None:
            return []
        return self._state.result.store.path(self.viewport.get_current_zoom())

    # ------------------------------------------------------------------
    def nearest(self, query) -> Optional[Record]:
        if self._state is None:
            return None
        return self._state.locator.nearest(query)

    def hover_at(self, query, x: float = 0.0, y: float = 0.0) -> Optional[HoverEvent]:
        """Snap ``query`` to the closest record and broadcast it as the cursor."""
        record = self.nearest(query)
        event = HoverEvent(record=record, x=x, y=y) if record is not None else None
        self.viewport.emit_hover(event)
        return event

    def hover_left(self) -> None:
        self.viewport.emit_hover(None)

    def request_hover(self, query, x: float = 0.0, y: float = 0.0) -> None:
        """Rate-limited :meth:`hover_at` for raw pointer-move events."""
        self.hover_throttle.submit((query, x, y))

    def request_hover_leave(self) -> None:
        self.hover_throttle.submit(None)

    def _on_hover_request(self, request) -> None:
        if request is None:
            self.hover_left()
        else:
            self.hover_at(*request)

    # ------------------------------------------------------------------
    def zoom_to(self, start, end, clearer: Optional[SelectionClearer] = None) -> Optional[TimeRange]:
        """Zoom to a brushed range and schedule clearing of the brush."""
        window = self.viewport.emit_zoom(TimeRange(start, end))
        if clearer is not None:
            clearer.schedule()
        return window

    def zoom_out(self) -> Optional[TimeRange]:
        return self.viewport.zoom_out(self.view_options.zoom_out_factor)

    def selection_clearer(self, clear_callback) -> SelectionClearer:
        return SelectionClearer(
            clear_callback, self.view_options.selection_clear_ms, parent=self
        )

    # ------------------------------------------------------------------
    def available_fields(self) -> Tuple[FieldDescriptor, ...]:
        return self._fields

    def selected_fields(self) -> List[FieldDescriptor]:
        return [f for f in self._fields if f.selected]

    def unselected_fields(self) -> List[FieldDescriptor]:
        return [f for f in self._fields if not f.selected]

    def select_field(self, name: str) -> Optional[FieldDescriptor]:
        """Select ``name``; it takes the palette color of its position in the selection."""
        palette = tuple(self.load_options.palette) or DEFAULT_COLORS
        position = len(self.selected_fields())
        updated = None
        fields = []
        for f in self._fields:
            if f.name == name and not f.selected:
                f = f.with_selected(True).with_color(palette[position % len(palette)])
                updated = f
            fields.append(f)
        if updated is None:
            return None
        self._fields = tuple(fields)
        self.fields_changed.emit(self._fields)
        return updated

    def deselect_field(self, name: str) -> bool:
        changed = False
        fields = []
        for f in self._fields:
            if f.name == name and f.selected:
                f = f.with_selected(False)
                changed = True
            fields.append(f)
        if changed:
            self._fields = tuple(fields)
            self.fields_changed.emit(self._fields)
        return changed

    # ------------------------------------------------------------------
    def _on_zoom_changed(self, window: Optional[TimeRange]) -> None:
        if self._state is not None and window is None:
            self._state.window_cache = {}
