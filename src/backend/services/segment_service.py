from __future__ import annotations
from typing import Dict, List, Sequence, Union

import logging

from ..models import STATE_COLORS, Gap, Record, Segment, SegmentTrack
from .record_store import RecordStore

logger = logging.getLogger(__name__)


def encode_segments(records: Sequence[Record], field: str) -> SegmentTrack:
    """Split ``field`` into contiguous value runs and missing-value gaps.

    A run closes at the timestamp of the record that starts the next run, so
    the intervals tile ``[first timestamp, last timestamp]`` without overlap.
    The last run ends at the last record (zero-width for a single record).
    """
    if not records:
        return SegmentTrack(field=field)

    intervals: List[Union[Segment, Gap]] = []

    def _close(value, start, end) -> None:
        if value is None:
            intervals.append(Gap(start=start, end=end))
        else:
            intervals.append(Segment(value=value, start=start, end=end))

    current = records[0].value(field)
    run_start = records[0].timestamp
    for record in records[1:]:
        value = record.value(field)
        if (value is None) != (current is None) or (value is not None and value != current):
            _close(current, run_start, record.timestamp)
            current = value
            run_start = record.timestamp

    _close(current, run_start, records[-1].timestamp)
    return SegmentTrack(field=field, intervals=tuple(intervals))


def state_colors(records: Sequence[Record], field: str, palette: Sequence[str] = STATE_COLORS) -> Dict[object, str]:
    """Map each non-missing value to a palette color, in first-appearance order."""
    colors: Dict[object, str] = {}
    for record in records:
        value = record.value(field)
        if value is None or value in colors:
            continue
        colors[value] = palette[len(colors) % len(palette)]
    return colors


class SegmentEncoder:
    """Per-store cache of segment tracks, one per field."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store
        self._tracks: Dict[str, SegmentTrack] = {}
        self._colors: Dict[str, Dict[object, str]] = {}

    def track(self, field: str) -> SegmentTrack:
        cached = self._tracks.get(field)
        if cached is None:
            cached = encode_segments(self.store.records, field)
            self._tracks[field] = cached
            logger.debug(
                "Encoded %s: %d segment(s), %d gap(s)",
                field,
                len(cached.segments),
                len(cached.gaps),
            )
        return cached

    def colors(self, field: str) -> Dict[object, str]:
        cached = self._colors.get(field)
        if cached is None:
            cached = state_colors(self.store.records, field)
            self._colors[field] = cached
        return cached

    def clear(self) -> None:
        self._tracks.clear()
        self._colors.clear()
