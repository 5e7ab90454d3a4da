from __future__ import annotations
from typing import Iterator, List, Optional, Sequence, Tuple

import logging
import numpy as np
import pandas as pd

from ..models import Record, TimeRange

logger = logging.getLogger(__name__)


class RecordStore:
    """Read-only, time-ordered record sequence produced by one load.

    Source order is trusted; records are never re-sorted here.
    """

    def __init__(self, records: Sequence[Record] = ()) -> None:
        self._records: Tuple[Record, ...] = tuple(records)
        self._timestamps = np.array(
            [r.timestamp.value for r in self._records], dtype=np.int64
        ).view("datetime64[ns]")
        self._extent: Optional[TimeRange] = None
        if self._records:
            self._extent = TimeRange(
                pd.Timestamp(self._timestamps.min()),
                pd.Timestamp(self._timestamps.max()),
            )
        self._ordered = bool(np.all(self._timestamps[1:] >= self._timestamps[:-1]))
        if not self._ordered:
            logger.warning("Records are not in ascending time order; lookups may be inaccurate")

    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __getitem__(self, index):
        return self._records[index]

    def __bool__(self) -> bool:
        return bool(self._records)

    @property
    def records(self) -> Tuple[Record, ...]:
        return self._records

    @property
    def timestamps(self) -> np.ndarray:
        """Record timestamps as a read-only ``datetime64[ns]`` array."""
        view = self._timestamps.view()
        view.setflags(write=False)
        return view

    @property
    def extent(self) -> Optional[TimeRange]:
        """Min/max timestamp over all records, ``None`` when empty."""
        return self._extent

    @property
    def is_time_ordered(self) -> bool:
        return self._ordered

    # ------------------------------------------------------------------
    def index_range(self, window: TimeRange) -> Tuple[int, int]:
        start = np.datetime64(window.start.value, "ns")
        end = np.datetime64(window.end.value, "ns")
        s = int(np.searchsorted(self._timestamps, start, side="left"))
        e = int(np.searchsorted(self._timestamps, end, side="right"))
        return s, max(s, e)

    def records_in(self, window: Optional[TimeRange]) -> Tuple[Record, ...]:
        """Records with ``window.start <= timestamp <= window.end``; all when ``None``."""
        if window is None:
            return self._records
        s, e = self.index_range(window)
        return self._records[s:e]

    def numeric_extent(self, field: str, window: Optional[TimeRange] = None) -> Optional[Tuple[float, float]]:
        """Min/max of the non-missing numeric values of ``field``."""
        values = [
            r.values.get(field)
            for r in self.records_in(window)
            if isinstance(r.values.get(field), float)
        ]
        if not values:
            return None
        return min(values), max(values)

    def path(self, window: Optional[TimeRange] = None) -> List[Tuple[float, float]]:
        """``(latitude, longitude)`` pairs for records with a valid position."""
        return [
            (r.latitude, r.longitude)
            for r in self.records_in(window)
            if r.has_position
        ]

    def first_position(self) -> Optional[Tuple[float, float]]:
        for r in self._records:
            if r.has_position:
                return r.latitude, r.longitude
        return None
