from __future__ import annotations
from typing import Optional

import numpy as np

from core.datetime_utils import to_datetime64
from ..models import Record
from .record_store import RecordStore


def nearest_index(timestamps: np.ndarray, query) -> int:
    """Index of the timestamp closest to ``query`` in a sorted array.

    Ties go to the later neighbor. Returns -1 for an empty array.
    """
    n = len(timestamps)
    if n == 0:
        return -1
    q = to_datetime64(query)
    idx = int(np.searchsorted(timestamps, q, side="left"))
    if idx == 0:
        return 0
    if idx >= n:
        return n - 1
    before = q - timestamps[idx - 1]
    after = timestamps[idx] - q
    return idx - 1 if before < after else idx


class NearestPointLocator:
    """Snaps a cursor instant to the closest record of one store."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def nearest_index(self, query) -> int:
        return nearest_index(self.store.timestamps, query)

    def nearest(self, query) -> Optional[Record]:
        idx = self.nearest_index(query)
        if idx < 0:
            return None
        return self.store[idx]
