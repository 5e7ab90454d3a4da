from __future__ import annotations
import math
from typing import List, Optional, Sequence, TypeVar

from ..models import Record, TimeRange
from .record_store import RecordStore

T = TypeVar("T")

OVERVIEW_TARGET = 2000
WINDOW_TARGET = 1000


def decimate(items: Sequence[T], target: int) -> List[T]:
    """Keep every ``ceil(n / target)``-th item, always ending on the real last item.

    Sequences already within budget are returned unchanged (as a list). The
    result holds at most ``target + 1`` items.
    """
    if target <= 0:
        raise ValueError(f"Decimation target must be positive, got {target}")
    n = len(items)
    if n <= target:
        return list(items)
    step = math.ceil(n / target)
    out = list(items[::step])
    if (n - 1) % step != 0:
        out.append(items[-1])
    return out


def decimate_for_overview(records: Sequence[Record], target: int = OVERVIEW_TARGET) -> List[Record]:
    return decimate(records, target)


def decimate_for_window(
    store: RecordStore,
    window: Optional[TimeRange],
    target: int = WINDOW_TARGET,
) -> List[Record]:
    """Resample the full-resolution records inside ``window``.

    The window slice always comes from the store, never from an overview
    result, so each zoom level is sampled independently.
    """
    return decimate(store.records_in(window), target)
