"""Tests for fixed-budget decimation of record sequences."""
import pandas as pd
import pytest

from backend.models import Record, TimeRange
from backend.services.decimation_service import (
    decimate,
    decimate_for_overview,
    decimate_for_window,
)
from backend.services.record_store import RecordStore

T0 = pd.Timestamp("2024-01-01T00:00:00")


def _records(n):
    return [Record(timestamp=T0 + pd.Timedelta(seconds=i), values={"v": float(i)}) for i in range(n)]


class TestDecimate:
    def test_5000_records_to_2000(self):
        records = _records(5000)
        out = decimate_for_overview(records, 2000)
        assert len(out) <= 2001
        assert out[-1] is records[-1]
        assert out[0] is records[0]

    def test_small_input_unchanged(self):
        records = _records(10)
        out = decimate_for_overview(records)
        assert out == records

    @pytest.mark.parametrize("n", [1, 2, 1999, 2000, 2001, 4001, 6000, 123_457])
    def test_last_element_is_kept(self, n):
        items = list(range(n))
        out = decimate(items, 2000)
        assert out[-1] == items[-1]
        assert len(out) <= 2001

    @pytest.mark.parametrize("n", [2001, 5000, 99_999])
    def test_idempotent_once_within_budget(self, n):
        out = list(range(n))
        while len(out) > 2000:
            out = decimate(out, 2000)
        assert decimate(out, 2000) == out
        assert out[-1] == n - 1

    def test_stride(self):
        out = decimate(list(range(10)), 4)
        # step = ceil(10 / 4) = 3 -> 0, 3, 6, 9; 9 is already the last element
        assert out == [0, 3, 6, 9]
        out = decimate(list(range(11)), 4)
        assert out == [0, 3, 6, 9, 10]

    def test_empty(self):
        assert decimate([], 10) == []

    @pytest.mark.parametrize("target", [0, -5])
    def test_invalid_target(self, target):
        with pytest.raises(ValueError):
            decimate([1, 2, 3], target)


class TestWindowDecimation:
    def test_uses_full_resolution_inside_window(self):
        records = _records(100_000)
        store = RecordStore(records)
        window = TimeRange(T0 + pd.Timedelta(seconds=1000), T0 + pd.Timedelta(seconds=1500))
        out = decimate_for_window(store, window, 1000)
        # 501 records fit the budget, so every one of them is returned.
        assert len(out) == 501
        assert out[0] is records[1000]
        assert out[-1] is records[1500]

    def test_large_window_is_bounded(self):
        records = _records(50_000)
        store = RecordStore(records)
        window = TimeRange(T0, T0 + pd.Timedelta(seconds=30_000))
        out = decimate_for_window(store, window)
        assert len(out) <= 1001
        assert out[-1] is records[30_000]

    def test_full_extent(self):
        records = _records(3000)
        store = RecordStore(records)
        out = decimate_for_window(store, None, 1000)
        assert out[-1] is records[-1]
