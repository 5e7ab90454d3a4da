"""Tests for the record store and nearest-timestamp lookup."""
import random

import numpy as np
import pandas as pd
import pytest

from backend.models import Record, TimeRange
from backend.services.nearest_point import NearestPointLocator, nearest_index
from backend.services.record_store import RecordStore

T0 = pd.Timestamp("2024-01-01T00:00:00")


def _store(offsets_s, **values):
    records = []
    for i, off in enumerate(offsets_s):
        vals = {name: seq[i] for name, seq in values.items()}
        records.append(Record(timestamp=T0 + pd.Timedelta(seconds=off), values=vals))
    return RecordStore(records)


class TestRecordStore:
    def test_extent(self):
        store = _store([0, 10, 20])
        assert store.extent == TimeRange(T0, T0 + pd.Timedelta(seconds=20))
        assert len(store) == 3
        assert store.is_time_ordered

    def test_empty(self):
        store = RecordStore([])
        assert store.extent is None
        assert len(store) == 0
        assert not store
        assert store.records_in(TimeRange(T0, T0)) == ()

    def test_unordered_source_is_kept_as_is(self):
        store = _store([10, 0, 20])
        assert not store.is_time_ordered
        assert [r.timestamp for r in store] == [
            T0 + pd.Timedelta(seconds=10),
            T0,
            T0 + pd.Timedelta(seconds=20),
        ]
        assert store.extent.start == T0

    def test_records_are_read_only(self):
        store = _store([0], v=[1.0])
        with pytest.raises(TypeError):
            store[0].values["v"] = 2.0
        with pytest.raises(ValueError):
            store.timestamps[0] = np.datetime64("2000-01-01")

    def test_records_in_window_is_inclusive(self):
        store = _store([0, 10, 20, 30, 40])
        window = TimeRange(T0 + pd.Timedelta(seconds=10), T0 + pd.Timedelta(seconds=30))
        assert [r.timestamp for r in store.records_in(window)] == [
            T0 + pd.Timedelta(seconds=s) for s in (10, 20, 30)
        ]
        assert store.records_in(None) == store.records

    def test_numeric_extent_skips_missing(self):
        store = _store([0, 10, 20, 30], v=[3.0, None, -1.0, 7.0])
        assert store.numeric_extent("v") == (-1.0, 7.0)
        window = TimeRange(T0, T0 + pd.Timedelta(seconds=20))
        assert store.numeric_extent("v", window) == (-1.0, 3.0)
        assert store.numeric_extent("other") is None

    def test_path_only_has_valid_positions(self):
        records = [
            Record(timestamp=T0, latitude=60.0, longitude=24.0),
            Record(timestamp=T0 + pd.Timedelta(seconds=1), latitude=None, longitude=24.1),
            Record(timestamp=T0 + pd.Timedelta(seconds=2), latitude=60.2, longitude=24.2),
        ]
        store = RecordStore(records)
        assert store.path() == [(60.0, 24.0), (60.2, 24.2)]
        assert store.first_position() == (60.0, 24.0)


class TestNearestPoint:
    def test_exact_match_returns_that_record(self):
        store = _store([0, 10, 20, 30])
        locator = NearestPointLocator(store)
        for record in store:
            assert locator.nearest(record.timestamp) is record

    def test_before_first_and_after_last(self):
        store = _store([0, 10, 20])
        locator = NearestPointLocator(store)
        assert locator.nearest(T0 - pd.Timedelta(hours=1)) is store[0]
        assert locator.nearest(T0 + pd.Timedelta(hours=1)) is store[-1]

    def test_closer_neighbor_wins(self):
        store = _store([0, 10])
        locator = NearestPointLocator(store)
        assert locator.nearest(T0 + pd.Timedelta(seconds=4)) is store[0]
        assert locator.nearest(T0 + pd.Timedelta(seconds=6)) is store[1]

    def test_tie_goes_to_successor(self):
        store = _store([0, 10])
        locator = NearestPointLocator(store)
        assert locator.nearest(T0 + pd.Timedelta(seconds=5)) is store[1]

    def test_empty_store(self):
        locator = NearestPointLocator(RecordStore([]))
        assert locator.nearest(T0) is None
        assert nearest_index(np.array([], dtype="datetime64[ns]"), T0) == -1

    def test_accepts_strings_and_datetimes(self):
        store = _store([0, 60])
        locator = NearestPointLocator(store)
        assert locator.nearest("2024-01-01T00:00:50") is store[1]
        assert locator.nearest(T0.to_pydatetime()) is store[0]

    def test_matches_brute_force(self):
        rng = random.Random(7)
        offsets = sorted(rng.sample(range(0, 100_000), 500))
        store = _store(offsets)
        locator = NearestPointLocator(store)
        for _ in range(200):
            q = rng.uniform(-1000, 101_000)
            query = T0 + pd.Timedelta(seconds=q)
            got = locator.nearest(query)
            best = min(abs((r.timestamp - query).total_seconds()) for r in store)
            assert abs((got.timestamp - query).total_seconds()) == pytest.approx(best)
