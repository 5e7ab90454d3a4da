"""Tests for run-length segmentation of field values."""
import random

import pandas as pd

from backend.importing import load_text
from backend.models import STATE_COLORS, Gap, Record, Segment
from backend.services.record_store import RecordStore
from backend.services.segment_service import SegmentEncoder, encode_segments, state_colors

T0 = pd.Timestamp("2024-01-01T00:00:00")


def _records(values, field="s"):
    return [
        Record(timestamp=T0 + pd.Timedelta(minutes=i), values={field: v})
        for i, v in enumerate(values)
    ]


def _t(i):
    return T0 + pd.Timedelta(minutes=i)


def _assert_tiles(track, records):
    intervals = track.intervals
    assert intervals, "expected at least one interval"
    assert intervals[0].start == records[0].timestamp
    assert intervals[-1].end == records[-1].timestamp
    for prev, nxt in zip(intervals, intervals[1:]):
        assert prev.end == nxt.start
        assert prev.start <= prev.end


class TestScenario:
    def test_numeric_gap_and_categorical_runs(self, scenario_csv):
        result = load_text(scenario_csv)
        records = result.store.records
        t = [r.timestamp for r in records]

        temp = encode_segments(records, "temp")
        assert temp.gaps == (Gap(start=t[2], end=t[3]),)
        _assert_tiles(temp, records)

        status = encode_segments(records, "status")
        assert status.segments == (
            Segment(value="A", start=t[0], end=t[2]),
            Segment(value="B", start=t[2], end=t[3]),
        )
        assert status.gaps == ()


class TestEncodeSegments:
    def test_empty(self):
        track = encode_segments([], "s")
        assert track.intervals == ()

    def test_single_record_is_zero_width(self):
        track = encode_segments(_records(["A"]), "s")
        assert track.intervals == (Segment(value="A", start=T0, end=T0),)

    def test_single_missing_record(self):
        track = encode_segments(_records([None]), "s")
        assert track.intervals == (Gap(start=T0, end=T0),)

    def test_missing_runs_merge(self):
        track = encode_segments(_records(["A", None, None, "A"]), "s")
        assert track.intervals == (
            Segment(value="A", start=_t(0), end=_t(1)),
            Gap(start=_t(1), end=_t(3)),
            Segment(value="A", start=_t(3), end=_t(3)),
        )

    def test_leading_and_trailing_gaps(self):
        records = _records([None, "A", "B", None])
        track = encode_segments(records, "s")
        assert [type(i).__name__ for i in track.intervals] == ["Gap", "Segment", "Segment", "Gap"]
        _assert_tiles(track, records)

    def test_numeric_values_compare_by_value(self):
        track = encode_segments(_records([1.0, 1.0, 2.0]), "s")
        assert [s.value for s in track.segments] == [1.0, 2.0]

    def test_absent_field_is_one_gap(self):
        records = _records(["A", "B"])
        track = encode_segments(records, "other")
        assert track.intervals == (Gap(start=_t(0), end=_t(1)),)

    def test_random_sequences_tile_the_extent(self):
        rng = random.Random(3)
        for _ in range(50):
            n = rng.randint(1, 60)
            values = [rng.choice(["A", "B", "C", None]) for _ in range(n)]
            records = _records(values)
            track = encode_segments(records, "s")
            _assert_tiles(track, records)
            # Neighbouring intervals never carry the same state.
            for prev, nxt in zip(track.intervals, track.intervals[1:]):
                same_kind = type(prev) is type(nxt)
                assert not (same_kind and isinstance(prev, Gap))
                if same_kind and isinstance(prev, Segment):
                    assert prev.value != nxt.value


class TestStateColors:
    def test_first_appearance_order(self):
        colors = state_colors(_records(["B", None, "A", "B", "C"]), "s")
        assert list(colors) == ["B", "A", "C"]
        assert colors["B"] == STATE_COLORS[0]
        assert colors["A"] == STATE_COLORS[1]

    def test_palette_cycles(self):
        values = [f"v{i}" for i in range(len(STATE_COLORS) + 1)]
        colors = state_colors(_records(values), "s")
        assert colors[values[-1]] == STATE_COLORS[0]


class TestSegmentEncoder:
    def test_tracks_are_cached_per_field(self):
        store = RecordStore(_records(["A", "B"]))
        encoder = SegmentEncoder(store)
        first = encoder.track("s")
        assert encoder.track("s") is first
        encoder.clear()
        assert encoder.track("s") is not first
        assert encoder.colors("s") == {"A": STATE_COLORS[0], "B": STATE_COLORS[1]}
