from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

import pandas as pd

from core.datetime_utils import to_naive_timestamp

# A cell value after parsing. ``None`` is the missing variant.
Value = Union[float, str, None]

# Default color palette for field traces
DEFAULT_COLORS: Tuple[str, ...] = (
    "#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd",
    "#8c564b", "#e377c2", "#7f7f7f", "#bcbd22", "#17becf",
    "#aec7e8", "#ffbb78", "#98df8a", "#ff9896", "#c5b0d5",
)

# Color palette for categorical states
STATE_COLORS: Tuple[str, ...] = (
    "#4CAF50",  # green
    "#F44336",  # red
    "#FF9800",  # orange
    "#2196F3",  # blue
    "#9C27B0",  # purple
    "#795548",  # brown
    "#607D8B",  # blue grey
    "#E91E63",  # pink
    "#00BCD4",  # cyan
    "#8BC34A",  # light green
)


class FieldRole(str, Enum):
    DATETIME = "datetime"
    LATITUDE = "latitude"
    LONGITUDE = "longitude"
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"


@dataclass(frozen=True)
class TimeRange:
    """Closed interval of timezone-naive instants."""

    start: pd.Timestamp
    end: pd.Timestamp

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", to_naive_timestamp(self.start))
        object.__setattr__(self, "end", to_naive_timestamp(self.end))

    @property
    def span(self) -> pd.Timedelta:
        return self.end - self.start

    @property
    def is_inverted(self) -> bool:
        return self.start > self.end

    def normalized(self) -> "TimeRange":
        if self.is_inverted:
            return TimeRange(self.end, self.start)
        return self

    def contains(self, ts) -> bool:
        ts = pd.Timestamp(ts)
        return self.start <= ts <= self.end

    def overlaps(self, other: "TimeRange") -> bool:
        return self.start <= other.end and other.start <= self.end

    def clamp(self, bounds: "TimeRange") -> "TimeRange":
        return TimeRange(max(self.start, bounds.start), min(self.end, bounds.end))

    def expanded(self, factor: float) -> "TimeRange":
        pad = self.span * float(factor)
        return TimeRange(self.start - pad, self.end + pad)


@dataclass(frozen=True, eq=False)
class Record:
    """One time-stamped observation. Immutable once loaded."""

    timestamp: pd.Timestamp
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    values: Mapping[str, Value] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def value(self, name: str) -> Value:
        return self.values.get(name)

    def is_missing(self, name: str) -> bool:
        return self.values.get(name) is None

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    label: str
    role: FieldRole
    color: str
    selected: bool = False

    @property
    def is_numeric(self) -> bool:
        return self.role is FieldRole.NUMERIC

    @property
    def is_categorical(self) -> bool:
        return self.role is FieldRole.CATEGORICAL

    def with_selected(self, selected: bool) -> "FieldDescriptor":
        return replace(self, selected=bool(selected))

    def with_color(self, color: str) -> "FieldDescriptor":
        return replace(self, color=color)


@dataclass(frozen=True)
class ColumnRoles:
    """Outcome of header classification, in original header order."""

    headers: Tuple[str, ...]
    datetime_field: Optional[str] = None
    latitude_field: Optional[str] = None
    longitude_field: Optional[str] = None
    numeric_fields: Tuple[str, ...] = ()
    categorical_fields: Tuple[str, ...] = ()

    def role_of(self, header: str) -> FieldRole:
        if header == self.datetime_field:
            return FieldRole.DATETIME
        if header == self.latitude_field:
            return FieldRole.LATITUDE
        if header == self.longitude_field:
            return FieldRole.LONGITUDE
        if header in self.numeric_fields:
            return FieldRole.NUMERIC
        return FieldRole.CATEGORICAL


@dataclass(frozen=True)
class Segment:
    value: Any
    start: pd.Timestamp
    end: pd.Timestamp


@dataclass(frozen=True)
class Gap:
    start: pd.Timestamp
    end: pd.Timestamp


@dataclass(frozen=True)
class SegmentTrack:
    """Runs of one field in time order; segments and gaps tile the extent."""

    field: str
    intervals: Tuple[Union[Segment, Gap], ...] = ()

    @property
    def segments(self) -> Tuple[Segment, ...]:
        return tuple(item for item in self.intervals if isinstance(item, Segment))

    @property
    def gaps(self) -> Tuple[Gap, ...]:
        return tuple(item for item in self.intervals if isinstance(item, Gap))


@dataclass(frozen=True)
class HoverEvent:
    """Cursor payload shared between views; x/y are view coordinates."""

    record: Record
    x: float = 0.0
    y: float = 0.0
