"""Typed data model shared by the loading, analysis and viewport layers."""

from .records import (
    DEFAULT_COLORS,
    STATE_COLORS,
    ColumnRoles,
    FieldDescriptor,
    FieldRole,
    Gap,
    HoverEvent,
    Record,
    Segment,
    SegmentTrack,
    TimeRange,
    Value,
)
from .options import MISSING_TOKENS, LoadOptions, ViewOptions

__all__ = [
    "DEFAULT_COLORS",
    "MISSING_TOKENS",
    "STATE_COLORS",
    "ColumnRoles",
    "FieldDescriptor",
    "FieldRole",
    "Gap",
    "HoverEvent",
    "LoadOptions",
    "Record",
    "Segment",
    "SegmentTrack",
    "TimeRange",
    "Value",
    "ViewOptions",
]
