from __future__ import annotations
from datetime import datetime

import numpy as np
import pandas as pd


def drop_timezone_preserving_wall(value):
    """Return ``value`` without any timezone information, preserving wall time."""
    if value is None or value is pd.NaT:
        return pd.NaT
    if isinstance(value, pd.Timestamp):
        if value.tzinfo is not None:
            return pd.Timestamp(value.to_pydatetime().replace(tzinfo=None))
        return value
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.replace(tzinfo=None)
        return value
    return value


def ensure_series_naive(series: pd.Series) -> pd.Series:
    """Ensure a Series of datetimes has no timezone information."""
    values = [drop_timezone_preserving_wall(v) for v in series]
    converted = pd.to_datetime(pd.Series(values, index=series.index), errors="coerce")
    return converted


def to_naive_timestamp(value) -> pd.Timestamp:
    """Coerce a datetime-like scalar to a timezone-naive ``pd.Timestamp``.

    Raises ``ValueError`` when the value cannot be interpreted as an instant.
    """
    ts = drop_timezone_preserving_wall(pd.Timestamp(value)) if value is not None else pd.NaT
    if pd.isna(ts):
        raise ValueError(f"Not a valid instant: {value!r}")
    return ts


def to_datetime64(value) -> np.datetime64:
    return np.datetime64(to_naive_timestamp(value).value, "ns")


__all__ = [
    "drop_timezone_preserving_wall",
    "ensure_series_naive",
    "to_datetime64",
    "to_naive_timestamp",
]
