"""Helpers for loading delimited time-series text."""

from .parsers import (
    LoadResult,
    build_field_descriptors,
    build_records,
    classify_headers,
    find_datetime_index,
    is_numeric_column,
    load_file,
    load_text,
    parse_row_timestamps,
    split_fields,
    split_lines,
)
from .utils import format_field_label, is_missing_token, normalize_ts_series

__all__ = [
    "LoadResult",
    "build_field_descriptors",
    "build_records",
    "classify_headers",
    "find_datetime_index",
    "format_field_label",
    "is_missing_token",
    "is_numeric_column",
    "load_file",
    "load_text",
    "normalize_ts_series",
    "parse_row_timestamps",
    "split_fields",
    "split_lines",
]
