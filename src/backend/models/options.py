from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .records import DEFAULT_COLORS

MISSING_TOKENS: Tuple[str, ...] = ("", "null", "NULL", "undefined")


@dataclass
class LoadOptions:
    # Structure
    delimiter: str = ","
    # Matched exactly after trimming; no other casing is recognized.
    missing_tokens: Tuple[str, ...] = MISSING_TOKENS

    # Timestamp handling
    assume_dayfirst: bool = False
    # If provided, these formats are tried before the generic parser.
    # Examples: ["%Y-%m-%d %H:%M:%S", "%d.%m.%Y %H:%M"]
    datetime_formats: Optional[List[str]] = None
    # Rows whose timestamp cannot be parsed are left out of the record sequence.
    drop_invalid_timestamps: bool = True

    # Field descriptors
    numeric_autoselect: int = 2
    categorical_autoselect: int = 1
    palette: Tuple[str, ...] = field(default_factory=lambda: tuple(DEFAULT_COLORS))

    # File reading
    encoding: Optional[str] = None


@dataclass
class ViewOptions:
    """Rendering budgets and interaction timings shared by all views."""

    overview_target: int = 2000
    window_target: int = 1000
    hover_interval_ms: int = 50
    selection_clear_ms: int = 100
    # Fraction of the current span added on each side by zoom-out.
    zoom_out_factor: float = 0.5
