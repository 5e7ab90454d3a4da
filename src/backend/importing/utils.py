from __future__ import annotations
import math
import re
import warnings
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import pandas as pd

from core.datetime_utils import ensure_series_naive
from ..models.options import MISSING_TOKENS

PathLike = Union[str, Path]

# Common fallback encodings for handling non-UTF-8 CSV files
_ENCODING_FALLBACKS = ("utf-8-sig", "utf-8", "cp1252", "latin-1")


def as_path(p: PathLike) -> Path:
    return p if isinstance(p, Path) else Path(p)


def get_encoding_candidates(user_encoding: Optional[str]) -> List[str]:
    """User-specified encoding first, then common fallbacks."""
    encodings_to_try = []
    if user_encoding:
        encodings_to_try.append(user_encoding)
    for enc in _ENCODING_FALLBACKS:
        if enc not in encodings_to_try:
            encodings_to_try.append(enc)
    return encodings_to_try


def cell_at(row: Sequence[str], index: int) -> Optional[str]:
    """Return the trimmed token at ``index`` or ``None`` when the row is short."""
    if index >= len(row):
        return None
    return row[index].strip()


def is_missing_token(value: Optional[str], tokens: Iterable[str] = MISSING_TOKENS) -> bool:
    if value is None:
        return True
    return value.strip() in tokens


def parse_finite(value: Optional[str]) -> Optional[float]:
    """Parse ``value`` as a finite float, or return ``None``."""
    if value is None:
        return None
    try:
        number = float(value.strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


_CAMEL_RE = re.compile(r"([a-z])([A-Z])")
_WORD_START_RE = re.compile(r"\b\w")


def format_field_label(name: str) -> str:
    """Turn ``engine_rpm`` / ``engineRpm`` into ``Engine Rpm``."""
    text = str(name).replace("_", " ")
    text = _CAMEL_RE.sub(r"\1 \2", text)
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), text)


def _try_parse_with_formats(s: pd.Series, fmts: Iterable[str], *, dayfirst: bool) -> pd.Series:
    out = pd.Series(pd.NaT, index=s.index, dtype="object")
    for f in fmts:
        mask = out.isna()
        if not mask.any():
            break
        cand = pd.to_datetime(s[mask], errors="coerce", format=f, dayfirst=dayfirst)
        out.loc[mask] = cand
    return out


_ISO_LEADING_DATE_RE = re.compile(r"^\s*\d{4}[-/.]\d{1,2}[-/.]\d{1,2}(?:\D|$)")


def _parse_single_datetime_mixed(x, *, dayfirst: bool):
    """Parse one datetime-like value with robust day/month handling."""
    if x is None:
        return pd.NaT
    if isinstance(x, float) and pd.isna(x):
        return pd.NaT

    # For leading YYYY-MM-DD style values, prefer year-first semantics.
    if isinstance(x, str) and _ISO_LEADING_DATE_RE.match(x):
        p = pd.to_datetime(x, errors="coerce", dayfirst=False, format="mixed", utc=False)
        if not pd.isna(p):
            return p

    p = pd.to_datetime(x, errors="coerce", dayfirst=dayfirst, format="mixed", utc=False)
    if pd.isna(p):
        p = pd.to_datetime(x, errors="coerce", dayfirst=not dayfirst, format="mixed", utc=False)
    return p


def _generic_pass(s: pd.Series, *, dayfirst: bool) -> pd.Series:
    try:
        with warnings.catch_warnings():
            warnings.filterwarnings(
                "ignore",
                message=r"Could not infer format, so each element will be parsed individually",
                category=UserWarning,
            )
            return pd.to_datetime(s, errors="coerce", dayfirst=dayfirst, format="mixed", utc=False)
    except (TypeError, ValueError, OverflowError):
        # Mixed timezone offsets or aware+naive values: parse per value.
        return s.map(lambda x: _parse_single_datetime_mixed(x, dayfirst=dayfirst))


def normalize_ts_series(
    ts_col: pd.Series,
    dayfirst: bool = False,
    *,
    explicit_formats: Optional[Iterable[str]] = None,
) -> pd.Series:
    """
    Parse raw timestamp tokens to a timezone-naive datetime64[ns] Series without
    altering wall-clock times. Unparseable tokens become NaT.
    """
    s = ts_col.astype("object").map(lambda x: x.strip() if isinstance(x, str) else x)
    s = s.map(lambda x: None if isinstance(x, str) and not x else x)

    if explicit_formats:
        parsed = _try_parse_with_formats(s, explicit_formats, dayfirst=dayfirst)
        remaining = parsed.isna()
    else:
        parsed = pd.Series(pd.NaT, index=s.index, dtype="object")
        remaining = pd.Series(True, index=s.index)

    # Generic parser attempts, stated day order first, then flipped
    for attempt_dayfirst in (dayfirst, not dayfirst):
        if not remaining.any():
            break
        parsed.loc[remaining] = _generic_pass(s[remaining], dayfirst=attempt_dayfirst)
        remaining = parsed.isna()

    return ensure_series_naive(parsed)
