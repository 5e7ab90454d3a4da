from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import logging
import pandas as pd

from ..errors import EmptyInputError, IngestionError, MissingTimeColumnError
from ..models import (
    ColumnRoles,
    FieldDescriptor,
    FieldRole,
    LoadOptions,
    Record,
    Value,
)
from ..models.options import MISSING_TOKENS
from ..services.record_store import RecordStore
from .utils import (
    PathLike,
    as_path,
    cell_at,
    format_field_label,
    get_encoding_candidates,
    is_missing_token,
    normalize_ts_series,
    parse_finite,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadResult:
    """Everything one inference pass produces; replaced as a unit on reload."""

    store: RecordStore
    fields: Tuple[FieldDescriptor, ...]
    roles: ColumnRoles
    dropped_rows: int = 0
    invalid_positions: int = 0


# --------- text splitting ---------
def split_lines(text: str) -> List[str]:
    """Split the blob into non-blank lines; the first one is the header."""
    if text is None:
        raise EmptyInputError("No input text to parse.")
    lines = [ln.rstrip("\r") for ln in str(text).strip().split("\n")]
    lines = [ln for ln in lines if ln.strip()]
    if not lines:
        raise EmptyInputError("Input is empty: expected a header line with column names.")
    return lines


def split_fields(line: str, delimiter: str = ",") -> List[str]:
    return [token.strip() for token in line.split(delimiter)]


# --------- classification ---------
def _is_datetime_header(header: str) -> bool:
    lower = header.lower()
    return "date" in lower or "time" in lower


def is_numeric_column(
    index: int,
    rows: Sequence[Sequence[str]],
    missing_tokens: Sequence[str] = MISSING_TOKENS,
) -> bool:
    """A column is numeric when it has at least one finite number and nothing else.

    Every row is checked. Missing tokens and cells absent from short rows are
    skipped; a single non-numeric value makes the whole column categorical.
    """
    has_numeric = False
    for row in rows:
        value = cell_at(row, index)
        if is_missing_token(value, missing_tokens):
            continue
        if parse_finite(value) is None:
            return False
        has_numeric = True
    return has_numeric


def classify_headers(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    missing_tokens: Sequence[str] = MISSING_TOKENS,
) -> ColumnRoles:
    """Assign a role to each header; the first match per rule wins."""
    datetime_field: Optional[str] = None
    latitude_field: Optional[str] = None
    longitude_field: Optional[str] = None
    numeric_fields: List[str] = []
    categorical_fields: List[str] = []

    for index, header in enumerate(headers):
        lower = header.lower()

        if datetime_field is None and _is_datetime_header(header):
            datetime_field = header
            continue

        if latitude_field is None and ("lat" in lower or lower == "y"):
            latitude_field = header
            continue

        if longitude_field is None and ("lon" in lower or "lng" in lower or lower == "x"):
            longitude_field = header
            continue

        if is_numeric_column(index, rows, missing_tokens):
            numeric_fields.append(header)
        else:
            categorical_fields.append(header)

    roles = ColumnRoles(
        headers=tuple(headers),
        datetime_field=datetime_field,
        latitude_field=latitude_field,
        longitude_field=longitude_field,
        numeric_fields=tuple(numeric_fields),
        categorical_fields=tuple(categorical_fields),
    )
    logger.info(
        "Column roles: datetime=%s latitude=%s longitude=%s numeric=%s categorical=%s",
        datetime_field,
        latitude_field,
        longitude_field,
        list(numeric_fields),
        list(categorical_fields),
    )
    return roles


def build_field_descriptors(roles: ColumnRoles, options: Optional[LoadOptions] = None) -> Tuple[FieldDescriptor, ...]:
    """Plottable fields in header order.

    Colors cycle over numeric fields first, then categorical ones.
    """
    options = options or LoadOptions()
    palette = tuple(options.palette) or ("#000000",)

    by_name: Dict[str, FieldDescriptor] = {}
    for index, name in enumerate(roles.numeric_fields):
        by_name[name] = FieldDescriptor(
            name=name,
            label=format_field_label(name),
            role=FieldRole.NUMERIC,
            color=palette[index % len(palette)],
            selected=index < options.numeric_autoselect,
        )
    offset = len(roles.numeric_fields)
    for index, name in enumerate(roles.categorical_fields):
        by_name[name] = FieldDescriptor(
            name=name,
            label=format_field_label(name),
            role=FieldRole.CATEGORICAL,
            color=palette[(offset + index) % len(palette)],
            selected=index < options.categorical_autoselect,
        )
    return tuple(by_name[h] for h in roles.headers if h in by_name)


# --------- cell parsing ---------
def parse_numeric_cell(value: Optional[str], missing_tokens: Sequence[str] = MISSING_TOKENS) -> Optional[float]:
    if is_missing_token(value, missing_tokens):
        return None
    return parse_finite(value)


def parse_categorical_cell(value: Optional[str], missing_tokens: Sequence[str] = MISSING_TOKENS) -> Optional[str]:
    if is_missing_token(value, missing_tokens):
        return None
    return value.strip()


def parse_coordinate_cell(value: Optional[str]) -> Optional[float]:
    """Coordinates that are not finite numbers become ``None``."""
    return parse_finite(value)


# --------- record building ---------
def find_datetime_index(headers: Sequence[str]) -> int:
    """Index of the first header naming a date or time, ``-1`` when there is none."""
    for index, header in enumerate(headers):
        if _is_datetime_header(header):
            return index
    return -1


def parse_row_timestamps(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    options: Optional[LoadOptions] = None,
) -> Tuple[List[pd.Timestamp], List[Sequence[str]], int]:
    """Parse the datetime column and keep only rows whose timestamp parsed.

    Returns ``(timestamps, kept_rows, dropped_rows)``. Classification and
    record building both run over ``kept_rows`` so they see the same rows.
    """
    options = options or LoadOptions()
    ts_index = find_datetime_index(headers)
    if ts_index < 0:
        raise MissingTimeColumnError(
            f"No datetime column found among headers {list(headers)!r}; "
            "expected a header containing 'date' or 'time'."
        )

    raw_ts = pd.Series([cell_at(row, ts_index) for row in rows], dtype="object")
    parsed = normalize_ts_series(
        raw_ts,
        dayfirst=options.assume_dayfirst,
        explicit_formats=options.datetime_formats,
    )

    timestamps: List[pd.Timestamp] = []
    kept: List[Sequence[str]] = []
    dropped = 0
    for row_no, row in enumerate(rows):
        ts = parsed.iat[row_no]
        if pd.isna(ts):
            if not options.drop_invalid_timestamps:
                raise IngestionError(f"Row {row_no + 1}: unparseable timestamp {cell_at(row, ts_index)!r}")
            dropped += 1
            continue
        timestamps.append(pd.Timestamp(ts))
        kept.append(row)

    if dropped:
        logger.warning("Dropped %d row(s) with unparseable timestamps", dropped)
    return timestamps, kept, dropped


def build_records(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    roles: ColumnRoles,
    options: Optional[LoadOptions] = None,
    *,
    timestamps: Optional[Sequence[pd.Timestamp]] = None,
) -> Tuple[List[Record], int, int]:
    """Return ``(records, dropped_rows, invalid_positions)`` in source order.

    When ``timestamps`` is given, ``rows`` are taken as already filtered by
    :func:`parse_row_timestamps` and nothing is dropped here.
    """
    options = options or LoadOptions()
    tokens = options.missing_tokens
    dropped = 0
    if timestamps is None:
        timestamps, rows, dropped = parse_row_timestamps(headers, rows, options)

    lat_index = headers.index(roles.latitude_field) if roles.latitude_field is not None else None
    lon_index = headers.index(roles.longitude_field) if roles.longitude_field is not None else None
    numeric = [(i, h) for i, h in enumerate(headers) if h in roles.numeric_fields]
    categorical = [(i, h) for i, h in enumerate(headers) if h in roles.categorical_fields]

    records: List[Record] = []
    invalid_positions = 0
    for ts, row in zip(timestamps, rows):
        latitude = parse_coordinate_cell(cell_at(row, lat_index)) if lat_index is not None else None
        longitude = parse_coordinate_cell(cell_at(row, lon_index)) if lon_index is not None else None
        if lat_index is not None and lon_index is not None and (latitude is None or longitude is None):
            invalid_positions += 1

        values: Dict[str, Value] = {}
        for index, name in numeric:
            values[name] = parse_numeric_cell(cell_at(row, index), tokens)
        for index, name in categorical:
            values[name] = parse_categorical_cell(cell_at(row, index), tokens)

        records.append(
            Record(
                timestamp=ts,
                latitude=latitude,
                longitude=longitude,
                values=values,
            )
        )

    if invalid_positions:
        logger.warning("%d record(s) have no valid latitude/longitude", invalid_positions)
    return records, dropped, invalid_positions


def load_text(text: str, options: Optional[LoadOptions] = None) -> LoadResult:
    """Infer the schema of a delimited blob and build its record store.

    Rows with unparseable timestamps are removed before column roles are
    inferred, so a value that never reaches a record cannot make its column
    categorical.
    """
    options = options or LoadOptions()
    lines = split_lines(text)
    headers = split_fields(lines[0], options.delimiter)
    rows = [split_fields(line, options.delimiter) for line in lines[1:]]

    timestamps, rows, dropped = parse_row_timestamps(headers, rows, options)
    roles = classify_headers(headers, rows, options.missing_tokens)
    records, _, invalid_positions = build_records(headers, rows, roles, options, timestamps=timestamps)
    store = RecordStore(records)
    fields = build_field_descriptors(roles, options)

    logger.info(
        "Loaded %d record(s), %d plottable field(s), extent=%s",
        len(store),
        len(fields),
        store.extent,
    )
    return LoadResult(
        store=store,
        fields=fields,
        roles=roles,
        dropped_rows=dropped,
        invalid_positions=invalid_positions,
    )


def read_text_file(file_path: PathLike, encoding: Optional[str] = None) -> str:
    """Read a text file trying the preferred encoding, then common fallbacks."""
    path = as_path(file_path)
    last_error: Optional[Exception] = None
    for enc in get_encoding_candidates(encoding):
        try:
            return path.read_text(encoding=enc)
        except UnicodeDecodeError as exc:
            last_error = exc
            logger.debug("Decoding %s as %s failed, trying next encoding", path.name, enc)
    raise IngestionError(f"Could not decode {path}") from last_error


def load_file(file_path: PathLike, options: Optional[LoadOptions] = None) -> LoadResult:
    options = options or LoadOptions()
    return load_text(read_text_file(file_path, options.encoding), options)
