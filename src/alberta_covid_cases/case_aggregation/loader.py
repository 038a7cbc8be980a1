"""Load the Alberta case export into a validated Polars frame.

The export is a flat CSV with one row per case. The first column usually has a
blank header and carries the case id; the remaining columns are named, e.g.

    "","Date reported","Alberta Health Services Zone","Gender","Age group","Case status","Case type"
    "1","2020-03-06","Calgary Zone","Female","60-69 years","Recovered","Confirmed"

Loading reads every column as a string, strips surrounding whitespace, maps
source columns onto canonical names, and validates each row. A row must have
exactly as many fields as the header, a zone, a status and a case id not used
by an earlier valid row; rows failing that are handled by the configured
``MalformedRowPolicy``. Blank lines are not rows. All other columns are
descriptive and optional.

Polars does the parsing, tolerating ragged lines; a light pass with the
``csv`` module records each row's physical line number and field count so
ragged rows can be reported against the right line.
"""

from __future__ import annotations

import csv
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import polars as pl
from loguru import logger

from ..config import MalformedRowPolicy
from ..domain.case_record import CaseRecord
from ..errors import DataLoadError, MalformedRowError

# Canonical column order matches CaseRecord
RECORD_COLUMNS = (
    "case_id",
    "zone",
    "status",
    "date_reported",
    "gender",
    "age_group",
    "case_type",
)
REQUIRED_COLUMNS = ("zone", "status")
DATE_FORMAT = "%Y-%m-%d"

_ROW_INDEX = "__row"
_LINE = "__line"
_FIELDS = "__fields"
_REASON = "__reason"
_MAX_SAMPLE_LINES = 5


@dataclass(frozen=True)
class CaseColumns:
    """Source column names in the export, keyed by canonical field.

    ``case_id`` may be None, in which case the first column is used when its
    header is blank, and 1-based row numbers are used otherwise.
    """

    case_id: Optional[str] = None
    zone: str = "Alberta Health Services Zone"
    status: str = "Case status"
    date_reported: str = "Date reported"
    gender: str = "Gender"
    age_group: str = "Age group"
    case_type: str = "Case type"

    def mapping(self) -> Dict[str, Optional[str]]:
        return {name: getattr(self, name) for name in RECORD_COLUMNS}


DEFAULT_COLUMNS = CaseColumns()


@dataclass(frozen=True)
class LoadResult:
    """A validated case frame plus bookkeeping about the load."""

    path: Path
    frame: pl.DataFrame
    rows_read: int
    rows_skipped: int
    skipped_lines: Tuple[int, ...] = field(default_factory=tuple)


def _is_blank_header(name: str) -> bool:
    # Polars names blank headers differently across releases
    stripped = name.strip()
    return stripped == "" or stripped == "column_1" or stripped.startswith("Unnamed")


def _resolve_id_column(columns: CaseColumns, available: list) -> Optional[str]:
    if columns.case_id is not None:
        if columns.case_id not in available:
            return None
        return columns.case_id
    if available and _is_blank_header(available[0]):
        return available[0]
    return None


def _scan_rows(path: Path, n_fields: int) -> Tuple[List[int], List[int]]:
    """Physical start line and field count of every non-blank data row.

    A row is blank when its first ``n_fields`` fields are all empty, which is
    exactly what survives Polars' truncation of ragged lines.
    """
    lines: List[int] = []
    counts: List[int] = []
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as fp:
            reader = csv.reader(fp)
            next(reader, None)  # header
            start = reader.line_num + 1
            for row in reader:
                if any(value.strip() for value in row[:n_fields]):
                    lines.append(start)
                    counts.append(len(row))
                start = reader.line_num + 1
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise DataLoadError(f"Could not parse case dataset {path}: {e}", path) from e
    return lines, counts


def _read_raw(path: Path) -> pl.DataFrame:
    """Parse the export, drop blank rows and attach line numbers and field counts."""
    if not path.exists():
        raise DataLoadError(f"Case dataset not found: {path}", path)
    if not path.is_file():
        raise DataLoadError(f"Case dataset is not a file: {path}", path)
    try:
        # infer_schema_length=0 reads every column as a string
        raw = pl.read_csv(path, infer_schema_length=0, truncate_ragged_lines=True)
    except (OSError, pl.exceptions.PolarsError) as e:
        raise DataLoadError(f"Could not parse case dataset {path}: {e}", path) from e

    blank = pl.all_horizontal(
        [pl.col(c).str.strip_chars().fill_null("") == "" for c in raw.columns]
    )
    raw = raw.filter(~blank)

    lines, counts = _scan_rows(path, raw.width)
    if len(lines) != raw.height:
        raise DataLoadError(
            f"Could not parse case dataset {path}: found {len(lines)} rows "
            f"but parsed {raw.height}; check for unbalanced quotes",
            path,
        )
    return raw.with_columns(
        pl.Series(_LINE, lines, dtype=pl.Int64),
        pl.Series(_FIELDS, counts, dtype=pl.Int64),
    )


def _normalize(raw: pl.DataFrame, path: Path, columns: CaseColumns) -> pl.DataFrame:
    """Rename, strip and type the raw string columns."""
    mapping = columns.mapping()
    missing = [mapping[name] for name in REQUIRED_COLUMNS if mapping[name] not in raw.columns]
    if missing:
        raise DataLoadError(
            f"Case dataset {path} is missing required column(s): {', '.join(missing)}",
            path,
        )

    id_column = _resolve_id_column(columns, raw.columns)
    if columns.case_id is not None and id_column is None:
        raise DataLoadError(
            f"Case dataset {path} is missing id column: {columns.case_id}", path
        )

    df = raw.with_row_index(_ROW_INDEX)

    exprs = []
    for name in RECORD_COLUMNS:
        source = id_column if name == "case_id" else mapping[name]
        if source is None:
            # No id column in the file: fall back to 1-based row numbers
            exprs.append((pl.col(_ROW_INDEX) + 1).cast(pl.Utf8).alias(name))
        elif source in df.columns:
            stripped = pl.col(source).str.strip_chars()
            exprs.append(
                pl.when(stripped == "").then(None).otherwise(stripped).alias(name)
            )
        else:
            exprs.append(pl.lit(None, dtype=pl.Utf8).alias(name))

    df = df.select(pl.col(_ROW_INDEX), pl.col(_LINE), pl.col(_FIELDS), *exprs)
    return df.with_columns(
        pl.col("date_reported").str.strptime(pl.Date, DATE_FORMAT, strict=False)
    )


def _flag_malformed(df: pl.DataFrame, n_fields: int) -> pl.DataFrame:
    reason = (
        pl.when(pl.col(_FIELDS) != n_fields)
        .then(pl.format("expected {} fields, found {}", pl.lit(n_fields), pl.col(_FIELDS)))
        .when(pl.col("case_id").is_null())
        .then(pl.lit("missing case id"))
        .when(pl.col("zone").is_null())
        .then(pl.lit("missing zone"))
        .when(pl.col("status").is_null())
        .then(pl.lit("missing status"))
        .otherwise(pl.lit(None, dtype=pl.Utf8))
    )
    df = df.with_columns(reason.alias(_REASON))

    # Duplicates only among rows that are otherwise valid
    duplicates = (
        df.filter(pl.col(_REASON).is_null())
        .filter(~pl.col("case_id").is_first_distinct())
        .get_column(_ROW_INDEX)
    )
    return df.with_columns(
        pl.when(pl.col(_ROW_INDEX).is_in(duplicates))
        .then(pl.lit("duplicate case id"))
        .otherwise(pl.col(_REASON))
        .alias(_REASON)
    )


def load_case_frame(
    path: Union[str, Path],
    columns: CaseColumns = DEFAULT_COLUMNS,
    policy: MalformedRowPolicy = MalformedRowPolicy.SKIP,
) -> LoadResult:
    """Read, normalize and validate the case export at ``path``.

    Args:
        path: Path to the CSV export
        columns: Source column names
        policy: What to do with ragged rows and rows missing a zone, status
            or unique id

    Returns:
        LoadResult whose frame has exactly the ``RECORD_COLUMNS``, in file order

    Raises:
        DataLoadError: If the file is missing, unreadable, unparseable or lacks
            a required column
        MalformedRowError: If a row is malformed and ``policy`` is ``ABORT``
    """
    path = Path(path)
    policy = MalformedRowPolicy(policy)
    logger.info(f"Loading case dataset from {path}")
    t0 = time.time()

    raw = _read_raw(path)
    n_fields = raw.width - 2
    df = _flag_malformed(_normalize(raw, path, columns), n_fields)
    rows_read = df.height

    bad = df.filter(pl.col(_REASON).is_not_null())
    skipped_lines: Tuple[int, ...] = ()
    if bad.height:
        lines = bad[_LINE].to_list()
        first_line, first_reason = lines[0], bad[_REASON][0]
        if policy is MalformedRowPolicy.ABORT:
            raise MalformedRowError(
                f"Malformed row at {path}:{first_line}: {first_reason}",
                path,
                line_number=first_line,
                reason=first_reason,
            )
        skipped_lines = tuple(lines)
        sample = ", ".join(str(n) for n in lines[:_MAX_SAMPLE_LINES])
        logger.warning(
            f"Skipped {bad.height} malformed row(s) in {path} "
            f"(first: line {first_line}, {first_reason}; lines {sample})"
        )

    frame = df.filter(pl.col(_REASON).is_null()).select(RECORD_COLUMNS)
    logger.info(
        f"Loaded {frame.height} cases from {path} in {time.time()-t0:.2f}s "
        f"| {rows_read} rows read, {bad.height} skipped"
    )
    return LoadResult(
        path=path,
        frame=frame,
        rows_read=rows_read,
        rows_skipped=bad.height,
        skipped_lines=skipped_lines,
    )


def frame_to_records(frame: pl.DataFrame) -> Tuple[CaseRecord, ...]:
    """Materialize a validated frame into immutable records, in row order."""
    return tuple(
        CaseRecord(**row) for row in frame.select(RECORD_COLUMNS).iter_rows(named=True)
    )
