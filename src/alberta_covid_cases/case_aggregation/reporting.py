"""Zone-level reporting over a loaded case engine.

This module turns engine aggregates into record-shaped projections for
downstream consumers:

- A per-zone Polars DataFrame (``zone, total_cases, active_cases, active_share``)
  in first-seen zone order, suitable for CSV export
- A ``CaseReport`` Pydantic model bundling the dataset totals with the
  per-zone rows, suitable for JSON output

Nothing here reads files other than through the engine; tables are written
only by ``save_zone_summary``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Union

import polars as pl
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ..domain.case_record import ACTIVE_STATUS
from .engine import CaseAggregationEngine

ZONE_SUMMARY_FILE = "zone_summary.csv"


class StrictBase(BaseModel):
    """Base class for strict models that forbid extra fields."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class ZoneSummary(StrictBase):
    """Case totals for one zone."""

    zone: str
    total_cases: int = Field(ge=0)
    active_cases: int = Field(ge=0)
    active_share: float = Field(ge=0.0, le=1.0)


class CaseReport(StrictBase):
    """Dataset-wide totals plus one ZoneSummary per zone."""

    source_path: str
    total_cases: int = Field(ge=0)
    active_cases: int = Field(ge=0)
    rows_skipped: int = Field(ge=0)
    zones: List[ZoneSummary]


def build_zone_summary_frame(engine: CaseAggregationEngine) -> pl.DataFrame:
    """One row per zone in first-seen order.

    ``active_share`` is active_cases / total_cases for the zone.
    """
    frame = engine.frame
    if frame.is_empty():
        return pl.DataFrame(
            schema={
                "zone": pl.Utf8,
                "total_cases": pl.Int64,
                "active_cases": pl.Int64,
                "active_share": pl.Float64,
            }
        )
    return (
        frame.group_by("zone", maintain_order=True)
        .agg(
            pl.len().cast(pl.Int64).alias("total_cases"),
            (pl.col("status") == ACTIVE_STATUS).sum().cast(pl.Int64).alias("active_cases"),
        )
        .with_columns(
            (pl.col("active_cases") / pl.col("total_cases")).alias("active_share")
        )
    )


def build_case_report(engine: CaseAggregationEngine) -> CaseReport:
    zones = [
        ZoneSummary(**row)
        for row in build_zone_summary_frame(engine).iter_rows(named=True)
    ]
    return CaseReport(
        source_path=str(engine.source_path),
        total_cases=engine.total_cases,
        active_cases=engine.count_total_active_cases(),
        rows_skipped=engine.rows_skipped,
        zones=zones,
    )


def save_zone_summary(df_zones: pl.DataFrame, output_dir: Union[str, Path]) -> Path:
    os.makedirs(output_dir, exist_ok=True)
    out_path = Path(output_dir) / ZONE_SUMMARY_FILE
    df_zones.write_csv(out_path)
    logger.info(f"Wrote {df_zones.height} zone rows to {out_path}")
    return out_path
