"""Process-wide aggregation engine over the Alberta case export.

The engine loads the export once and answers repeated aggregate queries over the
loaded, read-only data:

    engine = CaseAggregationEngine.get_instance()
    engine.count_total_active_cases()
    engine.count_active_cases_by_zone("Calgary Zone")
    engine.distinct_zones()

``get_instance`` reads the process configuration and performs the load under a
lock on first use; concurrent first callers see one load and one instance. A
failed load is remembered and re-raised on every later call, never retried.
Query methods take no lock since nothing is mutated after load.

Engines can also be built directly from a path with ``from_csv`` for callers
that manage their own lifetime.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import ClassVar, Dict, List, Optional, Tuple, Union

import polars as pl
from loguru import logger

from ..config import MalformedRowPolicy, load_config
from ..domain.case_record import ACTIVE_STATUS, CaseRecord
from ..errors import DataLoadError
from .loader import DEFAULT_COLUMNS, CaseColumns, LoadResult, frame_to_records, load_case_frame


class CaseAggregationEngine:
    """Read-only aggregate queries over a loaded case dataset."""

    _instance: ClassVar[Optional["CaseAggregationEngine"]] = None
    _load_error: ClassVar[Optional[DataLoadError]] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, result: LoadResult):
        self._result = result
        self._frame = result.frame
        self._cases: Tuple[CaseRecord, ...] = frame_to_records(result.frame)

    @classmethod
    def from_csv(
        cls,
        path: Union[str, Path],
        policy: MalformedRowPolicy = MalformedRowPolicy.SKIP,
        columns: CaseColumns = DEFAULT_COLUMNS,
    ) -> "CaseAggregationEngine":
        """Load ``path`` and build a standalone engine (not the singleton)."""
        return cls(load_case_frame(path, columns=columns, policy=policy))

    @classmethod
    def get_instance(cls) -> "CaseAggregationEngine":
        """Return the process-wide engine, loading the configured CSV on first call.

        Raises:
            DataLoadError: If the first load failed. The same error is raised
                again on every later call.
        """
        instance = cls._instance
        if instance is not None:
            return instance
        with cls._lock:
            if cls._instance is not None:
                return cls._instance
            if cls._load_error is not None:
                raise cls._load_error
            config = load_config()
            try:
                cls._instance = cls.from_csv(
                    config.csv_path, policy=config.malformed_row_policy
                )
            except DataLoadError as e:
                logger.error(f"Case dataset load failed: {e}")
                cls._load_error = e
                raise
            return cls._instance

    # ------------------------------------------------------------------ #
    # Load metadata
    # ------------------------------------------------------------------ #

    @property
    def source_path(self) -> Path:
        return self._result.path

    @property
    def rows_read(self) -> int:
        return self._result.rows_read

    @property
    def rows_skipped(self) -> int:
        return self._result.rows_skipped

    @property
    def total_cases(self) -> int:
        return len(self._cases)

    @property
    def frame(self) -> pl.DataFrame:
        """A copy of the validated case frame; changes to it do not reach the engine."""
        return self._frame.clone()

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_all_cases(self) -> Tuple[CaseRecord, ...]:
        """All loaded records in file order. The same tuple on every call."""
        return self._cases

    def count_cases_by_status(self, status: str) -> int:
        """Records whose status equals ``status`` exactly (case-sensitive)."""
        return self._frame.filter(pl.col("status") == status).height

    def count_cases_by_zone(self, zone_name: str) -> int:
        return self._frame.filter(pl.col("zone") == zone_name).height

    def count_total_active_cases(self) -> int:
        return self.count_cases_by_status(ACTIVE_STATUS)

    def count_active_cases_by_zone(self, zone_name: str) -> int:
        """Active records in ``zone_name``. Unknown zones count 0."""
        return self._frame.filter(
            (pl.col("status") == ACTIVE_STATUS) & (pl.col("zone") == zone_name)
        ).height

    def distinct_zones(self) -> List[str]:
        """Each zone label once, in the order it first appears in the export."""
        return self._frame.get_column("zone").unique(maintain_order=True).to_list()

    def status_counts(self) -> Dict[str, int]:
        """Record count per status, in first-seen status order."""
        counts = self._frame.group_by("status", maintain_order=True).agg(
            pl.len().alias("n")
        )
        return dict(zip(counts["status"].to_list(), counts["n"].to_list()))

    def active_cases_by_zone(self) -> Dict[str, int]:
        """Active count for every zone, zero included, in first-seen zone order."""
        counts = self._frame.group_by("zone", maintain_order=True).agg(
            (pl.col("status") == ACTIVE_STATUS).sum().alias("active")
        )
        return dict(zip(counts["zone"].to_list(), counts["active"].to_list()))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(source={str(self.source_path)!r}, "
            f"cases={self.total_cases}, skipped={self.rows_skipped})"
        )
