"""Case aggregation package.

This package loads the Alberta COVID-19 case export once per process and
answers aggregate queries over it.

Modules:
- loader: CSV reading, column mapping and malformed-row handling (Polars).
- engine: The process-wide CaseAggregationEngine and its queries.
- reporting: Per-zone summary tables and the CaseReport model.

Design goals:
- Load once, read many; nothing is mutated after load.
- Exact, case-sensitive matching on status and zone labels.
- Deterministic output: zones are always reported in first-seen order.
"""

from .engine import CaseAggregationEngine
from .loader import CaseColumns, LoadResult, load_case_frame

__all__ = [
    "CaseAggregationEngine",
    "CaseColumns",
    "LoadResult",
    "load_case_frame",
]
