"""
alberta-covid-cases: load-once aggregation over the Alberta COVID-19 case export.

This package provides:
- CaseAggregationEngine, a lazily loaded process-wide engine with count,
  filtered-count and distinct-zone queries
- A Polars-based loader with a configurable malformed-row policy
- Zone-level reporting models
- A Typer CLI (``alberta-covid-cases``)
"""

from .case_aggregation import CaseAggregationEngine
from .config import CaseDataConfig, MalformedRowPolicy, load_config
from .domain import ACTIVE_STATUS, CaseRecord
from .errors import CaseDataError, DataLoadError, MalformedRowError

__version__ = "0.1.0"
__all__ = [
    "CaseAggregationEngine",
    "CaseRecord",
    "ACTIVE_STATUS",
    "CaseDataConfig",
    "MalformedRowPolicy",
    "load_config",
    "CaseDataError",
    "DataLoadError",
    "MalformedRowError",
]
