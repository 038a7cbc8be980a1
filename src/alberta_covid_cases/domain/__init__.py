"""
Domain Layer - Alberta COVID-19 Cases

Pure value objects with no I/O and no third-party dependencies.

Contents:
- case_record.py: The immutable CaseRecord entity and the "Active" status label

Dependencies: NONE
Dependents: case_aggregation, cli
"""

from .case_record import ACTIVE_STATUS, CaseRecord

__all__ = [
    "ACTIVE_STATUS",
    "CaseRecord",
]
