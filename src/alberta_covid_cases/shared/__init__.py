"""
Shared Layer - Alberta COVID-19 Cases

Cross-cutting concerns that any layer may use. No business logic.

Contents:
- logging_utils.py: loguru sink configuration
"""

from .logging_utils import setup_logging

__all__ = [
    "setup_logging",
]
