"""Configuration management for the case aggregation engine.

This module handles loading configuration from environment variables and an
optional .env file, with proper fallbacks and validation. It is the only place
environment variables are read.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger


class MalformedRowPolicy(str, Enum):
    """What the loader does with a row missing its zone, status or id."""

    SKIP = "skip"
    ABORT = "abort"


@dataclass
class CaseDataConfig:
    """Configuration settings for loading the case dataset."""

    # Source settings
    csv_path: Path = Path("data/covid19dataexport.csv")
    malformed_row_policy: MalformedRowPolicy = MalformedRowPolicy.SKIP

    # Logging settings
    log_level: str = "INFO"
    log_file: Optional[Path] = None


def load_config() -> CaseDataConfig:
    """Load configuration with proper fallbacks.

    Priority:
    1. Environment variables
    2. .env file
    3. Default values

    Returns:
        CaseDataConfig: Loaded configuration

    Raises:
        ValueError: If ALBERTA_COVID_MALFORMED_ROWS is not a known policy
    """
    load_dotenv(override=False)
    try:
        csv_path = Path(os.getenv("ALBERTA_COVID_CSV", "data/covid19dataexport.csv"))
        policy = MalformedRowPolicy(
            os.getenv("ALBERTA_COVID_MALFORMED_ROWS", "skip").strip().lower()
        )
        log_level = os.getenv("ALBERTA_COVID_LOG_LEVEL", "INFO").strip().upper()
        log_file = os.getenv("ALBERTA_COVID_LOG_FILE")

        config = CaseDataConfig(
            csv_path=csv_path,
            malformed_row_policy=policy,
            log_level=log_level,
            log_file=Path(log_file) if log_file else None,
        )

        if not config.csv_path.exists():
            logger.warning(
                f"Case dataset not found at {config.csv_path}. Set ALBERTA_COVID_CSV "
                "or create a .env file with ALBERTA_COVID_CSV=/path/to/export.csv"
            )

        return config

    except Exception as e:
        logger.error(f"Error loading configuration: {e}")
        raise
