"""Exception types raised while loading case data."""

from pathlib import Path
from typing import Optional, Union


class CaseDataError(Exception):
    """Base class for all case data errors."""


class DataLoadError(CaseDataError):
    """The case dataset could not be loaded.

    Raised when the CSV resource is missing, unreadable, unparseable, or lacks
    the columns aggregation depends on. Fatal for the process: the engine does
    not retry a failed load.
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class MalformedRowError(DataLoadError):
    """A single row failed validation under the ``abort`` policy."""

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        line_number: Optional[int] = None,
        reason: Optional[str] = None,
    ):
        super().__init__(message, path)
        self.line_number = line_number
        self.reason = reason
