"""
A single Alberta COVID-19 case, as loaded from one row of the case export.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional

ACTIVE_STATUS = "Active"


@dataclass(frozen=True)
class CaseRecord:
    """
    One tracked case. Zone and status are always non-empty strings; the
    remaining descriptive fields may be None when the export left them blank.
    """
    case_id: str
    zone: str
    status: str
    date_reported: Optional[date] = None
    gender: Optional[str] = None
    age_group: Optional[str] = None
    case_type: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE_STATUS

    def to_dict(self) -> dict:
        """Serializes the record to a dictionary."""
        return {
            "case_id": self.case_id,
            "date_reported": self.date_reported.isoformat() if self.date_reported else None,
            "zone": self.zone,
            "gender": self.gender,
            "age_group": self.age_group,
            "status": self.status,
            "case_type": self.case_type,
        }
