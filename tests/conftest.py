# conftest.py  (shared fixtures for the test suite)
import sys
from pathlib import Path

import pytest
from loguru import logger

ROOT = Path(__file__).parent.parent.resolve()
SRC = ROOT / "src"

# Add src directory to Python path for proper imports
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from alberta_covid_cases.case_aggregation.engine import CaseAggregationEngine  # noqa: E402

HEADER = '"","Date reported","Alberta Health Services Zone","Gender","Age group","Case status","Case type"\n'

# 10 cases over 6 zones, 5 of them "Active". Row 10 uses a lowercase status
# and must not count as active.
SAMPLE_ROWS = """\
"1","2020-03-06","Calgary Zone","Female","60-69 years","Recovered","Confirmed"
"2","2020-03-07","Edmonton Zone","Male","30-39 years","Active","Confirmed"
"3","2020-03-07","Calgary Zone","Male","20-29 years","Active","Confirmed"
"4","2020-03-08","North Zone","Female","40-49 years","Died","Confirmed"
"5","2020-03-09","Calgary Zone","Female","10-19 years","Active","Probable"
"6","2020-03-09","South Zone","Male","50-59 years","Recovered","Confirmed"
"7","2020-03-10","Edmonton Zone","Female","Under 1 year","Active","Confirmed"
"8","2020-03-11","Central Zone","Male","80+ years","Recovered","Confirmed"
"9","2020-03-12","Unknown","Unknown","Unknown","Active","Confirmed"
"10","2020-03-12","Calgary Zone","Male","70-79 years","active","Confirmed"
"""

# Lines 3-6 are malformed: missing zone, blank status, duplicate id, missing id.
MALFORMED_ROWS = """\
"1","2020-03-06","Calgary Zone","Female","60-69 years","Active","Confirmed"
"2","2020-03-07","","Male","30-39 years","Active","Confirmed"
"3","2020-03-07","Edmonton Zone","Male","20-29 years","  ","Confirmed"
"1","2020-03-08","North Zone","Female","40-49 years","Died","Confirmed"
"","2020-03-09","South Zone","Female","10-19 years","Active","Probable"
"6","not-a-date","  Edmonton Zone ","Male","50-59 years","Active",""
"""

SAMPLE_ZONES = [
    "Calgary Zone",
    "Edmonton Zone",
    "North Zone",
    "South Zone",
    "Central Zone",
    "Unknown",
]


@pytest.fixture
def write_csv(tmp_path):
    """Write ``text`` to ``tmp_path / name``, prefixed by the export header."""
    def _write(name, text="", header=HEADER):
        path = tmp_path / name
        path.write_text(header + text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def sample_csv(write_csv):
    """A small, well-formed case export."""
    return write_csv("cases.csv", SAMPLE_ROWS)


@pytest.fixture
def malformed_csv(write_csv):
    """A case export with four malformed rows among six."""
    return write_csv("malformed.csv", MALFORMED_ROWS)


@pytest.fixture
def sample_zones():
    return list(SAMPLE_ZONES)


@pytest.fixture
def sample_engine(sample_csv):
    return CaseAggregationEngine.from_csv(sample_csv)


@pytest.fixture(autouse=True)
def fresh_singleton(monkeypatch):
    """Each test starts with an unloaded process-wide engine."""
    monkeypatch.setattr(CaseAggregationEngine, "_instance", None)
    monkeypatch.setattr(CaseAggregationEngine, "_load_error", None)
    yield


@pytest.fixture(autouse=True)
def reset_logger():
    """CLI tests rebind loguru to CliRunner streams; restore stderr afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr)
