import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep a stray dasha_reference.json in the working directory out of the test run.
os.environ.setdefault("DASHA_REFERENCE_FILE", str(ROOT / "tests" / "no_such_reference.json"))


@pytest.fixture
def dashas_payload():
    return {
        "current": {
            "planet": "Moon",
            "startDate": "2026-01-01T00:00:00+00:00",
            "endDate": "2036-01-01T00:00:00+00:00",
        },
        "sequence": [
            {"planet": "Venus", "startDate": "2000-01-01T00:00:00+00:00", "endDate": "2020-01-01T00:00:00+00:00"},
            {"planet": "Sun", "startDate": "2020-01-01T00:00:00+00:00", "endDate": "2026-01-01T00:00:00+00:00"},
            {"planet": "Moon", "startDate": "2026-01-01T00:00:00+00:00", "endDate": "2036-01-01T00:00:00+00:00"},
            {"planet": "Mars", "startDate": "2036-01-01T00:00:00+00:00", "endDate": "2043-01-01T00:00:00+00:00"},
        ],
    }
