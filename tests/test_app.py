"""
Tests for application wiring: entry-point imports and log formatting.
"""

import json
import logging
import subprocess
import sys
from pathlib import Path

import pytest

from rentdesk.logging_config import JSONFormatter

ROOT = Path(__file__).resolve().parent.parent


@pytest.mark.parametrize(
    "statement",
    [
        "import rentdesk.config",
        "import rentdesk.main",
        "import rentdesk.config, rentdesk.journey, rentdesk.database",
        "from rentdesk.journey.thresholds import InsightThresholds",
    ],
)
def test_modules_import_in_a_fresh_interpreter(statement):
    # Fresh process so import order is not masked by modules already loaded here
    completed = subprocess.run(
        [sys.executable, "-c", statement],
        cwd=ROOT,
        capture_output=True,
        text=True,
    )
    assert completed.returncode == 0, completed.stderr


def test_json_formatter_carries_journey_context():
    record = logging.LogRecord(
        name="rentdesk.journey.sources",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Journey source %s failed",
        args=("bills",),
        exc_info=None,
    )
    record.tenant_id = "tenant-1"
    record.source = "bills"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Journey source bills failed"
    assert payload["level"] == "WARNING"
    assert payload["tenant_id"] == "tenant-1"
    assert payload["source"] == "bills"
    assert payload["service"]


def test_json_formatter_omits_missing_context():
    record = logging.LogRecord("rentdesk", logging.INFO, __file__, 1, "started", None, None)

    payload = json.loads(JSONFormatter().format(record))

    assert "tenant_id" not in payload
    assert "source" not in payload
