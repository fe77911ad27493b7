"""Tests for the resolution report."""
import json
import os
import tempfile
from unittest.mock import patch

from browser_provisioner.engine.report import (
    Outcome,
    ResolutionReport,
    save_resolution_report,
)


def test_outcome_lookup():
    report = ResolutionReport("auto", "auto")
    report.record("release-cache", Outcome.UNAVAILABLE, 0.01234)
    assert report.outcome_of("release-cache") == "skipped or failed"
    assert report.outcome_of("system") == "not tried"
    assert report.attempts[0].elapsed == 0.012


def test_save_and_load():
    report = ResolutionReport("prefer-system", "bundled-only", ci=True)
    report.record("release-cache", Outcome.OK, 1.5)
    report.result = {"channel": "bundled", "strategy": "release-cache"}

    with tempfile.TemporaryDirectory() as tmpdir:
        path = save_resolution_report(report, tmpdir)
        assert path == os.path.join(tmpdir, "browser-resolution.json")
        with open(path) as f:
            data = json.load(f)

    assert data["requested_strategy"] == "prefer-system"
    assert data["effective_strategy"] == "bundled-only"
    assert data["ci"] is True
    assert data["attempts"] == [{"source": "release-cache", "outcome": "ok", "elapsed": 1.5}]
    assert "timestamp" in data


def test_save_never_raises():
    report = ResolutionReport("auto", "auto")
    with tempfile.TemporaryDirectory() as tmpdir:
        with patch("browser_provisioner.engine.report.open", side_effect=PermissionError("ro"),
                   create=True):
            assert save_resolution_report(report, tmpdir) == ""
