"""Tests for cmd_validate CLI function."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import pytest

from data_alchemist.core.enums import DataType
from data_alchemist.interfaces.cli.main import build_parser, cmd_validate
from data_alchemist.service import DataQualityService
from data_alchemist.sessions.store import FileSessionStore


def _args(session_root: Path, **overrides) -> argparse.Namespace:
    values = dict(
        session_id="s1",
        session_root=str(session_root),
        today="2025-01-15",
        config=None,
        report=False,
        report_json=False,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture
def session_root(tmp_path: Path) -> Path:
    return tmp_path / "sessions"


@pytest.fixture
def clean_session(session_root, clean_clients, clean_workers, clean_tasks):  # pylint: disable=redefined-outer-name
    service = DataQualityService(FileSessionStore(session_root))
    service.create_session("s1")
    for dataset in (clean_clients, clean_workers, clean_tasks):
        service.add_dataset("s1", dataset)
    return service


@pytest.fixture
def dirty_session(clean_session, make_dataset):  # pylint: disable=redefined-outer-name
    clean_session.add_dataset(
        "s1",
        make_dataset(DataType.CLIENTS, [{"clientId": "C1", "clientName": "Acme", "requirements": "x"}]),
    )
    return clean_session


class TestCmdValidate:
    """Tests for cmd_validate function."""

    def test_cmd_validate_missing_session(self, session_root):  # pylint: disable=redefined-outer-name
        """Test exit code 1 when the session does not exist."""
        assert cmd_validate(_args(session_root)) == 1

    def test_cmd_validate_empty_session(self, session_root):  # pylint: disable=redefined-outer-name
        """Test exit code 1 when the session has no datasets."""
        DataQualityService(FileSessionStore(session_root)).create_session("s1")
        assert cmd_validate(_args(session_root)) == 1

    def test_cmd_validate_clean(self, session_root, clean_session, capsys):  # pylint: disable=redefined-outer-name
        """Test exit code 0 and console output for clean data."""
        assert cmd_validate(_args(session_root)) == 0
        out = capsys.readouterr().out
        assert "Health score: 100/100" in out

    def test_cmd_validate_errors(self, session_root, dirty_session):  # pylint: disable=redefined-outer-name
        """Test exit code 2 when errors are found."""
        assert cmd_validate(_args(session_root)) == 2

    def test_cmd_validate_with_report_flag(self, session_root, dirty_session):  # pylint: disable=redefined-outer-name
        """Test --report with no directory writes next to the session file."""
        cmd_validate(_args(session_root, report=True))

        report_path = session_root / "session_s1" / "s1_validation.md"
        assert report_path.exists()
        assert "# Validation Report" in report_path.read_text(encoding="utf-8")

    def test_cmd_validate_with_report_json_dir(self, session_root, dirty_session, tmp_path):  # pylint: disable=redefined-outer-name
        """Test --report-json with a custom directory."""
        out_dir = tmp_path / "reports"
        cmd_validate(_args(session_root, report_json=str(out_dir)))

        data = json.loads((out_dir / "s1_validation.json").read_text(encoding="utf-8"))
        assert data["totalErrors"] >= 1
        assert data["errorsByCategory"]["required"][0]["column"] == "priority"

    def test_cmd_validate_bad_config(self, session_root, clean_session, tmp_path):  # pylint: disable=redefined-outer-name
        """Test exit code 2 for an invalid settings file."""
        config = tmp_path / "settings.yaml"
        config.write_text("unknown_threshold: 3\n", encoding="utf-8")
        assert cmd_validate(_args(session_root, config=str(config))) == 2

    def test_cmd_validate_bad_today(self, session_root, clean_session):  # pylint: disable=redefined-outer-name
        assert cmd_validate(_args(session_root, today="15/01/2025")) == 2

    def test_cmd_validate_caches_summary(self, session_root, dirty_session):  # pylint: disable=redefined-outer-name
        cmd_validate(_args(session_root))
        data = json.loads((session_root / "session_s1" / "session.json").read_text(encoding="utf-8"))
        assert data["validationSummary"]["totalErrors"] >= 1


class TestParser:
    """Argument parsing."""

    def test_validate_report_flags(self):
        args = build_parser().parse_args(
            ["validate", "--session-id", "s1", "--report", "--report-json", "out"]
        )
        assert args.report is True
        assert args.report_json == "out"
        assert args.func is cmd_validate

    def test_global_logging_flags(self):
        args = build_parser().parse_args(["--errors-only", "export", "--session-id", "s1", "--output-dir", "x"])
        assert args.errors_only
        assert args.session_root is None

    def test_session_id_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["validate"])
