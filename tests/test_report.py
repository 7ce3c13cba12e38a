"""
Tests for run reports and logging setup.
"""

import json
import logging
from pathlib import Path

import yaml

from devsetup.logging_utils import ColorFormatter, configure_logging, log_success
from devsetup.pipeline import Outcome, RunResult, Summary
from devsetup.report import save_report


def _summary() -> Summary:
    return Summary(
        total_steps=2,
        succeeded=1,
        skipped=0,
        failed=1,
        duration_s=1.23456,
        log_path="/tmp/run.log",
        results=[
            RunResult("docker", Outcome.SUCCESS, category="containers"),
            RunResult("kubectl", Outcome.FAILED, "exit 1", category="containers"),
        ],
        notes=["log out and back in"],
    )


class TestReport:
    def test_json(self, tmp_path: Path):
        path = tmp_path / "reports" / "run.json"
        save_report(str(path), _summary())
        data = json.loads(path.read_text())
        assert data["failed"] == 1
        assert data["refreshed"] is False
        assert data["duration_s"] == 1.235
        assert data["results"][1] == {"category": "containers", "step": "kubectl", "outcome": "failed", "detail": "exit 1"}

    def test_yaml(self, tmp_path: Path):
        path = tmp_path / "run.yaml"
        save_report(str(path), _summary())
        data = yaml.safe_load(path.read_text())
        assert data["total_steps"] == 2
        assert data["notes"] == ["log out and back in"]

    def test_unknown_extension_is_json(self, tmp_path: Path):
        path = tmp_path / "run.out"
        save_report(str(path), _summary())
        assert json.loads(path.read_text())["succeeded"] == 1


class TestLogging:
    def test_log_file_receives_debug(self, tmp_path: Path):
        path = tmp_path / "logs" / "run.log"
        actual = configure_logging(str(path), also_console=False)
        assert actual == str(path)
        logging.getLogger("devsetup.test").debug("STDOUT something")
        for h in logging.getLogger().handlers:
            h.flush()
        assert "STDOUT something" in path.read_text()

    def test_second_call_is_noop(self, tmp_path: Path):
        first = configure_logging(str(tmp_path / "a.log"), also_console=False)
        count = len(logging.getLogger().handlers)
        second = configure_logging(str(tmp_path / "b.log"), also_console=False)
        assert second == first
        assert len(logging.getLogger().handlers) == count

    def test_success_lines_are_green(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "done", (), None)
        record.success = True
        assert ColorFormatter("%(message)s").format(record).startswith("\033[0;32m")

    def test_log_success_marks_record(self, caplog):
        with caplog.at_level(logging.INFO):
            log_success(logging.getLogger("devsetup.test"), "%s installed", "git")
        assert caplog.records[-1].success is True
        assert caplog.records[-1].getMessage() == "git installed"
