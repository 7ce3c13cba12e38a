"""
Tests for the command runner.
"""

import logging
import sys

from devsetup.lib.command import fmt_argv, run_cmd, sudo


class TestRunCmd:
    def test_success_captures_output(self):
        r = run_cmd([sys.executable, "-c", "print('hi')"])
        assert r.ok
        assert r.stdout.strip() == "hi"

    def test_nonzero_exit_is_returned_not_raised(self):
        r = run_cmd([sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"])
        assert r.returncode == 3
        assert r.diagnostic().endswith("bad")

    def test_failure_diagnostic(self):
        r = run_cmd([sys.executable, "-c", "import sys; sys.exit(2)"])
        assert not r.ok
        assert r.returncode == 2
        assert r.diagnostic().startswith("exit 2:")

    def test_missing_executable_is_127(self):
        r = run_cmd(["definitely-not-a-binary-xyz"])
        assert r.returncode == 127

    def test_dry_run_does_not_execute(self, tmp_path):
        marker = tmp_path / "marker"
        r = run_cmd([sys.executable, "-c", f"open({str(marker)!r}, 'w')"], dry_run=True)
        assert r.ok
        assert not marker.exists()

    def test_output_goes_to_log(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="devsetup.lib.command"):
            run_cmd([sys.executable, "-c", "import sys; print('out'); sys.stderr.write('err')"])
        text = caplog.text
        assert "CMD " in text
        assert "STDOUT out" in text
        assert "STDERR err" in text


class TestHelpers:
    def test_sudo_prefix_with_env(self):
        assert sudo(["apt-get", "install"], env={"DEBIAN_FRONTEND": "noninteractive"}) == [
            "sudo",
            "DEBIAN_FRONTEND=noninteractive",
            "apt-get",
            "install",
        ]

    def test_fmt_argv_quotes(self):
        assert fmt_argv(["echo", "a b"]) == "echo 'a b'"
