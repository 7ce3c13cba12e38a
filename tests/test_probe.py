"""
Tests for presence probing.
"""

import stat
from pathlib import Path

from devsetup.lib import probe


def _make_executable(directory: Path, name: str) -> Path:
    p = directory / name
    p.write_text("#!/bin/sh\nexit 0\n")
    p.chmod(p.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return p


class TestCommandProbe:
    def test_tool_on_path_is_present(self, tmp_path: Path, monkeypatch):
        _make_executable(tmp_path, "fancytool")
        monkeypatch.setenv("PATH", str(tmp_path))
        assert probe.is_present("fancytool") is True

    def test_missing_tool_is_absent_not_an_error(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("PATH", str(tmp_path))
        assert probe.is_present("definitely-not-installed-xyz") is False

    def test_home_relative_path(self, tmp_path: Path, monkeypatch):
        bin_dir = tmp_path / ".cargo" / "bin"
        bin_dir.mkdir(parents=True)
        _make_executable(bin_dir, "rustc")
        monkeypatch.setenv("HOME", str(tmp_path))
        assert probe.is_present("~/.cargo/bin/rustc") is True
        assert probe.is_present("~/.cargo/bin/cargo") is False

    def test_none_probe_always_absent(self):
        assert probe.is_present("anything", probe.PROBE_NONE) is False


class FakeCompleted:
    def __init__(self, stdout, returncode=0):
        self.stdout = stdout
        self.returncode = returncode


class TestPackageProbe:
    def test_all_packages_installed(self, monkeypatch):
        seen = {}

        def fake_run(argv, **kwargs):
            seen["argv"] = argv
            return FakeCompleted("install ok installed\ninstall ok installed\n")

        monkeypatch.setattr(probe.subprocess, "run", fake_run)
        assert probe.is_present("postgresql postgresql-contrib", probe.PROBE_PACKAGE) is True
        assert seen["argv"][-2:] == ["postgresql", "postgresql-contrib"]

    def test_one_package_missing(self, monkeypatch):
        monkeypatch.setattr(
            probe.subprocess,
            "run",
            lambda argv, **kw: FakeCompleted("install ok installed\nunknown ok not-installed\n"),
        )
        assert probe.is_present("python3 python3-venv", probe.PROBE_PACKAGE) is False

    def test_unknown_package_nonzero_exit(self, monkeypatch):
        monkeypatch.setattr(probe.subprocess, "run", lambda argv, **kw: FakeCompleted("", returncode=1))
        assert probe.is_present("nope", probe.PROBE_PACKAGE) is False

    def test_no_dpkg_query_means_absent(self, monkeypatch):
        def missing(argv, **kw):
            raise FileNotFoundError("dpkg-query")

        monkeypatch.setattr(probe.subprocess, "run", missing)
        assert probe.is_present("git", probe.PROBE_PACKAGE) is False

    def test_empty_identifier(self):
        assert probe.package_installed("   ") is False
