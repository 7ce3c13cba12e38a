"""
Shared test fixtures and configuration.
"""

import logging
from pathlib import Path
from typing import Callable, List

import pytest

from devsetup.config import Settings
from devsetup.lib.command import CmdResult
from devsetup.pipeline import ActionResult, Category, InstallStep
from devsetup.steps import StepCtx


@pytest.fixture(autouse=True)
def reset_root_logging():
    """configure_logging() attaches handlers to the root logger; undo that per test."""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        if h not in before:
            root.removeHandler(h)
            h.close()
    for attr in ("_devsetup_configured", "_devsetup_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)
    root.setLevel(level)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        log_path=str(tmp_path / "run.log"),
        min_disk_gb=0,
        fetch_backoff_s=0,
    )


@pytest.fixture
def ctx(settings: Settings, tmp_path: Path) -> StepCtx:
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    c = StepCtx(settings=settings, scratch=scratch)
    # Pre-seed host variables so no test shells out to dpkg/lsb_release.
    c.__dict__["variables"] = {
        "arch": "amd64",
        "codename": "bookworm",
        "uname_s": "Linux",
        "uname_m": "x86_64",
        "home": "/home/dev",
        "user": "dev",
    }
    return c


@pytest.fixture
def recorded_commands(monkeypatch) -> List[List[str]]:
    """Replace every run_cmd used by actions with a recorder that always succeeds."""
    calls: List[List[str]] = []

    def fake_run_cmd(argv, **kwargs):
        calls.append(list(argv))
        return CmdResult(argv=list(argv), returncode=0, stdout="", stderr="")

    monkeypatch.setattr("devsetup.steps.actions.run_cmd", fake_run_cmd)
    monkeypatch.setattr("devsetup.lib.pkg.run_cmd", fake_run_cmd)
    return calls


class Recorder:
    """Builds steps whose actions record that they ran."""

    def __init__(self):
        self.ran: List[str] = []

    def step(self, identifier: str, ok: bool = True, raises: bool = False, notes=()) -> InstallStep:
        def action() -> ActionResult:
            self.ran.append(identifier)
            if raises:
                raise RuntimeError(f"{identifier} exploded")
            return ActionResult.success() if ok else ActionResult.failure(f"{identifier} failed")

        return InstallStep(identifier=identifier, description=identifier, action=action, notes=tuple(notes))


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def never_present() -> Callable[[str, str], bool]:
    return lambda identifier, kind: False


def make_categories(recorder: Recorder) -> List[Category]:
    return [
        Category("basics", "System Basics", [recorder.step("curl"), recorder.step("git")]),
        Category("ides", "IDEs", [recorder.step("code")]),
        Category("containers", "Containers", [recorder.step("docker"), recorder.step("kubectl")]),
        Category("cloud", "Cloud SDKs", [recorder.step("aws")]),
        Category("databases", "Databases", [recorder.step("redis-server")]),
        Category("languages", "Languages", [recorder.step("node"), recorder.step("golang-go"), recorder.step("rustc")]),
    ]


@pytest.fixture
def categories(recorder: Recorder) -> List[Category]:
    return make_categories(recorder)
