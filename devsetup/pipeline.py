from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .config import Configuration
from .lib.probe import PROBE_COMMAND, is_present
from .logging_utils import log_success

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    ok: bool
    detail: str = ""

    @classmethod
    def success(cls, detail: str = "") -> "ActionResult":
        return cls(ok=True, detail=detail)

    @classmethod
    def failure(cls, detail: str) -> "ActionResult":
        return cls(ok=False, detail=detail)


Action = Callable[[], ActionResult]
Prober = Callable[[str, str], bool]


class Outcome(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class InstallStep:
    """A single idempotent install unit."""

    identifier: str
    description: str
    action: Action = field(compare=False)
    probe: str = PROBE_COMMAND
    notes: Tuple[str, ...] = ()


@dataclass
class Category:
    name: str
    title: str
    steps: List[InstallStep]
    enabled: bool = True


@dataclass(frozen=True)
class RunResult:
    identifier: str
    outcome: Outcome
    detail: str = ""
    category: str = ""


@dataclass(frozen=True)
class Summary:
    total_steps: int
    succeeded: int
    skipped: int
    failed: int
    duration_s: float
    log_path: Optional[str]
    results: List[RunResult]
    notes: List[str]
    refreshed: bool = False


def run_step(
    step: InstallStep,
    *,
    prober: Prober = is_present,
    category: str = "",
    before_install: Optional[Callable[[], None]] = None,
) -> RunResult:
    """Run one step: skip if present, otherwise invoke and record the outcome.

    ``before_install`` is called only when the step is about to be installed.
    Never raises for a failing action.
    """

    if prober(step.identifier, step.probe):
        logger.info("%s is already installed. Skipping.", step.description)
        return RunResult(step.identifier, Outcome.SKIPPED, category=category)

    if before_install is not None:
        before_install()
    logger.info("Installing %s...", step.description)
    try:
        res = step.action()
    except Exception as e:
        logger.exception("Failed to install %s", step.description)
        return RunResult(step.identifier, Outcome.FAILED, f"{type(e).__name__}: {e}", category=category)

    if res.ok:
        log_success(logger, "%s installed successfully", step.description)
        return RunResult(step.identifier, Outcome.SUCCESS, res.detail, category=category)

    logger.error("Failed to install %s: %s", step.description, res.detail)
    return RunResult(step.identifier, Outcome.FAILED, res.detail, category=category)


def run_category(
    category: Category,
    *,
    prober: Prober = is_present,
    before_install: Optional[Callable[[], None]] = None,
) -> List[RunResult]:
    """Run every step of an enabled category in order, regardless of earlier failures."""

    if not category.enabled:
        logger.info("Skipping category %s (disabled)", category.name)
        return []

    logger.info("=== %s ===", category.title.upper())
    results = [
        run_step(step, prober=prober, category=category.name, before_install=before_install)
        for step in category.steps
    ]
    log_success(logger, "%s installation completed", category.title)
    return results


class _Refresh:
    """Runs the package metadata refresh at most once, on first demand."""

    def __init__(self, action: Optional[Action]):
        self.action = action
        self.ran = False

    def __call__(self) -> None:
        if self.action is None or self.ran:
            return
        self.ran = True
        logger.info("Refreshing package metadata...")
        try:
            res = self.action()
        except Exception:
            logger.exception("Package metadata refresh failed")
            return
        if res.ok:
            log_success(logger, "Package metadata refreshed")
        else:
            logger.warning("Package metadata refresh failed: %s", res.detail)


def execute(
    config: Configuration,
    categories: Sequence[Category],
    *,
    prober: Prober = is_present,
    log_path: Optional[str] = None,
    refresh: Optional[Action] = None,
) -> Summary:
    """Run all categories in declared order and aggregate their results.

    ``refresh`` (apt update and friends) is not a step: it runs once, just
    before the first step that actually needs installing, and never adds a
    RunResult. A fully provisioned host therefore sees only skips.
    """

    for c in categories:
        c.enabled = config.is_enabled(c.name)

    started = time.monotonic()
    logger.info("Starting installation process...")

    before_install = _Refresh(refresh)
    results: List[RunResult] = []
    notes: List[str] = []
    for c in categories:
        cat_results = run_category(c, prober=prober, before_install=before_install)
        results.extend(cat_results)
        by_id = {s.identifier: s for s in c.steps}
        for r in cat_results:
            if r.outcome is Outcome.SUCCESS:
                notes.extend(by_id[r.identifier].notes)

    duration = time.monotonic() - started
    summary = Summary(
        total_steps=len(results),
        succeeded=sum(1 for r in results if r.outcome is Outcome.SUCCESS),
        skipped=sum(1 for r in results if r.outcome is Outcome.SKIPPED),
        failed=sum(1 for r in results if r.outcome is Outcome.FAILED),
        duration_s=duration,
        log_path=log_path,
        results=results,
        notes=notes,
        refreshed=before_install.ran,
    )
    if summary.failed:
        logger.warning("%d step(s) failed; see %s", summary.failed, log_path or "the log")
    log_success(logger, "Installation completed in %d seconds!", int(duration))
    return summary
