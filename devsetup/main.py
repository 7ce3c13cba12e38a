from __future__ import annotations

import argparse
import logging
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from .config import Configuration, Settings
from .errors import DevSetupError, PreflightError
from .lib.manifests import load_manifest
from .lib.preflight import run_preflight
from .lib.probe import is_present
from .lib.workdir import scratch_dir
from .logging_utils import configure_logging
from .menu import BANNER, SetupCancelled, interactive_setup
from .pipeline import Category, Outcome, Prober, Summary, execute
from .report import save_report
from .steps import StepCtx, build_categories, build_refresh, category_names

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Development Environment Setup"


def build_configuration(
    names: Sequence[str],
    *,
    only: Sequence[str] = (),
    skip: Sequence[str] = (),
) -> Configuration:
    """Defaults (all enabled) narrowed by --only and --skip; unknown names raise KeyError."""

    config = Configuration.defaults(names)
    if only:
        config = config.only(only)
    if skip:
        config = config.without(skip)
    return config


def format_summary(summary: Summary, verify: Sequence[str] = ()) -> str:
    lines = [
        "",
        BANNER,
        f"Installation completed in {int(summary.duration_s)} seconds!",
        BANNER,
        "",
        "Summary:",
        f"- Steps: {summary.total_steps} (installed {summary.succeeded}, "
        f"already present {summary.skipped}, failed {summary.failed})",
        f"- Log file: {summary.log_path}",
    ]
    failed = [r for r in summary.results if r.outcome is Outcome.FAILED]
    if failed:
        lines.append("- Failed steps: " + ", ".join(f"{r.category}/{r.identifier}" for r in failed))
    lines += [f"- {n}" for n in summary.notes]
    if verify:
        lines += ["", "Quick verification commands:"]
        lines += [f"- {v}" for v in verify]
    return "\n".join(lines) + "\n"


def format_listing(manifest: Dict[str, Any], categories: Sequence[Category]) -> str:
    lines = [str(manifest.get("title") or DEFAULT_TITLE), ""]
    refresh = manifest.get("refresh") or []
    if refresh:
        lines.append("refresh (before the first install):")
        lines += [f"  $ {' '.join(str(a) for a in argv)}" for argv in refresh]
    for c in categories:
        lines.append(f"{c.name}: {c.title}")
        for s in c.steps:
            lines.append(f"  - {s.description} ({s.identifier}, probe={s.probe})")
    return "\n".join(lines)


def run(
    settings: Settings,
    *,
    interactive: bool = True,
    only: Sequence[str] = (),
    skip: Sequence[str] = (),
    prober: Prober = is_present,
    input_fn: Callable[[str], str] = input,
) -> int:
    """Pre-flight, configure, execute and summarize one provisioning run.

    Returns the process exit code.
    """

    log_path = configure_logging(log_path=settings.log_path)
    manifest = load_manifest(settings.manifest_path)
    title = str(manifest.get("title") or DEFAULT_TITLE)

    # Usage errors are reported before pre-flight prompts for sudo or pings.
    try:
        config = build_configuration(category_names(manifest), only=only, skip=skip)
    except KeyError as e:
        logger.error("%s", e.args[0])
        return 2

    try:
        run_preflight(
            min_disk_gb=settings.min_disk_gb,
            connectivity_host=settings.connectivity_host,
            dry_run=settings.dry_run,
        )
    except PreflightError as e:
        logger.error("%s", e)
        return 1

    with scratch_dir(settings.scratch_root) as scratch:
        ctx = StepCtx(settings=settings, scratch=scratch)
        categories = build_categories(manifest, ctx)
        refresh = build_refresh(manifest, ctx)

        print(f"{BANNER}\n  {title}\n{BANNER}\nLog file: {log_path}\n")

        if interactive:
            try:
                config = interactive_setup(config, categories, title=title, log_path=log_path, input_fn=input_fn)
            except SetupCancelled:
                return 0

        summary = execute(config, categories, prober=prober, log_path=log_path, refresh=refresh)

    print(format_summary(summary, manifest.get("verify") or []))
    if settings.report_path:
        save_report(settings.report_path, summary)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="devsetup",
        description="Provision a development workstation: OS packages, IDEs, containers, cloud SDKs, databases, languages.",
    )
    p.add_argument("--auto", action="store_true", help="Run with default settings (no interactive menu)")
    p.add_argument("--only", action="append", default=[], metavar="CATEGORY", help="Enable only this category (repeatable; implies --auto)")
    p.add_argument("--skip", action="append", default=[], metavar="CATEGORY", help="Disable this category (repeatable; implies --auto)")
    p.add_argument("--dry-run", action="store_true", help="Log commands without executing them")
    p.add_argument("--log", default=None, help="Path to the run log (default: /tmp/devsetup-<timestamp>.log)")
    p.add_argument("--manifest", default=None, help="Category manifest (YAML); defaults to the bundled workstation manifest")
    p.add_argument("--report", default=None, help="Write a run report (json|yaml) to this path")
    p.add_argument("--min-disk-gb", type=float, default=Settings.min_disk_gb, help="Minimum free disk space in GB (default: 5)")
    p.add_argument("--list", action="store_true", help="List categories and steps, then exit")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    overrides: Dict[str, Any] = {
        "manifest_path": args.manifest,
        "report_path": args.report,
        "min_disk_gb": args.min_disk_gb,
        "dry_run": bool(args.dry_run),
    }
    if args.log:
        overrides["log_path"] = args.log
    settings = Settings(**overrides)

    try:
        if args.list:
            manifest = load_manifest(args.manifest)
            ctx = StepCtx(settings=settings, scratch=Path(tempfile.gettempdir()))
            print(format_listing(manifest, build_categories(manifest, ctx)))
            return 0
        return run(
            settings,
            interactive=not (args.auto or args.only or args.skip),
            only=args.only,
            skip=args.skip,
        )
    except DevSetupError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
