"""Install actions, one factory per manifest step kind.

Each factory takes the manifest entry and the run context and returns a
zero-argument callable producing an ActionResult. Actions report failures
as data; they do not raise for a failed command or download.
"""

from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..lib.command import CmdResult, run_cmd, sudo
from ..lib.pkg import apt_install, apt_update, dpkg_install, install_keyring, keyring_path, write_sources_list
from ..pipeline import Action, ActionResult
from .context import StepCtx

logger = logging.getLogger(__name__)


def _argv(ctx: StepCtx, argv: Sequence[Any], **extra: str) -> List[str]:
    return [ctx.expand(str(a), **extra) for a in argv]


def _slug(identifier: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "-", identifier).strip("-") or "artifact"


def _fail(r: CmdResult) -> ActionResult:
    return ActionResult.failure(r.diagnostic())


def _run_all(ctx: StepCtx, commands: Sequence[Sequence[Any]], *, cwd: Optional[str] = None, **extra: str) -> ActionResult:
    for argv in commands:
        r = run_cmd(_argv(ctx, argv, **extra), cwd=cwd, dry_run=ctx.dry_run)
        if not r.ok:
            return _fail(r)
    return ActionResult.success()


def _install_packages(ctx: StepCtx, packages: Sequence[str], *, refresh: bool) -> ActionResult:
    if not packages:
        return ActionResult.success()
    if refresh:
        r = apt_update(dry_run=ctx.dry_run)
        if not r.ok:
            return _fail(r)
    r = apt_install([ctx.expand(p) for p in packages], dry_run=ctx.dry_run)
    return ActionResult.success() if r.ok else _fail(r)


def _sha256(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def _with_hooks(ctx: StepCtx, entry: Dict[str, Any], body: Callable[[], ActionResult]) -> Action:
    """Wrap an action with best-effort ``pre`` and ``post`` commands."""

    pre = entry.get("pre") or []
    post = entry.get("post") or []

    def action() -> ActionResult:
        for argv in pre:
            run_cmd(_argv(ctx, argv), dry_run=ctx.dry_run)
        res = body()
        if res.ok:
            for argv in post:
                r = run_cmd(_argv(ctx, argv), dry_run=ctx.dry_run)
                if not r.ok:
                    logger.warning("Post-install command failed: %s", r.diagnostic())
        return res

    return action


def apt_action(entry: Dict[str, Any], ctx: StepCtx) -> Callable[[], ActionResult]:
    packages = entry.get("packages") or entry["id"].split()
    return lambda: _install_packages(ctx, packages, refresh=False)


def apt_repo_action(entry: Dict[str, Any], ctx: StepCtx) -> Callable[[], ActionResult]:
    repo = entry["repo"]
    name = repo["name"]

    def action() -> ActionResult:
        key_file, fr = ctx.download(ctx.expand(repo["key_url"]), f"{name}.asc")
        if not fr.ok:
            return ActionResult.failure(str(fr.error))
        r = install_keyring(str(key_file), name, dry_run=ctx.dry_run)
        if not r.ok:
            return _fail(r)
        line = ctx.expand(repo["source"], keyring=keyring_path(name))
        r = write_sources_list(name, line, dry_run=ctx.dry_run)
        if not r.ok:
            return _fail(r)
        return _install_packages(ctx, entry.get("packages") or [], refresh=True)

    return action


def script_action(entry: Dict[str, Any], ctx: StepCtx) -> Callable[[], ActionResult]:
    """Download an installer script and run it with an interpreter."""

    interpreter = entry.get("interpreter") or ["sh"]
    args = entry.get("args") or []

    def action() -> ActionResult:
        script, fr = ctx.download(ctx.expand(entry["url"]), f"{_slug(entry['id'])}-install.sh")
        if not fr.ok:
            return ActionResult.failure(str(fr.error))
        r = run_cmd(
            [*_argv(ctx, interpreter), str(script), *_argv(ctx, args)],
            cwd=str(ctx.scratch),
            dry_run=ctx.dry_run,
        )
        if not r.ok:
            return _fail(r)
        return _install_packages(ctx, entry.get("packages") or [], refresh=True)

    return action


def binary_action(entry: Dict[str, Any], ctx: StepCtx) -> Callable[[], ActionResult]:
    """Download a single executable, optionally checksum it, and install it."""

    name = entry.get("install_name") or entry["id"]
    bin_dir = entry.get("bin_dir") or "/usr/local/bin"

    def action() -> ActionResult:
        extra: Dict[str, str] = {}
        if entry.get("version_url"):
            vfile, fr = ctx.download(ctx.expand(entry["version_url"]), f"{name}.version")
            if not fr.ok:
                return ActionResult.failure(str(fr.error))
            extra["version"] = "v0.0.0" if ctx.dry_run else vfile.read_text(encoding="utf-8").strip()

        artifact, fr = ctx.download(ctx.expand(entry["url"], **extra), name)
        if not fr.ok:
            return ActionResult.failure(str(fr.error))

        if entry.get("checksum_url") and not ctx.dry_run:
            sumfile, fr = ctx.download(ctx.expand(entry["checksum_url"], **extra), f"{name}.sha256")
            if not fr.ok:
                return ActionResult.failure(str(fr.error))
            expected = sumfile.read_text(encoding="utf-8").split()[0].strip().lower()
            actual = _sha256(artifact)
            if actual != expected:
                return ActionResult.failure(f"Checksum mismatch for {name}: expected {expected}, got {actual}")
            logger.info("Checksum verified for %s", name)

        r = run_cmd(
            sudo(["install", "-o", "root", "-g", "root", "-m", "0755", str(artifact), f"{bin_dir}/{name}"]),
            dry_run=ctx.dry_run,
        )
        return ActionResult.success() if r.ok else _fail(r)

    return action


def deb_action(entry: Dict[str, Any], ctx: StepCtx) -> Callable[[], ActionResult]:
    def action() -> ActionResult:
        deb, fr = ctx.download(ctx.expand(entry["url"]), f"{_slug(entry['id'])}.deb")
        if not fr.ok:
            return ActionResult.failure(str(fr.error))
        r = dpkg_install(str(deb), dry_run=ctx.dry_run)
        if not r.ok:
            return _fail(r)
        return _install_packages(ctx, entry.get("packages") or [], refresh=True)

    return action


def archive_action(entry: Dict[str, Any], ctx: StepCtx) -> Callable[[], ActionResult]:
    """Download a zip, unpack it in the scratch dir and run its installer."""

    def action() -> ActionResult:
        archive, fr = ctx.download(ctx.expand(entry["url"]), f"{_slug(entry['id'])}.zip")
        if not fr.ok:
            return ActionResult.failure(str(fr.error))
        dest = ctx.scratch / f"{_slug(entry['id'])}-unpacked"
        r = run_cmd(["unzip", "-q", "-o", str(archive), "-d", str(dest)], dry_run=ctx.dry_run)
        if not r.ok:
            return _fail(r)
        return _run_all(ctx, entry.get("install") or [], cwd=None if ctx.dry_run else str(dest))

    return action


def commands_action(entry: Dict[str, Any], ctx: StepCtx) -> Callable[[], ActionResult]:
    commands = entry.get("commands") or []
    warn_only = bool(entry.get("warn_only", False))

    def action() -> ActionResult:
        res = _run_all(ctx, commands)
        if not res.ok and warn_only:
            logger.warning("%s completed with some warnings", entry.get("description") or entry["id"])
            return ActionResult.success(res.detail)
        return res

    return action


ACTION_KINDS: Dict[str, Callable[[Dict[str, Any], StepCtx], Callable[[], ActionResult]]] = {
    "apt": apt_action,
    "apt_repo": apt_repo_action,
    "script": script_action,
    "binary": binary_action,
    "deb": deb_action,
    "archive": archive_action,
    "commands": commands_action,
}


def build_action(entry: Dict[str, Any], ctx: StepCtx) -> Action:
    body = ACTION_KINDS[entry["kind"]](entry, ctx)
    return _with_hooks(ctx, entry, body)
