from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from .command import CmdResult, run_cmd, sudo

logger = logging.getLogger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}
KEYRINGS_DIR = "/etc/apt/keyrings"
SOURCES_DIR = "/etc/apt/sources.list.d"


def apt_update(*, dry_run: bool = False) -> CmdResult:
    return run_cmd(sudo(["apt-get", "update", "-y"]), dry_run=dry_run)


def apt_install(packages: Sequence[str], *, dry_run: bool = False) -> CmdResult:
    if not packages:
        return CmdResult(argv=[], returncode=0, stdout="", stderr="")
    return run_cmd(
        sudo(["apt-get", "install", "-y", *packages], env=APT_ENV),
        dry_run=dry_run,
    )


def dpkg_install(deb_path: str, *, dry_run: bool = False) -> CmdResult:
    """Install a local .deb, letting apt resolve missing dependencies on failure."""

    r = run_cmd(sudo(["dpkg", "-i", deb_path]), dry_run=dry_run)
    if r.ok:
        return r
    logger.warning("dpkg -i %s failed; trying apt-get -f install", deb_path)
    return run_cmd(sudo(["apt-get", "-f", "install", "-y"], env=APT_ENV), dry_run=dry_run)


def install_keyring(key_path: str, name: str, *, dry_run: bool = False) -> CmdResult:
    """Dearmor a downloaded ASCII key into /etc/apt/keyrings/<name>.gpg."""

    run_cmd(sudo(["install", "-d", "-m", "0755", KEYRINGS_DIR]), dry_run=dry_run)
    return run_cmd(
        sudo(["gpg", "--batch", "--yes", "--dearmor", "-o", keyring_path(name), key_path]),
        dry_run=dry_run,
    )


def keyring_path(name: str) -> str:
    return str(Path(KEYRINGS_DIR) / f"{name}.gpg")


def write_sources_list(name: str, line: str, *, dry_run: bool = False) -> CmdResult:
    """Write a single-line apt source to /etc/apt/sources.list.d/<name>.list."""

    target = str(Path(SOURCES_DIR) / f"{name}.list")
    r = run_cmd(sudo(["tee", target]), input_text=line.rstrip("\n") + "\n", dry_run=dry_run)
    if r.ok:
        logger.info("Configured apt source %s: %s", target, line)
    return r


def dpkg_architecture() -> str:
    r = run_cmd(["dpkg", "--print-architecture"])
    return r.stdout.strip() if r.ok and r.stdout.strip() else "amd64"


def lsb_codename() -> str:
    r = run_cmd(["lsb_release", "-cs"])
    return r.stdout.strip() if r.ok and r.stdout.strip() else "stable"
