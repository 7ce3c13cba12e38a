from __future__ import annotations

import logging
import os
import shutil
import subprocess

from ..errors import PreflightError
from .command import run_cmd
from .net import is_online

logger = logging.getLogger(__name__)

GIB = 1024 ** 3


def check_not_root() -> None:
    if os.geteuid() == 0:
        raise PreflightError(
            "This tool should not be run as root. Please run as a regular user with sudo privileges."
        )


def check_sudo() -> None:
    """Make sure sudo works, prompting for a password once if needed."""

    if run_cmd(["sudo", "-n", "true"]).ok:
        return
    logger.info("sudo privileges are required. Please enter your password when prompted.")
    # sudo -v needs the terminal for its password prompt, so output is not captured.
    if subprocess.call(["sudo", "-v"]) != 0:
        raise PreflightError("Unable to obtain sudo privileges")


def check_internet(host: str = "google.com") -> None:
    if not is_online(host):
        raise PreflightError("Internet connection required. Please check your network connection.")
    logger.info("Internet connectivity confirmed.")


def free_disk_gb(path: str = "/") -> float:
    return shutil.disk_usage(path).free / GIB


def check_disk_space(min_gb: float, path: str = "/") -> None:
    available = free_disk_gb(path)
    if available < min_gb:
        raise PreflightError(
            f"Insufficient disk space. Available: {available:.0f}GB, Required: {min_gb:g}GB"
        )
    logger.info("Disk space check passed. Available: %.0fGB", available)


def run_preflight(*, min_disk_gb: float, connectivity_host: str, dry_run: bool = False) -> None:
    """Run all pre-flight checks in order; the first failure raises PreflightError."""

    if dry_run:
        logger.info("Dry run: skipping privilege and network checks")
    else:
        check_not_root()
        check_sudo()
        check_internet(connectivity_host)
    check_disk_space(min_disk_gb)
