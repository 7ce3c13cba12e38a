from __future__ import annotations

import logging
import os
import shutil
import subprocess

logger = logging.getLogger(__name__)

PROBE_COMMAND = "command"
PROBE_PACKAGE = "package"
PROBE_NONE = "none"

PROBE_KINDS = (PROBE_COMMAND, PROBE_PACKAGE, PROBE_NONE)


def command_exists(name: str) -> bool:
    # Accepts a bare name (PATH lookup) or a path such as ~/.cargo/bin/rustc.
    return shutil.which(os.path.expanduser(name)) is not None


def package_installed(packages: str) -> bool:
    """Return True if every (space separated) package is installed per dpkg."""

    names = packages.split()
    if not names:
        return False
    try:
        p = subprocess.run(
            ["dpkg-query", "-W", "-f=${Status}\n", *names],
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError:
        return False
    if p.returncode != 0:
        return False
    statuses = [ln.strip() for ln in p.stdout.splitlines() if ln.strip()]
    return len(statuses) == len(names) and all(s.endswith("install ok installed") for s in statuses)


def is_present(identifier: str, kind: str = PROBE_COMMAND) -> bool:
    """Report whether a tool is already on the system.

    Absence is a normal result; this never raises for a missing tool.
    """

    if kind == PROBE_NONE:
        return False
    if kind == PROBE_PACKAGE:
        present = package_installed(identifier)
    else:
        present = command_exists(identifier)
    logger.debug("probe %s(%s) -> %s", kind, identifier, present)
    return present
