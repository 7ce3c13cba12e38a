from __future__ import annotations

import getpass
import os
import platform
import string
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Dict

from ..config import Settings
from ..lib.net import FetchResult, fetch
from ..lib.pkg import dpkg_architecture, lsb_codename


class _Vars(dict):
    def __missing__(self, key: str) -> str:
        raise KeyError(f"Unknown placeholder {{{key}}}")


@dataclass
class StepCtx:
    """Everything an install action needs at run time."""

    settings: Settings
    scratch: Path

    @property
    def dry_run(self) -> bool:
        return self.settings.dry_run

    @cached_property
    def variables(self) -> Dict[str, str]:
        return {
            "arch": dpkg_architecture(),
            "codename": lsb_codename(),
            "uname_s": platform.system(),
            "uname_m": platform.machine(),
            "home": str(Path.home()),
            "user": os.environ.get("USER") or getpass.getuser(),
        }

    def expand(self, text: str, **extra: str) -> str:
        """Substitute {placeholders}; only the names actually used are resolved."""

        fields = {name for _, name, _, _ in string.Formatter().parse(text) if name}
        if not fields:
            return text
        values = _Vars(extra)
        for name in fields - set(extra):
            if name in self.variables:
                values[name] = self.variables[name]
        return text.format_map(values)

    def download(self, url: str, name: str) -> tuple[Path, FetchResult]:
        dest = self.scratch / name
        r = fetch(
            url,
            dest,
            max_attempts=self.settings.fetch_attempts,
            backoff_s=self.settings.fetch_backoff_s,
            timeout_s=self.settings.fetch_timeout_s,
            dry_run=self.dry_run,
        )
        return dest, r
