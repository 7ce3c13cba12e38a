from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple


def default_log_path() -> str:
    return time.strftime("/tmp/devsetup-%Y%m%d_%H%M%S.log")


@dataclass(frozen=True)
class Configuration:
    """Which categories are enabled for one run.

    Built once before the run and never mutated; the ``with_*`` helpers
    return new values.
    """

    flags: Tuple[Tuple[str, bool], ...]

    @classmethod
    def defaults(cls, names: Iterable[str]) -> "Configuration":
        return cls(flags=tuple((n, True) for n in names))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(n for n, _ in self.flags)

    def as_dict(self) -> Dict[str, bool]:
        return dict(self.flags)

    def is_enabled(self, name: str) -> bool:
        return self.as_dict().get(name, False)

    def _check(self, names: Iterable[str]) -> list[str]:
        names = list(names)
        unknown = [n for n in names if n not in self.names]
        if unknown:
            raise KeyError(f"Unknown categories: {', '.join(unknown)}")
        return names

    def with_toggled(self, name: str) -> "Configuration":
        self._check([name])
        return Configuration(flags=tuple((n, (not v) if n == name else v) for n, v in self.flags))

    def only(self, names: Iterable[str]) -> "Configuration":
        keep = set(self._check(names))
        return Configuration(flags=tuple((n, n in keep) for n, _ in self.flags))

    def without(self, names: Iterable[str]) -> "Configuration":
        drop = set(self._check(names))
        return Configuration(flags=tuple((n, v and n not in drop) for n, v in self.flags))


@dataclass(frozen=True)
class Settings:
    log_path: str = field(default_factory=default_log_path)
    manifest_path: Optional[str] = None
    report_path: Optional[str] = None
    scratch_root: Optional[str] = None
    min_disk_gb: float = 5.0
    fetch_attempts: int = 3
    fetch_backoff_s: float = 2.0
    fetch_timeout_s: float = 30.0
    connectivity_host: str = "google.com"
    dry_run: bool = False
