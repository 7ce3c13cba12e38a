from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests

from .command import run_cmd

logger = logging.getLogger(__name__)

USER_AGENT = "devsetup/1.0"
DEFAULT_ATTEMPTS = 3
DEFAULT_BACKOFF_S = 2.0
DEFAULT_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class FetchError:
    url: str
    attempts: int
    reason: str = ""

    def __str__(self) -> str:
        msg = f"Failed to download {self.url} after {self.attempts} attempts"
        return f"{msg}: {self.reason}" if self.reason else msg


@dataclass(frozen=True)
class FetchResult:
    ok: bool
    attempts: int
    error: Optional[FetchError] = None


def is_online(host: str = "google.com", *, dry_run: bool = False) -> bool:
    """Best-effort online check."""

    r = run_cmd(["ping", "-c", "1", "-W", "2", host], dry_run=dry_run)
    return r.returncode == 0


def _download_once(url: str, part: Path, timeout_s: float) -> None:
    with requests.get(url, stream=True, timeout=timeout_s, headers={"User-Agent": USER_AGENT}) as r:
        r.raise_for_status()
        with open(part, "wb") as f:
            for chunk in r.iter_content(chunk_size=65536):
                if chunk:
                    f.write(chunk)


def fetch(
    url: str,
    destination: str | Path,
    *,
    max_attempts: int = DEFAULT_ATTEMPTS,
    backoff_s: float = DEFAULT_BACKOFF_S,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    dry_run: bool = False,
) -> FetchResult:
    """Download url to destination, retrying with a fixed backoff.

    Data lands in ``<destination>.part`` and is renamed into place only once
    the transfer completed; failed attempts remove the partial file.
    """

    dest = Path(destination)
    if dry_run:
        logger.info("Would download %s -> %s", url, dest)
        return FetchResult(ok=True, attempts=0)

    dest.parent.mkdir(parents=True, exist_ok=True)
    part = dest.with_name(dest.name + ".part")
    reason = ""

    for attempt in range(1, max_attempts + 1):
        try:
            logger.info("Downloading %s (attempt %d/%d)", url, attempt, max_attempts)
            _download_once(url, part, timeout_s)
            os.replace(part, dest)
            return FetchResult(ok=True, attempts=attempt)
        except (requests.RequestException, OSError) as e:
            reason = str(e)
            part.unlink(missing_ok=True)
            logger.warning("Download failed (attempt %d/%d): %s", attempt, max_attempts, reason)
            if attempt < max_attempts:
                time.sleep(backoff_s)

    err = FetchError(url=url, attempts=max_attempts, reason=reason)
    logger.error("%s", err)
    return FetchResult(ok=False, attempts=max_attempts, error=err)
