from __future__ import annotations

import logging
import shutil
import signal
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


def _raise_exit(signum, frame) -> None:
    raise SystemExit(128 + signum)


@contextmanager
def scratch_dir(root: Optional[str] = None, *, prefix: str = "devsetup-") -> Iterator[Path]:
    """Process-scoped scratch directory for downloaded artifacts.

    Removed on normal exit, exceptions, Ctrl-C and SIGTERM (converted to
    SystemExit while the directory is alive).
    """

    path = Path(tempfile.mkdtemp(prefix=prefix, dir=root))
    logger.debug("Created scratch dir %s", path)
    previous = signal.signal(signal.SIGTERM, _raise_exit)
    try:
        yield path
    finally:
        signal.signal(signal.SIGTERM, previous)
        logger.info("Cleaning up temporary files...")
        shutil.rmtree(path, ignore_errors=True)
