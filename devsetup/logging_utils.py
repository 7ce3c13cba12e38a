from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .config import default_log_path

SUCCESS_MARK = "success"

_COLORS = {
    logging.DEBUG: "\033[0;37m",
    logging.INFO: "\033[0;34m",
    logging.WARNING: "\033[1;33m",
    logging.ERROR: "\033[0;31m",
    logging.CRITICAL: "\033[0;31m",
}
_GREEN = "\033[0;32m"
_RESET = "\033[0m"


class ColorFormatter(logging.Formatter):
    """Console formatter colouring whole lines by level (success lines green)."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = _GREEN if getattr(record, SUCCESS_MARK, False) else _COLORS.get(record.levelno, "")
        return f"{color}{text}{_RESET}" if color else text


def log_success(logger: logging.Logger, msg: str, *args) -> None:
    logger.info(msg, *args, extra={SUCCESS_MARK: True})


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Every component logs to one append-only run log. The file handler
    records DEBUG so command output lands in the log, while the console
    shows ``level`` and above.

    If the requested path is not writable we fall back to a file in the
    working directory and return that path instead.
    """

    log_path = log_path or default_log_path()
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_devsetup_configured", False):
        return getattr(logger, "_devsetup_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
    except OSError:
        chosen_path = str(Path.cwd() / Path(log_path).name)
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    file_handler.setLevel(logging.DEBUG)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console_fmt = "[%(asctime)s] %(levelname)s: %(message)s"
        if sys.stderr.isatty():
            console.setFormatter(ColorFormatter(fmt=console_fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        else:
            console.setFormatter(logging.Formatter(fmt=console_fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        console.setLevel(level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_devsetup_configured", True)
    setattr(logger, "_devsetup_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
