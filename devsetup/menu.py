from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from .config import Configuration
from .pipeline import Category

logger = logging.getLogger(__name__)

BANNER = "=" * 52


class SetupCancelled(Exception):
    """The user chose Exit in the menu."""


def render_menu(config: Configuration, categories: Sequence[Category], *, title: str, log_path: str) -> str:
    n = len(categories)
    lines = [
        "",
        BANNER,
        f"  {title}",
        BANNER,
        "Select installation categories:",
    ]
    for i, c in enumerate(categories, start=1):
        state = "true" if config.is_enabled(c.name) else "false"
        lines.append(f"{i}) {c.title} [{state}]")
    lines.append(f"{n + 1}) Start Installation")
    lines.append(f"{n + 2}) Exit")
    lines.append("")
    lines.append(f"Current log file: {log_path}")
    return "\n".join(lines)


def interactive_setup(
    config: Configuration,
    categories: Sequence[Category],
    *,
    title: str,
    log_path: str,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> Configuration:
    """Toggle categories until the user starts the run.

    Returns the final configuration; raises SetupCancelled on Exit.
    """

    n = len(categories)
    while True:
        output_fn(render_menu(config, categories, title=title, log_path=log_path))
        try:
            choice = input_fn(f"Enter your choice (1-{n + 2}): ").strip()
        except EOFError:
            logger.info("No more input; setup cancelled")
            raise SetupCancelled() from None
        # int() only accepts decimal digits ("²" is a digit but not decimal).
        idx: Optional[int] = int(choice) if choice.isdecimal() else None

        if idx is not None and 1 <= idx <= n:
            config = config.with_toggled(categories[idx - 1].name)
        elif idx == n + 1:
            return config
        elif idx == n + 2:
            logger.info("Setup cancelled by user")
            raise SetupCancelled()
        else:
            output_fn("Invalid option. Please try again.")
