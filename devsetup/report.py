from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from .pipeline import Summary

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def summary_to_dict(summary: Summary) -> Dict[str, Any]:
    return {
        "total_steps": summary.total_steps,
        "succeeded": summary.succeeded,
        "skipped": summary.skipped,
        "failed": summary.failed,
        "duration_s": round(summary.duration_s, 3),
        "log_path": summary.log_path,
        "results": [
            {
                "category": r.category,
                "step": r.identifier,
                "outcome": r.outcome.value,
                "detail": r.detail,
            }
            for r in summary.results
        ],
        "notes": list(summary.notes),
        "refreshed": summary.refreshed,
    }


def save_report(path: str, summary: Summary) -> None:
    """Write the run summary as JSON or YAML, picked by file extension."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    data = summary_to_dict(summary)

    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    logger.info("Run report written to %s", p)
