from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..errors import ManifestError
from ..lib.probe import PROBE_COMMAND, PROBE_KINDS, PROBE_PACKAGE
from ..pipeline import Action, Category, InstallStep
from .actions import ACTION_KINDS, build_action
from .context import StepCtx

logger = logging.getLogger(__name__)


def _normalize(raw: Any, category: str) -> Dict[str, Any]:
    # A bare string is shorthand for a single apt package.
    if isinstance(raw, str):
        raw = {"id": raw, "kind": "apt"}
    if not isinstance(raw, dict):
        raise ManifestError(f"{category}: step must be a string or mapping, got {type(raw).__name__}")
    entry = dict(raw)
    if not entry.get("id"):
        raise ManifestError(f"{category}: step is missing 'id'")
    entry.setdefault("kind", "apt")
    if entry["kind"] not in ACTION_KINDS:
        raise ManifestError(f"{category}/{entry['id']}: unknown step kind {entry['kind']!r}")
    default_probe = PROBE_PACKAGE if entry["kind"] == "apt" else PROBE_COMMAND
    entry.setdefault("probe", default_probe)
    if entry["probe"] not in PROBE_KINDS:
        raise ManifestError(f"{category}/{entry['id']}: unknown probe {entry['probe']!r}")
    return entry


def build_step(raw: Any, ctx: StepCtx, *, category: str = "") -> InstallStep:
    entry = _normalize(raw, category)
    return InstallStep(
        identifier=str(entry["id"]),
        description=str(entry.get("description") or entry["id"]),
        action=build_action(entry, ctx),
        probe=entry["probe"],
        notes=tuple(str(n) for n in entry.get("notes") or []),
    )


def category_names(manifest: Dict[str, Any]) -> List[str]:
    """Category names in declared order; rejects unnamed or duplicate categories."""

    names: List[str] = []
    for raw in manifest.get("categories") or []:
        if not isinstance(raw, dict) or not raw.get("name"):
            raise ManifestError("Each category needs a 'name'")
        name = str(raw["name"])
        if name in names:
            raise ManifestError(f"Duplicate category {name!r}")
        names.append(name)
    return names


def build_categories(manifest: Dict[str, Any], ctx: StepCtx) -> List[Category]:
    """Turn the manifest's ordered category list into Category objects."""

    categories: List[Category] = []
    for name, raw in zip(category_names(manifest), manifest.get("categories") or []):
        steps = [build_step(s, ctx, category=name) for s in raw.get("steps") or []]
        categories.append(Category(name=name, title=str(raw.get("title") or name), steps=steps))
    logger.debug("Built %d categories", len(categories))
    return categories


def build_refresh(manifest: Dict[str, Any], ctx: StepCtx) -> Optional[Action]:
    """The manifest's top-level ``refresh`` commands as one action, or None."""

    commands = manifest.get("refresh")
    if not commands:
        return None
    if not isinstance(commands, list) or not all(isinstance(c, list) for c in commands):
        raise ManifestError("'refresh' must be a list of commands")
    return build_action(
        {"id": "refresh", "kind": "commands", "description": "Package metadata refresh", "commands": commands},
        ctx,
    )
