from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..errors import ManifestError

DEFAULT_MANIFEST = "workstation.yaml"


def _manifests_dir() -> Path:
    # devsetup/lib/manifests.py -> devsetup/manifests
    return Path(__file__).resolve().parents[1] / "manifests"


def load_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"Manifest must be a mapping/dict: {path}")
    return data


def load_manifest(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the category manifest; defaults to the one shipped with the package."""

    p = Path(path) if path else _manifests_dir() / DEFAULT_MANIFEST
    if not p.exists():
        raise ManifestError(f"Manifest not found: {p}")
    data = load_yaml(p)
    if not isinstance(data.get("categories"), list) or not data["categories"]:
        raise ManifestError(f"{p}: 'categories' must be a non-empty list")
    return data
