from .actions import ACTION_KINDS, build_action
from .builder import build_categories, build_refresh, build_step, category_names
from .context import StepCtx

__all__ = [
    "ACTION_KINDS",
    "StepCtx",
    "build_action",
    "build_categories",
    "build_refresh",
    "build_step",
    "category_names",
]
