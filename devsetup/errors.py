from __future__ import annotations


class DevSetupError(Exception):
    """Base class for errors that abort a whole run."""


class PreflightError(DevSetupError):
    """A precondition checked before any step failed."""


class ManifestError(DevSetupError, ValueError):
    """The category/step manifest is malformed."""
