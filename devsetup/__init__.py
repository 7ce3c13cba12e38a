"""Development workstation provisioner (idempotent, category-driven).

Core design goals:
- Idempotent steps: anything already present is skipped
- One failing step never aborts its siblings
- Bounded, fixed-backoff retries for downloads
- Data-driven step table (YAML manifest)
- Centralized logging to a single run log
"""

__all__ = []
