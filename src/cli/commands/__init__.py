"""CLI command modules.

Commands:
- apply: create objects from a manifest, or render them with --dry-run
- controldata: print pg_controldata from an instance pod
"""

from .controldata import controldata
from .objects import apply

__all__ = [
    "apply",
    "controldata",
]
