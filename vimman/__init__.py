"""vimman package initialization."""

from __future__ import annotations

from .index import DocEntry, DocIndex
from .services.cache_service import CacheState, CompletionCache
from .services.editor_service import (
    NoMatchError,
    UsageError,
    plan_invocation,
    select_editor,
)
from .services.scan_service import build_index, resolve_roots, scan

__all__ = [
    "__version__",
    "CacheState",
    "CompletionCache",
    "DocEntry",
    "DocIndex",
    "NoMatchError",
    "UsageError",
    "build_index",
    "get_version",
    "plan_invocation",
    "resolve_roots",
    "scan",
    "select_editor",
]

__version__ = "0.1.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
