"""Utility helpers for filesystem access and path handling."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable
import os


def expand_path(path: Path | str) -> Path:
    """Expand ``~`` and make *path* absolute without touching the filesystem."""
    return Path(os.path.abspath(os.path.expanduser(str(path))))


def normalize_extensions(values: Iterable[str] | None) -> frozenset[str]:
    """Return extensions without their leading dot; matching stays case-sensitive."""

    if not values:
        return frozenset()

    normalized: set[str] = set()
    for raw in values:
        if raw is None:
            continue
        token = raw.strip().lstrip(".")
        if token:
            normalized.add(token)
    return frozenset(normalized)


def file_extension(name: str) -> str:
    """Return the text after the last dot of *name*, or an empty string."""
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return ""
    return ext


def collapse_home(path: Path | str, home: Path | str | None = None) -> str:
    """Return *path* with a leading home directory replaced by ``~``."""
    text = str(path)
    home_text = str(home if home is not None else Path.home()).rstrip("/")
    if home_text and (text == home_text or text.startswith(f"{home_text}/")):
        text = f"~{text[len(home_text):]}"
    if len(text) > 1:
        text = text.rstrip("/")
    return text
