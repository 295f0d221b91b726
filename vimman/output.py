"""Helpers for formatting vimman CLI output across terminals."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .utils import collapse_home


def _can_encode(text: str, encoding: str | None) -> bool:
    if not encoding:
        return False
    try:
        text.encode(encoding)
    except (LookupError, UnicodeEncodeError):
        return False
    return True


def supports_unicode_output(console: Console | None = None) -> bool:
    sample = "✓✗"
    if console is not None and _can_encode(sample, console.encoding):
        return True
    return _can_encode(sample, sys.stdout.encoding)


def status_marker(ok: bool, console: Console | None = None) -> str:
    if supports_unicode_output(console):
        return "[green]✓[/green]" if ok else "[red]✗[/red]"
    return "[green]OK[/green]" if ok else "[red]X[/red]"


def describe_root(
    root: Path,
    *,
    home: Path | str | None = None,
    console: Console | None = None,
) -> str:
    """Return a markup line marking whether *root* is a usable directory."""
    marker = status_marker(os.path.isdir(root), console)
    return f"{marker} {escape(collapse_home(root, home))}"
