"""Logic helpers for locating Vim plugin help files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Sequence

from ..config import DEFAULT_EXCLUDE_NAME, DEFAULT_EXTENSIONS, DEFAULT_ROOT
from ..index import DocEntry, DocIndex
from ..utils import expand_path, file_extension, normalize_extensions

DOC_DIR_NAME = "doc"


def resolve_roots(
    configured: Sequence[Path | str] | None,
    *,
    default_root: Path | str = DEFAULT_ROOT,
) -> tuple[Path, ...]:
    """Return configured roots followed by *default_root*, without duplicates."""

    roots: list[Path] = []
    seen: set[Path] = set()
    for raw in [*(configured or ()), default_root]:
        root = expand_path(raw)
        if root in seen:
            continue
        seen.add(root)
        roots.append(root)
    return tuple(roots)


def _iter_doc_dirs(root: Path, exclude_name: str) -> Iterable[tuple[Path, list[str]]]:
    # Yields each ``doc`` directory with its immediate file names. A directory
    # that is its own ancestor through a symlink is a loop and is skipped.
    ancestors: dict[str, frozenset[tuple[int, int]]] = {}
    for dirpath, dirnames, filenames in os.walk(root, topdown=True, followlinks=True):
        try:
            stat = os.stat(dirpath)
        except OSError:
            dirnames[:] = []
            continue
        identity = (stat.st_dev, stat.st_ino)
        parent_chain = ancestors.get(os.path.dirname(dirpath), frozenset())
        if identity in parent_chain:
            dirnames[:] = []
            continue
        ancestors[dirpath] = parent_chain | {identity}
        dirnames[:] = sorted(d for d in dirnames if d != exclude_name)
        current = Path(dirpath)
        if current.name == DOC_DIR_NAME:
            yield current, sorted(filenames)


def scan(
    roots: Sequence[Path | str],
    *,
    exclude_name: str = DEFAULT_EXCLUDE_NAME,
    extensions: Iterable[str] | None = DEFAULT_EXTENSIONS,
) -> list[DocEntry]:
    """Collect help files from every ``doc`` directory beneath *roots*.

    Missing roots are skipped. Subtrees named *exclude_name* are pruned
    and unreadable subtrees contribute nothing; neither stops the scan.
    """

    allowed = normalize_extensions(extensions)
    entries: list[DocEntry] = []
    for raw_root in roots:
        root = Path(raw_root)
        if not os.path.isdir(root):
            continue
        if root.name == exclude_name:
            continue
        for doc_dir, filenames in _iter_doc_dirs(root, exclude_name):
            for filename in filenames:
                if file_extension(filename) not in allowed:
                    continue
                entries.append(DocEntry(name=filename, directory=doc_dir))
    return entries


def build_index(
    roots: Sequence[Path | str],
    *,
    exclude_name: str = DEFAULT_EXCLUDE_NAME,
    extensions: Iterable[str] | None = DEFAULT_EXTENSIONS,
) -> DocIndex:
    """Scan *roots* and wrap the result in a fresh :class:`DocIndex`."""

    return DocIndex(
        entries=tuple(scan(roots, exclude_name=exclude_name, extensions=extensions))
    )
