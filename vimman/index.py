"""In-memory index of discovered Vim help files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Mapping, Sequence

from .utils import collapse_home, file_extension


@dataclass(frozen=True, slots=True)
class DocEntry:
    """One help file found inside a ``doc`` directory."""

    name: str
    directory: Path

    @property
    def extension(self) -> str:
        return file_extension(self.name)

    @property
    def path(self) -> Path:
        return self.directory / self.name

    def label(self, verbose: bool = False, home: Path | str | None = None) -> str:
        """Return the completion label, ``name`` or ``name:~/dir``."""
        if not verbose:
            return self.name
        return f"{self.name}:{collapse_home(self.directory, home)}"


@dataclass(frozen=True, slots=True)
class DocIndex:
    """All help files gathered by one scan, in scan order.

    Entries sharing a name are all kept; the index is rebuilt from a full
    scan and never patched.
    """

    entries: tuple[DocEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[DocEntry]:
        return iter(self.entries)

    def lookup_exact(self, name: str) -> list[Path]:
        return [entry.path for entry in self.entries if entry.name == name]

    def list_labels(self, verbose: bool = False, home: Path | str | None = None) -> list[str]:
        return [entry.label(verbose, home) for entry in self.entries]

    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def to_payload(self) -> list[dict[str, str]]:
        return [
            {"name": entry.name, "directory": str(entry.directory)}
            for entry in self.entries
        ]

    @classmethod
    def from_payload(cls, payload: Sequence[Mapping[str, object]]) -> "DocIndex":
        entries: list[DocEntry] = []
        for item in payload:
            name = item.get("name")
            directory = item.get("directory")
            if not isinstance(name, str) or not isinstance(directory, str):
                raise ValueError("Malformed help file entry in cache payload")
            entries.append(DocEntry(name=name, directory=Path(directory)))
        return cls(entries=tuple(entries))
