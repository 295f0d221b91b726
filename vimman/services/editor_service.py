"""Logic helpers for opening help topics and help files in Vim."""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Mapping, Sequence

from ..config import (
    CANONICAL_EDITOR,
    DEFAULT_EXCLUDE_NAME,
    DEFAULT_EXTENSIONS,
    ENV_EDITOR,
)
from ..text import Messages
from .scan_service import build_index

EDITOR_NOT_FOUND_EXIT = 127
EDITOR_NOT_EXECUTABLE_EXIT = 126


class InvocationError(ValueError):
    """Raised when an invocation cannot be turned into an editor command."""


class UsageError(InvocationError):
    """Raised when required arguments are missing."""


class NoMatchError(InvocationError):
    """Raised when edit mode finds no help file with the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(Messages.ERROR_NO_MANUAL_ENTRY.format(name=name))
        self.name = name


class InvocationMode(str, Enum):
    HELP = "help"
    EDIT = "edit"


@dataclass(frozen=True, slots=True)
class EditorInvocation:
    mode: InvocationMode
    target: str
    command: tuple[str, ...]
    paths: tuple[Path, ...] = field(default=())


def select_editor(preferred: str | None, canonical_default: str = CANONICAL_EDITOR) -> str:
    """Return *preferred* if it names a flavour of *canonical_default*."""

    if preferred and canonical_default.lower() in preferred.lower():
        return preferred
    return canonical_default


def resolve_editor_command(environ: Mapping[str, str] | None = None) -> tuple[str, ...]:
    """Return the Vim command to launch as a tokenized sequence."""

    env = os.environ if environ is None else environ
    editor = select_editor(env.get(ENV_EDITOR))
    tokens = tuple(shlex.split(editor))
    return tokens or (CANONICAL_EDITOR,)


def build_help_command(editor_command: Sequence[str], topic: str) -> tuple[str, ...]:
    return (*editor_command, "-c", f":help {topic} | only")


def plan_invocation(
    target: str | None,
    *,
    edit: bool,
    editor_command: Sequence[str],
    roots: Sequence[Path | str],
    exclude_name: str = DEFAULT_EXCLUDE_NAME,
    extensions: Iterable[str] | None = DEFAULT_EXTENSIONS,
) -> EditorInvocation:
    """Turn the user's request into the editor command to run.

    Edit mode scans *roots* on every call; the completion cache is never
    consulted here.
    """

    if not edit:
        if not target:
            raise UsageError(Messages.ERROR_NOT_ENOUGH_ARGUMENTS)
        return EditorInvocation(
            mode=InvocationMode.HELP,
            target=target,
            command=build_help_command(editor_command, target),
        )

    if not target:
        raise UsageError(Messages.ERROR_NOT_ENOUGH_ARGUMENTS_EDIT)
    index = build_index(roots, exclude_name=exclude_name, extensions=extensions)
    paths = tuple(index.lookup_exact(target))
    if not paths:
        raise NoMatchError(target)
    return EditorInvocation(
        mode=InvocationMode.EDIT,
        target=target,
        command=(*editor_command, *(str(path) for path in paths)),
        paths=paths,
    )


def _run_command(command: Sequence[str]) -> int:
    completed = subprocess.run(list(command), check=False)
    return int(completed.returncode)


def launch_editor(
    invocation: EditorInvocation,
    *,
    runner: Callable[[Sequence[str]], int] | None = None,
) -> int:
    """Run the editor and wait for it to exit.

    Once the editor has started the invocation counts as a success; its own
    exit status is not inspected. A missing editor binary returns 127 and
    any other failure to start it returns 126.
    """

    run = runner or _run_command
    try:
        run(invocation.command)
    except FileNotFoundError:
        return EDITOR_NOT_FOUND_EXIT
    except OSError:
        return EDITOR_NOT_EXECUTABLE_EXIT
    return 0
