"""Command line interface for vimman."""

from __future__ import annotations

import shlex
import sqlite3
import subprocess
import sys
from pathlib import Path
from typing import Iterable, Sequence

import click
import typer
from click.shell_completion import CompletionItem
from rich.console import Console
from rich.markup import escape
from typer.core import TyperGroup

from . import __version__, config as config_module
from .cache import SqliteCacheStore
from .config import (
    DEFAULT_EXCLUDE_NAME,
    DEFAULT_EXTENSIONS,
    Config,
    load_config,
)
from .index import DocIndex
from .output import describe_root
from .services.cache_service import CompletionCache
from .services.editor_service import (
    InvocationMode,
    NoMatchError,
    UsageError,
    launch_editor,
    plan_invocation,
    resolve_editor_command,
)
from .services.scan_service import build_index, resolve_roots
from .text import Messages, Styles
from .utils import collapse_home

DEFAULT_COMMAND = "open"
EDIT_FLAGS = ("-e", "--edit")

console = Console()


def _normalize_edit_args(args: list[str], reserved: Iterable[str] = ()) -> list[str]:
    # `vimman -e NAME` is shorthand for `vimman open -e NAME`; any other
    # dash-prefixed first token that is not a group option is a help topic.
    if not args:
        return []
    first = args[0]
    if first in EDIT_FLAGS:
        return [DEFAULT_COMMAND, *args]
    if first.startswith("-") and first != "--" and first.split("=", 1)[0] not in reserved:
        return [DEFAULT_COMMAND, *args[1:], "--", first]
    return list(args)


class DefaultOpenGroup(TyperGroup):
    """Treat unknown subcommands as help topics."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        reserved = {
            opt
            for param in self.get_params(ctx)
            for opt in (*param.opts, *param.secondary_opts)
        }
        return super().parse_args(ctx, _normalize_edit_args(args, reserved))

    def resolve_command(
        self,
        ctx: click.Context,
        args: list[str],
    ) -> tuple[str | None, click.Command | None, list[str]]:
        original_args = list(args)
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError:
            if not original_args:
                raise
            token = original_args[0]
            if token.startswith("-"):
                raise
            command = self.get_command(ctx, DEFAULT_COMMAND)
            if command is None:
                raise
            return DEFAULT_COMMAND, command, original_args

    def shell_complete(self, ctx: click.Context, incomplete: str) -> list[CompletionItem]:
        items = super().shell_complete(ctx, incomplete)
        if incomplete.startswith("-"):
            return items
        items.extend(
            CompletionItem(value, help=detail or None)
            for value, detail in _complete_doc_names(incomplete)
        )
        return items


app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    cls=DefaultOpenGroup,
)


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def _print_plain(text: str) -> None:
    console.print(escape(text), highlight=False, emoji=False, soft_wrap=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"vimman v{__version__}")
        raise typer.Exit()


def _parse_boolean(value: str) -> bool:
    token = value.strip().lower()
    if token in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if token in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(Messages.ERROR_BOOLEAN_INVALID.format(value=value))


def _scan_index(config: Config) -> DocIndex:
    return build_index(
        resolve_roots(config.dirs),
        exclude_name=DEFAULT_EXCLUDE_NAME,
        extensions=DEFAULT_EXTENSIONS,
    )


def _completion_cache(config: Config) -> CompletionCache:
    return CompletionCache(SqliteCacheStore(), expire_days=config.expire)


def _complete_doc_names(incomplete: str) -> list[tuple[str, str]]:
    """Return ``(name, description)`` completion candidates starting with *incomplete*."""
    try:
        config = load_config()
        lookup = _completion_cache(config).get_or_build(lambda: _scan_index(config))
    except (OSError, ValueError, sqlite3.Error):
        return []
    suffix = Messages.INFO_COMPLETION_UPDATED if lookup.rebuilt else ""
    candidates: list[tuple[str, str]] = []
    for entry in lookup.index:
        if not entry.name.startswith(incomplete):
            continue
        detail = collapse_home(entry.directory) if config.verbose else ""
        candidates.append((entry.name, f"{detail}{suffix}".strip()))
    return candidates


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Global Typer callback for shared options."""
    if ctx.invoked_subcommand is None:
        console.print(_styled(Messages.ERROR_NOT_ENOUGH_ARGUMENTS, Styles.ERROR))
        raise typer.Exit(code=1)


@app.command(DEFAULT_COMMAND, help=Messages.HELP_OPEN)
def open_doc(
    target: str | None = typer.Argument(
        None,
        help=Messages.HELP_TARGET,
        autocompletion=_complete_doc_names,
        show_default=False,
    ),
    edit: bool = typer.Option(
        False,
        "--edit",
        "-e",
        help=Messages.HELP_EDIT,
    ),
) -> None:
    config = load_config()
    editor_command = resolve_editor_command()
    try:
        invocation = plan_invocation(
            target,
            edit=edit,
            editor_command=editor_command,
            roots=resolve_roots(config.dirs),
            exclude_name=DEFAULT_EXCLUDE_NAME,
            extensions=DEFAULT_EXTENSIONS,
        )
    except UsageError as exc:
        console.print(_styled(escape(str(exc)), Styles.ERROR))
        raise typer.Exit(code=1)
    except NoMatchError as exc:
        _print_plain(str(exc))
        raise typer.Exit(code=1)

    if invocation.mode is InvocationMode.HELP:
        _print_plain(Messages.INFO_HELP_COMMAND.format(topic=invocation.target))
    else:
        for path in invocation.paths:
            _print_plain(collapse_home(path))

    code = launch_editor(invocation)
    if code != 0:
        console.print(
            _styled(
                escape(Messages.ERROR_EDITOR_LAUNCH.format(editor=_format_command(editor_command))),
                Styles.ERROR,
            )
        )
    raise typer.Exit(code=code)


@app.command("list", help=Messages.HELP_LIST)
def list_docs(
    verbose: bool | None = typer.Option(
        None,
        "--verbose/--no-verbose",
        help=Messages.HELP_LIST_VERBOSE,
        show_default=False,
    ),
    refresh: bool = typer.Option(
        False,
        "--refresh",
        help=Messages.HELP_LIST_REFRESH,
    ),
) -> None:
    config = load_config()
    show_verbose = config.verbose if verbose is None else verbose
    lookup = _completion_cache(config).get_or_build(
        lambda: _scan_index(config),
        force=refresh,
    )
    labels = lookup.index.list_labels(show_verbose)
    if not labels:
        console.print(_styled(Messages.INFO_NO_HELP_FILES, Styles.WARNING))
        raise typer.Exit(code=0)
    for label in labels:
        _print_plain(label)


@app.command("cache", help=Messages.HELP_CACHE)
def cache(
    show: bool = typer.Option(False, "--show", help=Messages.HELP_CACHE_SHOW),
    clear: bool = typer.Option(False, "--clear", help=Messages.HELP_CACHE_CLEAR),
    rebuild: bool = typer.Option(False, "--rebuild", help=Messages.HELP_CACHE_REBUILD),
) -> None:
    if sum(1 for flag in (show, clear, rebuild) if flag) > 1:
        raise typer.BadParameter(Messages.ERROR_CACHE_OPTIONS_CONFLICT)
    config = load_config()
    completion_cache = _completion_cache(config)

    if clear:
        if completion_cache.clear():
            console.print(_styled(Messages.INFO_CACHE_CLEARED, Styles.SUCCESS))
        else:
            console.print(_styled(Messages.INFO_CACHE_CLEAR_NONE, Styles.INFO))
        return

    if rebuild:
        lookup = completion_cache.get_or_build(lambda: _scan_index(config), force=True)
        console.print(
            _styled(Messages.INFO_CACHE_REBUILT.format(count=len(lookup.index)), Styles.SUCCESS)
        )
        return

    record = completion_cache.load()
    state = completion_cache.state_of(record)
    generated = "-"
    count = 0
    if record is not None:
        generated = record.generated_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        count = len(record.index)
    console.print(
        _styled(
            escape(
                Messages.INFO_CACHE_SUMMARY.format(
                    state=state.value,
                    generated=generated,
                    count=count,
                    expire=completion_cache.expire_days,
                    path=SqliteCacheStore().db_path,
                )
            ),
            Styles.INFO,
        ),
        soft_wrap=True,
    )


@app.command(help=Messages.HELP_CONFIG)
def config(
    add_dir: list[str] | None = typer.Option(
        None,
        "--add-dir",
        help=Messages.HELP_ADD_DIR,
    ),
    remove_dir: list[str] | None = typer.Option(
        None,
        "--remove-dir",
        help=Messages.HELP_REMOVE_DIR,
    ),
    clear_dirs: bool = typer.Option(
        False,
        "--clear-dirs",
        help=Messages.HELP_CLEAR_DIRS,
    ),
    set_verbose_option: str | None = typer.Option(
        None,
        "--set-verbose",
        help=Messages.HELP_SET_VERBOSE,
    ),
    set_expire_option: int | None = typer.Option(
        None,
        "--set-expire",
        help=Messages.HELP_SET_EXPIRE,
    ),
    show: bool = typer.Option(
        False,
        "--show",
        help=Messages.HELP_SHOW_CONFIG,
    ),
    edit: bool = typer.Option(
        False,
        "--edit",
        help=Messages.HELP_EDIT_CONFIG,
    ),
) -> None:
    """Manage vimman configuration stored in ~/.vimman/config.json."""
    if set_expire_option is not None and set_expire_option <= 0:
        raise typer.BadParameter(Messages.ERROR_EXPIRE_INVALID)
    verbose_value: bool | None = None
    if set_verbose_option is not None:
        try:
            verbose_value = _parse_boolean(set_verbose_option)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc

    changed = False
    dirs_changed = False
    if clear_dirs:
        config_module.clear_dirs()
        console.print(_styled(Messages.INFO_DIRS_CLEARED, Styles.SUCCESS))
        changed = dirs_changed = True
    if remove_dir:
        removed = config_module.remove_dirs(remove_dir)
        for value in remove_dir:
            message = (
                Messages.INFO_DIR_REMOVED
                if value.strip() in removed
                else Messages.INFO_DIR_NOT_CONFIGURED
            )
            console.print(_styled(escape(message.format(path=value.strip())), Styles.SUCCESS))
        changed = True
        dirs_changed = dirs_changed or bool(removed)
    if add_dir:
        added = config_module.add_dirs(add_dir)
        for value in added:
            console.print(
                _styled(escape(Messages.INFO_DIR_ADDED.format(path=value)), Styles.SUCCESS)
            )
        changed = True
        dirs_changed = dirs_changed or bool(added)
    if verbose_value is not None:
        config_module.set_verbose(verbose_value)
        state = "enabled" if verbose_value else "disabled"
        console.print(_styled(Messages.INFO_VERBOSE_SET.format(value=state), Styles.SUCCESS))
        changed = True
    if set_expire_option is not None:
        config_module.set_expire(set_expire_option)
        console.print(
            _styled(Messages.INFO_EXPIRE_SET.format(value=set_expire_option), Styles.SUCCESS)
        )
        changed = True

    if dirs_changed and _completion_cache(load_config()).clear():
        console.print(_styled(Messages.INFO_CACHE_INVALIDATED, Styles.INFO))

    if edit:
        _edit_config_file()
        return
    if show or not changed:
        _show_config()


def _show_config() -> None:
    cfg = load_config()
    console.print(
        _styled(
            escape(
                Messages.INFO_CONFIG_SUMMARY.format(
                    verbose="yes" if cfg.verbose else "no",
                    expire=cfg.expire,
                    path=config_module.config_file_path(),
                )
            ),
            Styles.INFO,
        ),
        soft_wrap=True,
    )
    console.print(Messages.INFO_CONFIG_ROOTS)
    for root in resolve_roots(cfg.dirs):
        console.print(f"  {describe_root(root, console=console)}", soft_wrap=True)


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    args = list(argv) if argv is not None else sys.argv[1:]
    if argv is None:
        app()
    else:
        app(args=args)


def _format_command(parts: Sequence[str]) -> str:
    return " ".join(shlex.quote(part) for part in parts)


def _ensure_config_file() -> Path:
    config_path = config_module.config_file_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    if not config_path.exists():
        config_module.save_config(Config())
    return config_path


def _edit_config_file() -> None:
    cmd_list = list(resolve_editor_command())
    config_path = _ensure_config_file()
    console.print(
        _styled(
            escape(
                Messages.INFO_CONFIG_EDITING.format(
                    path=config_path,
                    editor=_format_command(cmd_list),
                )
            ),
            Styles.INFO,
        )
    )
    try:
        subprocess.run(cmd_list + [str(config_path)], check=True)
    except FileNotFoundError as exc:
        console.print(
            _styled(
                escape(Messages.ERROR_CONFIG_EDITOR_LAUNCH.format(reason=str(exc))),
                Styles.ERROR,
            )
        )
        raise typer.Exit(code=1)
    except subprocess.CalledProcessError as exc:
        code = exc.returncode if exc.returncode is not None else 1
        console.print(
            _styled(
                Messages.ERROR_CONFIG_EDITOR_FAILED.format(code=code),
                Styles.ERROR,
            )
        )
        raise typer.Exit(code=code)
