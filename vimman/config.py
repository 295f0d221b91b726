"""Global configuration management for vimman."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from contextlib import contextmanager
from contextvars import ContextVar
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Sequence

from .text import Messages

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".vimman"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "vimman_config_dir_override",
    default=None,
)
DEFAULT_ROOT = "~/.vim/doc"
DEFAULT_EXCLUDE_NAME = ".neobundle"
DEFAULT_EXTENSIONS: tuple[str, ...] = ("txt", "jax")
DEFAULT_EXPIRE_DAYS = 7
DEFAULT_VERBOSE = False
CANONICAL_EDITOR = "vim"
CACHE_KEY = "vimman"
ENV_EDITOR = "EDITOR"


@dataclass
class Config:
    dirs: list[str] = field(default_factory=list)
    verbose: bool = DEFAULT_VERBOSE
    expire: int = DEFAULT_EXPIRE_DAYS


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


def config_file_path() -> Path:
    """Return the config file currently in effect."""
    return _resolve_config_file()


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def load_config() -> Config:
    config_file = _resolve_config_file()
    if not config_file.exists():
        return Config()
    raw = json.loads(config_file.read_text(encoding="utf-8"))
    if not isinstance(raw, Mapping):
        return Config()
    return Config(
        dirs=_coerce_dirs_lenient(raw.get("dir")),
        verbose=_coerce_bool_lenient(raw.get("verbose")),
        expire=resolve_expire_days(raw.get("expire")),
    )


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    data["dir"] = list(config.dirs)
    data["verbose"] = bool(config.verbose)
    data["expire"] = resolve_expire_days(config.expire)
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def add_dirs(values: Sequence[str]) -> list[str]:
    """Append plugin directories, returning the ones that were new."""
    config = load_config()
    added: list[str] = []
    for value in values:
        cleaned = value.strip()
        if not cleaned or cleaned in config.dirs:
            continue
        config.dirs.append(cleaned)
        added.append(cleaned)
    save_config(config)
    return added


def remove_dirs(values: Sequence[str]) -> list[str]:
    """Remove plugin directories, returning the ones that were configured."""
    config = load_config()
    removed: list[str] = []
    for value in values:
        cleaned = value.strip()
        if cleaned in config.dirs:
            config.dirs.remove(cleaned)
            removed.append(cleaned)
    save_config(config)
    return removed


def clear_dirs() -> None:
    config = load_config()
    config.dirs = []
    save_config(config)


def set_verbose(value: bool) -> None:
    config = load_config()
    config.verbose = bool(value)
    save_config(config)


def set_expire(value: int) -> None:
    config = load_config()
    config.expire = resolve_expire_days(value)
    save_config(config)


def resolve_expire_days(value: object) -> int:
    """Return *value* as a positive day count, falling back to the default."""

    if value is None or isinstance(value, bool):
        return DEFAULT_EXPIRE_DAYS
    if isinstance(value, float):
        if not value.is_integer():
            return DEFAULT_EXPIRE_DAYS
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return DEFAULT_EXPIRE_DAYS
    if not isinstance(value, int) or value <= 0:
        return DEFAULT_EXPIRE_DAYS
    return value


def _coerce_dirs(value: object, field: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    dirs: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
        cleaned = item.strip()
        if cleaned and cleaned not in dirs:
            dirs.append(cleaned)
    return dirs


def _coerce_dirs_lenient(value: object) -> list[str]:
    try:
        return _coerce_dirs(value, "dir")
    except ValueError:
        return []


def _coerce_bool(value: object, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned in {"true", "1", "yes", "on"}:
            return True
        if cleaned in {"false", "0", "no", "off"}:
            return False
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_bool_lenient(value: object) -> bool:
    if value is None:
        return DEFAULT_VERBOSE
    try:
        return _coerce_bool(value, "verbose")
    except ValueError:
        return DEFAULT_VERBOSE
