"""
TOML-based config file loading for artifact-search.

Searches for `.artifact-search.toml`, `artifact-search.toml`, or
`pyproject.toml [tool.artifact-search]` walking up from the current directory.
Keys may sit at the top level or under a `[search]` table. Config values are
merged with CLI flags using three-way precedence: explicit CLI flags > config
file > built-in defaults.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

TOOL_NAME = "artifact-search"

IF_NO_FILES_FOUND_CHOICES = ("warn", "error", "ignore")


class ConfigError(ValueError):
    """A config file is not valid TOML or holds a value of the wrong type."""


@dataclass
class SearchConfig:
    """
    Settings read from a config file. `None` means "not set", so the merge can
    tell an unset key from one explicitly set to the default.
    """

    if_no_files_found: str | None = None
    include_hidden_files: bool | None = None
    follow_symlinks: bool | None = None
    split_commas: bool | None = None
    max_workers: int | None = None


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def _is_policy(value: Any) -> bool:
    return value in IF_NO_FILES_FOUND_CHOICES


# snake_case field -> (check, description of what the check expects)
_FIELD_CHECKS: dict[str, tuple[Callable[[Any], bool], str]] = {
    "if_no_files_found": (_is_policy, "one of " + ", ".join(IF_NO_FILES_FOUND_CHOICES)),
    "include_hidden_files": (_is_bool, "true or false"),
    "follow_symlinks": (_is_bool, "true or false"),
    "split_commas": (_is_bool, "true or false"),
    "max_workers": (_is_positive_int, "a positive integer"),
}

_SECTION = "search"

# Per directory, the first of these that exists wins
_CONFIG_FILENAMES = [f".{TOOL_NAME}.toml", f"{TOOL_NAME}.toml", "pyproject.toml"]


def find_config_file(start_dir: Path) -> Path | None:
    """
    Return the nearest config file at or above `start_dir`, or `None`. A
    `pyproject.toml` only counts if it has a `[tool.artifact-search]` table.
    """
    for directory in [start_dir.resolve(), *start_dir.resolve().parents]:
        for filename in _CONFIG_FILENAMES:
            candidate = directory / filename
            if not candidate.is_file():
                continue
            if filename != "pyproject.toml" or _has_tool_table(candidate):
                return candidate
    return None


def _has_tool_table(pyproject: Path) -> bool:
    try:
        data = tomllib.loads(pyproject.read_text())
    except (tomllib.TOMLDecodeError, OSError):
        return False
    return TOOL_NAME in data.get("tool", {})


def load_config(config_path: Path) -> SearchConfig:
    """
    Read and validate a config file. Raises `ConfigError` if it is not valid
    TOML or a known key has a value of the wrong type.
    """
    try:
        data = tomllib.loads(config_path.read_text())
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get(TOOL_NAME, {})

    try:
        return _parse_config_data(data)
    except ConfigError as e:
        raise ConfigError(f"{config_path}: {e}") from e


def _parse_config_data(data: dict[str, Any]) -> SearchConfig:
    """Pick known keys from the top level and `[search]`, checking each value's type."""
    entries = {k: v for k, v in data.items() if k != _SECTION}
    section = data.get(_SECTION)
    if isinstance(section, dict):
        entries.update(cast(dict[str, Any], section))

    values: dict[str, Any] = {}
    for key, value in entries.items():
        name = key.replace("-", "_")
        if name not in _FIELD_CHECKS:
            continue  # Unknown keys are ignored
        check, expected = _FIELD_CHECKS[name]
        if not check(value):
            raise ConfigError(f"'{key}' must be {expected}, got {value!r}")
        values[name] = value

    return SearchConfig(**values)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: SearchConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Copy every config value that is set onto `cli_opts`, unless the matching
    flag was given explicitly on the command line.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(SearchConfig):
        value = getattr(config, cfg_field.name)
        if value is not None and cfg_field.name not in explicit_flags:
            if hasattr(cli_opts, cfg_field.name):
                setattr(cli_opts, cfg_field.name, value)

    return cli_opts
