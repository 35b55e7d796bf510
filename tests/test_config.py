"""Tests for config file loading and merging."""

from __future__ import annotations

from pathlib import Path

import pytest

from artifact_search.cli import NoFileOptions, Options
from artifact_search.config import (
    ConfigError,
    SearchConfig,
    find_config_file,
    load_config,
    merge_cli_with_config,
)


def _default_options() -> Options:
    return Options(
        paths=["dist/**"],
        if_no_files_found=NoFileOptions.warn,
        include_hidden_files=False,
        follow_symlinks=True,
        split_commas=False,
        max_workers=4,
        base_dir=None,
        json=False,
        root=False,
        verbose=0,
        version=False,
    )


def test_find_config_standalone_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "artifact-search.toml"
    config_file.write_text('if-no-files-found = "error"\n')
    assert find_config_file(tmp_path) == config_file


def test_find_config_dot_file_takes_precedence(tmp_path: Path) -> None:
    (tmp_path / "artifact-search.toml").write_text('if-no-files-found = "error"\n')
    dot_config = tmp_path / ".artifact-search.toml"
    dot_config.write_text('if-no-files-found = "ignore"\n')
    assert find_config_file(tmp_path) == dot_config


def test_find_config_pyproject_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text('[tool.artifact-search]\nif-no-files-found = "error"\n')
    assert find_config_file(tmp_path) == config_file


def test_find_config_pyproject_without_section_skipped(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.ruff]\nline-length = 100\n")
    assert find_config_file(tmp_path) is None


def test_find_config_pyproject_invalid_toml_skipped(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.artifact-search\n")
    assert find_config_file(tmp_path) is None


def test_find_config_walks_up(tmp_path: Path) -> None:
    config_file = tmp_path / "artifact-search.toml"
    config_file.write_text("max-workers = 2\n")
    subdir = tmp_path / "sub" / "deep"
    subdir.mkdir(parents=True)
    assert find_config_file(subdir) == config_file


def test_find_config_none_when_missing(tmp_path: Path) -> None:
    assert find_config_file(tmp_path) is None


def test_load_config_flat_keys(tmp_path: Path) -> None:
    config_file = tmp_path / "artifact-search.toml"
    config_file.write_text(
        'if-no-files-found = "error"\n'
        "include-hidden-files = true\n"
        "follow-symlinks = false\n"
        "split-commas = false\n"
        "max-workers = 2\n"
    )
    config = load_config(config_file)
    assert config == SearchConfig(
        if_no_files_found="error",
        include_hidden_files=True,
        follow_symlinks=False,
        split_commas=False,
        max_workers=2,
    )


def test_load_config_sectioned(tmp_path: Path) -> None:
    config_file = tmp_path / ".artifact-search.toml"
    config_file.write_text('[search]\nif-no-files-found = "ignore"\n')
    assert load_config(config_file).if_no_files_found == "ignore"


def test_load_config_from_pyproject(tmp_path: Path) -> None:
    config_file = tmp_path / "pyproject.toml"
    config_file.write_text(
        '[project]\nname = "demo"\n\n[tool.artifact-search]\ninclude-hidden-files = true\n'
    )
    config = load_config(config_file)
    assert config.include_hidden_files is True
    assert config.if_no_files_found is None


def test_load_config_ignores_unknown_keys(tmp_path: Path) -> None:
    config_file = tmp_path / "artifact-search.toml"
    config_file.write_text('retention-days = 5\nif-no-files-found = "warn"\n')
    assert load_config(config_file) == SearchConfig(if_no_files_found="warn")


def test_load_config_malformed_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "artifact-search.toml"
    config_file.write_text("[search\n")
    with pytest.raises(ConfigError, match="Invalid TOML in"):
        load_config(config_file)


@pytest.mark.parametrize(
    ("line", "key"),
    [
        ('max-workers = "2"', "max-workers"),
        ("max-workers = 0", "max-workers"),
        ("max-workers = true", "max-workers"),
        ('include-hidden-files = "yes"', "include-hidden-files"),
        ("follow-symlinks = 1", "follow-symlinks"),
        ('if-no-files-found = "explode"', "if-no-files-found"),
    ],
)
def test_load_config_rejects_mistyped_values(tmp_path: Path, line: str, key: str) -> None:
    config_file = tmp_path / "artifact-search.toml"
    config_file.write_text(line + "\n")
    with pytest.raises(ConfigError, match=f"'{key}' must be"):
        load_config(config_file)


def test_load_config_error_names_the_file(tmp_path: Path) -> None:
    config_file = tmp_path / ".artifact-search.toml"
    config_file.write_text("[search]\nsplit-commas = \"no\"\n")
    with pytest.raises(ConfigError) as exc_info:
        load_config(config_file)
    assert str(config_file) in str(exc_info.value)
    assert isinstance(exc_info.value, ValueError)


def test_merge_applies_config_values() -> None:
    options = _default_options()
    config = SearchConfig(if_no_files_found="error", include_hidden_files=True, max_workers=1)
    merge_cli_with_config(options, config, explicit_flags=set())
    assert options.if_no_files_found == "error"
    assert options.include_hidden_files is True
    assert options.max_workers == 1
    assert options.follow_symlinks is True


def test_merge_explicit_flags_win() -> None:
    options = _default_options()
    config = SearchConfig(if_no_files_found="error", follow_symlinks=False)
    merge_cli_with_config(options, config, explicit_flags={"if_no_files_found"})
    assert options.if_no_files_found is NoFileOptions.warn
    assert options.follow_symlinks is False


def test_merge_without_config_is_noop() -> None:
    options = _default_options()
    assert merge_cli_with_config(options, None, explicit_flags=set()) == _default_options()
