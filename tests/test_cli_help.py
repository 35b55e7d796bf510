"""Tests for CLI help text."""

from __future__ import annotations

import pytest

from artifact_search.cli import main


def _render_help(capsys: pytest.CaptureFixture[str]) -> str:
    """Run `artifact-search --help` via CLI entrypoint and return captured stdout."""
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    return capsys.readouterr().out


def test_help_includes_tagline(capsys: pytest.CaptureFixture[str]) -> None:
    out = _render_help(capsys)
    assert "artifact-search: Find the files an artifact upload would include" in out


def test_help_includes_common_usage(capsys: pytest.CaptureFixture[str]) -> None:
    out = _render_help(capsys)
    assert "Common usage:" in out
    assert "artifact-search 'dist/**/*.whl'" in out
    assert "Patterns starting\nwith '!' exclude files." in out
    assert "Commas are part of file names unless --split-commas is given." in out


def test_help_lists_policy_choices(capsys: pytest.CaptureFixture[str]) -> None:
    out = _render_help(capsys)
    assert "--if-no-files-found {warn,error,ignore}" in out
