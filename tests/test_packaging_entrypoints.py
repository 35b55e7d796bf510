"""Packaging entrypoint tests."""

from __future__ import annotations

import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


def _pyproject() -> dict:
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    return tomllib.loads(pyproject.read_text(encoding="utf-8"))


def test_cli_entrypoint() -> None:
    scripts = _pyproject()["project"]["scripts"]
    assert scripts["artifact-search"] == "artifact_search.cli:main"


def test_runtime_dependencies_declared() -> None:
    deps = _pyproject()["project"]["dependencies"]
    assert any(d.startswith("pathspec") for d in deps)
