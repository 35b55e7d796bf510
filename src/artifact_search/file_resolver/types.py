"""Value types for file search: patterns, results and resolver configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Polarity(str, Enum):
    """Whether a pattern adds matches to the result or removes them."""

    include = "include"
    exclude = "exclude"


@dataclass(frozen=True)
class SearchPattern:
    """One normalized pattern string from the search-path specification."""

    text: str
    polarity: Polarity = Polarity.include

    @property
    def is_include(self) -> bool:
        return self.polarity is Polarity.include

    @property
    def is_exclude(self) -> bool:
        return self.polarity is Polarity.exclude


ResolvedFileSet = tuple[Path, ...]
"""Sorted, duplicate-free absolute paths of regular files."""

RootDirectory = Path
"""Absolute directory that is an ancestor of every resolved file."""


@dataclass(frozen=True)
class SearchResult:
    """
    The files to upload and the directory they are relative to.

    An empty `files` tuple is a valid outcome; what to do about it is up to
    the caller.
    """

    files: ResolvedFileSet
    root_directory: RootDirectory

    @property
    def is_empty(self) -> bool:
        return not self.files

    @property
    def is_degenerate_root(self) -> bool:
        """True when the patterns share no ancestor below the filesystem root."""
        return self.root_directory == Path(self.root_directory.anchor)

    def relative_paths(self) -> list[str]:
        """POSIX paths of each file relative to `root_directory`, in result order."""
        return [
            Path(os.path.relpath(path, self.root_directory)).as_posix() for path in self.files
        ]


@dataclass
class ResolverConfig:
    """
    Options for `FileResolver`.

    `base_dir=None` anchors relative patterns at the current directory at
    resolve time. `max_workers=1` expands patterns serially.
    """

    base_dir: Path | None = None
    include_hidden_files: bool = False
    follow_symlinks: bool = True
    max_workers: int = 4

    @property
    def effective_base_dir(self) -> Path:
        """Absolute directory that relative patterns are anchored at."""
        base = self.base_dir if self.base_dir is not None else Path.cwd()
        return Path(os.path.abspath(base))
