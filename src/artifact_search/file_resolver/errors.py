"""
Errors raised during pattern parsing and file resolution.

Every error derives from `SearchError`. `retryable` separates caller-input
mistakes (fix the patterns) from I/O conditions that may clear on a later run.
An empty match is never an error: it is a `SearchResult` with no files.
"""

from __future__ import annotations

from pathlib import Path


class SearchError(Exception):
    """Base class for all file search failures."""

    retryable: bool = False


class InvalidPatternError(SearchError, ValueError):
    """The search-path specification is malformed or has no inclusion patterns."""


class NotAFileError(SearchError):
    """A literal inclusion target is missing or is not a regular file or directory."""

    def __init__(self, path: Path, reason: str = "not a regular file") -> None:
        self.path: Path = path
        self.reason: str = reason
        super().__init__(f"{reason}: {path}")


class FilesystemAccessError(SearchError):
    """An I/O failure (permissions, broken symlink, ...) while expanding a pattern."""

    retryable = True

    def __init__(self, path: Path, reason: str) -> None:
        self.path: Path = path
        self.reason: str = reason
        super().__init__(f"Cannot access {path}: {reason}")
