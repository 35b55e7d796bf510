"""
artifact-search: discover the files matching a search-path specification and
the root directory they should be stored relative to.
"""

from artifact_search.file_resolver import (
    FileResolver,
    FilesystemAccessError,
    InvalidPatternError,
    NotAFileError,
    ResolverConfig,
    SearchError,
    SearchPattern,
    SearchResult,
    find_files,
    find_files_async,
    parse,
)

__all__ = [
    "FileResolver",
    "FilesystemAccessError",
    "InvalidPatternError",
    "NotAFileError",
    "ResolverConfig",
    "SearchError",
    "SearchPattern",
    "SearchResult",
    "find_files",
    "find_files_async",
    "parse",
]
