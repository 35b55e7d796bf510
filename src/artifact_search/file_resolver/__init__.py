"""
Self-contained file discovery: search-path parsing, glob expansion with
exclusions, and root directory inference.

No imports from `artifact_search` outside this package.

Usage::

    from artifact_search.file_resolver import find_files

    result = find_files("dist/**/*.whl\\n!dist/**/*-debug.whl")
    for path in result.files:
        print(path.relative_to(result.root_directory))
"""

from __future__ import annotations

import asyncio

from artifact_search.file_resolver.errors import (
    FilesystemAccessError,
    InvalidPatternError,
    NotAFileError,
    SearchError,
)
from artifact_search.file_resolver.patterns import parse
from artifact_search.file_resolver.resolver import FileResolver
from artifact_search.file_resolver.types import (
    Polarity,
    ResolvedFileSet,
    ResolverConfig,
    RootDirectory,
    SearchPattern,
    SearchResult,
)


def find_files(
    raw_spec: str, config: ResolverConfig | None = None, *, split_commas: bool = False
) -> SearchResult:
    """Parse a search-path specification and resolve it in one step."""
    return FileResolver(config).resolve(parse(raw_spec, split_commas=split_commas))


async def find_files_async(
    raw_spec: str, config: ResolverConfig | None = None, *, split_commas: bool = False
) -> SearchResult:
    """Like `find_files()`, but awaits the filesystem scan off the event loop."""
    return await asyncio.to_thread(find_files, raw_spec, config, split_commas=split_commas)


__all__ = [
    "FileResolver",
    "FilesystemAccessError",
    "InvalidPatternError",
    "NotAFileError",
    "Polarity",
    "ResolvedFileSet",
    "ResolverConfig",
    "RootDirectory",
    "SearchError",
    "SearchPattern",
    "SearchResult",
    "find_files",
    "find_files_async",
    "parse",
]
