"""
Parsing of search-path specifications into `SearchPattern`s.

A specification is newline-delimited text (optionally also split on commas) such as::

    dist/**/*.whl
    reports/coverage.xml
    !dist/**/*-debug.whl

Pure string processing: no filesystem access happens here.
"""

from __future__ import annotations

import os
import re

from artifact_search.file_resolver.errors import InvalidPatternError
from artifact_search.file_resolver.types import Polarity, SearchPattern

# Characters that indicate a path segment is a glob pattern rather than a literal name.
GLOB_CHARS = frozenset("*?[")

NEGATION_MARKER = "!"
COMMENT_MARKER = "#"

_LINE_SPLIT = re.compile(r"\r?\n|\r")
_LINE_AND_COMMA_SPLIT = re.compile(r"\r?\n|\r|,")


def has_glob_chars(text: str) -> bool:
    return any(c in text for c in GLOB_CHARS)


def parse(raw_spec: str, *, split_commas: bool = False) -> list[SearchPattern]:
    """
    Split a raw search-path specification into patterns, in input order.

    With `split_commas`, commas separate entries too. Entries are trimmed
    and empty entries dropped. Entries starting with `#`
    are comments. A leading `!` marks an exclusion. Raises
    `InvalidPatternError` if an entry is malformed or no inclusion pattern
    remains.
    """
    splitter = _LINE_AND_COMMA_SPLIT if split_commas else _LINE_SPLIT
    patterns: list[SearchPattern] = []

    for entry in splitter.split(raw_spec):
        entry = entry.strip()
        if not entry or entry.startswith(COMMENT_MARKER):
            continue
        patterns.append(_parse_entry(entry))

    if not any(p.is_include for p in patterns):
        if patterns:
            raise InvalidPatternError(
                f"Search path has only exclusion patterns, nothing to include: {raw_spec!r}"
            )
        raise InvalidPatternError(f"Search path has no patterns: {raw_spec!r}")
    return patterns


def _parse_entry(entry: str) -> SearchPattern:
    """Classify one trimmed, non-empty entry."""
    if "\0" in entry:
        raise InvalidPatternError(f"Pattern contains a NUL character: {entry!r}")

    polarity = Polarity.include
    text = entry
    if text.startswith(NEGATION_MARKER):
        polarity = Polarity.exclude
        text = text[len(NEGATION_MARKER) :].strip()
        if not text:
            raise InvalidPatternError(f"Exclusion marker without a pattern: {entry!r}")

    if text.startswith("~"):
        text = os.path.expanduser(text)

    return SearchPattern(text=text, polarity=polarity)
