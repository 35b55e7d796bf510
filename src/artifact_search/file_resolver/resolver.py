"""
FileResolver: main entry point for file discovery.

Expands inclusion patterns into a deduplicated, sorted list of concrete file
paths, removes everything an exclusion pattern matches, and infers the root
directory the files should be stored relative to.
"""

from __future__ import annotations

import logging
import os
import stat
import threading
from collections.abc import Iterable, Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path

import pathspec

from artifact_search.file_resolver.errors import (
    FilesystemAccessError,
    InvalidPatternError,
    NotAFileError,
)
from artifact_search.file_resolver.patterns import has_glob_chars
from artifact_search.file_resolver.types import ResolverConfig, SearchPattern, SearchResult

logger = logging.getLogger(__name__)


def _normalize(path: str | Path) -> Path:
    """Absolute form with `.` and `..` collapsed. Symlinks are left alone."""
    return Path(os.path.normpath(os.path.abspath(path)))


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _stat(path: Path) -> os.stat_result | None:
    """
    `os.stat()` that returns `None` for a missing path and raises
    `FilesystemAccessError` for anything else that goes wrong, including
    symlinks whose target is gone.
    """
    try:
        return os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        if os.path.islink(path):
            raise FilesystemAccessError(path, "broken symbolic link") from None
        return None
    except OSError as e:
        raise FilesystemAccessError(path, e.strerror or str(e)) from e


@dataclass(frozen=True, eq=False)
class _CompiledPattern:
    """
    A pattern split at its literal prefix. `base` is the absolute path formed
    by the leading segments without glob characters; `glob` is the rest and
    `spec` its compiled form, matched relative to `base`. Both are `None` when
    the whole pattern is literal.
    """

    source: SearchPattern
    base: Path
    glob: str | None
    spec: pathspec.PathSpec | None

    @property
    def is_literal(self) -> bool:
        return self.spec is None

    def matches(self, path: Path) -> bool:
        """Check a normalized absolute path. Literal directories match everything below them."""
        if path == self.base:
            return self.spec is None
        try:
            rel = path.relative_to(self.base)
        except ValueError:
            return False
        if self.spec is None:
            return True
        return self.spec.match_file(rel.as_posix())

    def covers_dir(self, path: Path) -> bool:
        """Check whether everything below the directory `path` matches."""
        if self.spec is None or path != self.base:
            # A wildmatch hit on a directory extends to all of its descendants.
            return self.matches(path)
        return self.glob == "**"


def _compile_pattern(pattern: SearchPattern, base_dir: Path) -> _CompiledPattern:
    """Anchor a pattern at `base_dir` (if relative) and split it at its literal prefix."""
    text = pattern.text if os.sep == "/" else pattern.text.replace(os.sep, "/")
    path = Path(text)
    if not path.is_absolute():
        path = base_dir / path

    parts = path.parts
    for i, part in enumerate(parts):
        if has_glob_chars(part):
            remainder = "/".join(parts[i:])
            # Anchored wildmatch: `*` and `?` stay in one segment, `**` spans
            # segments, and a matched directory implies everything below it.
            spec = pathspec.PathSpec.from_lines("gitignore", ["/" + remainder])
            return _CompiledPattern(pattern, _normalize(Path(*parts[:i])), remainder, spec)
    return _CompiledPattern(pattern, _normalize(path), None, None)


@dataclass(frozen=True)
class _Expansion:
    """Files found for one inclusion pattern and the literal prefix it contributes to the root."""

    prefix: Path
    files: list[Path]


class FileResolver:
    """
    Resolves parsed search patterns against the filesystem.

    Holds no state between calls: each `resolve()` is a point-in-time snapshot
    of the filesystem for the given patterns.
    """

    def __init__(self, config: ResolverConfig | None = None) -> None:
        self._config: ResolverConfig = config if config is not None else ResolverConfig()
        if self._config.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1: {self._config.max_workers}")

    def resolve(self, patterns: Sequence[SearchPattern]) -> SearchResult:
        """
        Expand inclusion patterns, drop anything an exclusion pattern matches,
        and compute the root directory from the inclusion patterns' literal
        prefixes.

        A literal path naming a directory includes every file below it.
        Raises `InvalidPatternError` if there are no inclusion patterns,
        `NotAFileError` if a literal inclusion target is missing or not a
        regular file or directory, and `FilesystemAccessError` on I/O
        failures during expansion. No matches is not an error.
        """
        base_dir = self._config.effective_base_dir
        compiled = [_compile_pattern(p, base_dir) for p in patterns]
        includes = [c for c in compiled if c.source.is_include]
        excludes = [c for c in compiled if c.source.is_exclude]
        if not includes:
            raise InvalidPatternError("No inclusion patterns to resolve")

        expansions = self._expand_all(includes, excludes)

        candidates: set[Path] = set()
        for expansion in expansions:
            candidates.update(expansion.files)
        files = sorted(path for path in candidates if not any(e.matches(path) for e in excludes))
        if len(files) < len(candidates):
            logger.debug("Exclusion patterns removed %d file(s)", len(candidates) - len(files))

        root = Path(os.path.commonpath([str(e.prefix) for e in expansions]))
        logger.debug("Root directory is %s", root)
        return SearchResult(files=tuple(files), root_directory=root)

    def _expand_all(
        self, includes: list[_CompiledPattern], excludes: list[_CompiledPattern]
    ) -> list[_Expansion]:
        """
        Expand every inclusion pattern, in parallel when configured. The first
        failure cancels the remaining expansions and is re-raised.
        """
        cancelled = threading.Event()
        workers = min(self._config.max_workers, len(includes))
        if workers <= 1:
            return [self._expand(c, excludes, cancelled) for c in includes]

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="artifact-search") as pool:
            futures = [pool.submit(self._expand, c, excludes, cancelled) for c in includes]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [f for f in futures if f in done and f.exception() is not None]
            if failed:
                cancelled.set()
                for future in pending:
                    future.cancel()
                raise failed[0].exception()  # pyright: ignore[reportGeneralTypeIssues]
            return [f.result() for f in futures]

    def _expand(
        self,
        pattern: _CompiledPattern,
        excludes: list[_CompiledPattern],
        cancelled: threading.Event,
    ) -> _Expansion:
        base = pattern.base
        if pattern.is_literal:
            st = _stat(base)
            if st is None:
                raise NotAFileError(base, "no such file or directory")
            if stat.S_ISREG(st.st_mode):
                logger.debug("Pattern %r is the file %s", pattern.source.text, base)
                return _Expansion(prefix=base.parent, files=[base])
            if not stat.S_ISDIR(st.st_mode):
                raise NotAFileError(base)
            files = list(self._walk_files(pattern, excludes, cancelled))
        else:
            st = _stat(base)
            if st is None or not stat.S_ISDIR(st.st_mode):
                logger.debug("Pattern %r: %s is not a directory", pattern.source.text, base)
                return _Expansion(prefix=base, files=[])
            files = list(self._walk_files(pattern, excludes, cancelled))

        logger.debug(
            "Pattern %r matched %d file(s) under %s", pattern.source.text, len(files), base
        )
        return _Expansion(prefix=base, files=files)

    def _walk_files(
        self,
        pattern: _CompiledPattern,
        excludes: list[_CompiledPattern],
        cancelled: threading.Event,
    ) -> Iterable[Path]:
        """
        Walk the pattern's literal prefix with `os.walk()` and yield the regular
        files it matches. Directories an exclusion covers are pruned in-place,
        as are hidden entries unless configured otherwise. Only files that
        match and are not excluded get a `stat()`, so unrelated broken links
        never fail the walk. Directory symlinks are followed only if
        `follow_symlinks` is set, and never back into a directory already on
        the current path.
        """
        root = pattern.base
        include_hidden = self._config.include_hidden_files
        follow = self._config.follow_symlinks
        # Real paths of each pending directory's ancestors, for cycle detection.
        ancestors: dict[str, frozenset[str]] = {}

        if any(e.covers_dir(root) for e in excludes):
            logger.debug("Pattern %r: %s is excluded", pattern.source.text, root)
            return

        def on_error(error: OSError) -> None:
            failed = Path(error.filename) if error.filename else root
            raise FilesystemAccessError(failed, error.strerror or str(error)) from error

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error, followlinks=follow):
            if cancelled.is_set():
                return
            current = Path(dirpath)

            dirnames[:] = [
                d
                for d in dirnames
                if (include_hidden or not _is_hidden(d))
                and not any(e.covers_dir(current / d) for e in excludes)
            ]
            if follow:
                chain = ancestors.pop(dirpath, frozenset()) | {os.path.realpath(dirpath)}
                kept: list[str] = []
                for d in dirnames:
                    child = os.path.join(dirpath, d)
                    if os.path.realpath(child) in chain:
                        logger.debug("Not descending into %s: symlink cycle", child)
                        continue
                    ancestors[child] = chain
                    kept.append(d)
                dirnames[:] = kept
            dirnames.sort()

            for filename in sorted(filenames):
                if not include_hidden and _is_hidden(filename):
                    continue
                path = current / filename
                if not pattern.matches(path) or any(e.matches(path) for e in excludes):
                    continue
                st = _stat(path)
                if st is not None and stat.S_ISREG(st.st_mode):
                    yield path
