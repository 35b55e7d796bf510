#!/usr/bin/env python3
"""
artifact-search: Find the files an artifact upload would include, and their root directory

Common usage:
  artifact-search 'dist/**/*.whl'
  artifact-search 'build/reports' '!build/reports/**/*.tmp'
  artifact-search --json --split-commas 'logs/*.log, coverage.xml'
  artifact-search --root 'path/to/output'

Each PATH may hold several patterns separated by newlines. Patterns starting
with '!' exclude files. A literal directory includes every file below it.
Commas are part of file names unless --split-commas is given.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import json
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from artifact_search.config import (
    TOOL_NAME,
    ConfigError,
    find_config_file,
    load_config,
    merge_cli_with_config,
)
from artifact_search.file_resolver import (
    FilesystemAccessError,
    ResolverConfig,
    SearchError,
    SearchResult,
    find_files,
)

logger = logging.getLogger(__name__)


class NoFileOptions(str, Enum):
    """
    What to do when the patterns match no files.

    - `warn`: Log a warning and succeed (default).
    - `error`: Log an error and exit with a failure code.
    - `ignore`: Log at info level and succeed.
    """

    warn = "warn"
    error = "error"
    ignore = "ignore"


@dataclass
class Options:
    """Command-line options for the artifact-search tool."""

    paths: list[str]
    if_no_files_found: NoFileOptions
    include_hidden_files: bool
    follow_symlinks: bool
    split_commas: bool
    max_workers: int
    base_dir: Path | None
    json: bool
    root: bool
    verbose: int
    version: bool


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns a tuple of (options, explicit_flags) where `explicit_flags` tracks
    which flags the user explicitly passed (for config merge precedence).
    """
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog=TOOL_NAME,
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=str,
        default=[],
        metavar="PATH",
        help="Search patterns: files, directories or globs ('!' prefix to exclude)",
    )
    parser.add_argument(
        "--if-no-files-found",
        type=str,
        choices=[o.value for o in NoFileOptions],
        default=NoFileOptions.warn.value,
        help="What to do when no files match: 'warn' logs a warning, 'error' fails, "
        "'ignore' stays quiet (default: %(default)s)",
    )
    parser.add_argument(
        "--include-hidden-files",
        action="store_true",
        help="Include files and directories whose name starts with '.'",
    )
    parser.add_argument(
        "--no-follow-symlinks",
        action="store_true",
        dest="no_follow_symlinks",
        help="Do not descend into symbolic links to directories",
    )
    parser.add_argument(
        "--split-commas",
        action="store_true",
        dest="split_commas",
        help="Also split patterns on commas (then no file name may contain a comma)",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=4,
        metavar="N",
        help="Expand up to N patterns in parallel (1 = serial, default: %(default)s)",
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        default=None,
        metavar="DIR",
        help="Resolve relative patterns against DIR instead of the current directory",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--json",
        action="store_true",
        help="Print the root directory and files as a JSON object",
    )
    output.add_argument(
        "--root",
        action="store_true",
        help="Print only the root directory",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (repeat for debug output)",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    # Re-parse with sentinel defaults to detect which flags were actually supplied,
    # since comparing against defaults fails when the user passes the default.
    _SENTINEL = object()
    _tracked_flags: dict[str, str] = {
        # argparse dest name -> Options field name
        "if_no_files_found": "if_no_files_found",
        "include_hidden_files": "include_hidden_files",
        "no_follow_symlinks": "follow_symlinks",
        "split_commas": "split_commas",
        "max_workers": "max_workers",
    }
    sentinel_parser = argparse.ArgumentParser(add_help=False)
    sentinel_parser.add_argument("--if-no-files-found", default=_SENTINEL)
    sentinel_parser.add_argument("--include-hidden-files", action="store_true", default=_SENTINEL)
    sentinel_parser.add_argument(
        "--no-follow-symlinks", dest="no_follow_symlinks", action="store_true", default=_SENTINEL
    )
    sentinel_parser.add_argument(
        "--split-commas", dest="split_commas", action="store_true", default=_SENTINEL
    )
    sentinel_parser.add_argument("--max-workers", type=int, default=_SENTINEL)
    sentinel_opts, _ = sentinel_parser.parse_known_args(args if args is not None else sys.argv[1:])

    explicit_flags: set[str] = set()
    for dest_name, field_name in _tracked_flags.items():
        if getattr(sentinel_opts, dest_name, _SENTINEL) is not _SENTINEL:
            explicit_flags.add(field_name)

    return (
        Options(
            paths=opts.paths,
            if_no_files_found=NoFileOptions(opts.if_no_files_found),
            include_hidden_files=opts.include_hidden_files,
            follow_symlinks=not opts.no_follow_symlinks,
            split_commas=opts.split_commas,
            max_workers=opts.max_workers,
            base_dir=opts.base_dir,
            json=opts.json,
            root=opts.root,
            verbose=opts.verbose,
            version=opts.version,
        ),
        explicit_flags,
    )


def _configure_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level, format="%(levelname)s: %(message)s", stream=sys.stderr, force=True
    )


def _report_empty(options: Options, search_path: str) -> bool:
    """
    Apply the `--if-no-files-found` policy to an empty result.
    Returns `True` if the run should fail.
    """
    message = (
        f"No files were found with the provided path: {search_path}. "
        "No artifacts will be uploaded."
    )
    if options.if_no_files_found is NoFileOptions.error:
        logger.error(message)
        return True
    if options.if_no_files_found is NoFileOptions.warn:
        logger.warning(message)
    else:
        logger.info(message)
    return False


def _print_result(options: Options, result: SearchResult) -> None:
    if options.json:
        print(
            json.dumps(
                {
                    "root_directory": str(result.root_directory),
                    "files": [str(p) for p in result.files],
                },
                indent=2,
            )
        )
    elif options.root:
        print(result.root_directory)
    else:
        for path in result.files:
            print(path)


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the artifact-search CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for pattern errors or no files under
        `--if-no-files-found error`, 2 for filesystem errors)
    """
    options, explicit_flags = _parse_args(args)
    _configure_logging(options.verbose)

    if options.version:
        try:
            version = importlib.metadata.version(TOOL_NAME)
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    if not options.paths:
        print(
            "Error: No search path specified. Provide files, directories or glob patterns."
            " Use --help for more options.",
            file=sys.stderr,
        )
        return 1

    # Load and merge config file settings
    config_path = find_config_file(Path.cwd())
    if config_path:
        logger.debug("Using config file %s", config_path)
        try:
            config = load_config(config_path)
        except (ConfigError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        merge_cli_with_config(options, config, explicit_flags)
        options.if_no_files_found = NoFileOptions(options.if_no_files_found)

    search_path = "\n".join(options.paths)
    resolver_config = ResolverConfig(
        base_dir=options.base_dir,
        include_hidden_files=options.include_hidden_files,
        follow_symlinks=options.follow_symlinks,
        max_workers=options.max_workers,
    )

    try:
        result = find_files(search_path, resolver_config, split_commas=options.split_commas)
    except FilesystemAccessError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except (SearchError, ValueError) as e:
        # Pattern errors, missing literal files, bad option values.
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if result.is_empty:
        if _report_empty(options, search_path):
            return 1
    else:
        s = "" if len(result.files) == 1 else "s"
        logger.info(
            "With the provided path, there will be %d file%s uploaded", len(result.files), s
        )
        logger.debug("Root artifact directory is %s", result.root_directory)
        if result.is_degenerate_root:
            logger.warning(
                "Patterns share no common directory; files are relative to %s",
                result.root_directory,
            )

    _print_result(options, result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
