"""
Command-line entry point for wildfind.

Turns command-line flags and the settings file into a SearchConfig, runs the
walker and prints every discovered file followed by a summary.
"""

import argparse
import logging
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, TextIO

from pydantic import ValidationError

from .config.parser import ConfigurationError, create_config_template, load_config
from .models.config import MIN_SPLIT_ENTRIES, SearchConfig
from .models.search_results import DiscoveredFile, SearchResult
from .tools.fs_walker import SearchError, find_files


logger = logging.getLogger(__name__)

# Short flags that take their value in brackets, e.g. --i[target,.git]
BRACKET_FLAGS = ('--i', '--a', '--c')


class ConsolePrinter:
    """
    Writes search progress to a text stream.

    Match callbacks may arrive from several worker threads; a lock keeps the
    two lines of each match together.
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self._lock = threading.Lock()

    def print_header(self, search: str, config: SearchConfig) -> None:
        self.stream.write(f"Searching for {search}...\n")
        if not config.ignore.is_empty():
            self.stream.write(f"Ignoring {sorted(config.ignore.names)}\n")

    def print_file(self, discovered: DiscoveredFile) -> None:
        with self._lock:
            self.stream.write(f"{discovered}\n")

    def print_summary(self, result: SearchResult, elapsed: float) -> None:
        self.stream.write(f"{result}\n")
        self.stream.write(f"Completed in {elapsed:.2f}s\n")


def _min_split_type(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value} is not a valid value for the --c flag")
    if number < MIN_SPLIT_ENTRIES:
        raise argparse.ArgumentTypeError(
            f"The value for --c: {value} is too small. The minimum value is {MIN_SPLIT_ENTRIES}."
        )
    return number


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value} is not a valid number")
    if number < 1:
        raise argparse.ArgumentTypeError(f"{value} must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser for the ``wildfind`` command.
    """
    parser = argparse.ArgumentParser(
        prog="wildfind",
        description="Recursively search a directory tree for file names matching a wildcard pattern",
        allow_abbrev=False,
    )
    parser.add_argument(
        "search",
        nargs="?",
        help="File name to search for; a leading and/or trailing * is a wildcard",
    )
    parser.add_argument(
        "-d",
        "--directory",
        default=".",
        help="Directory to search (default: current directory)",
    )
    parser.add_argument(
        "--ignore",
        "--i",
        action="append",
        default=[],
        dest="ignore",
        help="Comma-separated directory names not to descend into (can be repeated)",
    )
    parser.add_argument(
        "--root-ignore",
        "--ri",
        action="store_true",
        dest="root_ignore",
        help="Apply the ignore list in the search directory only",
    )
    parser.add_argument(
        "--allow",
        "--a",
        action="append",
        default=[],
        dest="allow",
        help="Comma-separated directory names to descend into exclusively (can be repeated)",
    )
    parser.add_argument(
        "--root-allow",
        "--ra",
        action="store_true",
        dest="root_allow",
        help="Apply the allow list in the search directory only",
    )
    parser.add_argument(
        "--disable-concurrency",
        "--dc",
        action="store_true",
        dest="disable_concurrency",
        help="Walk the tree on a single thread",
    )
    parser.add_argument(
        "--min-split",
        "--c",
        type=_min_split_type,
        default=None,
        dest="min_split",
        help="Minimum entries in a directory before it is split across workers (at least 2)",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Maximum number of concurrent worker threads",
    )
    parser.add_argument(
        "--config",
        default=None,
        dest="config_path",
        help="Settings file (default: search for .wildfind.yaml)",
    )
    parser.add_argument(
        "--init-config",
        default=None,
        metavar="PATH",
        help="Write a settings template to PATH and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug details to stderr",
    )
    return parser


def expand_bracket_flags(argv: List[str]) -> List[str]:
    """Rewrite ``--i[a,b]`` style arguments into ``--i a,b``.

    Args:
        argv: Command-line arguments without the program name.

    Returns:
        list[str]: Arguments argparse can parse.
    """
    expanded = []
    for arg in argv:
        flag, bracket, rest = arg.partition('[')
        if bracket and flag in BRACKET_FLAGS and rest.endswith(']'):
            expanded.extend([flag, rest[:-1]])
        else:
            expanded.append(arg)
    return expanded


def _split_names(values: List[str]) -> List[str]:
    names = []
    for value in values:
        names.extend(value.strip('[]').split(','))
    return names


def build_search_config(args: argparse.Namespace) -> SearchConfig:
    """Combine the settings file with command-line flags.

    Args:
        args: Parsed CLI namespace.

    Returns:
        SearchConfig: Configuration for the run.

    Raises:
        ConfigurationError: If the settings file is invalid.
        ValidationError: If a combined value is invalid.
    """
    parse_result = load_config(args.config_path)
    for warning in parse_result.warnings:
        if parse_result.is_default:
            logger.debug(warning)
        else:
            logger.warning(warning)

    settings = parse_result.config
    overrides = {
        'ignore': settings.ignore.merged_with(_split_names(args.ignore), args.root_ignore),
        'allow': settings.allow.merged_with(_split_names(args.allow), args.root_allow),
    }
    if args.disable_concurrency:
        overrides['concurrency_enabled'] = False
    if args.min_split is not None:
        overrides['min_entries_for_split'] = args.min_split
    if args.workers is not None:
        overrides['max_workers'] = args.workers

    return settings.to_search_config(args.search, **overrides)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run(argv: Optional[List[str]] = None, stdout: Optional[TextIO] = None) -> int:
    """Run wildfind with the given arguments.

    Args:
        argv: Command-line arguments without the program name. If ``None``,
            uses the process arguments.
        stdout: Stream for search output (default: ``sys.stdout``).

    Returns:
        int: Process exit code.
    """
    stdout = stdout if stdout is not None else sys.stdout
    parser = build_parser()
    args = parser.parse_args(expand_bracket_flags(sys.argv[1:] if argv is None else argv))
    _configure_logging(args.verbose)

    if args.init_config:
        try:
            create_config_template(args.init_config)
        except ConfigurationError as exc:
            sys.stderr.write(f"wildfind: {exc}\n")
            return 1
        stdout.write(f"Configuration template written to {Path(args.init_config)}\n")
        return 0

    if not args.search:
        parser.error("the following arguments are required: search")

    try:
        config = build_search_config(args)
    except ConfigurationError as exc:
        sys.stderr.write(f"wildfind: {exc}\n")
        return 1
    except ValidationError as exc:
        sys.stderr.write(f"wildfind: invalid option value: {exc}\n")
        return 1

    printer = ConsolePrinter(stdout)
    started = time.perf_counter()
    printer.print_header(args.search, config)
    logger.debug(f"Search configuration: {config}")

    try:
        result = find_files(args.directory, config, on_match=printer.print_file)
    except SearchError as exc:
        sys.stderr.write(f"wildfind: {exc}\n")
        return 1

    printer.print_summary(result, time.perf_counter() - started)
    return 0


def main() -> None:
    """Run the CLI entry point with process arguments."""
    sys.exit(run())
