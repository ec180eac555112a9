from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from smartcopy.config import AppConfig, load_config
from smartcopy.errors import InvalidArgumentsError, SmartCopyError
from smartcopy.ignore_engine import build_ignore_engine
from smartcopy.log_setup import configure_logging
from smartcopy.models import CopyStats, SyncOptions
from smartcopy.report import render_summary
from smartcopy.run_service import run_copy


VERSION = "1.2.1"

EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_INVALID_ARGUMENTS = 2
EXIT_INVALID_CONFIG = 3

EXAMPLES = """\
examples:
  smartcopy source dest              # basic copy
  smartcopy -d source dest           # copy and detect extra files
  smartcopy -D source dest           # copy and delete extra files
  smartcopy src1 src2 dest           # copy both sources into dest/
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smartcopy",
        description="Copy files and directories, skipping entries that are already up to date",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("paths", nargs="+", metavar="PATH", help="one or more sources followed by the destination")
    parser.add_argument(
        "-d",
        "--detect-extra",
        action="store_true",
        help="detect extra files in destination not present in source",
    )
    parser.add_argument(
        "-D",
        "--delete-extra",
        action="store_true",
        help="detect and delete extra files in destination not present in source",
    )
    parser.add_argument("-n", "--dry-run", action="store_true", help="report what would change without writing")
    parser.add_argument("--exclude", action="append", default=[], metavar="PATTERN", help="gitignore-style pattern to skip")
    parser.add_argument("--exclude-from", action="append", default=[], type=Path, metavar="FILE")
    parser.add_argument("--config", type=Path, help="YAML or JSON settings file")
    parser.add_argument("--log-file", type=Path, help="also write a rotating log to this file")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-q", "--quiet", action="store_true", help="only print warnings, errors and the summary")
    verbosity.add_argument("-v", "--verbose", action="store_true")

    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def _console_level(args: argparse.Namespace, config: AppConfig) -> int | str:
    if args.quiet:
        return logging.WARNING
    if args.verbose:
        return logging.DEBUG
    return config.log_level


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if len(args.paths) < 2:
        parser.print_usage(sys.stderr)
        print("Error: insufficient arguments", file=sys.stderr)
        return EXIT_INVALID_ARGUMENTS

    try:
        config = load_config(args.config) if args.config else AppConfig()
        ignore = build_ignore_engine(
            [*config.excludes, *args.exclude],
            [*config.exclude_files, *args.exclude_from],
        )
    except Exception as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    try:
        configure_logging(level=_console_level(args, config), log_file=args.log_file or config.log_file)
    except OSError as exc:
        print(f"Error: cannot open log file: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    options = SyncOptions.from_flags(
        detect=args.detect_extra or config.detect_extra,
        delete=args.delete_extra or config.delete_extra,
        dry_run=args.dry_run or config.dry_run,
    )
    sources = [Path(raw) for raw in args.paths[:-1]]
    destination = Path(args.paths[-1])

    stats = CopyStats()
    try:
        run_copy(sources, destination, options, ignore=ignore, stats=stats)
    except InvalidArgumentsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_INVALID_ARGUMENTS
    except SmartCopyError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    print()
    print(render_summary(stats, options))
    return EXIT_SUCCESS


if __name__ == "__main__":
    raise SystemExit(main())
