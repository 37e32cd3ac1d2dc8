# projectmap/main.py
"""Command-line entry point: print the file map and token estimate for roots/selections."""

import argparse
import asyncio
import os
import sys
from dataclasses import replace

from projectmap.config import load_limits
from projectmap.exceptions import ConfigurationError
from projectmap.file_processing import format_token_count
from projectmap.logging_config import setup_logging
from projectmap.session import ScanSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projectmap",
        description="Print a file map and token estimate for project files.",
    )
    parser.add_argument("roots", nargs="+", help="Workspace root directories")
    parser.add_argument(
        "--select", action="append", default=None, metavar="PATH",
        help="Selected file or directory (repeatable). Defaults to the roots.",
    )
    parser.add_argument("--all-files", action="store_true", help="Show every project file in the map, marking the selection")
    parser.add_argument("--show-ignored", action="store_true", help="Only apply the built-in ignore patterns")
    parser.add_argument("--max-files", type=int, default=None, help="Cap on files collected per root")
    parser.add_argument("--no-map", action="store_true", help="Skip the file map, print only the status line")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def status_line(files_count: int, tokens: int) -> str:
    return f"{files_count} file{'' if files_count == 1 else 's'} | {format_token_count(tokens)}"


async def run(args, limits) -> int:
    roots = [os.path.abspath(r) for r in args.roots]
    selections = [os.path.abspath(p) for p in args.select] if args.select else roots
    session = ScanSession(roots, limits=limits)
    summary = await session.measure_selection(
        selections,
        include_file_map=not args.no_map,
        include_all_files=args.all_files,
        show_ignored=args.show_ignored,
    )
    if summary.file_map:
        print(summary.file_map)
        print()
    print(status_line(len(summary.files), summary.total_tokens))
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(debug=True if args.debug else None)

    try:
        limits = load_limits()
        if args.max_files is not None:
            limits = replace(limits, max_collected_files=args.max_files)
    except ConfigurationError as e:
        parser.error(str(e))

    return asyncio.run(run(args, limits))


if __name__ == "__main__":
    sys.exit(main())
