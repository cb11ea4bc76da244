#!/usr/bin/env python3

__VERSION__ = "0.1.0"
__DESCRIPTION__ = "Aligns the columns of @TableTest tables in Java, Kotlin and .table files."
__AUTHOR__ = "tabletest-format contributors"

import sys

import argparse
import csv
import logging
from functools import partial
from io import StringIO
from pathlib import Path
from concurrent.futures import ProcessPoolExecutor, as_completed

from typing import List, Optional, Sequence

from tabulate import tabulate

from tabletest_format.config import IndentStyle
from tabletest_format.file_formatter import (
    ConfigOverrides, FormattingResult, FormattingStatus, format_file
)
from tabletest_format.formatting import TableFormatError, format_table
from tabletest_format.io_tools import discover_files, write_atomically

logger = logging.getLogger("tabletest_format.cli")

_REPORT_HEADERS = ["File", "Status", "Detail"]


def _overrides(args: argparse.Namespace) -> ConfigOverrides:
    style = IndentStyle.parse(args.indent_style) if args.indent_style else None
    return ConfigOverrides(indent_style=style, indent_size=args.indent_size)


def format_files(files: List[Path], args: argparse.Namespace) -> List[FormattingResult]:
    """
    Format every file, serially or in a process pool when --threads > 1.
    Results come back in the order of `files`.
    """
    job = partial(
        format_file,
        delimiter=args.delimiter,
        overrides=_overrides(args),
        use_editorconfig=not args.no_editorconfig,
    )

    threads = getattr(args, "threads", 1)
    if not threads or threads <= 1 or len(files) <= 1:
        return [job(f) for f in files]

    from rich.progress import Progress, BarColumn, TimeElapsedColumn, TextColumn
    from rich.console import Console

    by_path = {}
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        refresh_per_second=5,
        console=Console(stderr=True),
        transient=True,
    ) as progress:
        bar = progress.add_task("[cyan]Formatting tables", total=len(files))
        with ProcessPoolExecutor(max_workers=threads) as ex:
            fut_to_path = {ex.submit(job, f): f for f in files}
            for fut in as_completed(fut_to_path):
                by_path[fut_to_path[fut]] = fut.result()
                progress.update(bar, advance=1)
    return [by_path[f] for f in files]


def _status_label(result: FormattingResult, check_mode: bool) -> str:
    if result.failed:
        return "error"
    if result.changed:
        return "needs formatting" if check_mode else "reformatted"
    return "already formatted"


def print_report(results: Sequence[FormattingResult], check_mode: bool, output_format: str = "text") -> None:
    """Print one row per file, as a text table, a markdown table or CSV."""
    rows = [
        [result.location(), _status_label(result, check_mode), result.error or ""]
        for result in results
    ]
    if output_format == "csv":
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(_REPORT_HEADERS)
        writer.writerows(rows)
        print(output.getvalue(), end="")
    elif output_format == "markdown":
        print(tabulate(rows, headers=_REPORT_HEADERS, tablefmt="github"))
    else:
        print(tabulate(rows, headers=_REPORT_HEADERS, tablefmt="simple"))


def print_summary(status: FormattingStatus, check_mode: bool) -> None:
    mode = "Checked" if check_mode else "Formatted"
    print(f"{mode} {status.files_checked} files")

    if status.has_changes:
        if check_mode:
            print(f"{status.files_changed} files need formatting:")
            for path in status.changed_files:
                print(f"  {path}")
        else:
            print(f"{status.files_changed} files were reformatted")
    else:
        print("All files are already formatted")

    if status.has_errors:
        print(f"{len(status.failed)} files could not be formatted")


def run(args: argparse.Namespace, check_mode: bool) -> int:
    files = discover_files(args.paths)
    if not files:
        print("No files found to format")
        return 0

    status = FormattingStatus()
    reported: List[FormattingResult] = []
    for result in format_files(files, args):
        if result.failed:
            logger.error("%s: %s", result.location(), result.error)
        elif result.changed and not check_mode:
            try:
                write_atomically(result.path, result.content)
            except OSError as e:
                result = FormattingResult(result.path, False, result.content, error=str(e))
                logger.error("Could not write %s: %s", result.path, e)
        status.add_result(result)
        reported.append(result)

    if args.verbose:
        print_report(reported, check_mode, args.report)
    print_summary(status, check_mode)

    if status.has_errors:
        return 1
    return 1 if check_mode and status.has_changes else 0


def check_command(args: argparse.Namespace) -> int:
    return run(args, check_mode=True)


def apply_command(args: argparse.Namespace) -> int:
    return run(args, check_mode=False)


def table_command(args: argparse.Namespace) -> int:
    if args.file:
        try:
            text = args.file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Could not read %s: %s", args.file, e)
            return 1
    else:
        text = sys.stdin.read()

    indent = None
    if args.indent_size:
        style = IndentStyle.parse(args.indent_style) if args.indent_style else IndentStyle.SPACE
        indent = style.repeat(args.indent_size)

    try:
        formatted = format_table(text, args.delimiter, indent=indent)
    except TableFormatError as e:
        logger.error("%s: %s", args.file or "<stdin>", e)
        return 1
    sys.stdout.write(formatted)
    return 0


_log_handlers: List[logging.Handler] = []


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure logging to the console and, optionally, a plain log file."""
    root = logging.getLogger()
    for handler in _log_handlers:
        root.removeHandler(handler)
        handler.close()
    _log_handlers.clear()

    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Console handler
    c_handler = logging.StreamHandler()
    c_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    c_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    root.addHandler(c_handler)
    _log_handlers.append(c_handler)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        f_handler = logging.FileHandler(log_file, encoding="utf-8")
        f_handler.setLevel(logging.DEBUG)
        f_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(f_handler)
        _log_handlers.append(f_handler)
        logging.getLogger(__name__).debug("Logging initialized at %s", log_file)


def _delimiter(value: str) -> str:
    if len(value) != 1 or value.isspace():
        raise argparse.ArgumentTypeError("delimiter must be a single non-space character")
    return value


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return number


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tabletest-format",
        description=f"tabletest-format v{__VERSION__} | {__DESCRIPTION__}",
        epilog=f"{__AUTHOR__}")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__VERSION__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Options shared by all subcommands
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--delimiter", type=_delimiter, default="|", help="Column delimiter (default: |)")
    common.add_argument("--indent-style", choices=["space", "tab"], default=None,
                        help="Indent character for table rows (overrides .editorconfig)")
    common.add_argument("--indent-size", type=_non_negative_int, default=None,
                        help="Indent units added below the annotation; 0 keeps the existing indentation")
    common.add_argument("--verbose", "-v", action="store_true", help="Debug logging and a per-file report")
    common.add_argument("--log-file", type=Path, default=None, help="Also write debug logs to this file")

    # Options for commands that walk the file system
    files = argparse.ArgumentParser(add_help=False)
    files.add_argument("paths", nargs="+", type=Path, metavar="PATH", help="Files or directories to format")
    files.add_argument("--no-editorconfig", action="store_true", help="Ignore .editorconfig files")
    files.add_argument("--threads", type=int, default=1, help="Number of processes used to format files")
    files.add_argument("--report", choices=["text", "markdown", "csv"], default="text",
                       help="Format of the per-file report printed with --verbose")

    # --- CHECK SUBCOMMAND ---
    check = subparsers.add_parser("check", parents=[common, files],
                                  help="Report files whose tables need formatting, without modifying them")
    check.set_defaults(func=check_command)

    # --- APPLY SUBCOMMAND ---
    apply = subparsers.add_parser("apply", parents=[common, files],
                                  help="Format tables in place")
    apply.set_defaults(func=apply_command)

    # --- TABLE SUBCOMMAND ---
    table = subparsers.add_parser("table", parents=[common],
                                  help="Format a single table read from a file or stdin and print it")
    table.add_argument("file", nargs="?", type=Path, default=None, help="Table file (default: stdin)")
    table.set_defaults(func=table_command)

    args = parser.parse_args(argv)
    # a bare style has no width to repeat
    if args.command == "table" and args.indent_style and args.indent_size is None:
        table.error("--indent-style requires --indent-size")
    return args


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, log_file=args.log_file)
    return args.func(args)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n[INFO] Cancelled by user.")
        sys.exit(1)
