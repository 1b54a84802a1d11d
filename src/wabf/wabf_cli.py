#!/usr/bin/env python3
"""
wabf CLI - Command Line Interface
Enumerates a phone number pattern and checks every number against a
messaging directory, with rich terminal feedback.
"""

import argparse
import signal
import sys
import logging
import threading
import time
from typing import List, Optional

from wabf.generator import PatternExpander, PatternError, normalize_pattern, validate_pattern
from wabf.config import (
    APP_NAME, APP_VERSION, APP_DESCRIPTION, DEFAULT_DELAY, DEFAULT_JITTER, DEFAULT_CONCURRENCY,
    DEFAULT_MAX_CANDIDATES, DEFAULT_OUTPUT_FORMAT, DEFAULT_AVATAR_DIR, CONFIRMATION_THRESHOLD,
    REQUEST_TIMEOUT, OUTPUT_FORMATS, ENV_DIRECTORY_URL, ERROR_MESSAGES, SUCCESS_MESSAGES,
    ScanConfig, get_directory_url, get_directory_token,
)
from wabf.core.models import ScanOutcome
from wabf.core.plugin_api import create_lookup_client, list_lookup_clients, resolve_client_class
from wabf.operations.results_handler import ResultsHandler
from wabf.operations.scan_coordinator import ScanCoordinator
from wabf.utils import confirm_action, estimate_duration, format_duration
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.panel import Panel
from rich import box
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn, TimeRemainingColumn


console = Console()
logger = logging.getLogger(__name__)


class ConsoleUI:
    """Rich-based console UI for the CLI."""

    @staticmethod
    def print_banner(pattern: str, args):
        lines = [f"[bold cyan]{APP_NAME}[/] CLI v{APP_VERSION}", f"[dim]{APP_DESCRIPTION}[/]", ""]
        lines.append(f"Target Pattern: [bold]{pattern}[/]")
        if args.output_file:
            lines.append(f"Output File:    {args.output_file}")
        if args.csv:
            lines.append(f"CSV File:       {args.csv}")
        if args.vcard:
            lines.append(f"VCard File:     {args.vcard}")
        console.print(Panel.fit("\n".join(lines), border_style="cyan"))

    @staticmethod
    def print_clients():
        table = Table(title="Lookup Clients", box=box.SIMPLE_HEAD, expand=False)
        table.add_column("Name", style="bold")
        table.add_column("Class")
        table.add_column("Origin")
        for name, info in sorted(list_lookup_clients().items()):
            table.add_row(name, info['class'], info['origin'])
        console.print(table)

    @staticmethod
    def print_summary(found: List[ScanOutcome], total_checked: int, elapsed_time: int, cancelled: bool):
        title = "Summary (interrupted)" if cancelled else "Summary"
        console.print(Panel.fit(
            f"Checked: [bold]{total_checked:,}[/] | Found: [bold green]{len(found)}[/] | "
            f"Elapsed: [bold]{format_duration(elapsed_time)}[/]",
            title=title,
            border_style="yellow" if cancelled else "green",
        ))


def setup_logging(verbose: bool = False):
    """Setup logging configuration.
    Default to WARNING to avoid flooding the live progress. Use --verbose for DEBUG.
    Route logs through Rich so live progress isn't broken.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    # Quiet noisy libraries unless verbose
    for name in ("urllib3", "requests"):
        logging.getLogger(name).setLevel(logging.WARNING if not verbose else logging.INFO)


def validate_args(args) -> bool:
    """Validate command line arguments."""
    if not validate_pattern(args.pattern):
        console.print(ERROR_MESSAGES['invalid_pattern'].format(pattern=args.pattern), markup=False)
        return False

    if args.delay < 0 or args.jitter < 0:
        console.print("Delay and jitter must be non-negative")
        return False

    if args.concurrency < 1:
        console.print("Concurrency must be a positive integer")
        return False

    if args.max_candidates <= 0:
        console.print("Max candidates must be positive")
        return False

    if args.start < 0:
        console.print("Start position must be non-negative")
        return False

    return True


def build_lookup_client(args):
    """Create the lookup client selected on the command line, or None."""
    if resolve_client_class(args.client) is None:
        console.print(ERROR_MESSAGES['unknown_client'].format(name=args.client), markup=False)
        return None

    base_url = get_directory_url(args.directory_url)
    if args.client == "http" and not base_url:
        console.print(ERROR_MESSAGES['no_directory'].format(env=ENV_DIRECTORY_URL), markup=False)
        return None

    return create_lookup_client(
        args.client,
        base_url=base_url,
        token=get_directory_token(args.directory_token),
        timeout=args.request_timeout,
    )


def install_signal_handlers(cancel_event: threading.Event):
    """Turn SIGINT/SIGTERM into a cooperative stop."""
    def _handler(signum, frame):
        if not cancel_event.is_set():
            console.print(f"\n{ERROR_MESSAGES['interrupted']}")
        cancel_event.set()

    signal.signal(signal.SIGINT, _handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handler)


def run_scan(coordinator: ScanCoordinator, expander: PatternExpander, start: int,
             results_handler: ResultsHandler) -> List[ScanOutcome]:
    """Drive the scan with a progress bar; outcomes go to the results handler."""
    total = expander.count() - start

    with Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        transient=True,
        refresh_per_second=10,
        console=console,
        disable=not console.is_terminal,
    ) as progress:
        task = progress.add_task("Checking numbers • Found: 0", total=total)

        def _cb(status):
            progress.update(task, completed=status.get('completed', 0),
                            description=f"Checking numbers • Found: {status.get('found', 0)}")

        coordinator.progress_callback = _cb
        outcomes = coordinator.scan(expander.candidates(start=start), total=total, start_index=start)
        return results_handler.consume(outcomes)


def main(argv: Optional[List[str]] = None):
    """Main function."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.list_clients:
        ConsoleUI.print_clients()
        return 0

    args.pattern = normalize_pattern("".join(args.pattern or []))
    if not args.pattern:
        console.print(ERROR_MESSAGES['no_pattern'])
        parser.print_usage()
        return 1

    logger.debug(f"Starting {APP_NAME} with pattern: {args.pattern}")
    try:
        expander = PatternExpander(args.pattern)
    except PatternError as e:
        console.print(ERROR_MESSAGES['parse_error'].format(error=e), markup=False)
        return 1

    if not validate_args(args):
        return 1

    total = expander.count()
    if total > args.max_candidates:
        console.print(ERROR_MESSAGES['too_many_candidates'].format(count=total, max=args.max_candidates),
                      markup=False)
        return 1
    if args.start >= total:
        console.print(f"Start position {args.start:,} is past the last of {total:,} numbers")
        return 1

    if not args.no_banner:
        ConsoleUI.print_banner(args.pattern, args)

    to_check = total - args.start
    console.print(SUCCESS_MESSAGES['candidates_generated'].format(count=to_check))

    if to_check > CONFIRMATION_THRESHOLD and not args.yes:
        estimate = estimate_duration(to_check, args.delay, args.jitter, args.concurrency)
        message = (
            f"This will check {to_check:,} numbers with {args.concurrency} worker(s).\n"
            f"Estimated duration: at least {format_duration(estimate)} (plus network time)."
        )
        if not confirm_action(message, default=True):
            console.print("Operation cancelled")
            return 0

    lookup = build_lookup_client(args)
    if lookup is None:
        return 1

    cancel_event = threading.Event()
    install_signal_handlers(cancel_event)

    config = ScanConfig(
        concurrency=args.concurrency,
        delay=args.delay,
        jitter=args.jitter,
    )
    coordinator = ScanCoordinator(lookup, config=config, cancel_event=cancel_event)

    console.print(SUCCESS_MESSAGES['scan_started'].format(
        workers=args.concurrency, plural='' if args.concurrency == 1 else 's'))

    start_time = time.time()
    try:
        results_handler = ResultsHandler(
            output_file=args.output_file,
            output_format=args.output_format,
            csv_file=args.csv,
            vcard_file=args.vcard,
            jsonl_file=args.jsonl_out,
            save_avatars=args.save_avatars,
            avatar_dir=args.avatar_dir,
            console=console,
            verbose=args.verbose,
        )
        with results_handler:
            found = run_scan(coordinator, expander, args.start, results_handler)
    except OSError as e:
        console.print(ERROR_MESSAGES['output_failed'].format(error=e), markup=False)
        return 1
    finally:
        lookup.close()

    elapsed_time = int(time.time() - start_time)
    progress = coordinator.get_progress()
    ConsoleUI.print_summary(found, progress['completed'], elapsed_time, progress['cancelled'])
    console.print(SUCCESS_MESSAGES['scan_finished'].format(found=len(found)))
    if progress['cancelled']:
        console.print(f"Resume with --start {args.start + progress['completed']} "
                      f"(approximate: workers finish out of order)")
        return 130
    return 0


def create_argument_parser():
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=f"{APP_NAME} CLI - {APP_DESCRIPTION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Pattern syntax:
  x or X   any digit 0-9
  [137]    one of the listed digits
  [5-9]    a range of digits inside a set
  Spaces and '+' are ignored, so "+1 555 ..." works.

Examples:
  # Standard
  %(prog)s "1555123456x"

  # Parallel
  %(prog)s --concurrency 4 "155512345xx"

  # Export
  %(prog)s --csv results.csv --save-avatars "15551234[5-9]x"

  # Resume from a specific number
  %(prog)s --start 5000 "1555xxxxx"
        """
    )

    parser.add_argument("pattern", nargs="*", help="Phone number pattern, e.g. 15551234567[x] or +1 555 ...")
    parser.add_argument("--concurrency", "-c", type=int, default=DEFAULT_CONCURRENCY,
                        help=f"Number of parallel workers (default: {DEFAULT_CONCURRENCY})")
    parser.add_argument("--delay", type=float, default=DEFAULT_DELAY,
                        help=f"Delay in seconds between checks, per worker (default: {DEFAULT_DELAY})")
    parser.add_argument("--jitter", type=float, default=DEFAULT_JITTER,
                        help=f"Maximum random extra delay in seconds (default: {DEFAULT_JITTER})")
    parser.add_argument("--start", type=int, default=0, help="Skip the first N numbers of the pattern")
    parser.add_argument("--max-candidates", type=int, default=DEFAULT_MAX_CANDIDATES,
                        help=f"Refuse patterns expanding to more numbers (default: {DEFAULT_MAX_CANDIDATES:,})")
    parser.add_argument("--yes", "-y", action="store_true", help="Don't ask for confirmation on large scans")
    parser.add_argument("--output-file", help="Write found numbers to this file, one per line")
    parser.add_argument("--output-format", choices=OUTPUT_FORMATS, default=DEFAULT_OUTPUT_FORMAT,
                        help=f"Format of --output-file lines (default: {DEFAULT_OUTPUT_FORMAT})")
    parser.add_argument("--csv", help="Export results to a CSV file")
    parser.add_argument("--vcard", help="Export results to a VCard (.vcf) file")
    parser.add_argument("--jsonl-out", help="Append every found result to a JSONL file")
    parser.add_argument("--save-avatars", action="store_true", help="Download and save profile pictures")
    parser.add_argument("--avatar-dir", default=DEFAULT_AVATAR_DIR,
                        help=f"Directory for saved profile pictures (default: {DEFAULT_AVATAR_DIR})")
    parser.add_argument("--client", default="http", help="Lookup client to use (default: http)")
    parser.add_argument("--directory-url", help=f"Base URL of the directory bridge (default: ${ENV_DIRECTORY_URL})")
    parser.add_argument("--directory-token", help="Bearer token for the directory bridge")
    parser.add_argument("--request-timeout", type=float, default=REQUEST_TIMEOUT,
                        help=f"Per-request timeout in seconds (default: {REQUEST_TIMEOUT})")
    parser.add_argument("--list-clients", action="store_true", help="Show available lookup clients and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--no-banner", action="store_true", help="Don't show application banner")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} CLI v{APP_VERSION}")

    return parser


if __name__ == "__main__":
    sys.exit(main())
