import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import List

from lazyarchive.errors import LazyArchiveError, RunCancelled
from lazyarchive.logger import configure_logging
from lazyarchive.models import (
    DEFAULT_INTERVAL,
    DEFAULT_MIN_DIR_AGE,
    DEFAULT_MIN_FILE_AGE,
    MoverConfig,
)
from lazyarchive.scheduler import Cancellation, Scheduler
from lazyarchive.utils import format_duration, parse_duration, validate_source_dest


def duration(text: str):
    try:
        return parse_duration(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lazyarchive",
        usage="%(prog)s [options] SOURCE DEST",
        description="Lazily move files older than a minimum age from SOURCE into DEST, "
                    "and remove old empty directories left behind in SOURCE.",
    )
    p.add_argument("source", nargs="?", help="Directory to move files out of")
    p.add_argument("dest", nargs="?", help="Directory to move files into")
    p.add_argument("--interval", "--timeout", dest="interval", type=duration,
                   default=DEFAULT_INTERVAL, metavar="DURATION",
                   help=f"How often to look for files to move (default {format_duration(DEFAULT_INTERVAL)})")
    p.add_argument("--min-file-age", type=duration, default=DEFAULT_MIN_FILE_AGE, metavar="DURATION",
                   help=f"Minimum age to move files (default {format_duration(DEFAULT_MIN_FILE_AGE)})")
    p.add_argument("--min-dir-age", type=duration, default=DEFAULT_MIN_DIR_AGE, metavar="DURATION",
                   help=f"Minimum age to remove empty dirs (default {format_duration(DEFAULT_MIN_DIR_AGE)})")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    return p


def install_signal_handlers(cancellation: Cancellation) -> None:
    if threading.current_thread() is not threading.main_thread():
        return

    def handler(signum, frame):
        cancellation.cancel(RunCancelled(f"interrupted by {signal.Signals(signum).name}"))

    signal.signal(signal.SIGINT, handler)
    signal.signal(signal.SIGTERM, handler)


def main(argv: List[str] | None = None, cancellation: Cancellation | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.source or not args.dest:
        parser.print_usage(sys.stderr)
        print("Error: missing argument", file=sys.stderr)
        return 2

    config = MoverConfig(
        source=Path(args.source),
        dest=Path(args.dest),
        interval=args.interval,
        min_file_age=args.min_file_age,
        min_dir_age=args.min_dir_age,
    )

    try:
        validate_source_dest(config.source, config.dest)
    except LazyArchiveError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    configure_logging(args.verbose)
    if cancellation is None:
        cancellation = Cancellation()
        install_signal_handlers(cancellation)

    try:
        Scheduler(config).run(cancellation)
    except LazyArchiveError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
