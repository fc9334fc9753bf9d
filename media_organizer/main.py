import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .core import MediaOrganizerApp
from .exceptions import SourceRootError
from .reporting import ReportGenerator


def setup_logging(log_dir: Path, verbose: bool) -> Path:
    """Sets up logging to both console and a dated per-run file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"organizer_{datetime.now():%Y-%m-%d_%H-%M-%S}.log"

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)
    return log_file


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Media Organizer: sort photos and home movies into YEAR/MONTH/DAY folders")

    p.add_argument("src", type=Path, help="Source directory to scan")
    p.add_argument("dest", type=Path, help="Destination library root")

    p.add_argument("--copy", action="store_true", help="Copy files instead of moving them")
    p.add_argument("--dry-run", action="store_true", help="Simulate actions without modifying disk")
    p.add_argument("--workers", type=int, default=1, help="Parallel workers (default: 1, sequential)")
    p.add_argument("--log-dir", type=Path, default=None, help="Where to write the run log (default: dest)")
    p.add_argument("--report-csv", type=Path, default=None, help="Write a per-file outcome report to this CSV")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return p.parse_args(argv)


def main(argv: Optional[list] = None):
    args = parse_args(argv)

    # 1. Setup
    dest_root = args.dest.resolve()
    src_root = args.src.resolve()

    # Nothing is created under dest until the source is known to exist
    if not src_root.is_dir():
        logging.error(f"Source directory {src_root} does not exist or is not a directory.")
        sys.exit(1)

    log_file = setup_logging(args.log_dir.resolve() if args.log_dir else dest_root, args.verbose)

    logging.info("=== Media Organizer Started ===")
    logging.info(f"Source: {src_root}")
    logging.info(f"Dest:   {dest_root}")
    logging.info(f"Log:    {log_file}")

    # 2. Execution
    app = MediaOrganizerApp(logger=logging.getLogger("media_organizer"))

    try:
        summary, results = app.organize(
            src_root=src_root,
            dest_root=dest_root,
            move=not args.copy,
            dry_run=args.dry_run,
            max_workers=args.workers,
        )
    except SourceRootError as e:
        logging.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        sys.exit(1)
    except Exception:
        logging.exception("Fatal error during organization.")
        sys.exit(1)

    # 3. Report
    if args.report_csv:
        ReportGenerator().write_report(results, args.report_csv)

    return summary


if __name__ == "__main__":
    main()
