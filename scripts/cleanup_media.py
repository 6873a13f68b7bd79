"""Cron entry point for sweeping expired artifacts."""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timedelta

from tubeconv.config import load_config
from tubeconv.media.media_cleanup import SweepSummary, sweep_expired_files


def perform_cleanup(*, dry_run: bool, reference_time: datetime | None = None) -> SweepSummary:
    """Execute one retention sweep and return its counters."""
    config = load_config()
    return sweep_expired_files(
        config.downloads_dir,
        timedelta(seconds=config.retention_max_age_seconds),
        reference_time,
        dry_run=dry_run,
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Delete artifacts older than the retention threshold.")
    parser.add_argument("--dry-run", action="store_true", help="Only report counts without deleting files.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    try:
        summary = perform_cleanup(dry_run=args.dry_run)
    except Exception as exc:
        print(f"cleanup failed: {exc}", file=sys.stderr)
        return 2

    if summary.dry_run:
        print(
            f"cleanup dry-run, scanned={summary.scanned}, expired={summary.removed}",
            file=sys.stdout,
        )
    else:
        print(
            f"cleanup done, scanned={summary.scanned}, removed={summary.removed}, failed={summary.failed}",
            file=sys.stdout,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
