"""Helpers for retention cleanup of the working directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SweepSummary:
    scanned: int = 0
    removed: int = 0
    failed: int = 0
    dry_run: bool = False


def _file_age(path: Path, now: datetime) -> timedelta | None:
    try:
        mtime = path.stat().st_mtime
    except FileNotFoundError:
        return None
    return now - datetime.fromtimestamp(mtime, tz=timezone.utc)


def sweep_expired_files(
    directory: Path,
    max_age: timedelta,
    reference_time: datetime | None = None,
    *,
    dry_run: bool = False,
) -> SweepSummary:
    """Remove files in ``directory`` last modified more than ``max_age`` ago.

    Files are considered regardless of whether they were ever downloaded.
    Sub-directories are left alone. A file that disappears mid-sweep (served
    and deleted concurrently) is skipped silently; any other per-file error
    is logged and the sweep moves on.
    """
    now = reference_time or datetime.now(timezone.utc)
    summary = SweepSummary(dry_run=dry_run)
    if not directory.is_dir():
        logger.warning("media.cleanup.missing_directory", extra={"directory": str(directory)})
        return summary

    for entry in directory.iterdir():
        try:
            if not entry.is_file():
                continue
            summary.scanned += 1
            age = _file_age(entry, now)
            if age is None or age <= max_age:
                continue
            if dry_run:
                summary.removed += 1
                continue
            entry.unlink(missing_ok=True)
        except OSError as exc:
            summary.failed += 1
            logger.warning(
                "media.cleanup.remove_failed",
                extra={"path": str(entry), "error": str(exc)},
            )
            continue
        summary.removed += 1
        logger.info(
            "media.cleanup.removed",
            extra={"path": str(entry), "age_hours": round(age.total_seconds() / 3600)},
        )

    logger.info(
        "media.cleanup.completed",
        extra={
            "directory": str(directory),
            "scanned": summary.scanned,
            "removed": summary.removed,
            "failed": summary.failed,
            "dry_run": dry_run,
        },
    )
    return summary
