"""Lifecycle helpers wiring background tasks for FastAPI startup."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from .media.media_cleanup import SweepSummary, sweep_expired_files


logger = logging.getLogger(__name__)


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


def retention_sweep_once(
    *,
    directory: Path,
    max_age: timedelta,
    now: datetime | None = None,
) -> SweepSummary:
    """Run a single retention sweep iteration and return its counters."""

    return sweep_expired_files(directory, max_age, now or _default_clock())


async def run_periodic_retention_sweep(
    *,
    directory: Path,
    max_age: timedelta,
    shutdown_event: asyncio.Event,
    interval_seconds: float = 24 * 60 * 60,
    clock: Callable[[], datetime] | None = None,
) -> None:
    """Sweep immediately, then every ``interval_seconds`` until shutdown."""

    interval = max(0.01, float(interval_seconds))
    tick = clock or _default_clock
    while not shutdown_event.is_set():
        try:
            # Directory listing and unlinks are blocking calls.
            summary = await asyncio.to_thread(
                retention_sweep_once, directory=directory, max_age=max_age, now=tick()
            )
        except Exception:
            logger.exception("Retention sweep iteration failed")
        else:
            if summary.removed:
                logger.info("Retention sweep removed %s files", summary.removed)
        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            continue


__all__ = [
    "retention_sweep_once",
    "run_periodic_retention_sweep",
]
