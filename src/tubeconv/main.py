"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from datetime import timedelta

from fastapi import FastAPI

from .config import AppConfig, load_config
from .dependencies import include_routers
from .extraction.extraction_base import ExtractionInvoker
from .lifecycle import run_periodic_retention_sweep
from .logging import configure_logging

logger = logging.getLogger(__name__)


def _build_lifespan(config: AppConfig):
    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await _startup_retention_sweep(app, config)
        try:
            yield
        finally:
            await _shutdown_retention_sweep(app)

    return lifespan


async def _startup_retention_sweep(app: FastAPI, config: AppConfig) -> None:
    if not config.sweeper_enabled:
        logger.info("Retention sweep startup skipped: disabled via config")
        return
    shutdown_event = asyncio.Event()
    task = asyncio.create_task(
        run_periodic_retention_sweep(
            directory=config.downloads_dir,
            max_age=timedelta(seconds=config.retention_max_age_seconds),
            shutdown_event=shutdown_event,
            interval_seconds=config.retention_interval_seconds,
        ),
        name="tubeconv-retention-sweep",
    )
    app.state.retention_sweep_task = task
    app.state.retention_sweep_shutdown_event = shutdown_event


async def _shutdown_retention_sweep(app: FastAPI) -> None:
    shutdown_event = getattr(app.state, "retention_sweep_shutdown_event", None)
    if shutdown_event is not None:
        shutdown_event.set()
    task: asyncio.Task[None] | None = getattr(app.state, "retention_sweep_task", None)
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    app.state.retention_sweep_task = None
    app.state.retention_sweep_shutdown_event = None


def create_app(
    config: AppConfig | None = None,
    *,
    invoker: ExtractionInvoker | None = None,
) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    cfg = config or load_config()
    configure_logging(cfg.log_level)
    app = FastAPI(title="tubeconv", lifespan=_build_lifespan(cfg))
    include_routers(app, cfg, invoker=invoker)
    return app
