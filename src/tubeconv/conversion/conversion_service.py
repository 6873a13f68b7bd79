"""Domain service coordinating one conversion request."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from ..exceptions import ArtifactMissingError, ExtractionError, ExtractionTimeoutError
from ..extraction.extraction_base import ExtractionInvoker
from ..extraction.ytdlp_invoker import output_template_for
from ..media.media_service import ArtifactStore
from .conversion_models import ConversionJob, ConversionResult
from .job_naming import new_job_id
from .validation import validate_request

logger = structlog.get_logger(__name__)

_DIAGNOSTIC_LOG_LIMIT = 2000


@dataclass(slots=True)
class ConversionService:
    """Validate, extract and resolve a single conversion job.

    The semaphore bounds how many extraction processes run at once; requests
    beyond that wait for a free slot instead of spawning more children. The
    wait is bounded by ``queue_timeout_seconds`` (``None`` waits forever) and
    ends in ``ExtractionTimeoutError`` like a slow run would.

    Leftover files of a failed or cancelled job are removed right away.
    """

    invoker: ExtractionInvoker
    store: ArtifactStore
    max_concurrent_extractions: int = 4
    queue_timeout_seconds: float | None = None
    id_factory: Callable[[], str] = field(default=new_job_id)
    _slots: asyncio.Semaphore = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._slots = asyncio.Semaphore(max(1, self.max_concurrent_extractions))

    def prepare_job(self, url: object, target_format: object) -> ConversionJob:
        """Validate the raw payload and allocate a job identifier."""
        source_url, parsed_format = validate_request(url, target_format)
        return ConversionJob(
            job_id=self.id_factory(),
            source_url=source_url,
            target_format=parsed_format,
        )

    async def convert(self, url: object, target_format: object) -> ConversionResult:
        """Run the whole pipeline for one request and return the artifact."""
        started = time.monotonic()
        job = self.prepare_job(url, target_format)
        log = logger.bind(job_id=job.job_id)
        log.info(
            "conversion.job.accepted",
            source_url=job.source_url,
            target_format=job.target_format.value,
        )

        await self._extract(job)

        try:
            artifact = await asyncio.to_thread(self.store.resolve, job.job_id)
        except ArtifactMissingError:
            log.error("conversion.job.artifact_missing", root=str(self.store.root))
            raise

        elapsed = time.monotonic() - started
        log.info(
            "conversion.job.completed",
            artifact=artifact.filename,
            size_bytes=artifact.size_bytes,
            processing_seconds=round(elapsed, 2),
        )
        return ConversionResult(job=job, artifact=artifact, processing_seconds=elapsed)

    async def _extract(self, job: ConversionJob) -> None:
        log = logger.bind(job_id=job.job_id)
        template = output_template_for(self.store.root, job.job_id)
        await self._acquire_slot(log)
        try:
            with structlog.contextvars.bound_contextvars(job_id=job.job_id):
                await self.invoker.invoke(job.source_url, job.target_format, template)
        except ExtractionError as exc:
            log.warning(
                "conversion.job.extraction_failed",
                classification=type(exc).__name__,
                target_format=job.target_format.value,
                stderr=str(exc)[-_DIAGNOSTIC_LOG_LIMIT:],
            )
            await asyncio.to_thread(self.store.discard, job.job_id)
            raise
        except asyncio.CancelledError:
            # The invoker reaps the child before re-raising.
            log.info("conversion.job.cancelled")
            self.store.discard(job.job_id)
            raise
        finally:
            self._slots.release()

    async def _acquire_slot(self, log: structlog.stdlib.BoundLogger) -> None:
        if not self._slots.locked():
            await self._slots.acquire()
            return
        log.info(
            "conversion.job.waiting_for_slot",
            limit=self.max_concurrent_extractions,
            queue_timeout_seconds=self.queue_timeout_seconds,
        )
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=self.queue_timeout_seconds)
        except asyncio.TimeoutError as exc:
            log.warning("conversion.job.queue_timeout", queue_timeout_seconds=self.queue_timeout_seconds)
            raise ExtractionTimeoutError(
                f"no extraction slot freed within {self.queue_timeout_seconds}s"
            ) from exc
