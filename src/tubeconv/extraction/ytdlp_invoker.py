"""yt-dlp command line driver."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from ..conversion.conversion_models import TargetFormat
from ..conversion.validation import ensure_acceptable
from ..exceptions import (
    AgeRestrictedError,
    CopyrightRestrictedError,
    ExtractionError,
    ExtractionTimeoutError,
    UnknownExtractionError,
    VideoNotFoundError,
    VideoUnavailableError,
)
from .extraction_base import ExtractionInvoker

logger = structlog.get_logger(__name__)

BASE_OPTIONS = ("--no-check-certificate", "--no-warnings", "--prefer-free-formats")
AUDIO_OPTIONS = ("--extract-audio", "--audio-format", "mp3", "--audio-quality", "0")
# Order matters: mp4+m4a merge, then any single-file mp4, then whatever is best.
VIDEO_FORMAT_SELECTOR = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"

_FAILURE_MARKERS: tuple[tuple[type[ExtractionError], tuple[str, ...]], ...] = (
    (VideoUnavailableError, ("unavailable", "private", "not available in your country")),
    (CopyrightRestrictedError, ("copyright",)),
    (
        AgeRestrictedError,
        ("age-restricted", "age restricted", "confirm your age", "inappropriate for some users"),
    ),
    (VideoNotFoundError, ("not found", "does not exist", "http error 404")),
)

_STDERR_LOG_LIMIT = 2000


def output_template_for(directory: Path, job_id: str) -> Path:
    """Return the ``-o`` template; the tool substitutes the real extension."""
    return directory / f"{job_id}.%(ext)s"


def build_command(
    binary: str,
    source_url: str,
    target_format: TargetFormat,
    output_template: Path,
) -> list[str]:
    """Build the argument vector for one extraction run."""
    command = [binary, *BASE_OPTIONS, "-o", str(output_template)]
    if target_format is TargetFormat.AUDIO:
        command.extend(AUDIO_OPTIONS)
    else:
        command.extend(["-f", VIDEO_FORMAT_SELECTOR])
    command.extend(["--", source_url])
    return command


def classify_failure(diagnostic: str) -> type[ExtractionError]:
    """Map the tool's diagnostic text onto the failure taxonomy."""
    lowered = diagnostic.lower()
    for error_type, markers in _FAILURE_MARKERS:
        if any(marker in lowered for marker in markers):
            return error_type
    return UnknownExtractionError


@dataclass(slots=True)
class YtDlpInvoker(ExtractionInvoker):
    """Run yt-dlp as a child process, one attempt per job.

    Log lines pick up the caller's ``job_id`` from structlog context variables.
    """

    binary: str = "yt-dlp"
    timeout_seconds: float = 900.0
    log: structlog.stdlib.BoundLogger = field(default_factory=lambda: logger)

    async def invoke(
        self,
        source_url: str,
        target_format: TargetFormat,
        output_template: Path,
    ) -> None:
        ensure_acceptable(source_url)
        command = build_command(self.binary, source_url, target_format, output_template)
        self.log.info("extraction.process.start", command=command)

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            self.log.error("extraction.process.spawn_failed", binary=self.binary, error=str(exc))
            raise UnknownExtractionError(f"could not start {self.binary}: {exc}") from exc

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            await self._kill(process)
            self.log.warning(
                "extraction.process.timeout",
                timeout_seconds=self.timeout_seconds,
                pid=process.pid,
            )
            raise ExtractionTimeoutError(
                f"{self.binary} did not finish within {self.timeout_seconds}s"
            ) from exc
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        if process.returncode == 0:
            self.log.info("extraction.process.finished", pid=process.pid)
            return

        diagnostic = stderr.decode("utf-8", errors="replace").strip()
        error_type = classify_failure(diagnostic)
        self.log.error(
            "extraction.process.failed",
            returncode=process.returncode,
            classification=error_type.__name__,
            stderr=diagnostic[-_STDERR_LOG_LIMIT:],
        )
        raise error_type(diagnostic or f"{self.binary} exited with {process.returncode}")

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()
