"""Data structures for the conversion pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from pathlib import Path


class TargetFormat(StrEnum):
    """Output formats a client may request."""

    AUDIO = "mp3"
    VIDEO = "mp4"


class FailureReason(StrEnum):
    """Error codes attached to failed conversion responses."""

    INVALID_REQUEST = "invalid_request"
    VIDEO_UNAVAILABLE = "video_unavailable"
    COPYRIGHT_RESTRICTED = "copyright_restricted"
    AGE_RESTRICTED = "age_restricted"
    VIDEO_NOT_FOUND = "video_not_found"
    EXTRACTION_FAILED = "extraction_failed"
    EXTRACTION_TIMEOUT = "extraction_timeout"
    ARTIFACT_MISSING = "artifact_missing"
    INTERNAL_ERROR = "internal_error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ConversionJob:
    """A validated request, alive only while its conversion runs."""

    job_id: str
    source_url: str
    target_format: TargetFormat
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True, frozen=True)
class OutputArtifact:
    """A file produced by the extraction tool for one job."""

    filename: str
    size_bytes: int
    path: Path

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)


@dataclass(slots=True, frozen=True)
class ConversionResult:
    """Outcome of a successful conversion."""

    job: ConversionJob
    artifact: OutputArtifact
    processing_seconds: float
