"""Domain level exceptions for the conversion pipeline.

Every exception carries a ``user_message`` that is safe to return to a client;
the underlying diagnostic (tool stderr, OS error) travels in ``args`` and is
only ever logged.
"""

from __future__ import annotations

__all__ = [
    "AppError",
    "InvalidInputError",
    "ExtractionError",
    "VideoUnavailableError",
    "CopyrightRestrictedError",
    "AgeRestrictedError",
    "VideoNotFoundError",
    "UnknownExtractionError",
    "ExtractionTimeoutError",
    "ArtifactMissingError",
    "NotFoundError",
    "StreamingError",
]


class AppError(Exception):
    """Base class for application specific errors."""

    user_message = "An unexpected error occurred. Please try again later."

    def __init__(self, *args: object, user_message: str | None = None) -> None:
        super().__init__(*args)
        if user_message is not None:
            self.user_message = user_message


class InvalidInputError(AppError):
    """Raised when a request carries a bad URL or format."""

    user_message = "A valid YouTube URL is required"


class ExtractionError(AppError):
    """Base class for failures reported by the extraction tool."""

    user_message = "Failed to process your download. Please try again later."


class VideoUnavailableError(ExtractionError):
    """The video is private, deleted or region-blocked."""

    user_message = "This video is unavailable or private. Please try another video."


class CopyrightRestrictedError(ExtractionError):
    """The video is blocked on copyright grounds."""

    user_message = "This video cannot be downloaded due to copyright restrictions."


class AgeRestrictedError(ExtractionError):
    """The video requires age verification."""

    user_message = "Age-restricted videos cannot be downloaded."


class VideoNotFoundError(ExtractionError):
    """The URL does not resolve to an existing video."""

    user_message = "Video not found. Please check the URL and try again."


class UnknownExtractionError(ExtractionError):
    """The tool failed for a reason that could not be classified."""


class ExtractionTimeoutError(ExtractionError):
    """The tool did not finish before the configured deadline."""

    user_message = "The conversion took too long. Please try again later."


class ArtifactMissingError(AppError):
    """The tool reported success but no output file materialised."""

    user_message = "Could not process your download. Please try again."


class NotFoundError(AppError):
    """A requested artifact does not exist (never produced or already removed)."""

    user_message = "File not found"


class StreamingError(AppError):
    """An artifact could not be read before the response started."""

    user_message = "An error occurred while serving the file"
