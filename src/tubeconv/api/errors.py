"""Reusable error primitives for API exception handling."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..conversion.conversion_models import FailureReason
from ..exceptions import (
    AgeRestrictedError,
    AppError,
    ArtifactMissingError,
    CopyrightRestrictedError,
    ExtractionTimeoutError,
    InvalidInputError,
    NotFoundError,
    StreamingError,
    VideoNotFoundError,
    VideoUnavailableError,
)

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = AppError.user_message

# Most specific first; the first isinstance match wins.
_ERROR_MAP: tuple[tuple[type[AppError], int, FailureReason], ...] = (
    (InvalidInputError, status.HTTP_400_BAD_REQUEST, FailureReason.INVALID_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND, FailureReason.INVALID_REQUEST),
    (StreamingError, status.HTTP_502_BAD_GATEWAY, FailureReason.INTERNAL_ERROR),
    (ExtractionTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT, FailureReason.EXTRACTION_TIMEOUT),
    (VideoUnavailableError, status.HTTP_500_INTERNAL_SERVER_ERROR, FailureReason.VIDEO_UNAVAILABLE),
    (CopyrightRestrictedError, status.HTTP_500_INTERNAL_SERVER_ERROR, FailureReason.COPYRIGHT_RESTRICTED),
    (AgeRestrictedError, status.HTTP_500_INTERNAL_SERVER_ERROR, FailureReason.AGE_RESTRICTED),
    (VideoNotFoundError, status.HTTP_500_INTERNAL_SERVER_ERROR, FailureReason.VIDEO_NOT_FOUND),
    (ArtifactMissingError, status.HTTP_500_INTERNAL_SERVER_ERROR, FailureReason.ARTIFACT_MISSING),
)


@dataclass(slots=True)
class ApiError(Exception):
    """Structured application-level error for HTTP handlers."""

    status_code: int
    code: str
    message: str
    headers: Mapping[str, str] | None = None

    def to_response(self) -> JSONResponse:
        """Materialise the error into a ``JSONResponse`` instance.

        Only the user-facing message is returned; ``code`` stays in the logs.
        """

        return JSONResponse(
            status_code=self.status_code,
            content={"error": self.message},
            headers=dict(self.headers or {}),
        )

    @classmethod
    def from_app_error(cls, exc: AppError) -> "ApiError":
        """Translate a domain exception into its HTTP representation."""

        for error_type, status_code, reason in _ERROR_MAP:
            if isinstance(exc, error_type):
                return cls(status_code, reason.value, exc.user_message)
        return cls(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            FailureReason.EXTRACTION_FAILED.value,
            exc.user_message,
        )


async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    """Convert :class:`ApiError` exceptions into JSON payloads."""

    return exc.to_response()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Convert domain exceptions that escaped a router into JSON payloads."""

    error = ApiError.from_app_error(exc)
    logger.warning(
        "api.app_error",
        extra={"path": request.url.path, "code": error.code, "error": str(exc)},
    )
    return error.to_response()


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as a plain 400."""

    logger.info("api.invalid_body", extra={"path": request.url.path, "errors": str(exc.errors())})
    return ApiError(
        status.HTTP_400_BAD_REQUEST,
        FailureReason.INVALID_REQUEST.value,
        "Invalid request body",
    ).to_response()


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the traceback, return a generic message."""

    logger.exception("api.unexpected_error", extra={"path": request.url.path}, exc_info=exc)
    return ApiError(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        FailureReason.INTERNAL_ERROR.value,
        UNEXPECTED_ERROR_MESSAGE,
    ).to_response()


__all__ = [
    "ApiError",
    "api_error_handler",
    "app_error_handler",
    "unexpected_error_handler",
    "validation_error_handler",
]
