"""Request validation for conversion jobs."""

from __future__ import annotations

import logging
import re

from ..exceptions import InvalidInputError
from .conversion_models import TargetFormat

logger = logging.getLogger(__name__)

# Host allowlist only; the extraction tool decides whether the path is a real video.
YOUTUBE_URL_PATTERN = re.compile(r"^(https?://)?(www\.)?(youtube\.com|youtu\.?be)/.+")

MISSING_URL_MESSAGE = "A valid YouTube URL is required"
INVALID_FORMAT_MESSAGE = "Format must be mp3 or mp4"
INVALID_URL_MESSAGE = "Please enter a valid YouTube URL"


def is_acceptable(url: object) -> bool:
    """Return ``True`` when ``url`` looks like a YouTube watch or short link."""
    if not isinstance(url, str) or not url:
        return False
    if any(char.isspace() or not char.isprintable() for char in url):
        return False
    return YOUTUBE_URL_PATTERN.match(url) is not None


def ensure_acceptable(url: object) -> str:
    """Return ``url`` unchanged or raise :class:`InvalidInputError`."""
    if not is_acceptable(url):
        raise InvalidInputError(f"rejected url {url!r}", user_message=INVALID_URL_MESSAGE)
    return url  # type: ignore[return-value]


def validate_request(url: object, target_format: object) -> tuple[str, TargetFormat]:
    """Check a raw request payload in the order clients expect errors.

    Missing URL first, then an unsupported format, then a URL outside the
    host allowlist.
    """
    if not url or not isinstance(url, str):
        logger.info("conversion.request.missing_url")
        raise InvalidInputError("url missing or not a string", user_message=MISSING_URL_MESSAGE)

    try:
        parsed_format = TargetFormat(target_format)
    except ValueError:
        logger.info("conversion.request.invalid_format", extra={"format": repr(target_format)})
        raise InvalidInputError(
            f"unsupported format {target_format!r}", user_message=INVALID_FORMAT_MESSAGE
        ) from None

    if not is_acceptable(url):
        logger.info("conversion.request.invalid_url", extra={"url": url})
        raise InvalidInputError(f"rejected url {url!r}", user_message=INVALID_URL_MESSAGE)

    return url, parsed_format
