"""Helpers for serving produced artifacts to clients."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from fastapi import status
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from ..exceptions import InvalidInputError, NotFoundError, StreamingError
from .media_service import ArtifactStore

_MIME_BY_SUFFIX = {
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mkv": "video/x-matroska",
}


def _guess_mime(suffix: str) -> str:
    return _MIME_BY_SUFFIX.get(suffix.lower(), "application/octet-stream")


class _ArtifactStream:
    """Chunk iterator over an open file that remembers whether it hit EOF.

    The server asks for the next chunk only after sending the previous one,
    so ``completed`` means every byte was handed to the connection.
    """

    def __init__(self, handle: BinaryIO, chunk_size: int) -> None:
        self.handle = handle
        self.chunk_size = chunk_size
        self.completed = False

    def __iter__(self) -> Iterator[bytes]:
        try:
            while True:
                chunk = self.handle.read(self.chunk_size)
                if not chunk:
                    self.completed = True
                    break
                yield chunk
        finally:
            self.handle.close()


@dataclass(slots=True)
class PublicResultService:
    """Stream artifacts by filename and optionally delete them afterwards.

    The file handle is opened before the response starts, so a concurrent
    deletion by the retention sweep either happens first (the client sees
    404) or does not affect the transfer already in progress.
    """

    store: ArtifactStore
    delete_after_download: bool = True
    chunk_size: int = 1024 * 1024
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def open_result(self, filename: str) -> StreamingResponse | JSONResponse:
        """Return a streaming response for ``filename`` or an error payload."""
        try:
            handle, path, size = self._open(filename)
        except InvalidInputError as exc:
            self.log.warning("public.result.rejected", extra={"requested": filename})
            return self._error(status.HTTP_400_BAD_REQUEST, exc.user_message)
        except NotFoundError as exc:
            self.log.info("public.result.not_found", extra={"requested": filename})
            return self._error(status.HTTP_404_NOT_FOUND, exc.user_message)
        except StreamingError as exc:
            self.log.error("public.result.open_failed", extra={"requested": filename, "error": str(exc)})
            return self._error(status.HTTP_502_BAD_GATEWAY, exc.user_message)

        stream = _ArtifactStream(handle, self.chunk_size)
        background = BackgroundTask(self._after_stream, stream, path) if self.delete_after_download else None
        self.log.info(
            "public.result.streaming",
            extra={"requested": path.name, "size_bytes": size, "delete_after": self.delete_after_download},
        )
        return StreamingResponse(
            iter(stream),
            media_type=_guess_mime(path.suffix),
            headers={
                "Content-Disposition": f'attachment; filename="{path.name}"',
                "Content-Length": str(size),
            },
            background=background,
        )

    def _after_stream(self, stream: _ArtifactStream, path: Path) -> None:
        if not stream.completed:
            self.log.warning("public.result.incomplete_transfer", extra={"path": str(path)})
            return
        self.delete_served(path)

    def delete_served(self, path: Path) -> None:
        """Remove an artifact after its response completed; never raises."""
        try:
            removed = self.store.remove(path)
        except OSError as exc:
            self.log.error("public.result.delete_failed", extra={"path": str(path), "error": str(exc)})
            return
        if removed:
            self.log.info("public.result.deleted", extra={"path": str(path)})
        else:
            self.log.info("public.result.already_gone", extra={"path": str(path)})

    def _open(self, filename: str) -> tuple[BinaryIO, Path, int]:
        if not filename:
            raise InvalidInputError("empty filename", user_message="No filename provided")
        path = self.store.path_for(filename)
        try:
            handle = path.open("rb")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise NotFoundError(str(path)) from exc
        except OSError as exc:
            raise StreamingError(f"cannot open {path}: {exc}") from exc
        try:
            size = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            handle.close()
            raise StreamingError(f"cannot stat {path}: {exc}") from exc
        return handle, path, size

    @staticmethod
    def _error(status_code: int, message: str) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": message})
