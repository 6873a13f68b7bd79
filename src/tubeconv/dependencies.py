"""Dependency wiring helpers."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api.errors import (
    ApiError,
    api_error_handler,
    app_error_handler,
    unexpected_error_handler,
    validation_error_handler,
)
from .api.health_api import router as health_router
from .config import AppConfig
from .conversion.conversion_api import router as conversion_router
from .conversion.conversion_service import ConversionService
from .exceptions import AppError
from .extraction.extraction_base import ExtractionInvoker
from .extraction.ytdlp_invoker import YtDlpInvoker
from .media.media_service import ArtifactStore
from .media.public_result_service import PublicResultService
from .public.public_results_router import build_public_results_router


def include_routers(
    app: FastAPI,
    config: AppConfig,
    *,
    invoker: ExtractionInvoker | None = None,
) -> None:
    """Mount module routers, attach services and register error handlers."""
    store = ArtifactStore(config.downloads_dir)
    store.ensure_structure()

    extraction_invoker = invoker or YtDlpInvoker(
        binary=config.extractor_binary,
        timeout_seconds=config.extraction_timeout_seconds,
    )
    conversion_service = ConversionService(
        invoker=extraction_invoker,
        store=store,
        max_concurrent_extractions=config.max_concurrent_extractions,
        queue_timeout_seconds=config.extraction_timeout_seconds,
    )
    public_result_service = PublicResultService(
        store=store,
        delete_after_download=config.delete_after_download,
        chunk_size=config.stream_chunk_size_bytes,
    )

    app.state.config = config
    app.state.artifact_store = store
    app.state.conversion_service = conversion_service
    app.state.public_result_service = public_result_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(health_router)
    app.include_router(conversion_router)
    app.include_router(build_public_results_router(public_result_service))
