"""HTTP routes for conversion requests."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, Request

from ..api.errors import ApiError
from ..exceptions import AppError
from .conversion_models import ConversionResult
from .conversion_schemas import ConversionRequestSchema, ConversionResponseSchema, ErrorSchema
from .conversion_service import ConversionService

router = APIRouter(tags=["conversion"])
logger = logging.getLogger(__name__)

DELIVERY_ROUTE_NAME = "download_artifact"


def get_conversion_service(request: Request) -> ConversionService:
    """Fetch conversion service from application state."""
    try:
        return request.app.state.conversion_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - wiring error
        raise RuntimeError("ConversionService is not configured") from exc


def _render(request: Request, result: ConversionResult) -> ConversionResponseSchema:
    link = request.url_for(DELIVERY_ROUTE_NAME, filename=result.artifact.filename)
    return ConversionResponseSchema(
        format=result.job.target_format.value,
        download_link=str(link),
        file_size=f"{result.artifact.size_mb:.2f} MB",
        processing_time=f"{result.processing_seconds:.2f} seconds",
    )


@router.post(
    "/download",
    response_model=ConversionResponseSchema,
    responses={400: {"model": ErrorSchema}, 500: {"model": ErrorSchema}, 504: {"model": ErrorSchema}},
)
@router.post("/api/download", response_model=ConversionResponseSchema, include_in_schema=False)
async def submit_conversion(
    request: Request,
    payload: ConversionRequestSchema | None = Body(default=None),
    service: ConversionService = Depends(get_conversion_service),
) -> ConversionResponseSchema:
    """Convert a YouTube URL and return a one-time download link."""
    body = payload or ConversionRequestSchema()
    try:
        result = await service.convert(body.url, body.format)
    except AppError as exc:
        error = ApiError.from_app_error(exc)
        logger.info(
            "conversion.request.rejected",
            extra={"status_code": error.status_code, "code": error.code},
        )
        raise error from exc
    return _render(request, result)
