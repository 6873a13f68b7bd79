"""Public endpoints for artifact downloads."""

from fastapi import APIRouter

from ..conversion.conversion_api import DELIVERY_ROUTE_NAME
from ..media.public_result_service import PublicResultService


def build_public_results_router(service: PublicResultService) -> APIRouter:
    router = APIRouter(tags=["public-results"])

    # ``:path`` lets separators reach the service, which rejects them with 400.
    @router.get("/downloads/{filename:path}", name=DELIVERY_ROUTE_NAME)
    def get_result(filename: str):
        return service.open_result(filename)

    @router.get("/api/download-file/{filename:path}")
    def get_result_legacy(filename: str):
        return service.open_result(filename)

    return router
