"""Pydantic schemas for conversion requests and responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ConversionRequestSchema(BaseModel):
    """Body accepted by the conversion endpoints."""

    # Types are checked by validate_request so wrong types get its 400 messages.
    model_config = ConfigDict(extra="ignore")

    url: Any = None
    format: Any = None


class ConversionResponseSchema(BaseModel):
    """Successful conversion payload, serialised with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    format: str
    download_link: str = Field(alias="downloadLink")
    file_size: str = Field(alias="fileSize")
    processing_time: str = Field(alias="processingTime")


class ErrorSchema(BaseModel):
    """Error body shared by every failing endpoint."""

    error: str
