"""Common response schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
    details: Optional[str] = None
    max_size: Optional[int] = Field(default=None, alias="maxSize")
    available_endpoint: Optional[str] = Field(default=None, alias="availableEndpoint")

    model_config = ConfigDict(populate_by_name=True)


class ServiceStatusResponse(BaseModel):
    message: str
    version: str
    status: str
    endpoint: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
