"""Pydantic schemas used as views in the MVC architecture."""

from .assessment import AssessmentMetadata, AssessmentResponse
from .common import ErrorResponse, HealthResponse, ServiceStatusResponse

__all__ = [
    "AssessmentMetadata",
    "AssessmentResponse",
    "ErrorResponse",
    "HealthResponse",
    "ServiceStatusResponse",
]
