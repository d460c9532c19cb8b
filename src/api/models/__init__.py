"""API Pydantic models."""

from .responses import (
    ClassifyRequest,
    ErrorCodes,
    ErrorResponse,
    HealthResponse,
    TranscriptRequest,
)

__all__ = [
    "ClassifyRequest",
    "ErrorCodes",
    "ErrorResponse",
    "HealthResponse",
    "TranscriptRequest",
]
