"""
API Module
==========

API routes and schemas.
"""

from .schemas import (
    ExportRequest,
    ExportResponse,
    IdsRequest,
    IdsResponse,
    HealthResponse,
    VersionResponse,
    ErrorResponse,
)

__all__ = [
    "ExportRequest",
    "ExportResponse",
    "IdsRequest",
    "IdsResponse",
    "HealthResponse",
    "VersionResponse",
    "ErrorResponse",
]
