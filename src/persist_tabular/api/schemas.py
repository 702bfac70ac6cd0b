"""
API Request/Response Schemas
============================

Pydantic models for API request and response validation.
"""

from typing import Any, Literal, Optional
from pydantic import BaseModel, Field


# Bare file names only: no directories, no traversal.
FILE_NAME_PATTERN = r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$"


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class ExportRequest(BaseModel):
    """Request body for POST /tabular/export endpoint."""

    file_name: str = Field(
        ...,
        min_length=1,
        pattern=FILE_NAME_PATTERN,
        description="Output file name inside the configured output directory"
    )
    parent_namespace: Optional[str] = Field(
        default=None,
        description="UUID the file namespace is derived from (defaults to server setting)"
    )
    rows: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Persist projections, written in order"
    )
    id_field: Optional[str] = Field(
        default=None,
        description="If set, each row gets an 'id' derived from this field's value"
    )
    required_fields: list[str] = Field(
        default_factory=list,
        description="Rows missing any of these fields (or holding null) are skipped"
    )
    table_name: Optional[str] = Field(
        default=None,
        description="Table name for the DDL (defaults to the file name stem)"
    )


class IdsRequest(BaseModel):
    """Request body for POST /tabular/ids endpoint."""

    file_name: str = Field(..., min_length=1, pattern=FILE_NAME_PATTERN)
    parent_namespace: Optional[str] = None
    names: list[str] = Field(..., min_length=1)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class ExportResponse(BaseModel):
    """Response for POST /tabular/export."""

    status: Literal["success"] = "success"
    file_path: str
    namespace: str
    header: list[str] = Field(default_factory=list)
    rows_written: int = 0
    rows_skipped: int = 0
    ddl: str


class IdsResponse(BaseModel):
    """Response for POST /tabular/ids."""

    namespace: str
    ids: dict[str, str]


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    status: str = "ok"


class VersionResponse(BaseModel):
    """Response for GET /version endpoint."""

    version: str
    name: str = "Persist Tabular"


class ErrorResponse(BaseModel):
    """Standard error response."""

    status: str = "error"
    message: str
    detail: Optional[str] = None
