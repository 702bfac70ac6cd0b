"""
API Routes
==========

Endpoint definitions for the Persist Tabular API:
  1. POST /tabular/export - Write rows to a delimited file, return schema DDL
  2. POST /tabular/ids    - Derive deterministic ids without writing

This module wires requests to the export layer without adding business logic.
"""

import logging

from fastapi import APIRouter

from .schemas import (
    ExportRequest,
    ExportResponse,
    IdsRequest,
    IdsResponse,
    HealthResponse,
    VersionResponse,
)

from persist_tabular.export import (
    PersistProperties,
    PersistPropsTransformContext,
    TabularWriter,
    compose_transforms,
    derive_namespace,
    create_id,
)

from persist_tabular.app import config as app_config
from persist_tabular.app import exceptions as app_exceptions


logger = logging.getLogger(__name__)


# =============================================================================
# ROUTER
# =============================================================================

router = APIRouter()


# =============================================================================
# ROW HELPERS
# =============================================================================

def _require_fields(fields: list[str]):
    """Transform rejecting rows where any of `fields` is missing or null."""
    def transform(ctx: PersistPropsTransformContext, persist: PersistProperties):
        if any(persist.get(name) is None for name in fields):
            return None
        return persist
    return transform


def _with_id(writer: TabularWriter, row: PersistProperties, id_field: str) -> PersistProperties:
    """Put a derived 'id' first, keeping the remaining keys in order."""
    key = row.get(id_field)
    if key is None:
        return dict(row)
    persist = {"id": writer.create_id(str(key))}
    persist.update((name, value) for name, value in row.items() if name != "id")
    return persist


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/tabular/export", response_model=ExportResponse)
def export_rows(request: ExportRequest) -> ExportResponse:
    """
    Write the request rows to `file_name` in the output directory.

    The schema is inferred from the first accepted row. Returns the header,
    row counts and the CREATE TABLE statement for the inferred schema.
    """
    try:
        parent_namespace = request.parent_namespace or app_config.DEFAULT_PARENT_NAMESPACE
        transforms = []
        if request.required_fields:
            transforms.append(_require_fields(request.required_fields))

        with TabularWriter(
            dest_path=app_config.get_output_dir(),
            file_name=request.file_name,
            parent_namespace=parent_namespace,
            pp_transform=compose_transforms(*transforms) if transforms else None,
        ) as writer:
            skipped = 0
            for row in request.rows:
                persist = _with_id(writer, row, request.id_field) if request.id_field else dict(row)
                if not writer.write(PersistPropsTransformContext(persist=persist, source=row)):
                    skipped += 1

            response = ExportResponse(
                file_path=str(writer.file_path),
                namespace=str(writer.pk_namespace),
                header=[column.delimited_header() for column in writer.schema],
                rows_written=writer.row_index,
                rows_skipped=skipped,
                ddl=writer.sql_ddl_create_table(request.table_name),
            )

        logger.info(
            "Exported %s: %d written, %d skipped",
            request.file_name, response.rows_written, response.rows_skipped
        )
        return response

    except Exception as e:
        raise app_exceptions.get_http_exception(e)


@router.post("/tabular/ids", response_model=IdsResponse)
def derive_ids(request: IdsRequest) -> IdsResponse:
    """Derive ids for `names` under (parent_namespace, file_name)."""
    try:
        parent_namespace = request.parent_namespace or app_config.DEFAULT_PARENT_NAMESPACE
        namespace = derive_namespace(request.file_name, parent_namespace)
        return IdsResponse(
            namespace=str(namespace),
            ids={name: create_id(name, namespace) for name in request.names},
        )
    except Exception as e:
        raise app_exceptions.get_http_exception(e)


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok")


@router.get("/version", response_model=VersionResponse)
def get_version() -> VersionResponse:
    """Get API version."""
    return VersionResponse(version=app_config.VERSION, name=app_config.APP_NAME)
