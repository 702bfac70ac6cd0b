"""
Tabular Writer
==============

Streams heterogeneous records into one delimited file while deriving its
schema from the data.

Lifecycle:
----------
    created -> (first accepted row) header + rows -> closed

- The header is written exactly once, together with the first ACCEPTED row.
  A row rejected by the transform never triggers it.
- Without an explicit schema, columns are guessed from the first accepted
  row, in that row's key order. The schema is then fixed: later rows with
  extra keys lose them, rows with missing keys get empty cells.
- Rows are separated by `record_delim`; there is no trailing separator.

The writer owns its output stream and is not thread-safe.
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol, Sequence, TextIO, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .column_defn import GuessColumnDefn, PersistProperties, TabularColumnDefn
from .errors import InvalidColumnNameError, TabularIoError, WriterClosedError
from .identifiers import UUID, as_namespace, create_id, derive_namespace
from .sql_ddl import DEFAULT_INDENT, create_table_ddl


logger = logging.getLogger(__name__)


# =============================================================================
# TRANSFORMS
# =============================================================================

@dataclass(frozen=True)
class PersistPropsTransformContext:
    """One candidate row: its exportable projection and the record it came from."""
    persist: PersistProperties
    source: Any = None


class PersistPropsFlow(Protocol):
    """Object-style transform exposing a single flow() method."""

    def flow(
        self,
        ctx: PersistPropsTransformContext,
        persist: PersistProperties
    ) -> PersistProperties | None:
        ...


TransformFn = Callable[[PersistPropsTransformContext, PersistProperties], Union[PersistProperties, None]]

# Returning None (or any falsy value) rejects the row.
PersistPropsTransformer = Union[PersistPropsFlow, TransformFn]


def apply_transform(
    transform: PersistPropsTransformer,
    ctx: PersistPropsTransformContext,
    persist: PersistProperties
) -> PersistProperties | None:
    """Invoke a transform in either of its accepted shapes."""
    flow = getattr(transform, "flow", None)
    if flow is not None:
        return flow(ctx, persist)
    return transform(ctx, persist)


def compose_transforms(*transforms: PersistPropsTransformer) -> TransformFn:
    """
    Chain transforms left to right.

    Each transform receives the projection produced by the previous one.
    The chain stops at the first transform that rejects the row.
    """
    def composed(
        ctx: PersistPropsTransformContext,
        persist: PersistProperties
    ) -> PersistProperties | None:
        for transform in transforms:
            persist = apply_transform(transform, ctx, persist)
            if not persist:
                return None
        return persist

    return composed


# =============================================================================
# OPTIONS
# =============================================================================

_FORBIDDEN_DELIM_CHARS = ('"', "\\")


class TabularWriterOptions(BaseModel):
    """Validated scalar options of a TabularWriter."""

    dest_path: Path
    file_name: str = Field(..., min_length=1)
    parent_namespace: uuid.UUID
    column_delim: str = Field(default=",", min_length=1)
    record_delim: str = Field(default="\n", min_length=1)

    @field_validator("file_name")
    @classmethod
    def validate_bare_file_name(cls, value: str) -> str:
        if Path(value).name != value or value in (".", ".."):
            raise ValueError(f"file_name must be a bare file name, got '{value}'")
        return value

    @model_validator(mode="after")
    def validate_delimiters(self):
        if self.column_delim == self.record_delim:
            raise ValueError("column_delim and record_delim must differ")
        for delim in (self.column_delim, self.record_delim):
            if any(ch in delim for ch in _FORBIDDEN_DELIM_CHARS):
                raise ValueError(f"Delimiter {delim!r} may not contain quotes or backslashes")
        return self


# =============================================================================
# WRITER
# =============================================================================

class TabularWriter:
    """
    Writes accepted rows to `dest_path/file_name` as delimited text.

    Args:
        dest_path: Existing directory to write into.
        file_name: Output file name; also seeds the id namespace and the
            default table name.
        parent_namespace: UUID (or UUID string) this file's namespace is
            derived from.
        schema: Explicit column definitions. When omitted, columns are
            guessed from the first accepted row.
        pp_transform: Optional row mapper/filter.
        column_delim: Separator between cells.
        record_delim: Separator between lines.

    Raises:
        InvalidNamespaceError: If parent_namespace is not a UUID.
        InvalidColumnNameError: If an explicit column header contains a
            delimiter or a quote.
        TabularIoError: If the output file cannot be opened.
    """

    def __init__(
        self,
        dest_path: str | Path,
        file_name: str,
        parent_namespace: uuid.UUID | str,
        schema: Sequence[TabularColumnDefn] | None = None,
        pp_transform: PersistPropsTransformer | None = None,
        column_delim: str = ",",
        record_delim: str = "\n",
    ):
        self.options = TabularWriterOptions(
            dest_path=dest_path,
            file_name=file_name,
            parent_namespace=as_namespace(parent_namespace),
            column_delim=column_delim,
            record_delim=record_delim,
        )
        self.dest_path = self.options.dest_path
        self.file_name = self.options.file_name
        self.column_delim = self.options.column_delim
        self.record_delim = self.options.record_delim
        self.schema: list[TabularColumnDefn] = list(schema) if schema else []
        self._check_headers(column.delimited_header() for column in self.schema)
        self.pp_transform = pp_transform
        self.pk_namespace = derive_namespace(self.file_name, self.options.parent_namespace)
        self.row_index = 0
        self._closed = False

        self.file_path = self.dest_path / self.file_name
        try:
            # newline="" keeps record_delim byte-exact on every platform
            self._stream: TextIO = open(self.file_path, "w", encoding="utf-8", newline="")
        except OSError as e:
            raise TabularIoError(f"Failed to open {self.file_path}: {e}") from e

        logger.debug(
            "Opened %s (namespace=%s, explicit_schema=%s)",
            self.file_path, self.pk_namespace, bool(self.schema)
        )

    # -------------------------------------------------------------------------
    # Context manager
    # -------------------------------------------------------------------------

    def __enter__(self) -> "TabularWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    # -------------------------------------------------------------------------
    # Ids
    # -------------------------------------------------------------------------

    def create_id(self, name: str) -> UUID:
        """Deterministic id for `name` within this file's namespace."""
        return create_id(name, self.pk_namespace)

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------

    def _check_headers(self, headers: Iterable[str]) -> None:
        """Reject headers that would split or unbalance the header line."""
        for header in headers:
            if (
                not header
                or self.column_delim in header
                or self.record_delim in header
                or '"' in header
            ):
                raise InvalidColumnNameError(
                    f"Column name {header!r} is empty or contains a delimiter or quote."
                )

    def guess_schema(self, guess_from: PersistProperties) -> None:
        """
        Populate the schema from a sample row, only if it is still empty.

        Raises:
            InvalidColumnNameError: If a key cannot be used as a header; the
                schema stays empty.
        """
        if self.schema:
            return
        self._check_headers(guess_from.keys())
        for name in guess_from.keys():
            self.schema.append(GuessColumnDefn(name, guess_from))
        logger.info(
            "Guessed %d columns for %s: %s",
            len(self.schema), self.file_name, [column.name for column in self.schema]
        )

    def delimited_header(self) -> str:
        return self.column_delim.join(column.delimited_header() for column in self.schema)

    def sql_ddl_create_table(
        self,
        table_name: str | None = None,
        indent: str = DEFAULT_INDENT
    ) -> str:
        """
        CREATE TABLE statement for the current schema.

        Safe at any point of the lifecycle; before the first accepted row an
        inferred schema is still empty and so is the statement body.
        """
        return create_table_ddl(table_name or Path(self.file_name).stem, self.schema, indent)

    # -------------------------------------------------------------------------
    # Rows
    # -------------------------------------------------------------------------

    def write(self, ctx: PersistPropsTransformContext) -> bool:
        """
        Transform, filter and write one row.

        Returns:
            True if the row was written, False if the transform rejected it.

        Raises:
            WriterClosedError: If the writer was already closed.
            InvalidColumnNameError: If the first accepted row has a key that
                cannot be used as a header.
            CellSerializationError: If a cell cannot be rendered; nothing of
                the row is written.
            TabularIoError: If the stream write fails.
        """
        if self._closed:
            raise WriterClosedError(f"Writer for {self.file_path} is closed.")

        persist = ctx.persist
        if self.pp_transform is not None:
            persist = apply_transform(self.pp_transform, ctx, persist)

        if not persist:
            logger.debug("Row rejected for %s (rows written: %d)", self.file_name, self.row_index)
            return False

        is_first_row = self.row_index == 0
        if is_first_row:
            self.guess_schema(persist)

        # Render every cell before touching the stream: no partial rows.
        content = self.column_delim.join(
            column.delimited_content(persist) for column in self.schema
        )
        chunks = [self.delimited_header()] if is_first_row else []
        chunks.append(self.record_delim)
        chunks.append(content)

        try:
            self._stream.write("".join(chunks))
        except OSError as e:
            raise TabularIoError(f"Failed to write {self.file_path}: {e}") from e

        self.row_index += 1
        return True

    def write_all(self, contexts: Iterable[PersistPropsTransformContext]) -> int:
        """Write every context in order; returns the number of rows accepted."""
        return sum(1 for ctx in contexts if self.write(ctx))

    def close(self) -> None:
        """Flush and close the output stream. Calling twice is harmless."""
        if self._closed:
            return
        self._closed = True
        try:
            self._stream.close()
        except OSError as e:
            raise TabularIoError(f"Failed to close {self.file_path}: {e}") from e
        logger.info("Closed %s after %d rows", self.file_path, self.row_index)
