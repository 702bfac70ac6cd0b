"""
Export Module
=============

Core of persist_tabular: streams schema-less records into a delimited file,
infers a relational schema from the first accepted row, renders CREATE TABLE
DDL and derives deterministic ids.
"""

from .errors import (
    TabularExportError,
    TabularIoError,
    WriterClosedError,
    CellSerializationError,
    InvalidNamespaceError,
    InvalidColumnNameError,
)

from .column_defn import (
    PersistProperties,
    TabularColumnDefn,
    GuessColumnDefn,
    ExplicitColumnDefn,
    columns_from_table,
    encode_cell,
    decode_cell,
    is_id_column,
    is_numeric,
    guess_sql_type,
    NULL_REPRESENTATION,
    SQL_INTEGER,
    SQL_DECIMAL,
    SQL_VARCHAR,
)

from .identifiers import (
    UUID,
    as_namespace,
    derive_namespace,
    create_id,
)

from .sql_ddl import (
    create_table_ddl,
    DEFAULT_INDENT,
)

from .tabular_writer import (
    TabularWriter,
    TabularWriterOptions,
    PersistPropsTransformContext,
    PersistPropsTransformer,
    apply_transform,
    compose_transforms,
)

from .export_validators import (
    split_records,
    split_delimited,
    read_tabular,
    validate_tabular_export,
    ExportValidationError,
)

__all__ = [
    # Exceptions
    "TabularExportError",
    "TabularIoError",
    "WriterClosedError",
    "CellSerializationError",
    "InvalidNamespaceError",
    "InvalidColumnNameError",
    "ExportValidationError",

    # Columns
    "PersistProperties",
    "TabularColumnDefn",
    "GuessColumnDefn",
    "ExplicitColumnDefn",
    "columns_from_table",
    "encode_cell",
    "decode_cell",
    "is_id_column",
    "is_numeric",
    "guess_sql_type",
    "NULL_REPRESENTATION",
    "SQL_INTEGER",
    "SQL_DECIMAL",
    "SQL_VARCHAR",

    # Ids
    "UUID",
    "as_namespace",
    "derive_namespace",
    "create_id",

    # DDL
    "create_table_ddl",
    "DEFAULT_INDENT",

    # Writer
    "TabularWriter",
    "TabularWriterOptions",
    "PersistPropsTransformContext",
    "PersistPropsTransformer",
    "apply_transform",
    "compose_transforms",

    # Validation
    "split_records",
    "split_delimited",
    "read_tabular",
    "validate_tabular_export",
]
