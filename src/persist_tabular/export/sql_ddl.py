"""
SQL DDL Generation
==================

Renders a CREATE TABLE statement from a tabular schema.
The statement is returned as text and never executed here.

Output shape:

    CREATE TABLE customers (
        id VARCHAR(8192),
        name VARCHAR(8192),
        amount INTEGER,
        PRIMARY KEY(id)
    );
"""

import logging
from typing import Sequence

from .column_defn import TabularColumnDefn


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_INDENT = "    "


# =============================================================================
# PUBLIC INTERFACE
# =============================================================================

def create_table_ddl(
    table_name: str,
    schema: Sequence[TabularColumnDefn],
    indent: str = DEFAULT_INDENT
) -> str:
    """
    Build a CREATE TABLE statement for `schema`.

    Column clauses come first, in schema order, followed by every table-level
    clause (e.g. PRIMARY KEY) a column provides. Columns that cannot describe
    themselves in SQL are left out rather than guessed.

    Args:
        table_name: Name of the table to create.
        schema: Ordered column definitions. May be empty.
        indent: Prefix applied to each clause line.

    Returns:
        The statement text, terminated by ';'.
    """
    column_clauses: list[str] = []
    table_clauses: list[str] = []

    for column in schema:
        column_clause = getattr(column, "sql_column_clause", None)
        if column_clause is None:
            logger.warning(
                "Column '%s' of table '%s' has no SQL definition; omitted from DDL",
                column.name, table_name
            )
            continue
        column_clauses.append(column_clause(indent))

        table_clause = getattr(column, "sql_table_clause", None)
        if table_clause is not None:
            clause = table_clause(indent)
            if clause:
                table_clauses.append(clause)

    body = ",\n".join(column_clauses + table_clauses)
    if body:
        return f"CREATE TABLE {table_name} (\n{body}\n);"
    return f"CREATE TABLE {table_name} (\n);"
