"""
Column Definitions
==================

A column knows how to render its header, how to render one cell for a row,
and (optionally) how to describe itself in a CREATE TABLE statement.

Cell Encoding:
--------------
- `id` and `*_id` columns: the raw value, unquoted (assumed delimiter-safe).
- Every other column: a JSON literal. Strings are quoted and escaped, so a
  value containing the column delimiter or a newline never breaks row structure.
- Lists and dicts are stringified: the cell holds their JSON text as a JSON
  string, so it decodes back to that text, not to the container.
- Decimals are written with their exact digits and decode back to Decimal,
  as do all fractional numbers.
- A key missing from the row renders as NULL_REPRESENTATION.

Type Inference (GuessColumnDefn):
---------------------------------
The SQL type is pinned from the FIRST accepted row and never revisited:
    integral number        -> INTEGER
    fractional number      -> DECIMAL(16,2)
    anything else          -> VARCHAR(8192)
Strings that fully parse as a number ("42", "10.5") count as numbers.
"""

import json
import logging
import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from .errors import CellSerializationError


logger = logging.getLogger(__name__)


# =============================================================================
# TYPES
# =============================================================================

# One row's exportable projection: column name -> value, insertion-ordered.
PersistProperties = dict[str, Any]


@runtime_checkable
class TabularColumnDefn(Protocol):
    """
    Minimal column contract required by TabularWriter.

    Implementations may also provide:
        sql_column_clause(indent: str) -> str
        sql_table_clause(indent: str) -> str | None
    Columns without sql_column_clause are left out of generated DDL.
    """
    name: str

    def delimited_header(self) -> str:
        ...

    def delimited_content(self, pp: PersistProperties) -> str:
        ...


# =============================================================================
# CONSTANTS
# =============================================================================

# Representation of a key missing from the row
NULL_REPRESENTATION = ""

SQL_INTEGER = "INTEGER"
SQL_DECIMAL = "DECIMAL(16,2)"
SQL_VARCHAR = "VARCHAR(8192)"

PRIMARY_KEY_COLUMN = "id"
ID_SUFFIX = "_id"

_NUMERIC_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


# =============================================================================
# CELL ENCODING
# =============================================================================

def is_id_column(name: str) -> bool:
    """True for `id` and any column ending in `_id`."""
    return name == PRIMARY_KEY_COLUMN or name.endswith(ID_SUFFIX)


def _json_serializer(obj: Any) -> Any:
    """Custom JSON serializer for types not natively supported."""
    # Nested decimals keep their digits as text
    if isinstance(obj, Decimal):
        if not obj.is_finite():
            raise ValueError(f"Out of range decimal value: {obj}")
        return str(obj)
    # Handle datetime objects
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _to_json(value: Any) -> str:
    return json.dumps(
        value,
        ensure_ascii=False,
        allow_nan=False,
        default=_json_serializer,
    )


def encode_cell(name: str, value: Any) -> str:
    """
    Render one cell value for column `name`.

    Raises:
        CellSerializationError: If the value has no literal form (including NaN/inf).
    """
    if is_id_column(name):
        return NULL_REPRESENTATION if value is None else str(value)
    try:
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise ValueError(f"Out of range decimal value: {value}")
            return str(value)
        if isinstance(value, (dict, list, tuple)):
            # Container JSON has bare delimiters; quote it as one string
            return _to_json(_to_json(value))
        return _to_json(value)
    except (TypeError, ValueError) as e:
        raise CellSerializationError(
            f"Cannot serialize value for column '{name}': {e}"
        ) from e


def decode_cell(name: str, text: str) -> Any:
    """
    Inverse of encode_cell(). Empty cells decode to None.

    Fractional numbers decode to Decimal so no digits are lost; stringified
    lists and dicts decode to their JSON text.
    """
    if text == NULL_REPRESENTATION:
        return None
    if is_id_column(name):
        return text
    return json.loads(text, parse_float=Decimal)


# =============================================================================
# TYPE INFERENCE
# =============================================================================

def _as_number(value: Any) -> float | Decimal | int | None:
    """Return the numeric reading of `value`, or None if it has none."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, str):
        text = value.strip()
        if not _NUMERIC_LITERAL.fullmatch(text):
            return None
        number = float(text)
        return number if math.isfinite(number) else None
    return None


def is_numeric(value: Any) -> bool:
    """
    True if `value` is a number or a string that fully parses as one.

    Never raises: None, booleans, mappings, sequences and other objects are
    simply non-numeric.
    """
    return _as_number(value) is not None


def guess_sql_type(value: Any) -> str:
    """Pick the SQL column type for a sample value."""
    number = _as_number(value)
    if number is None:
        return SQL_VARCHAR
    if isinstance(number, int):
        return SQL_INTEGER
    if isinstance(number, Decimal):
        integral = number == number.to_integral_value()
    else:
        integral = number.is_integer()
    return SQL_INTEGER if integral else SQL_DECIMAL


# =============================================================================
# COLUMN IMPLEMENTATIONS
# =============================================================================

@dataclass(frozen=True)
class GuessColumnDefn:
    """
    Column whose SQL type is guessed from one sample row.

    The type is computed once, at construction, from `guessed_from[name]`.
    Rows written later never change it, even if their values differ in kind.
    """
    name: str
    guessed_from: PersistProperties = field(repr=False, compare=False)
    sql_type: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sql_type", guess_sql_type(self.guessed_from.get(self.name)))

    def delimited_header(self) -> str:
        return self.name

    def delimited_content(self, pp: PersistProperties) -> str:
        if self.name not in pp:
            return NULL_REPRESENTATION
        return encode_cell(self.name, pp[self.name])

    def sql_column_clause(self, indent: str = "") -> str:
        return f"{indent}{self.name} {self.sql_type}"

    def sql_table_clause(self, indent: str = "") -> str | None:
        if self.name == PRIMARY_KEY_COLUMN:
            return f"{indent}PRIMARY KEY({self.name})"
        return None


@dataclass(frozen=True)
class ExplicitColumnDefn:
    """
    Caller-declared column with a fixed SQL type.

    Mirrors a schema column entry {"name", "type", "is_pk"}; never samples data.
    """
    name: str
    sql_type: str = SQL_VARCHAR
    primary_key: bool = False

    def delimited_header(self) -> str:
        return self.name

    def delimited_content(self, pp: PersistProperties) -> str:
        if self.name not in pp:
            return NULL_REPRESENTATION
        return encode_cell(self.name, pp[self.name])

    def sql_column_clause(self, indent: str = "") -> str:
        return f"{indent}{self.name} {self.sql_type}"

    def sql_table_clause(self, indent: str = "") -> str | None:
        if self.primary_key:
            return f"{indent}PRIMARY KEY({self.name})"
        return None


def columns_from_table(table: dict[str, Any]) -> list[ExplicitColumnDefn]:
    """
    Build an explicit schema from a table entry of a schema document.

    Args:
        table: {"name": ..., "columns": [{"name", "type", "is_pk"}, ...]}

    Returns:
        Column definitions in declared order.
    """
    columns = []
    for col in table.get("columns", []):
        columns.append(ExplicitColumnDefn(
            name=col["name"],
            sql_type=col.get("type", SQL_VARCHAR),
            primary_key=bool(col.get("is_pk", False)),
        ))
    logger.debug("Built %d explicit columns for table '%s'", len(columns), table.get("name", ""))
    return columns
