"""
Export Validators
=================

Reads back and validates files produced by TabularWriter.
Performs sanity checks on header, row arity and row count.
"""

from pathlib import Path
from typing import Any

from .column_defn import decode_cell


# =============================================================================
# EXCEPTIONS
# =============================================================================

class ExportValidationError(Exception):
    """Raised when export validation fails."""
    pass


# =============================================================================
# READING
# =============================================================================

def split_records(
    text: str,
    column_delim: str = ",",
    record_delim: str | None = "\n"
) -> list[list[str]]:
    """
    Split file content into records of raw cell texts.

    Delimiters inside JSON string literals (including escaped quotes) split
    neither cells nor records. With record_delim=None the whole text is one
    record.
    """
    # Longer delimiter first, so one that prefixes the other never wins early
    delims = sorted(
        [(column_delim, False)] + ([(record_delim, True)] if record_delim else []),
        key=lambda item: len(item[0]),
        reverse=True
    )
    records: list[list[str]] = []
    cells: list[str] = []
    current: list[str] = []
    in_string = False
    escaped = False
    i = 0

    while i < len(text):
        ch = text[i]
        if in_string:
            current.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            i += 1
            continue

        for delim, ends_record in delims:
            if text.startswith(delim, i):
                cells.append("".join(current))
                current = []
                if ends_record:
                    records.append(cells)
                    cells = []
                i += len(delim)
                break
        else:
            if ch == '"':
                in_string = True
            current.append(ch)
            i += 1

    if in_string:
        raise ExportValidationError(f"Unterminated string literal in: {text[-200:]}")
    cells.append("".join(current))
    records.append(cells)
    return records


def split_delimited(line: str, column_delim: str = ",") -> list[str]:
    """Split one line into raw cell texts."""
    return split_records(line, column_delim, None)[0]


def read_tabular(
    file_path: str | Path,
    column_delim: str = ",",
    record_delim: str = "\n"
) -> tuple[list[str], list[dict[str, Any]]]:
    """
    Parse an exported file back into rows.

    Args:
        file_path: File written by TabularWriter.
        column_delim: Separator between cells.
        record_delim: Separator between lines.

    Returns:
        (header, rows) where each row maps column name -> decoded value.
        A file with no rows returns ([], []).

    Raises:
        ExportValidationError: If the file cannot be read or parsed.
    """
    path = Path(file_path)
    if not path.exists():
        raise ExportValidationError(f"Tabular file not found: {file_path}")

    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            content = f.read()
    except OSError as e:
        raise ExportValidationError(f"Failed to read {file_path}: {e}") from e

    if not content:
        return [], []

    records = split_records(content, column_delim, record_delim)
    header = records[0]
    rows = []

    for line_number, cells in enumerate(records[1:], start=2):
        if len(cells) != len(header):
            raise ExportValidationError(
                f"Line {line_number} of {file_path} has {len(cells)} cells, "
                f"header has {len(header)}"
            )
        try:
            rows.append({
                name: decode_cell(name, cell)
                for name, cell in zip(header, cells)
            })
        except ValueError as e:
            raise ExportValidationError(
                f"Line {line_number} of {file_path} has an undecodable cell: {e}"
            ) from e

    return header, rows


# =============================================================================
# VALIDATION
# =============================================================================

def validate_tabular_export(
    file_path: str | Path,
    expected_rows: int | None = None,
    column_delim: str = ",",
    record_delim: str = "\n"
) -> bool:
    """
    Validate an exported file has a header and the expected row count.

    Args:
        file_path: File written by TabularWriter.
        expected_rows: Optional number of data rows (header excluded).

    Returns:
        True if the file is valid.

    Raises:
        ExportValidationError: If validation fails.
    """
    header, rows = read_tabular(file_path, column_delim, record_delim)

    if not header or header == [""]:
        raise ExportValidationError(f"Tabular file has no header: {file_path}")

    if len(set(header)) != len(header):
        raise ExportValidationError(f"Tabular file has duplicate columns: {file_path}")

    if expected_rows is not None and len(rows) != expected_rows:
        raise ExportValidationError(
            f"{Path(file_path).name} has {len(rows)} rows, expected {expected_rows}"
        )

    return True
