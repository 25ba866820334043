"""
CSV readers and writers for the conversion boundary.

**Conceptual**: This module is the only place that touches delimited files.
The conversion engine works on plain rows of strings (header first), so the
readers here hand it exactly that: every cell as text, nothing coerced to
numbers, dates or NaN, and duplicate header names kept as they are.

**Reading rules**:
  - Quoted fields and embedded delimiters are handled by pandas' C parser.
  - Leading whitespace after a delimiter is skipped.
  - Blank lines are skipped.
  - Rows shorter than the header are padded with "".
  - The header is read as an ordinary row (header=None) so duplicates are not
    renamed to "name.1"; the engine resolves them itself.
"""

from pathlib import Path
from typing import List, Sequence

import pandas as pd

from csv_migration.utils.logging_config import get_logger

logger = get_logger(__name__)


class CsvReadError(Exception):
    """
    Raised when a CSV file cannot be read into header + data rows.

    **Usage**: Raised for empty files, parser failures, and (when data rows
    are required) files that only contain a header.
    """
    pass


class CsvWriteError(Exception):
    """Raised when converted rows cannot be written to disk."""
    pass


def read_csv_frame(path: Path | str) -> pd.DataFrame:
    """
    Read a CSV file into an all-string DataFrame, header included as row 0.

    Args:
        path: CSV file path.

    Returns:
        DataFrame with positional integer columns and string cells.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        CsvReadError: If the file is empty or can't be parsed.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(
            f"CSV file not found: {path}. "
            f"Ensure the file exists and the path is correct."
        )

    try:
        df = pd.read_csv(
            path,
            header=None,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            skipinitialspace=True,
            skip_blank_lines=True,
            encoding="utf-8",
        )
    except pd.errors.EmptyDataError as e:
        raise CsvReadError(f"{path}: CSV file is empty.") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise CsvReadError(f"{path}: Failed to parse CSV. Error: {e}") from e

    # na_filter=False leaves missing trailing fields as NaN in object columns
    return df.fillna("")


def read_csv_rows(
    path: Path | str,
    require_data_rows: bool = True,
) -> List[List[str]]:
    """
    Read a CSV file into a list of string rows (header first).

    Args:
        path: CSV file path.
        require_data_rows: If True (default), a file with only a header row
                          is rejected.

    Returns:
        Rows as lists of strings; rows[0] is the header.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        CsvReadError: If the file is empty, can't be parsed, or lacks data
                     rows when they are required.

    Example:
        >>> rows = read_csv_rows("data/users.csv")
        >>> rows[0]
        ['id', 'username', 'active']
    """
    df = read_csv_frame(path)
    rows = df.values.tolist()

    if not rows:
        raise CsvReadError(f"{path}: CSV has no header row.")

    if require_data_rows and len(rows) < 2:
        raise CsvReadError(
            f"{path}: CSV must have at least a header and one data row, "
            f"found {len(rows)} row(s)."
        )

    logger.info("csv_read", path=str(path), rows=len(rows) - 1, columns=len(rows[0]))
    return rows


def rows_to_csv_text(rows: Sequence[Sequence[str]]) -> str:
    """
    Render rows (header first) as CSV text with standard quoting.

    Example:
        >>> rows_to_csv_text([["id", "note"], ["1", "a, b"]])
        'id,note\\n1,"a, b"\\n'
    """
    if not rows:
        return ""
    df = pd.DataFrame([list(row) for row in rows[1:]], columns=list(rows[0]))
    return df.to_csv(index=False, lineterminator="\n")


def read_csv_text(path: Path | str) -> str:
    """
    Read a CSV file and re-render it as normalized CSV text.

    Used to embed sample data in generator prompts: the text is exactly what
    the parser saw (leading spaces dropped, quoting normalized).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        CsvReadError: If the file can't be read or has no data rows.
    """
    return rows_to_csv_text(read_csv_rows(path))


def write_csv_rows(path: Path | str, rows: Sequence[Sequence[str]]) -> None:
    """
    Write rows (header first) to a CSV file, creating parent directories.

    The table is written to a hidden sibling file and moved into place, so
    the destination is either the complete new file or left untouched.

    Args:
        path: Destination path.
        rows: Header row followed by data rows.

    Raises:
        CsvWriteError: If rows is empty or the file can't be written.
    """
    path = Path(path)

    if not rows:
        raise CsvWriteError(f"Refusing to write {path}: no header row.")

    df = pd.DataFrame([list(row) for row in rows[1:]], columns=list(rows[0]))

    partial_path = path.with_name(f".{path.name}.partial")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(partial_path, index=False, lineterminator="\n")
        partial_path.replace(path)
    except OSError as e:
        if partial_path.exists():
            partial_path.unlink()
        raise CsvWriteError(f"Failed to write CSV to {path}. Error: {e}") from e

    logger.info("csv_written", path=str(path), rows=len(rows) - 1)
