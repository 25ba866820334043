"""
File-level conversion: load schemas and data, convert, write the result.

Wraps the pure engine with the file boundary. Output is written only after
the whole conversion succeeded.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from csv_migration.conversion.engine import convert_rows, unmapped_target_columns
from csv_migration.data.io import read_csv_rows, write_csv_rows
from csv_migration.schema.io import load_schema_json
from csv_migration.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    """
    Summary of one file conversion.

    Attributes:
        output_path: Where the converted CSV was written.
        row_count: Number of converted data rows (header excluded).
        unmapped_targets: Target columns no source column feeds; every cell
                         in these columns is blank.
    """
    output_path: Path
    row_count: int
    unmapped_targets: Tuple[str, ...] = ()


def convert_csv_file(
    source_data_path: Path | str,
    source_schema_path: Path | str,
    target_schema_path: Path | str,
    output_path: Path | str,
) -> ConversionResult:
    """
    Convert a source CSV file into the target layout and write it to disk.

    **Functionally**:
      1. Load the source and target schema documents.
      2. Read the source CSV (header plus at least one data row).
      3. Convert rows with the engine.
      4. Write the converted table to output_path.

    Args:
        source_data_path: Source CSV file.
        source_schema_path: Source-side schema JSON (with target_column and
                           values_mapping entries).
        target_schema_path: Target-side schema JSON (defines output columns).
        output_path: Destination CSV path (parent directories are created).

    Returns:
        ConversionResult describing the written file.

    Raises:
        FileNotFoundError: If an input file is missing.
        SchemaDecodeError: If a schema document is invalid.
        CsvReadError: If the source CSV can't be read.
        MalformedInputError: If the source has no header row.
        CsvWriteError: If the output can't be written.
    """
    output_path = Path(output_path)

    source_schema = load_schema_json(source_schema_path)
    target_schema = load_schema_json(target_schema_path)
    raw_rows = read_csv_rows(source_data_path)

    converted = convert_rows(raw_rows, source_schema, target_schema)
    unmapped = unmapped_target_columns(source_schema, target_schema)

    write_csv_rows(output_path, converted)

    result = ConversionResult(
        output_path=output_path,
        row_count=len(converted) - 1,
        unmapped_targets=tuple(unmapped),
    )
    logger.info(
        "conversion_complete",
        source=str(source_data_path),
        output=str(output_path),
        rows=result.row_count,
        unmapped_targets=list(result.unmapped_targets),
    )
    return result
