"""
Schema JSON readers and writers.

Schema documents are JSON arrays of column objects (see
`csv_migration.schema.model`). They are written with 2-space indentation so
they stay easy to review and hand-edit between generation and conversion.
"""

import json
from pathlib import Path

from csv_migration.schema.model import Schema, SchemaDecodeError
from csv_migration.utils.logging_config import get_logger

logger = get_logger(__name__)


def load_schema_json(path: Path | str) -> Schema:
    """
    Read a schema document from disk.

    Args:
        path: Path to a JSON schema file.

    Returns:
        Decoded Schema (entries in document order).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        SchemaDecodeError: If the file is not valid JSON or not a valid
                          schema document.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(
            f"Schema JSON not found: {path}. "
            f"Ensure the file exists and the path is correct."
        )

    try:
        with path.open("r", encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise SchemaDecodeError(
            f"{path}: invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e

    try:
        schema = Schema.from_records(document)
    except SchemaDecodeError as e:
        raise SchemaDecodeError(f"{path}: {e}") from e

    logger.info("schema_loaded", path=str(path), columns=len(schema))
    return schema


def save_schema_json(path: Path | str, schema: Schema) -> None:
    """
    Write a schema document to disk, creating parent directories.

    Args:
        path: Destination path.
        schema: Schema to encode.

    Raises:
        OSError: If the file can't be written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        json.dump(schema.to_records(), f, indent=2, ensure_ascii=False)
        f.write("\n")

    logger.info("schema_saved", path=str(path), columns=len(schema))
