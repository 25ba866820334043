"""
Schema-driven conversion engine.

**Conceptual**: Given raw rows (header first), a source schema and a target
schema, produce a new table whose header is the target schema's column names
and whose cells are copied, remapped or blanked according to the source
schema. This is a pure, single-pass, in-memory transform: no I/O, no shared
state, safe to call concurrently from several threads.

**Functionally**, for every data row and every target column T:
  1. Find the first source entry S (declared order) with S.target_column == T.column.
     None -> "".
  2. Locate S.column in the header (both names trimmed, case-sensitive; last
     duplicate wins). Not in the header, or the row is too short -> "".
  3. Trim the cell. Blank -> "" (no mapping attempted).
  4. S.values_mapping[value] if the key exists, else the trimmed value.

**Lenient**: missing mappings, missing cells and unmapped categorical values
are not errors. They surface only as blank or unchanged cells. The only
failure is input without a header row (MalformedInputError), which aborts the
call with no partial output.
"""

from typing import Dict, List, Optional, Sequence

from csv_migration.schema.model import ColumnSchema


class MalformedInputError(Exception):
    """
    Raised when the raw input cannot be converted at all.

    **Conceptual**: Conversion needs at least a header row. Anything less is
    fatal to the whole call; no partial output is returned.
    """
    pass


def build_header_index(header: Sequence[str]) -> Dict[str, int]:
    """
    Map trimmed header names to zero-based column positions.

    Duplicated names resolve to the last occurrence.

    Example:
        >>> build_header_index([" id", "name", "id"])
        {'id': 2, 'name': 1}
    """
    index: Dict[str, int] = {}
    for position, name in enumerate(header):
        index[name.strip()] = position
    return index


def resolve_target_sources(
    source_schema: Sequence[ColumnSchema],
    target_schema: Sequence[ColumnSchema],
) -> Dict[str, ColumnSchema]:
    """
    Precompute target column name -> the source entry that feeds it.

    When several source entries name the same target column, the first one in
    source schema order wins (same result as scanning the source schema for
    each cell). Target columns nobody feeds are absent from the result.

    Args:
        source_schema: Source-side entries in declared order.
        target_schema: Target-side entries.

    Returns:
        Dict keyed by target column name.
    """
    wanted = {entry.column for entry in target_schema}
    sources: Dict[str, ColumnSchema] = {}
    for entry in source_schema:
        target = entry.target_column
        if target and target in wanted and target not in sources:
            sources[target] = entry
    return sources


def unmapped_target_columns(
    source_schema: Sequence[ColumnSchema],
    target_schema: Sequence[ColumnSchema],
) -> List[str]:
    """
    Return target column names (target order) that no source column feeds.

    A target claimed by a placeholder entry with an empty `column` counts as
    unmapped: its cells are always blank.
    """
    sources = resolve_target_sources(source_schema, target_schema)
    return [
        entry.column for entry in target_schema
        if entry.column not in sources or not sources[entry.column].column.strip()
    ]


def transform_value(raw_value: str, source_column: ColumnSchema) -> str:
    """
    Convert one source cell using its source column's values mapping.

    Example:
        >>> col = ColumnSchema("active", "is_active", ("Y", "N"), {"Y": "true", "N": "false"})
        >>> transform_value(" Y ", col)
        'true'
        >>> transform_value("maybe", col)
        'maybe'
        >>> transform_value("   ", col)
        ''
    """
    value = raw_value.strip()
    if not value:
        return ""

    mapping = source_column.values_mapping
    if mapping is not None and value in mapping:
        return mapping[value]

    return value


def convert_rows(
    raw_rows: Sequence[Sequence[str]],
    source_schema: Sequence[ColumnSchema],
    target_schema: Sequence[ColumnSchema],
    use_index: bool = True,
) -> List[List[str]]:
    """
    Convert raw rows from the source layout to the target layout.

    Args:
        raw_rows: Header row followed by data rows.
        source_schema: Source-side Schema (or sequence of ColumnSchema).
        target_schema: Target-side Schema (or sequence of ColumnSchema).
                      Defines output column order and count.
        use_index: Resolve target -> source entries once per call (default).
                  False scans the source schema for every cell instead; the
                  output is identical.

    Returns:
        Output header (target column names) followed by one converted row per
        input data row, each with len(target_schema) cells.

    Raises:
        MalformedInputError: If raw_rows is empty (no header row).

    Example:
        >>> source = [ColumnSchema("active_status", "is_active", ("Y", "N"), {"Y": "true", "N": "false"})]
        >>> target = [ColumnSchema("is_active")]
        >>> convert_rows([["active_status"], ["Y"], ["N"], [""]], source, target)
        [['is_active'], ['true'], ['false'], ['']]
    """
    if not raw_rows:
        raise MalformedInputError(
            "No rows to convert: input must contain at least a header row."
        )

    header_index = build_header_index(raw_rows[0])
    target_columns = [entry.column for entry in target_schema]

    if use_index:
        sources = resolve_target_sources(source_schema, target_schema)
        feeders: List[Optional[ColumnSchema]] = [sources.get(name) for name in target_columns]
    else:
        feeders = None

    output: List[List[str]] = [list(target_columns)]

    for source_row in raw_rows[1:]:
        output_row: List[str] = []

        for position, target_name in enumerate(target_columns):
            if feeders is not None:
                source_column = feeders[position]
            else:
                source_column = _scan_for_source(source_schema, target_name)

            output_row.append(_convert_cell(source_row, header_index, source_column))

        output.append(output_row)

    return output


def _scan_for_source(
    source_schema: Sequence[ColumnSchema],
    target_name: str,
) -> Optional[ColumnSchema]:
    """Return the first source entry whose target_column is target_name."""
    for entry in source_schema:
        if entry.target_column and entry.target_column == target_name:
            return entry
    return None


def _convert_cell(
    source_row: Sequence[str],
    header_index: Dict[str, int],
    source_column: Optional[ColumnSchema],
) -> str:
    """Produce one output cell; "" for every missing piece."""
    if source_column is None:
        return ""

    name = source_column.column.strip()
    if not name:
        return ""

    position = header_index.get(name)
    if position is None or position >= len(source_row):
        return ""

    return transform_value(source_row[position], source_column)
