"""
Column schema model: the data contract for each side of a migration.

**Conceptual**: A schema is an ordered list of `ColumnSchema` entries, one per
CSV column, in header order. The source-side schema additionally says which
target column each source column feeds and how its categorical values
translate into the target vocabulary. The target-side schema only names the
target columns (and, descriptively, their known values).

**Schema philosophy**:
  - Schemas are passive, immutable value objects. They carry no conversion
    behavior; `csv_migration.conversion.engine` interprets them.
  - `values` and `values_mapping` are descriptive metadata, never enforced.
    A cell whose value is not listed in `values` is still converted.
  - Decoding is lenient for optional fields: a malformed `target_column`,
    `values` or `values_mapping` decodes to "no mapping" instead of failing.
    Only a structurally broken document (not a list of objects, or an entry
    without a usable `column`) raises SchemaDecodeError.

**JSON shape** (one object per column):
    {
        "column": "active",
        "target_column": "is_active",
        "values": ["Y", "N"],
        "values_mapping": {"Y": "true", "N": "false"}
    }
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple


class SchemaDecodeError(Exception):
    """
    Raised when a schema document cannot be decoded into ColumnSchema entries.

    **Usage**: The message names the entry index and the offending field so a
    hand-edited schema file can be fixed quickly.
    """
    pass


# Accepted spellings for optional fields (snake_case is canonical)
_TARGET_COLUMN_KEYS = ("target_column", "targetColumn")
_VALUES_MAPPING_KEYS = ("values_mapping", "valuesMapping")


@dataclass(frozen=True)
class ColumnSchema:
    """
    Describes one column in either the source or the target vocabulary.

    Attributes:
        column: Column name as it appears in that side's CSV header.
        target_column: Source side only. Name of the target column this
                      source column feeds. None means "no current mapping".
        values: Known categorical values, in order. Empty means the column
               is dynamic (IDs, free text, numbers, dates).
        values_mapping: Source categorical value -> target categorical value,
                       including composite values such as "R+W+D".
                       None means values pass through unchanged.
                       Stored as a read-only mapping.
    """
    column: str
    target_column: Optional[str] = None
    values: Tuple[str, ...] = ()
    values_mapping: Optional[Mapping[str, str]] = None

    def __post_init__(self):
        # Frozen fields hold immutable copies; callers keep their own dict.
        object.__setattr__(self, "values", tuple(self.values))
        if self.values_mapping is not None:
            object.__setattr__(
                self, "values_mapping", MappingProxyType(dict(self.values_mapping))
            )

    def __hash__(self) -> int:
        mapping = (
            frozenset(self.values_mapping.items())
            if self.values_mapping is not None else None
        )
        return hash((self.column, self.target_column, self.values, mapping))

    @property
    def is_categorical(self) -> bool:
        """True if the column has a closed, enumerated value set."""
        return bool(self.values)

    @property
    def is_mapped(self) -> bool:
        """True if this (source-side) column feeds a target column."""
        return bool(self.target_column)

    @classmethod
    def from_record(cls, record: Mapping[str, Any], index: int = 0) -> "ColumnSchema":
        """
        Decode one JSON object into a ColumnSchema.

        **Functionally**:
          - `column` must be present and a string. JSON null decodes to ""
            (the generator emits null for target columns with no source
            column); such an entry never matches a header name.
          - `target_column`: non-string or empty -> None.
          - `values`: anything other than a list of strings -> ().
          - `values_mapping`: anything other than an object of
            string -> string -> None.
          - camelCase aliases (`targetColumn`, `valuesMapping`) are accepted.

        Args:
            record: Decoded JSON object.
            index: Position of the entry in its document (error context).

        Returns:
            ColumnSchema for the record.

        Raises:
            SchemaDecodeError: If the record is not an object or has no
                              usable `column`.
        """
        if not isinstance(record, Mapping):
            raise SchemaDecodeError(
                f"Schema entry {index} must be a JSON object, got {type(record).__name__}."
            )

        if "column" not in record:
            raise SchemaDecodeError(
                f"Schema entry {index} is missing required field 'column'. "
                f"Found fields: {sorted(record.keys())}."
            )

        column = record["column"]
        if column is None:
            column = ""
        if not isinstance(column, str):
            raise SchemaDecodeError(
                f"Schema entry {index}: 'column' must be a string, "
                f"got {type(column).__name__} ({column!r})."
            )

        target_column = _first_present(record, _TARGET_COLUMN_KEYS)
        if not isinstance(target_column, str) or not target_column:
            target_column = None

        raw_values = record.get("values")
        if isinstance(raw_values, list) and all(isinstance(v, str) for v in raw_values):
            values = tuple(raw_values)
        else:
            values = ()

        raw_mapping = _first_present(record, _VALUES_MAPPING_KEYS)
        if isinstance(raw_mapping, Mapping) and all(
            isinstance(k, str) and isinstance(v, str) for k, v in raw_mapping.items()
        ):
            values_mapping = dict(raw_mapping)
        else:
            values_mapping = None

        return cls(
            column=column,
            target_column=target_column,
            values=values,
            values_mapping=values_mapping,
        )

    def to_record(self) -> Dict[str, Any]:
        """
        Encode as a JSON-ready dict.

        `column` and `values` are always present; `target_column` and
        `values_mapping` are omitted when absent.
        """
        record: Dict[str, Any] = {"column": self.column}
        if self.target_column:
            record["target_column"] = self.target_column
        record["values"] = list(self.values)
        if self.values_mapping is not None:
            record["values_mapping"] = dict(self.values_mapping)
        return record


@dataclass(frozen=True)
class Schema:
    """
    Ordered, immutable sequence of ColumnSchema entries for one side of a migration.

    Order matches the order of the corresponding CSV header. For the target
    side it defines the output column order and count.

    Attributes:
        columns: Entries in declared order.
    """
    columns: Tuple[ColumnSchema, ...] = ()

    def __iter__(self) -> Iterator[ColumnSchema]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def __getitem__(self, index: int) -> ColumnSchema:
        return self.columns[index]

    def column_names(self) -> List[str]:
        """Return column names in declared order."""
        return [entry.column for entry in self.columns]

    @classmethod
    def of(cls, entries: Sequence[ColumnSchema]) -> "Schema":
        """Build a Schema from any sequence of entries."""
        return cls(columns=tuple(entries))

    @classmethod
    def from_records(cls, records: Any) -> "Schema":
        """
        Decode a JSON array of column objects.

        Args:
            records: Decoded JSON document (expected: list of objects).

        Returns:
            Schema with entries in document order.

        Raises:
            SchemaDecodeError: If the document is not a list, or any entry
                              fails `ColumnSchema.from_record`.
        """
        if not isinstance(records, list):
            raise SchemaDecodeError(
                f"Schema document must be a JSON array of column objects, "
                f"got {type(records).__name__}."
            )
        return cls(columns=tuple(
            ColumnSchema.from_record(record, index)
            for index, record in enumerate(records)
        ))

    def to_records(self) -> List[Dict[str, Any]]:
        """Encode as a JSON-ready list of dicts, in declared order."""
        return [entry.to_record() for entry in self.columns]


def _first_present(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Return the value of the first key present in record, else None."""
    for key in keys:
        if key in record:
            return record[key]
    return None
