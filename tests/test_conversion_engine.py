"""
Tests for the conversion engine.

This module tests:
  - Output shape (header + one row per data row, target column count/order).
  - Value mapping, pass-through of unmapped values, blank handling.
  - Lenient fallbacks (no feeding source column, missing header, short rows).
  - Tie-breaks: last duplicate header wins, first source entry wins.
  - Indexed and linear-scan resolution producing identical output.
  - MalformedInputError on empty input.
"""

import pytest

from csv_migration.conversion.engine import (
    MalformedInputError,
    build_header_index,
    convert_rows,
    resolve_target_sources,
    transform_value,
    unmapped_target_columns,
)
from csv_migration.schema.model import ColumnSchema, Schema


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def user_source_schema():
    """Source schema for a small user table migration."""
    return Schema.of([
        ColumnSchema("id", "id"),
        ColumnSchema("username", "name"),
        ColumnSchema(
            "active",
            "is_active",
            ("Y", "N"),
            {"Y": "true", "N": "false"},
        ),
        ColumnSchema(
            "perms",
            "permissions",
            ("R", "R+W", "R+W+D"),
            {"R": "view", "R+W": "view, edit", "R+W+D": "view, edit, delete"},
        ),
        ColumnSchema("legacy_code"),
    ])


@pytest.fixture
def user_target_schema():
    """Target schema; 'phone' has no source column."""
    return Schema.of([
        ColumnSchema("id"),
        ColumnSchema("name"),
        ColumnSchema("phone"),
        ColumnSchema("is_active", values=("true", "false")),
        ColumnSchema("permissions", values=("view", "view, edit", "view, edit, delete")),
    ])


@pytest.fixture
def user_rows():
    return [
        ["id", "username", "active", "perms", "legacy_code"],
        ["1", " alice ", "Y", "R+W+D", "X1"],
        ["2", "bob", "N", "R", "X2"],
        ["3", "carol", "", "R+W", "X3"],
        ["4", "dave", "?", "ADMIN", "X4"],
    ]


# ============================================================================
# Examples
# ============================================================================

def test_convert_rows_boolean_mapping_example():
    """Y/N -> true/false, blank stays blank."""
    source = [ColumnSchema("active_status", "is_active", ("Y", "N"), {"Y": "true", "N": "false"})]
    target = [ColumnSchema("is_active")]

    output = convert_rows([["active_status"], ["Y"], ["N"], [""]], source, target)

    assert output == [["is_active"], ["true"], ["false"], [""]]


def test_convert_rows_full_table(user_rows, user_source_schema, user_target_schema):
    """End-to-end conversion of a realistic table."""
    output = convert_rows(user_rows, user_source_schema, user_target_schema)

    assert output == [
        ["id", "name", "phone", "is_active", "permissions"],
        ["1", "alice", "", "true", "view, edit, delete"],
        ["2", "bob", "", "false", "view"],
        ["3", "carol", "", "", "view, edit"],
        ["4", "dave", "", "?", "ADMIN"],
    ]


# ============================================================================
# Shape
# ============================================================================

def test_output_row_count_and_width(user_rows, user_source_schema, user_target_schema):
    output = convert_rows(user_rows, user_source_schema, user_target_schema)

    assert len(output) == len(user_rows)
    for row in output:
        assert len(row) == len(user_target_schema)


def test_output_header_follows_target_order_not_source_order():
    source = [ColumnSchema("a", "A"), ColumnSchema("b", "B")]
    target = [ColumnSchema("B"), ColumnSchema("A")]

    output = convert_rows([["a", "b"], ["1", "2"]], source, target)

    assert output == [["B", "A"], ["2", "1"]]


def test_header_only_input_yields_header_only_output(user_source_schema, user_target_schema):
    output = convert_rows([["id", "username"]], user_source_schema, user_target_schema)

    assert output == [["id", "name", "phone", "is_active", "permissions"]]


def test_empty_target_schema_yields_empty_rows():
    output = convert_rows([["a"], ["1"], ["2"]], [ColumnSchema("a", "A")], [])

    assert output == [[], [], []]


def test_input_rows_are_not_mutated(user_rows, user_source_schema, user_target_schema):
    snapshot = [list(row) for row in user_rows]

    convert_rows(user_rows, user_source_schema, user_target_schema)

    assert user_rows == snapshot


# ============================================================================
# Lenient fallbacks
# ============================================================================

def test_target_without_source_is_always_blank(user_rows, user_source_schema, user_target_schema):
    output = convert_rows(user_rows, user_source_schema, user_target_schema)

    phone_position = output[0].index("phone")
    assert all(row[phone_position] == "" for row in output[1:])


def test_source_column_missing_from_header_is_blank():
    source = [ColumnSchema("email", "email")]
    target = [ColumnSchema("email")]

    output = convert_rows([["id"], ["1"]], source, target)

    assert output == [["email"], [""]]


def test_short_row_is_blank_for_missing_cells():
    source = [ColumnSchema("a", "A"), ColumnSchema("c", "C")]
    target = [ColumnSchema("A"), ColumnSchema("C")]

    output = convert_rows([["a", "b", "c"], ["1"]], source, target)

    assert output == [["A", "C"], ["1", ""]]


def test_source_entry_without_target_column_feeds_nothing():
    source = [ColumnSchema("a"), ColumnSchema("b", "")]
    target = [ColumnSchema("a"), ColumnSchema("b")]

    output = convert_rows([["a", "b"], ["1", "2"]], source, target)

    assert output == [["a", "b"], ["", ""]]


def test_source_entry_with_empty_column_name_is_blank():
    """A 'column: null' placeholder never reads a header, even a blank one."""
    source = [ColumnSchema("", "phone")]
    target = [ColumnSchema("phone")]

    output = convert_rows([["", "id"], ["555", "1"]], source, target)

    assert output == [["phone"], [""]]


def test_blank_cell_is_blank_even_when_mapping_has_blank_key():
    source = [ColumnSchema("flag", "flag", ("Y",), {"": "unknown", "Y": "yes"})]
    target = [ColumnSchema("flag")]

    output = convert_rows([["flag"], ["   "], [""], ["Y"]], source, target)

    assert output == [["flag"], [""], [""], ["yes"]]


def test_unmapped_value_passes_through_trimmed():
    source = [ColumnSchema("role", "role", ("staff",), {"staff": "employee"})]
    target = [ColumnSchema("role")]

    output = convert_rows([["role"], ["  contractor  "], [" staff"]], source, target)

    assert output == [["role"], ["contractor"], ["employee"]]


def test_mapping_key_lookup_is_exact_and_case_sensitive():
    source = [ColumnSchema("s", "s", ("Y",), {"Y": "true"})]
    target = [ColumnSchema("s")]

    output = convert_rows([["s"], ["y"], ["Y"]], source, target)

    assert output == [["s"], ["y"], ["true"]]


def test_composite_values_map_as_whole_strings():
    source = [ColumnSchema(
        "perms", "perms", (), {"R+W": "read,write", "R": "read"},
    )]
    target = [ColumnSchema("perms")]

    output = convert_rows([["perms"], ["R+W"], ["W+R"]], source, target)

    assert output == [["perms"], ["read,write"], ["W+R"]]


def test_values_list_is_not_enforced():
    source = [ColumnSchema("size", "size", ("S", "M", "L"))]
    target = [ColumnSchema("size")]

    output = convert_rows([["size"], ["XXL"]], source, target)

    assert output == [["size"], ["XXL"]]


# ============================================================================
# Header handling and tie-breaks
# ============================================================================

def test_header_names_are_trimmed():
    source = [ColumnSchema("name", "name")]
    target = [ColumnSchema("name")]

    output = convert_rows([["  name  "], ["x"]], source, target)

    assert output == [["name"], ["x"]]


def test_source_column_name_is_trimmed_before_lookup():
    source = [ColumnSchema(" id ", "id"), ColumnSchema("   ", "phone")]
    target = [ColumnSchema("id"), ColumnSchema("phone")]

    output = convert_rows([["id", ""], ["7", "555"]], source, target)
    scanned = convert_rows([["id", ""], ["7", "555"]], source, target, use_index=False)

    assert output == scanned == [["id", "phone"], ["7", ""]]
    assert unmapped_target_columns(source, target) == ["phone"]


def test_header_lookup_is_case_sensitive():
    source = [ColumnSchema("Name", "name")]
    target = [ColumnSchema("name")]

    output = convert_rows([["name"], ["x"]], source, target)

    assert output == [["name"], [""]]


def test_duplicate_header_last_occurrence_wins():
    source = [ColumnSchema("code", "code")]
    target = [ColumnSchema("code")]

    output = convert_rows([["code", "other", "code"], ["first", "x", "last"]], source, target)

    assert output == [["code"], ["last"]]


def test_first_source_entry_wins_for_shared_target():
    source = [ColumnSchema("nick", "name"), ColumnSchema("full_name", "name")]
    target = [ColumnSchema("name")]

    output = convert_rows([["nick", "full_name"], ["al", "Alice"]], source, target)

    assert output == [["name"], ["al"]]


def test_first_source_entry_wins_even_when_its_column_is_absent():
    """The winning entry is chosen by schema order, not by data availability."""
    source = [ColumnSchema("missing", "name"), ColumnSchema("full_name", "name")]
    target = [ColumnSchema("name")]

    output = convert_rows([["full_name"], ["Alice"]], source, target)

    assert output == [["name"], [""]]


def test_duplicate_target_columns_are_each_filled():
    source = [ColumnSchema("a", "x")]
    target = [ColumnSchema("x"), ColumnSchema("x")]

    output = convert_rows([["a"], ["1"]], source, target)

    assert output == [["x", "x"], ["1", "1"]]


# ============================================================================
# Identity schema
# ============================================================================

def test_identity_schema_round_trips_data(user_rows, user_source_schema, user_target_schema):
    converted = convert_rows(user_rows, user_source_schema, user_target_schema)
    identity = Schema.of([ColumnSchema(name, name) for name in converted[0]])

    again = convert_rows(converted, identity, identity)

    assert again == converted


def test_identity_schema_trims_whitespace():
    identity = [ColumnSchema("a", "a"), ColumnSchema("b", "b")]

    output = convert_rows([["a", "b"], [" 1", "2 "]], identity, identity)

    assert output == [["a", "b"], ["1", "2"]]


# ============================================================================
# Indexed vs linear-scan resolution
# ============================================================================

@pytest.mark.parametrize("rows,source,target", [
    (
        [["id", "username", "active"], ["1", "a", "Y"], ["2", "", "N"], ["3"]],
        [
            ColumnSchema("id", "id"),
            ColumnSchema("username", "name"),
            ColumnSchema("active", "is_active", ("Y", "N"), {"Y": "true"}),
        ],
        [ColumnSchema("id"), ColumnSchema("name"), ColumnSchema("phone"), ColumnSchema("is_active")],
    ),
    (
        [["k", "k", "v"], ["1", "2", "3"]],
        [ColumnSchema("v", "out"), ColumnSchema("k", "out"), ColumnSchema("k", "key")],
        [ColumnSchema("key"), ColumnSchema("out"), ColumnSchema("out")],
    ),
    (
        [["a"], [" "], ["x"]],
        [ColumnSchema("a"), ColumnSchema("", "a"), ColumnSchema("a", "a")],
        [ColumnSchema("a")],
    ),
])
def test_indexed_and_scan_resolution_are_identical(rows, source, target):
    indexed = convert_rows(rows, source, target, use_index=True)
    scanned = convert_rows(rows, source, target, use_index=False)

    assert indexed == scanned


def test_indexed_and_scan_resolution_match_on_full_table(
    user_rows, user_source_schema, user_target_schema,
):
    assert convert_rows(user_rows, user_source_schema, user_target_schema) == convert_rows(
        user_rows, user_source_schema, user_target_schema, use_index=False,
    )


# ============================================================================
# Errors
# ============================================================================

def test_empty_input_raises_malformed_input_error(user_source_schema, user_target_schema):
    with pytest.raises(MalformedInputError, match="at least a header row"):
        convert_rows([], user_source_schema, user_target_schema)


# ============================================================================
# Helpers
# ============================================================================

def test_build_header_index_trims_and_keeps_last_duplicate():
    assert build_header_index([" id", "name ", "id"]) == {"id": 2, "name": 1}


def test_resolve_target_sources_ignores_targets_not_in_target_schema():
    source = [ColumnSchema("a", "gone"), ColumnSchema("b", "kept")]
    target = [ColumnSchema("kept")]

    sources = resolve_target_sources(source, target)

    assert list(sources) == ["kept"]
    assert sources["kept"].column == "b"


def test_unmapped_target_columns_in_target_order(user_source_schema, user_target_schema):
    assert unmapped_target_columns(user_source_schema, user_target_schema) == ["phone"]


def test_transform_value_without_mapping_trims():
    assert transform_value("  abc ", ColumnSchema("x", "x")) == "abc"


def test_transform_value_with_mapping():
    column = ColumnSchema("x", "x", ("Y",), {"Y": "true"})

    assert transform_value("Y", column) == "true"
    assert transform_value("N", column) == "N"
    assert transform_value("", column) == ""


def test_unmapped_target_columns_counts_placeholder_entries():
    source = [ColumnSchema("", "phone"), ColumnSchema("mail", "email")]
    target = [ColumnSchema("phone"), ColumnSchema("email"), ColumnSchema("fax")]

    assert unmapped_target_columns(source, target) == ["phone", "fax"]
