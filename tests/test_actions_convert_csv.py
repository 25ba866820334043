"""
Tests for the convert_csv action.

**Purpose**: Verify argument resolution (flags first, interactive prompts for
anything missing), output naming, and the exit codes main() reports for
success and each class of failure.
"""

import json
import sys
from argparse import Namespace
from pathlib import Path

import pytest

# Add project root to path so we can import actions module
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from actions.convert_csv import converted_output_path, main, resolve_inputs


@pytest.fixture
def migration_files(tmp_path):
    data = tmp_path / "users.csv"
    data.write_text("id,active\n1,Y\n2,N\n", encoding="utf-8")

    source_schema = tmp_path / "source.json"
    source_schema.write_text(json.dumps([
        {"column": "id", "target_column": "id", "values": []},
        {
            "column": "active",
            "target_column": "is_active",
            "values": ["Y", "N"],
            "values_mapping": {"Y": "true", "N": "false"},
        },
    ]), encoding="utf-8")

    target_schema = tmp_path / "target.json"
    target_schema.write_text(json.dumps([
        {"column": "id", "values": []},
        {"column": "is_active", "values": ["true", "false"]},
        {"column": "email", "values": []},
    ]), encoding="utf-8")

    return data, source_schema, target_schema


def run_main(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


# ============================================================================
# Argument resolution
# ============================================================================

def test_resolve_inputs_prompts_only_for_missing_values():
    args = Namespace(data="users.csv", source_schema=None, target_schema=None, name=None)
    answers = iter(["  source.json ", "target.json", "users"])
    asked = []

    def fake_input(prompt):
        asked.append(prompt)
        return next(answers)

    resolved = resolve_inputs(args, input_fn=fake_input)

    assert resolved.data == "users.csv"
    assert resolved.source_schema == "source.json"
    assert resolved.target_schema == "target.json"
    assert resolved.name == "users"
    assert len(asked) == 3
    assert "source schema" in asked[0]


def test_resolve_inputs_empty_answer_raises():
    args = Namespace(data=None, source_schema="s", target_schema="t", name="n")

    with pytest.raises(ValueError, match="data is required"):
        resolve_inputs(args, input_fn=lambda prompt: "   ")


def test_converted_output_path():
    assert converted_output_path("output", "users") == Path("output") / "converted_users.csv"


# ============================================================================
# main()
# ============================================================================

def test_main_converts_and_reports(tmp_path, migration_files, capsys):
    data, source_schema, target_schema = migration_files
    out_dir = tmp_path / "out"

    code = run_main([
        "--data", str(data),
        "--source-schema", str(source_schema),
        "--target-schema", str(target_schema),
        "--name", "users",
        "--output-dir", str(out_dir),
    ])

    assert code == 0
    assert (out_dir / "converted_users.csv").read_text(encoding="utf-8") == (
        "id,is_active,email\n1,true,\n2,false,\n"
    )
    stdout = capsys.readouterr().out
    assert "Successfully converted 2 rows" in stdout
    assert "No source column for: email" in stdout


def test_main_invalid_schema_exits_1(tmp_path, migration_files, capsys):
    data, source_schema, target_schema = migration_files
    source_schema.write_text("{broken", encoding="utf-8")

    code = run_main([
        "--data", str(data),
        "--source-schema", str(source_schema),
        "--target-schema", str(target_schema),
        "--name", "users",
        "--output-dir", str(tmp_path / "out"),
    ])

    assert code == 1
    assert "invalid JSON" in capsys.readouterr().err
    assert not (tmp_path / "out" / "converted_users.csv").exists()


def test_main_missing_data_file_exits_1(tmp_path, migration_files):
    _, source_schema, target_schema = migration_files

    code = run_main([
        "--data", str(tmp_path / "missing.csv"),
        "--source-schema", str(source_schema),
        "--target-schema", str(target_schema),
        "--name", "users",
        "--output-dir", str(tmp_path / "out"),
    ])

    assert code == 1


def test_main_prompts_for_missing_name(tmp_path, migration_files, monkeypatch):
    data, source_schema, target_schema = migration_files
    asked = []

    def fake_input(prompt):
        asked.append(prompt)
        return " users "

    monkeypatch.setattr("builtins.input", fake_input)

    code = run_main([
        "--data", str(data),
        "--source-schema", str(source_schema),
        "--target-schema", str(target_schema),
        "--output-dir", str(tmp_path / "out"),
    ])

    assert code == 0
    assert asked == ["Please enter a name for the output file: "]
    assert (tmp_path / "out" / "converted_users.csv").exists()


def test_main_empty_prompt_answer_exits_1(tmp_path, migration_files, monkeypatch):
    data, source_schema, target_schema = migration_files
    monkeypatch.setattr("builtins.input", lambda prompt: "")

    code = run_main([
        "--data", str(data),
        "--source-schema", str(source_schema),
        "--target-schema", str(target_schema),
        "--output-dir", str(tmp_path / "out"),
    ])

    assert code == 1


def test_main_unwritable_output_exits_2(tmp_path, migration_files):
    data, source_schema, target_schema = migration_files
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")

    code = run_main([
        "--data", str(data),
        "--source-schema", str(source_schema),
        "--target-schema", str(target_schema),
        "--name", "users",
        "--output-dir", str(blocker),
    ])

    assert code == 2
