#!/usr/bin/env python3
"""
Convert a source CSV into the target layout using a pair of schema files.

**Usage**:
    python actions/convert_csv.py --data data/users.csv \\
        --source-schema output/schemas/source_schema_users.json \\
        --target-schema output/schemas/target_schema_users.json \\
        --name users
    python actions/convert_csv.py            # prompts for every value

**What this script does**:
  1. Collect paths from arguments, prompting interactively for missing ones
  2. Load source and target schemas
  3. Read the source CSV and convert every row
  4. Save to {output_dir}/converted_{name}.csv
  5. Print the converted row count and any target columns left blank

**Example output**:
    $ python actions/convert_csv.py --data users.csv ... --name users
    Converting CSV data...
    ✓ Successfully converted 120 rows to output/converted_users.csv
"""

import argparse
import sys
from pathlib import Path

# Add project root to Python path so we can import csv_migration modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from csv_migration.config.settings import get_settings
from csv_migration.conversion.engine import MalformedInputError
from csv_migration.conversion.pipeline import convert_csv_file
from csv_migration.data.io import CsvReadError, CsvWriteError
from csv_migration.schema.model import SchemaDecodeError
from csv_migration.utils.logging_config import configure_logging


def parse_args(argv=None):
    """
    Parse command line arguments.

    Every path is optional on the command line; missing values are asked for
    interactively by `resolve_inputs`.

    Returns:
        Namespace with attributes: data, source_schema, target_schema, name,
        output_dir, log_level.
    """
    parser = argparse.ArgumentParser(
        description="Convert a CSV file from a source layout to a target layout",
        epilog="""
Examples:
  # Fully scripted
  python actions/convert_csv.py --data users.csv \\
      --source-schema output/schemas/source_schema_users.json \\
      --target-schema output/schemas/target_schema_users.json --name users

  # Interactive
  python actions/convert_csv.py
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--data", help="Source data CSV path")
    parser.add_argument("--source-schema", help="Source schema JSON path")
    parser.add_argument("--target-schema", help="Target schema JSON path")
    parser.add_argument("--name", help="Name for the output file (converted_<name>.csv)")
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Output directory (default: CSV_MIGRATION_OUTPUT_DIR or output/)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level for structured logs on stderr (default: WARNING)",
    )

    return parser.parse_args(argv)


def prompt_value(label: str, input_fn=None) -> str:
    """Ask for a value on stdin (or via input_fn) and return it trimmed."""
    return (input_fn or input)(f"Please enter {label}: ").strip()


def resolve_inputs(args: argparse.Namespace, input_fn=None) -> argparse.Namespace:
    """
    Fill missing arguments by prompting, in the same order as the flags.

    Raises:
        ValueError: If a required value is still empty after prompting.
    """
    prompts = [
        ("data", "the source data CSV path"),
        ("source_schema", "the source schema JSON path"),
        ("target_schema", "the target schema JSON path"),
        ("name", "a name for the output file"),
    ]
    for attr, label in prompts:
        if not getattr(args, attr):
            setattr(args, attr, prompt_value(label, input_fn))
        if not getattr(args, attr):
            raise ValueError(f"A value for {attr.replace('_', ' ')} is required.")
    return args


def converted_output_path(output_dir: Path | str, name: str) -> Path:
    """Return {output_dir}/converted_{name}.csv."""
    return Path(output_dir) / f"converted_{name}.csv"


def main(argv=None):
    """
    Main entry point for the script.

    **Exit codes**:
      - 0: Success
      - 1: Input error (missing file, invalid schema or CSV)
      - 2: Fatal error (unexpected failure, output not writable)
      - 130: Interrupted
    """
    try:
        args = parse_args(argv)
        configure_logging(args.log_level)

        try:
            args = resolve_inputs(args)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        output_dir = args.output_dir or get_settings().output_dir
        output_file = converted_output_path(output_dir, args.name)

        print("Converting CSV data...")
        try:
            result = convert_csv_file(
                source_data_path=args.data,
                source_schema_path=args.source_schema,
                target_schema_path=args.target_schema,
                output_path=output_file,
            )
        except (FileNotFoundError, SchemaDecodeError, CsvReadError, MalformedInputError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except CsvWriteError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(2)

        print(f"✓ Successfully converted {result.row_count} rows to {result.output_path}")
        if result.unmapped_targets:
            print(
                "  ! No source column for: "
                + ", ".join(result.unmapped_targets)
                + " (left blank)"
            )

        sys.exit(0)

    except KeyboardInterrupt:
        print("\nInterrupted by user. Exiting...")
        sys.exit(130)


if __name__ == "__main__":
    main()
