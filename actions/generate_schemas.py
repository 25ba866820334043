#!/usr/bin/env python3
"""
Generate target and source schemas from sample CSVs with an Ollama model.

**Usage**:
    python actions/generate_schemas.py --source samples/old_users.csv \\
        --target samples/new_users.csv --mode cloud --name users
    python actions/generate_schemas.py      # prompts for every value

**What this script does**:
  1. Collect sample paths, AI mode and schema name (prompting when missing)
  2. Load generator settings (endpoints, models, OLLAMA_API_KEY)
  3. Generate the target schema from the target sample and save it to
     {output_dir}/schemas/target_schema_{name}.json
  4. Generate the source schema (mapped onto that target schema) and save it
     to {output_dir}/schemas/source_schema_{name}.json

Review both files before running actions/convert_csv.py: model output is not
deterministic.

**Requirements**:
  - Cloud mode: OLLAMA_API_KEY set in .env (https://ollama.com/settings/keys)
  - Local mode: an Ollama server on localhost:11434 with the model pulled
"""

import argparse
import sys
from pathlib import Path

import requests

# Add project root to Python path so we can import csv_migration modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from csv_migration.config.settings import GeneratorSettings, get_settings, normalize_ai_mode
from csv_migration.data.io import CsvReadError
from csv_migration.generation.generator import SchemaGenerator
from csv_migration.generation.ollama_client import (
    OllamaAuthenticationError,
    OllamaClient,
    OllamaClientError,
)
from csv_migration.generation.response_parser import SchemaResponseError
from csv_migration.schema.io import save_schema_json
from csv_migration.utils.logging_config import configure_logging

DIVIDER = "-" * 80


def parse_args(argv=None):
    """
    Parse command line arguments.

    Returns:
        Namespace with attributes: source, target, mode, name, output_dir,
        verbose, log_level.
    """
    parser = argparse.ArgumentParser(
        description="Generate source/target column schemas from sample CSV files",
        epilog="""
Examples:
  # Cloud model (needs OLLAMA_API_KEY)
  python actions/generate_schemas.py --source old.csv --target new.csv --name users

  # Local Ollama server
  python actions/generate_schemas.py --source old.csv --target new.csv --mode local --name users
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--source", help="Source sample CSV path")
    parser.add_argument("--target", help="Target sample CSV path")
    parser.add_argument("--mode", help="AI mode: local or cloud (default: CSV_MIGRATION_AI_MODE or cloud)")
    parser.add_argument("--name", help="Name for the schema files")
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Output directory (default: CSV_MIGRATION_OUTPUT_DIR or output/)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print every prompt and model answer",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level for structured logs on stderr (default: WARNING)",
    )

    return parser.parse_args(argv)


def resolve_inputs(args: argparse.Namespace, input_fn=None) -> argparse.Namespace:
    """
    Fill missing arguments by prompting. An empty mode answer keeps the
    configured default; the mode is normalized case-insensitively.

    Raises:
        ValueError: If a required value is empty or the mode is unknown.
    """
    input_fn = input_fn or input

    if not args.source:
        args.source = input_fn("Please enter the source sample CSV path: ").strip()
    if not args.target:
        args.target = input_fn("Please enter the target sample CSV path: ").strip()
    if args.mode is None:
        args.mode = input_fn("Please enter AI mode (CLOUD/LOCAL) [default: settings]: ").strip()
    if not args.name:
        args.name = input_fn("Please enter a name for the schemas: ").strip()

    for attr in ("source", "target", "name"):
        if not getattr(args, attr):
            raise ValueError(f"A value for {attr} is required.")

    args.mode = normalize_ai_mode(args.mode) if args.mode else None
    return args


def schema_output_paths(output_dir: Path | str, name: str):
    """Return (target_path, source_path) under {output_dir}/schemas/."""
    schemas_dir = Path(output_dir) / "schemas"
    return (
        schemas_dir / f"target_schema_{name}.json",
        schemas_dir / f"source_schema_{name}.json",
    )


def print_exchange(label: str, text: str) -> None:
    """Echo a prompt or model answer between dividers."""
    print("\n" + DIVIDER)
    print(f"{label}:")
    print(DIVIDER)
    print(text)
    print(DIVIDER)


def main(argv=None):
    """
    Main entry point for the script.

    **Exit codes**:
      - 0: Success (both schemas written)
      - 1: Configuration or input error (missing API key, unreadable sample)
      - 2: Fatal error (model call failed, unusable model answer)
      - 130: Interrupted
    """
    try:
        args = parse_args(argv)
        configure_logging(args.log_level)

        try:
            args = resolve_inputs(args)
            generator_settings = GeneratorSettings.from_env(mode=args.mode)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        output_dir = args.output_dir or get_settings().output_dir
        target_file, source_file = schema_output_paths(output_dir, args.name)

        echo = print_exchange if args.verbose else None

        with OllamaClient(generator_settings) as client:
            generator = SchemaGenerator(client, echo=echo)

            try:
                print(f"Generating {target_file.name} from sample data ({generator_settings.mode} mode)...")
                target_schema = generator.generate_target_schema(args.target)
                save_schema_json(target_file, target_schema)
                print(f"✓ {target_file} generated successfully")

                print(f"Generating {source_file.name}...")
                source_schema = generator.generate_source_schema(args.source, target_schema)
                save_schema_json(source_file, source_schema)
                print(f"✓ {source_file} generated successfully")

            except (FileNotFoundError, CsvReadError) as e:
                print(f"Error: {e}", file=sys.stderr)
                sys.exit(1)

            except OllamaAuthenticationError as e:
                print(f"Error: Authentication failed: {e}", file=sys.stderr)
                print("Check your OLLAMA_API_KEY in .env file", file=sys.stderr)
                sys.exit(1)

            except (OllamaClientError, requests.Timeout) as e:
                print(f"Error: Model call failed: {e}", file=sys.stderr)
                sys.exit(2)

            except SchemaResponseError as e:
                print(f"Error: Failed to parse AI response: {e}", file=sys.stderr)
                sys.exit(2)

        sys.exit(0)

    except KeyboardInterrupt:
        print("\nInterrupted by user. Exiting...")
        sys.exit(130)


if __name__ == "__main__":
    main()
