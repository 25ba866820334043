"""
Schema generation from sample CSVs.

**Conceptual**: Generation runs in two steps, target first:
  1. The target sample is classified column by column into a target schema
     (categorical columns list their values, dynamic ones don't).
  2. The source sample plus that target schema produce the source schema:
     one entry per target column, naming the source column that feeds it and,
     for categorical pairs, a values mapping.

The model call is non-deterministic, so generated schemas are meant to be
reviewed (and hand-edited if needed) before conversion.
"""

from pathlib import Path
from typing import Callable, Optional

from csv_migration.data.io import read_csv_text
from csv_migration.generation.prompts import (
    build_source_schema_prompt,
    build_target_schema_prompt,
)
from csv_migration.generation.response_parser import parse_ai_response
from csv_migration.schema.model import Schema
from csv_migration.utils.logging_config import get_logger

logger = get_logger(__name__)


class SchemaGenerator:
    """
    Generates target and source schemas by prompting a model.

    Args:
        client: Anything with `generate(prompt: str) -> str`; normally an
               OllamaClient.
        echo: Optional callback receiving (label, text) for every prompt and
             model answer, used by actions to show the exchange.
    """

    def __init__(self, client, echo: Optional[Callable[[str, str], None]] = None):
        self.client = client
        self.echo = echo

    def generate_target_schema(self, csv_path: Path | str) -> Schema:
        """
        Classify every column of a target sample CSV.

        Raises:
            FileNotFoundError / CsvReadError: If the sample can't be read.
            OllamaClientError / requests.Timeout: If the model call fails.
            SchemaResponseError: If the answer isn't a schema document.
        """
        csv_text = read_csv_text(csv_path)
        prompt = build_target_schema_prompt(csv_text)
        schema = self._ask("target schema", prompt)

        logger.info(
            "schema_generated",
            side="target",
            sample=str(csv_path),
            columns=len(schema),
            categorical=sum(1 for entry in schema if entry.is_categorical),
        )
        return schema

    def generate_source_schema(self, csv_path: Path | str, target_schema: Schema) -> Schema:
        """
        Map a source sample CSV onto an existing target schema.

        Raises:
            FileNotFoundError / CsvReadError: If the sample can't be read.
            OllamaClientError / requests.Timeout: If the model call fails.
            SchemaResponseError: If the answer isn't a schema document.
        """
        csv_text = read_csv_text(csv_path)
        prompt = build_source_schema_prompt(csv_text, target_schema)
        schema = self._ask("source schema", prompt)

        logger.info(
            "schema_generated",
            side="source",
            sample=str(csv_path),
            columns=len(schema),
            mapped=sum(1 for entry in schema if entry.is_mapped),
        )
        return schema

    def _ask(self, label: str, prompt: str) -> Schema:
        if self.echo is not None:
            self.echo(f"GENERATE {label.upper()} PROMPT", prompt)

        answer = self.client.generate(prompt)

        if self.echo is not None:
            self.echo(f"GENERATE {label.upper()} AI RESPONSE", answer)

        return parse_ai_response(answer)
