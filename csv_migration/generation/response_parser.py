"""
Parse model answers into Schema objects.

Models rarely return bare JSON. This module strips the usual wrapping before
decoding:
  - Markdown code fences (a leading ```json or ``` and a trailing ```).
  - Reasoning blocks: when the answer contains "<think>", only the text after
    the last "</think>" is kept.
"""

import json

from csv_migration.schema.model import Schema, SchemaDecodeError

_THINK_OPEN = "<think>"
_THINK_CLOSE = "</think>"


class SchemaResponseError(Exception):
    """
    Raised when a model answer is not a decodable schema document.

    The message includes the cleaned answer so the failing generation can be
    inspected without re-running the model.
    """
    pass


def clean_ai_response(response: str) -> str:
    """
    Strip code fences and reasoning blocks from a model answer.

    Example:
        >>> clean_ai_response('```json\\n[{"column": "id"}]\\n```')
        '[{"column": "id"}]'
        >>> clean_ai_response('<think>hmm</think>\\n[]')
        '[]'
    """
    text = response.strip()

    if text.startswith("```json"):
        text = text[len("```json"):]
    if text.startswith("```"):
        text = text[len("```"):]
    if text.endswith("```"):
        text = text[:-len("```")]
    text = text.strip()

    if _THINK_OPEN in text:
        last_close = text.rfind(_THINK_CLOSE)
        if last_close != -1:
            text = text[last_close + len(_THINK_CLOSE):].strip()

    return text.strip()


def parse_ai_response(response: str) -> Schema:
    """
    Decode a model answer into a Schema.

    Args:
        response: Raw model answer.

    Returns:
        Decoded Schema.

    Raises:
        SchemaResponseError: If the cleaned answer is not valid JSON or not a
                            valid schema document.
    """
    cleaned = clean_ai_response(response)

    try:
        document = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise SchemaResponseError(
            f"JSON decode error: {e.msg} (line {e.lineno}, column {e.colno})\n"
            f"Cleaned response: {cleaned}"
        ) from e

    try:
        return Schema.from_records(document)
    except SchemaDecodeError as e:
        raise SchemaResponseError(f"{e}\nCleaned response: {cleaned}") from e
