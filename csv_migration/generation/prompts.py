"""
Instruction prompts for model-assisted schema generation.

Two prompts drive generation:
  - The target prompt asks the model to classify every column of the target
    sample as categorical (listing its values) or dynamic.
  - The source prompt gives the model the source sample plus the target
    schema and asks for one mapping entry per target column, including
    `values_mapping` when both sides are categorical.

Templates use `string.Template` placeholders ($csv_data, $target_schema_json)
because the prompts themselves are full of literal JSON braces.
"""

import json
from string import Template

from csv_migration.schema.model import Schema

_CLASSIFICATION_RULES = """\
A column is CATEGORICAL (has "values") if values represent:
- Fixed categories, types, or classifications
- Status or state indicators (active/inactive, pending/approved/rejected)
- Boolean flags (true/false, yes/no, Y/N, 1/0)
- Predefined options or enums (role: admin/user/guest, priority: low/medium/high)
- Fixed attributes (size: S/M/L, gender: M/F/Other)

A column is DYNAMIC (empty "values") if values are:
- Unique identifiers (id, uuid, code, reference numbers)
- Names, titles, or descriptive text
- Numeric measurements (price, quantity, amount, score, age)
- Dates and timestamps (created_at, updated_at, birth_date)
- Email addresses, URLs, phone numbers
- Free-text fields (notes, descriptions, comments)
- Foreign key IDs that reference other entities (user_id, product_id, category_id)"""

_RELATIONSHIP_RULES = """\
- If a column name ends with "_id" (like user_id, store_id, category_id), treat it as DYNAMIC
- If another column exists with the same prefix but different suffix (like user_id + user_name, store_id + store_name), BOTH columns must be DYNAMIC
- Even if these related columns have few unique values, they represent references to other data, not fixed categories"""

_PATTERN_RULES = """\
- Columns with paired patterns like (X_id, X_name) or (X_code, X_description) indicate relationships -> both DYNAMIC
- Columns ending with _count, _total, _amount, _price, _quantity -> always DYNAMIC
- Columns ending with _type, _status, _level, _priority -> likely CATEGORICAL"""

_COMPOSITE_RULES = """\
- Composite values may use different separators: "read,write" or "read, write" (with/without spaces)
- Maintain the TARGET SCHEMA separator format in "values_mapping"
- Example: CSV "trx, history" maps to TARGET "transaction,history" (match target format)"""

TARGET_SCHEMA_PROMPT = Template("""
You are a strict data schema (JSON) generator for tabular data analysis.

Analyze ALL columns from the CSV below. The CSV contains complete data - all categorical values that exist are present in the dataset.

CSV DATA:
$csv_data

Return ONLY valid JSON in this format:
[
  {
    "column": "column_name",
    "values": ["value1", "value2"]
  }
]

CLASSIFICATION RULES:
""" + _CLASSIFICATION_RULES + """

CRITICAL RULES FOR RELATIONSHIPS:
""" + _RELATIONSHIP_RULES + """

PATTERN DETECTION:
""" + _PATTERN_RULES + """

COMPOSITE VALUE HANDLING:
""" + _COMPOSITE_RULES + """

OUTPUT REQUIREMENTS:
- Pure JSON only (no markdown, no explanations, no preamble)
- Number of objects MUST equal number of CSV columns
- Preserve exact CSV header names (case-sensitive)
- Maintain CSV column order

EXAMPLE:
[
  {"column": "id", "values": []},
  {"column": "name", "values": []},
  {"column": "email", "values": []},
  {"column": "age", "values": []},
  {"column": "role", "values": ["admin", "manager", "employee"]},
  {"column": "status", "values": ["active", "inactive"]},
  {"column": "department_id", "values": []},
  {"column": "department_name", "values": []},
  {"column": "permissions", "values": ["read", "write", "delete", "read,write", "read,write,delete"]},
  {"column": "created_at", "values": []}
]
""")

SOURCE_SCHEMA_PROMPT = Template("""
You are a strict data mapping schema (JSON) generator for tabular data analysis.

Analyze ALL columns from the CSV below and map them to the target schema. The CSV contains complete data - all categorical values that exist are present in the dataset.

CSV DATA:
$csv_data

TARGET SCHEMA JSON:
$target_schema_json

Return ONLY valid JSON in this format:
[
  {
    "column": "csv_column_name",
    "target_column": "target_column_name",
    "values": ["value1", "value2"],
    "values_mapping": {
      "value1": "target_value1",
      "value2": "target_value2"
    }
  }
]

COLUMN MAPPING RULES:
1. Match CSV columns to TARGET SCHEMA columns based on:
   - Exact or similar names (username -> name, active -> is_active)
   - Semantic meaning (location_id -> store_id, user_role -> role)
   - Data type and purpose (both are IDs, both are status fields, etc.)

2. Map each TARGET SCHEMA object to the most appropriate CSV column
3. If no suitable CSV column exists, still include the target_column with "column": null

VALUE CLASSIFICATION RULES:
""" + _CLASSIFICATION_RULES + """

CRITICAL RULES FOR RELATIONSHIPS:
""" + _RELATIONSHIP_RULES + """
- Set "values" to empty array [] and "values_mapping" to null for all DYNAMIC columns

PATTERN DETECTION:
""" + _PATTERN_RULES + """

COMPOSITE VALUE HANDLING:
""" + _COMPOSITE_RULES + """

VALUE MAPPING RULES:
"values_mapping" is ONLY populated when:
1. Both CSV column "values" AND TARGET SCHEMA "values" are NOT empty (both are categorical)
2. Map each CSV value to the closest semantic meaning in TARGET SCHEMA values
3. Consider abbreviations, synonyms, and common variations (Y->true, staff->employee, trx->transaction)
4. For composite values (comma-separated), map each component then reconstruct (trx,history -> transaction,history)

Set "values_mapping" to null when:
- CSV column is DYNAMIC (empty "values"), OR
- TARGET SCHEMA column is DYNAMIC (empty "values"), OR
- Both are DYNAMIC

OUTPUT REQUIREMENTS:
- Pure JSON only (no markdown, no explanations, no preamble)
- Number of objects MUST equal number of TARGET SCHEMA objects
- Maintain TARGET SCHEMA object order
- Use exact TARGET SCHEMA column names for "target_column"

EXAMPLE:

CSV: id, username, age, active, user_role, permissions, location_id, location_name
TARGET SCHEMA: id, name, age, is_active, role, permissions, store_id, store_name

[
  {"column": "id", "target_column": "id", "values": [], "values_mapping": null},
  {"column": "username", "target_column": "name", "values": [], "values_mapping": null},
  {"column": "age", "target_column": "age", "values": [], "values_mapping": null},
  {
    "column": "active",
    "target_column": "is_active",
    "values": ["Y", "N"],
    "values_mapping": {"Y": "true", "N": "false"}
  },
  {
    "column": "user_role",
    "target_column": "role",
    "values": ["admin", "manager", "staff"],
    "values_mapping": {"admin": "admin", "manager": "manager", "staff": "employee"}
  },
  {
    "column": "permissions",
    "target_column": "permissions",
    "values": ["trx", "history", "setting", "trx,history", "trx, history, setting"],
    "values_mapping": {
      "trx": "transaction",
      "history": "history",
      "setting": "settings",
      "trx,history": "transaction,history",
      "trx, history, setting": "transaction,history,settings"
    }
  },
  {"column": "location_id", "target_column": "store_id", "values": [], "values_mapping": null},
  {"column": "location_name", "target_column": "store_name", "values": [], "values_mapping": null}
]
""")


def build_target_schema_prompt(csv_text: str) -> str:
    """Render the target-schema classification prompt for a CSV sample."""
    return TARGET_SCHEMA_PROMPT.substitute(csv_data=csv_text)


def build_source_schema_prompt(csv_text: str, target_schema: Schema) -> str:
    """
    Render the source-to-target mapping prompt.

    Args:
        csv_text: Source sample as CSV text.
        target_schema: Previously generated (or hand-written) target schema;
                      embedded as indented JSON.
    """
    target_schema_json = json.dumps(target_schema.to_records(), indent=2, ensure_ascii=False)
    return SOURCE_SCHEMA_PROMPT.substitute(
        csv_data=csv_text,
        target_schema_json=target_schema_json,
    )
