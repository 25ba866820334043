"""
csv_migration – schema-driven conversion of CSV data between column layouts.

Converts rows from a source vocabulary to a target vocabulary using a pair of
declarative column schemas, with optional model-assisted schema generation.
"""
