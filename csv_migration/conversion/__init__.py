"""
Conversion engine and file-level conversion pipeline.

Applies a source schema and a target schema to raw rows and emits the
converted table.
"""
