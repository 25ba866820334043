"""
Configuration loading and validation for runtime settings.

Provides strongly typed settings objects for the schema generator endpoints,
credentials and output locations, validated upfront.
"""
