"""
Model-assisted schema generation.

Builds instruction prompts from sample CSVs, calls an Ollama model endpoint
and decodes its answer into column schemas.
"""
