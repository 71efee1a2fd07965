"""Domain layer — schemas, parsing, and pure genesis rules.

This layer depends only on stdlib, pydantic, and ruamel.yaml.
It must never import from services, infrastructure, commands, or config.
"""
