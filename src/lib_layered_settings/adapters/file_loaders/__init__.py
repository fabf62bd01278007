"""Structured file loaders (JSON, TOML, YAML)."""
