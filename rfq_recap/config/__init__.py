"""Configuration loading (YAML, validated with JSON schema)."""
