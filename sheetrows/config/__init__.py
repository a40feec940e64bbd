"""YAML run configuration."""
