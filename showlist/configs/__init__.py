"""Configuration: environment settings and YAML lookup tables."""
