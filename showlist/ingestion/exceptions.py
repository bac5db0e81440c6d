"""
Exceptions raised by the ingestion layer.

Only infrastructure problems are raised. Data-quality problems in the
listings are recorded as ParseError / ParseWarning diagnostics instead.
"""


class IngestionError(Exception):
    """Base class for failures that abort a whole run."""


class SourceFileError(IngestionError):
    """A source listing is missing or cannot be read."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read source file {path}: {reason}")


class ConfigError(IngestionError):
    """Configuration is missing or invalid."""
