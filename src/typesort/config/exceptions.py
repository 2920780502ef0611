"""Custom exceptions for configuration management."""

from typesort.errors import TypesortError


class ConfigError(TypesortError):
    """Raised when configuration data cannot be processed."""
