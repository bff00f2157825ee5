"""Exceptions raised by the exporter."""


class ConfigurationError(Exception):
    """Raised when application configuration is invalid."""

    pass
