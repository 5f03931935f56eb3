"""Exceptions that cross the parliament boundary."""


class ParliamentError(Exception):
    """Base for errors surfaced to callers."""


class ConfigurationError(ParliamentError):
    """Raised for unknown agent types or malformed agent configuration."""


class PreconditionViolation(ParliamentError):
    """Raised when an operation receives input it is not defined for."""
