"""Custom exceptions for the processing module."""

from typing import Any


class YAMLProcessingError(Exception):
    """Raised when errors are encountered during YAML processing."""

    def __init__(self, errors: list[dict[str, Any]]):
        super().__init__("Errors encountered during YAML processing.")
        self.errors = errors


class InvalidConfigurationError(Exception):
    """Raised when a desired project field cannot be resolved."""

    def __init__(self, field: str, value: Any, reason: str | None = None) -> None:
        """Initializes the exception with the offending field and value."""
        message = f"Invalid value {value!r} for field '{field}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.field = field
        self.value = value
        self.reason = reason
