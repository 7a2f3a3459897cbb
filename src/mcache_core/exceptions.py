"""Custom exception hierarchy for mcache."""

from __future__ import annotations


class McacheError(Exception):
    """Base exception for all mcache errors."""


class TemplateError(McacheError):
    """Raised when a key template contains a malformed placeholder."""


class BindingError(McacheError):
    """Raised when a placeholder references an unknown argument or field."""


class StoreError(McacheError):
    """Raised when a read or write against the backing store fails."""

    def __init__(self, message: str, *, operation: str = "", key: str | None = None) -> None:
        """Record which store operation failed and for which key."""
        super().__init__(message)
        self.operation = operation
        self.key = key


class CodecError(McacheError):
    """Raised when a result cannot be serialized or a stored value deserialized."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        """Record the cache key involved, when known."""
        super().__init__(message)
        self.key = key


class InitializationError(McacheError):
    """Raised when a cached function runs before the store handle is installed."""
