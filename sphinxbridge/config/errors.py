"""
Error Taxonomy - Consistent error codes across the bridge.

Usage:
    from sphinxbridge.config.errors import ErrorCode, SphinxBridgeError

    raise UnsupportedOperatorError("like")
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error output."""

    # Query translation errors
    QUERY_INVALID = "QUERY_INVALID"
    QUERY_UNSUPPORTED_OPERATOR = "QUERY_UNSUPPORTED_OPERATOR"
    ARGUMENT_TYPE = "ARGUMENT_TYPE"

    # Mapping / index errors
    MAPPING_NOT_FOUND = "MAPPING_NOT_FOUND"
    INDEX_CONFIGURATION = "INDEX_CONFIGURATION"

    # Realtime write errors
    WRITE_MISSING_IDENTIFIER = "WRITE_MISSING_IDENTIFIER"

    # Transport errors
    TRANSPORT_FAILED = "TRANSPORT_FAILED"


class SphinxBridgeError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a serializable dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class QueryTranslationError(SphinxBridgeError, ValueError):
    """A query specification could not be translated."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.QUERY_INVALID,
    ) -> None:
        super().__init__(code, message, details)


class UnsupportedOperatorError(QueryTranslationError):
    """A filter or order uses an operator the backend cannot express."""

    def __init__(self, operator: str, kind: str = "filter", attribute: str | None = None) -> None:
        self.operator = operator
        self.attribute = attribute
        super().__init__(
            f"Unsupported Sphinx {kind} operator {operator}",
            {"operator": operator, "kind": kind, "attribute": attribute},
            code=ErrorCode.QUERY_UNSUPPORTED_OPERATOR,
        )


class ArgumentTypeError(SphinxBridgeError, TypeError):
    """A call received an argument of the wrong shape."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.ARGUMENT_TYPE, message, details)


class MappingLookupError(SphinxBridgeError, LookupError):
    """An attribute has no registered mapping."""

    def __init__(self, attribute: str, index: str | None = None) -> None:
        self.attribute = attribute
        where = f" on index {index}" if index else ""
        super().__init__(
            ErrorCode.MAPPING_NOT_FOUND,
            f"No mapping registered for attribute {attribute!r}{where}",
            {"attribute": attribute, "index": index},
        )


class IndexConfigurationError(SphinxBridgeError, ValueError):
    """An index was used or configured incorrectly."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.INDEX_CONFIGURATION, message, details)


class MissingIdentifierError(SphinxBridgeError, ValueError):
    """A realtime write was attempted on a record without an ID."""

    def __init__(self, operation: str, index: str | None = None) -> None:
        self.operation = operation
        super().__init__(
            ErrorCode.WRITE_MISSING_IDENTIFIER,
            f"Attempted to {operation} a record without an ID",
            {"operation": operation, "index": index},
        )


class TransportError(SphinxBridgeError):
    """Failure reported by a search transport."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.TRANSPORT_FAILED, message, details)
