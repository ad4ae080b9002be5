"""
Configuration - Bridge settings and error taxonomy.
"""

from .errors import (
    ArgumentTypeError,
    ErrorCode,
    IndexConfigurationError,
    MappingLookupError,
    MissingIdentifierError,
    QueryTranslationError,
    SphinxBridgeError,
    TransportError,
    UnsupportedOperatorError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "SphinxBridgeError",
    "QueryTranslationError",
    "UnsupportedOperatorError",
    "ArgumentTypeError",
    "MappingLookupError",
    "IndexConfigurationError",
    "MissingIdentifierError",
    "TransportError",
]
