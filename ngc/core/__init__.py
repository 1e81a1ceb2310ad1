"""Core types, errors, and constants."""

from ngc.core.errors import (
    BridgeError,
    ConfigError,
    HttpParseError,
    NgcError,
    TmuxError,
)

__all__ = [
    "BridgeError",
    "ConfigError",
    "HttpParseError",
    "NgcError",
    "TmuxError",
]
