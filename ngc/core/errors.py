"""Typed exception hierarchy for ngc."""

from __future__ import annotations


class NgcError(Exception):
    """Base class for all ngc errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(NgcError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""


class BridgeError(NgcError):
    """Base class for IDE bridge transport errors."""


class HttpParseError(BridgeError):
    """Raised when a buffered HTTP request is malformed beyond recovery.

    Incomplete input is not an error; the decoder reports it by returning
    no request.
    """


class TmuxError(NgcError):
    """Raised when a tmux command fails."""

    def __init__(self, args: list[str], returncode: int, stderr: str = "") -> None:
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"tmux {' '.join(args)} exited with {returncode}{detail}")
