"""Shared Rich Console instances for the ngc CLI."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

_console: Console | None = None
_err_console: Console | None = None


def get_console() -> Console:
    """Get the shared stdout Console."""
    global _console
    if _console is None:
        _console = Console(highlight=False, markup=True)
    return _console


def get_err_console() -> Console:
    """Get the shared stderr Console, used for errors and status lines."""
    global _err_console
    if _err_console is None:
        _err_console = Console(stderr=True, highlight=False, markup=True)
    return _err_console


def print_error(message: str) -> None:
    get_err_console().print(f"[red]Error:[/] {escape(message)}")
