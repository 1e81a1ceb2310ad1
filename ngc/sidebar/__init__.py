"""Editor-side helpers: terminal specs, tmux control, selection and diagnostics."""

from ngc.sidebar.commands import (
    cli_choices,
    next_active_index,
    next_preset,
    preset_index,
    resolve_cli_target,
)
from ngc.sidebar.diagnostics import Diagnostic, format_diagnostics
from ngc.sidebar.selection import compose_send_text, extract_selection
from ngc.sidebar.terminal import (
    TerminalSpec,
    bracketed_paste,
    build_terminal_specs,
    create_deterministic_id,
    cwd_base,
    window_name,
)
from ngc.sidebar.tmux import TmuxController, TmuxWindow, in_tmux

__all__ = [
    "Diagnostic",
    "TerminalSpec",
    "TmuxController",
    "TmuxWindow",
    "bracketed_paste",
    "build_terminal_specs",
    "cli_choices",
    "compose_send_text",
    "create_deterministic_id",
    "cwd_base",
    "extract_selection",
    "format_diagnostics",
    "in_tmux",
    "next_active_index",
    "next_preset",
    "preset_index",
    "resolve_cli_target",
    "window_name",
]
