"""Target resolution and cycling for the CLI switching commands."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ngc.sidebar.terminal import TerminalSpec

logger = logging.getLogger(__name__)

WINDOW_TYPES = ("sidebar", "tmux")
FALLBACK_PRESET = "right"


def cli_choices(specs: Sequence[TerminalSpec]) -> list[str]:
    """Selection list entries such as "sidebar 1 gemini", sorted."""
    choices = []
    for position, spec in enumerate(specs, start=1):
        choices.append(f"sidebar {position} {spec.cmd}")
        choices.append(f"tmux {position} {spec.cmd}")
    return sorted(choices)


def _valid_options(specs: Sequence[TerminalSpec]) -> str:
    options = []
    for position, spec in enumerate(specs, start=1):
        for window_type in WINDOW_TYPES:
            options.append(f"'{window_type} {position}' ({spec.cmd})")
            options.append(f"'{window_type} {spec.cmd}'")
    return ", ".join(options)


def resolve_cli_target(arg: str, specs: Sequence[TerminalSpec]) -> tuple[str, int]:
    """Parse "<type> <idx|cmd>" into a window type and a 1-based terminal position.

    A command name resolves to the first terminal running that command.

    Raises:
        ValueError: If the argument is malformed, names no terminal, or uses an
            unknown window type.
    """
    parts = arg.split()
    if len(parts) < 2:
        raise ValueError("Invalid argument. Expected <type> <cmd_idx> or <type> <cmd>.")

    window_type, identifier = parts[0], parts[1]
    index: int | None
    try:
        index = int(identifier)
    except ValueError:
        index = next(
            (pos for pos, spec in enumerate(specs, start=1) if spec.cmd == identifier),
            None,
        )

    if index is None or not 1 <= index <= len(specs):
        raise ValueError(
            f'Invalid command identifier: "{identifier}". Should be a valid index or '
            f"command name. Valid options are: {_valid_options(specs)}"
        )

    if window_type not in WINDOW_TYPES:
        raise ValueError(
            f'Invalid window type: {window_type}. Should be "tmux" or "sidebar".'
        )
    return window_type, index


def next_active_index(
    active: Sequence[int], current: int, direction: str = "next"
) -> int | None:
    """Pick the sidebar to switch to when cycling through active terminals.

    Args:
        active: Terminal positions with a live sidebar terminal, in order.
        current: Position of the last active terminal.
        direction: "next" or "prev" (case-insensitive).

    Returns:
        The position to switch to, or None with fewer than two active terminals.
    """
    if len(active) < 2:
        return None
    step = -1 if direction.lower() == "prev" else 1
    # 1-based slot of the current terminal; -1 when it is not active
    slot = active.index(current) + 1 if current in active else -1
    return active[(slot - 1 + step) % len(active)]


def preset_index(presets: Sequence[str], name: str) -> int:
    """Position of a preset, falling back to the "right" preset for unknown names."""
    if name in presets:
        return presets.index(name)
    logger.warning("Invalid sidebar style preset: %s, falling back to %s", name, FALLBACK_PRESET)
    if FALLBACK_PRESET in presets:
        return presets.index(FALLBACK_PRESET)
    return 0


def next_preset(presets: Sequence[str], current_idx: int) -> str:
    """The preset after current_idx (0-based), wrapping around."""
    if not presets:
        raise ValueError("No sidebar presets configured")
    return presets[(current_idx + 1) % len(presets)]
