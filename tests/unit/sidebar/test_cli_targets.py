"""Tests for CLI target resolution and cycling helpers."""

import pytest

from ngc.sidebar.commands import (
    cli_choices,
    next_active_index,
    next_preset,
    preset_index,
    resolve_cli_target,
)
from ngc.sidebar.terminal import TerminalSpec

SPECS = [
    TerminalSpec(index=1, cmd="gemini", name="p-ngc-1(gemini)"),
    TerminalSpec(index=2, cmd="qwen", name="p-ngc-2(qwen)"),
]


class TestResolveCliTarget:
    def test_by_index(self) -> None:
        assert resolve_cli_target("tmux 2", SPECS) == ("tmux", 2)

    def test_by_command_name(self) -> None:
        assert resolve_cli_target("sidebar qwen", SPECS) == ("sidebar", 2)

    def test_extra_whitespace(self) -> None:
        assert resolve_cli_target("  sidebar   1 ", SPECS) == ("sidebar", 1)

    def test_too_few_parts(self) -> None:
        with pytest.raises(ValueError, match="Expected <type> <cmd_idx> or <type> <cmd>"):
            resolve_cli_target("tmux", SPECS)

    def test_unknown_identifier_lists_options(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            resolve_cli_target("tmux claude", SPECS)
        message = str(exc_info.value)
        assert 'Invalid command identifier: "claude"' in message
        assert "'sidebar 1' (gemini)" in message
        assert "'tmux qwen'" in message

    def test_index_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="Invalid command identifier"):
            resolve_cli_target("sidebar 3", SPECS)

    def test_unknown_window_type(self) -> None:
        with pytest.raises(ValueError, match='Invalid window type: float. Should be "tmux" or "sidebar".'):
            resolve_cli_target("float 1", SPECS)


def test_cli_choices_sorted() -> None:
    assert cli_choices(SPECS) == [
        "sidebar 1 gemini",
        "sidebar 2 qwen",
        "tmux 1 gemini",
        "tmux 2 qwen",
    ]


class TestNextActiveIndex:
    def test_needs_two_active(self) -> None:
        assert next_active_index([1], 1) is None
        assert next_active_index([], 1) is None

    def test_next_wraps(self) -> None:
        assert next_active_index([1, 3, 4], 3) == 4
        assert next_active_index([1, 3, 4], 4) == 1

    def test_prev_wraps(self) -> None:
        assert next_active_index([1, 3, 4], 1, "prev") == 4
        assert next_active_index([1, 3, 4], 3, "PREV") == 1

    def test_current_not_active(self) -> None:
        assert next_active_index([1, 3, 4], 2) == 4
        assert next_active_index([1, 3], 2, "prev") == 3


class TestPresets:
    PRESETS = ["right-fixed", "left-fixed", "bottom-fixed", "floating", "right"]

    def test_next_preset_cycles(self) -> None:
        assert next_preset(self.PRESETS, 0) == "left-fixed"
        assert next_preset(self.PRESETS, 4) == "right-fixed"

    def test_next_preset_requires_presets(self) -> None:
        with pytest.raises(ValueError):
            next_preset([], 0)

    def test_preset_index(self) -> None:
        assert preset_index(self.PRESETS, "floating") == 3

    def test_unknown_preset_falls_back_to_right(self) -> None:
        assert preset_index(self.PRESETS, "sideways") == 4
        assert preset_index(["a", "b"], "sideways") == 0
