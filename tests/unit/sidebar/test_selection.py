"""Tests for visual selection extraction."""

from ngc.sidebar.selection import compose_send_text, extract_selection

BUFFER = ["def add(a, b):", "    return a + b", "", "print(add(1, 2))"]


class TestExtractSelection:
    def test_single_line_columns(self) -> None:
        assert extract_selection(BUFFER, 1, 5, 1, 7) == "add"

    def test_single_line_end_past_eol(self) -> None:
        assert extract_selection(BUFFER, 2, 5, 2, 2147483647) == "return a + b"

    def test_single_line_start_past_eol_keeps_line(self) -> None:
        assert extract_selection(BUFFER, 1, 50, 1, 60) == "def add(a, b):"

    def test_multi_line_trims_first_and_last(self) -> None:
        assert extract_selection(BUFFER, 1, 5, 2, 10) == "add(a, b):\n    return"

    def test_multi_line_linewise(self) -> None:
        text = extract_selection(BUFFER, 1, 1, 2, 2147483647)
        assert text == "def add(a, b):\n    return a + b"

    def test_multi_line_empty_last_line(self) -> None:
        assert extract_selection(BUFFER, 2, 5, 3, 1) == "return a + b\n"

    def test_no_selection(self) -> None:
        assert extract_selection(BUFFER, 0, 0, 0, 0) is None
        assert extract_selection(BUFFER, 3, 1, 2, 1) is None


class TestComposeSendText:
    def test_selection_with_args(self) -> None:
        assert compose_send_text("code", "explain") == "code explain"

    def test_selection_without_args(self) -> None:
        assert compose_send_text("code") == "code "

    def test_args_only(self) -> None:
        assert compose_send_text(None, "hello") == "hello"
