"""Format editor diagnostics into a prompt for the CLI."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

MAX_CONTENT_LENGTH = 80

# LSP severity numbers
SEVERITY_NAMES = {1: "ERROR", 2: "WARN", 3: "INFO", 4: "HINT"}


@dataclass
class Diagnostic:
    """One diagnostic. lnum is 0-based, as LSP reports it."""

    lnum: int
    severity: str
    message: str
    source: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Diagnostic:
        """Build from an LSP-style dict; severity may be a number or a name."""
        severity = data.get("severity", 1)
        if isinstance(severity, int):
            severity = SEVERITY_NAMES.get(severity, str(severity))
        return cls(
            lnum=int(data["lnum"]),
            severity=str(severity).upper(),
            message=str(data.get("message", "")),
            source=str(data.get("source") or ""),
        )


def format_diagnostics(
    filename: str,
    diagnostics: Sequence[Diagnostic],
    lines: Sequence[str],
    line_number: int | None = None,
) -> str | None:
    """Render diagnostics as "file:<name>" followed by one line per entry.

    Args:
        filename: Path shown in the header.
        diagnostics: Diagnostics for the file.
        lines: File contents, used to quote the offending line.
        line_number: Optional 1-based line to filter on.

    Returns:
        The formatted text, or None when no diagnostic matches.
    """
    formatted = []
    for diag in diagnostics:
        line = diag.lnum + 1
        if line_number is not None and line != line_number:
            continue
        content = lines[diag.lnum] if 0 <= diag.lnum < len(lines) else ""
        if len(content) > MAX_CONTENT_LENGTH:
            content = content[:MAX_CONTENT_LENGTH] + "..."
        formatted.append(
            f"L{line}:{content} - {{{diag.source}}}[{diag.severity}] {diag.message}"
        )

    if not formatted:
        return None
    return f"file:{filename}\n" + "\n".join(formatted)
