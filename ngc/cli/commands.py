"""One-shot CLI commands: probe, tmux-send and diagnostics.

Each function prints its result and returns an exit code.
"""

import json
from pathlib import Path

from ngc.cli.output import get_console, get_err_console, print_error
from ngc.client import BridgeClient, ClientError
from ngc.core.errors import NgcError
from ngc.sidebar.diagnostics import Diagnostic, format_diagnostics
from ngc.sidebar.tmux import TmuxController, in_tmux


async def cmd_probe(port: int, timeout: float = 5.0) -> int:
    """Run the initialize handshake against a bridge and print the server info."""
    try:
        async with BridgeClient(port=port, timeout=timeout) as client:
            result = await client.initialize()
            has_stream = await client.open_stream()
    except ClientError as e:
        print_error(e.message)
        return 1

    info = result.get("serverInfo", {})
    console = get_console()
    console.print(f"Bridge on port {port}: [green]ok[/]")
    console.print(f"  server: {info.get('name')} {info.get('version')}", markup=False)
    console.print(f"  protocol: {result.get('protocolVersion')}", markup=False)
    console.print(f"  event stream: {'yes' if has_stream else 'no'}")
    return 0


def cmd_tmux_send(target: str, text: str) -> int:
    """Paste text into a tmux window."""
    if not in_tmux():
        print_error("Not running in a tmux session.")
        return 1
    try:
        TmuxController().send_text(target, text)
    except NgcError as e:
        print_error(f"Failed to send text to tmux: {e.message}")
        return 1
    return 0


def cmd_diagnostics(file: Path, diag_json: Path, line: int | None = None) -> int:
    """Print diagnostics for a file in the format pasted into the CLIs."""
    try:
        raw = json.loads(diag_json.read_text(encoding="utf-8"))
        diagnostics = [Diagnostic.from_dict(item) for item in raw]
        lines = file.read_text(encoding="utf-8", errors="replace").splitlines()
    except (OSError, ValueError, KeyError, TypeError) as e:
        print_error(f"Cannot read diagnostics: {e}")
        return 1

    text = format_diagnostics(str(file), diagnostics, lines, line_number=line)
    if text is None:
        get_err_console().print("No diagnostics found")
        return 1
    # Printed verbatim: messages contain brackets and must not wrap
    get_console().print(text, markup=False, emoji=False, soft_wrap=True)
    return 0
