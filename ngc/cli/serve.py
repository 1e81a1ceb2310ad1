"""Bridge server mode for ngc.

Runs the loopback IDE bridge until interrupted. CLIs find it through the
environment variables printed at startup:

    GEMINI_CLI_IDE_SERVER_PORT / GEMINI_CLI_IDE_WORKSPACE_PATH
    QWEN_CODE_IDE_SERVER_PORT  / QWEN_CODE_IDE_WORKSPACE_PATH

Example:
    ngc serve --port 41000 -v
"""

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

from ngc.bridge.bootstrap import configure_bridge_logging, create_bridge
from ngc.cli.output import get_console, print_error
from ngc.config.loader import load_config
from ngc.config.schema import Config
from ngc.core.constants import BIND_HOST, MCP_PATH, get_log_dir
from ngc.core.errors import ConfigError, NgcError
from ngc.sidebar.terminal import build_terminal_specs
from ngc.sidebar.tmux import env_prefix

# Load .env file if present
load_dotenv()

logger = logging.getLogger(__name__)


def print_banner(
    config: Config, host: str, port: int, cwd: Path, log_file: Path, bind_fallback: bool
) -> None:
    """Show where the bridge listens and how to launch each CLI against it."""
    console = get_console()
    console.print("[bold]ngc IDE bridge[/]")
    console.print(f"Listening: http://{host}:{port}{MCP_PATH}")
    console.print(f"Bridge log: {log_file}")
    if bind_fallback:
        console.print(
            "[yellow]Configured port was unavailable; running CLIs must be restarted.[/]"
        )

    try:
        specs = build_terminal_specs(config, cwd, port)
    except ConfigError as e:
        console.print(f"[yellow]{e.message}[/]")
        console.print(f"  GEMINI_CLI_IDE_SERVER_PORT={port}")
        console.print(f"  GEMINI_CLI_IDE_WORKSPACE_PATH={cwd}")
    else:
        console.print("Launch commands:")
        for spec in specs:
            console.print(f"  {spec.name}", style="cyan", markup=False)
            console.print(f"    {env_prefix(spec.env)}{spec.cmd}", markup=False)
    console.print("Press Ctrl+C to stop")
    console.print("")


async def run_serve(
    port: int | None = None,
    verbose: bool = False,
    config_path: Path | None = None,
    log_dir: Path | None = None,
) -> int:
    """Run the bridge until cancelled.

    Args:
        port: Port to listen on. If None, uses config.bridge.port.
        verbose: Enable DEBUG output to console (-v).
        config_path: Explicit config file; None for layered loading.
        log_dir: Directory for bridge.log. Defaults to ~/.ngc/logs.

    Returns:
        Process exit code.
    """
    try:
        config = load_config(config_path)
    except NgcError as e:
        print_error(f"Configuration error: {e.message}")
        return 1

    file_level = getattr(logging, config.bridge.log_level)
    console_level = logging.DEBUG if verbose else logging.WARNING
    log_file = configure_bridge_logging(
        log_dir or get_log_dir(),
        level=file_level,
        console_level=console_level,
    )

    server, _session = create_bridge(config)
    effective_port = port if port is not None else config.bridge.port
    try:
        bound_port = await server.start(effective_port)
    except NgcError as e:
        print_error(e.message)
        return 1

    try:
        print_banner(
            config, BIND_HOST, bound_port, Path.cwd(), log_file, server.bind_fallback
        )
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down bridge on port %d", bound_port)
        server.close()
        await server.wait_closed()
    return 0
