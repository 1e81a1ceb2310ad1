"""Argument parsing for the ngc CLI."""

import argparse
from pathlib import Path


def add_port_arg(parser: argparse.ArgumentParser, required: bool = False) -> None:
    """Add --port argument to a parser."""
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        required=required,
        help="Bridge port (default: from config, 0 picks a free port)",
    )


def add_config_arg(parser: argparse.ArgumentParser) -> None:
    """Add --config argument to a parser."""
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file to use instead of ~/.ngc and ./.ngc layering",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ngc",
        description="IDE bridge for the Gemini and Qwen CLIs",
    )
    subparsers = parser.add_subparsers(dest="command")

    # ngc serve
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the IDE bridge server",
        description="Listen on loopback for CLI connections until Ctrl+C.",
    )
    add_port_arg(serve_parser)
    add_config_arg(serve_parser)
    serve_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug output on the console",
    )
    serve_parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for bridge.log (default: ~/.ngc/logs)",
    )

    # ngc probe
    probe_parser = subparsers.add_parser(
        "probe",
        help="Check that a bridge answers the initialize handshake",
    )
    add_port_arg(probe_parser, required=True)
    probe_parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Request timeout in seconds (default: 5)",
    )

    # ngc tmux-send
    tmux_parser = subparsers.add_parser(
        "tmux-send",
        help="Paste text into a tmux window as one bracketed block",
    )
    tmux_parser.add_argument("target", help="Window name or id (a 'tmux:' prefix is accepted)")
    tmux_parser.add_argument("text", help="Text to paste")

    # ngc diagnostics
    diag_parser = subparsers.add_parser(
        "diagnostics",
        help="Format LSP diagnostics for pasting into a CLI",
    )
    diag_parser.add_argument("file", type=Path, help="Source file the diagnostics refer to")
    diag_parser.add_argument(
        "diag_json",
        type=Path,
        help="JSON file with a list of {lnum, severity, message, source} objects",
    )
    diag_parser.add_argument(
        "--line",
        type=int,
        default=None,
        help="Only include diagnostics on this 1-based line",
    )

    return parser
