"""Command-line interface."""

import asyncio

from ngc.cli.arg_parser import build_parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ngc CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        if args.command == "serve":
            from ngc.cli.serve import run_serve

            exit_code = asyncio.run(run_serve(
                port=args.port,
                verbose=args.verbose,
                config_path=args.config,
                log_dir=args.log_dir,
            ))
        elif args.command == "probe":
            from ngc.cli.commands import cmd_probe

            exit_code = asyncio.run(cmd_probe(args.port, args.timeout))
        elif args.command == "tmux-send":
            from ngc.cli.commands import cmd_tmux_send

            exit_code = cmd_tmux_send(args.target, args.text)
        elif args.command == "diagnostics":
            from ngc.cli.commands import cmd_diagnostics

            exit_code = cmd_diagnostics(args.file, args.diag_json, args.line)
        else:
            parser.print_help()
            exit_code = 1
    except KeyboardInterrupt:
        # Ctrl+C stops the bridge; shutdown already ran in run_serve
        exit_code = 0
    raise SystemExit(exit_code)


__all__ = ["main"]
