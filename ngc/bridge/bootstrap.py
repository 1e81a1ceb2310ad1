"""Wiring for a running bridge: logging setup and the server/session pair.

Usage:
    configure_bridge_logging(get_log_dir(), console_level=logging.DEBUG)
    server, session = create_bridge(config)
    port = await server.start(config.bridge.port)
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ngc.bridge.server import BridgeServer
from ngc.bridge.session import BridgeSession
from ngc.config.schema import Config

logger = logging.getLogger(__name__)

LOG_FILE_NAME = "bridge.log"
NAMESPACE_LOGGER = "ngc"


def configure_bridge_logging(
    log_dir: Path,
    level: int = logging.INFO,
    console_level: int = logging.WARNING,
) -> Path:
    """Configure file and console logging for the ngc namespace.

    Logs are written to `{log_dir}/bridge.log` with automatic rotation
    (max 5MB per file, 3 backup files). Existing handlers on the namespace
    logger are replaced, so calling this twice does not duplicate output.

    Args:
        log_dir: Directory for bridge.log. Created if it doesn't exist.
        level: Logging level for file output (default INFO).
        console_level: Logging level for stderr output (default WARNING).

    Returns:
        Path to the bridge.log file.
    """
    log_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    ))

    ngc_logger = logging.getLogger(NAMESPACE_LOGGER)
    ngc_logger.setLevel(min(level, console_level))
    for handler in list(ngc_logger.handlers):
        ngc_logger.removeHandler(handler)
        handler.close()
    ngc_logger.addHandler(file_handler)
    ngc_logger.addHandler(console_handler)
    ngc_logger.propagate = False

    logger.info("Bridge logging configured: %s", log_file)
    return log_file


def create_bridge(
    config: Config, session: BridgeSession | None = None
) -> tuple[BridgeServer, BridgeSession]:
    """Build a server whose callbacks are served by a BridgeSession.

    The server is not started; call `await server.start(port)`.
    """
    session = session or BridgeSession()
    server = BridgeServer(
        session.on_request,
        session.on_close,
        keep_alive_interval=config.bridge.keep_alive_interval,
        post_close_delay=config.bridge.post_close_delay,
    )
    session.attach(server)
    return server, session
