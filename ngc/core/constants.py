"""Core constants and paths for ngc.

Single source of truth for global paths and bridge protocol constants.
"""

from pathlib import Path

NGC_DIR_NAME = ".ngc"

# Environment variable controlling the default log level (as the editor plugin does)
LOG_LEVEL_ENV = "NGC_LOG_LEVEL"

# IDE bridge protocol
MCP_PATH = "/mcp"
INITIALIZED_NOTIFICATION = "notifications/initialized"
BIND_HOST = "127.0.0.1"  # Loopback only
LISTEN_BACKLOG = 64
KEEP_ALIVE_INTERVAL = 30.0  # seconds
POST_CLOSE_DELAY = 0.01  # seconds between POST response and close
MAX_HEADER_SIZE = 32 * 1024  # request line plus headers
MAX_BODY_SIZE = 1_048_576  # 1MB
MAX_REQUEST_SIZE = MAX_HEADER_SIZE + MAX_BODY_SIZE


def get_ngc_dir() -> Path:
    """Get ~/.ngc (global config directory)."""
    return Path.home() / NGC_DIR_NAME


def get_defaults_dir() -> Path:
    """Get package defaults directory (shipped with package)."""
    import ngc
    return Path(ngc.__file__).parent / "defaults"


def get_log_dir() -> Path:
    """Get the default directory for bridge logs."""
    return get_ngc_dir() / "logs"
