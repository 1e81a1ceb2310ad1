"""Configuration loading and validation."""

from ngc.config.loader import DEFAULT_CONFIG, DEFAULTS_DIR, load_config
from ngc.config.schema import BridgeConfig, Config, SidebarConfig

__all__ = [
    "BridgeConfig",
    "Config",
    "DEFAULT_CONFIG",
    "DEFAULTS_DIR",
    "SidebarConfig",
    "load_config",
]
