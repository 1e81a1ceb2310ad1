"""Pydantic models for ngc configuration validation."""

import os
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ngc.core.constants import KEEP_ALIVE_INTERVAL, LOG_LEVEL_ENV, POST_CLOSE_DELAY

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

DEFAULT_PRESETS = ["right-fixed", "left-fixed", "bottom-fixed", "floating", "right"]


def _default_log_level() -> str:
    """Read the log level from NGC_LOG_LEVEL, falling back to WARNING."""
    value = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    if value == "WARN":
        value = "WARNING"
    if value not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        return "WARNING"
    return value


class BridgeConfig(BaseModel):
    """Configuration for the IDE bridge server.

    Example in config.json:
        "bridge": {
            "port": 0,
            "keep_alive_interval": 30.0,
            "log_level": "INFO"
        }
    """

    model_config = ConfigDict(extra="forbid")

    port: int = Field(default=0, ge=0, le=65535)
    """Port to listen on. 0 picks an ephemeral port."""

    keep_alive_interval: float = Field(default=KEEP_ALIVE_INTERVAL, gt=0)
    """Seconds of stream inactivity before a keep-alive comment is written."""

    post_close_delay: float = Field(default=POST_CLOSE_DELAY, ge=0)
    """Seconds to wait after a POST response before closing the connection."""

    log_level: LogLevel = Field(default_factory=_default_log_level)
    """Logging level for bridge operations."""


class SidebarConfig(BaseModel):
    """Window style presets for the sidebar terminal."""

    model_config = ConfigDict(extra="forbid")

    preset: str = "right-fixed"
    """Initial style preset."""

    presets: list[str] = Field(default_factory=lambda: list(DEFAULT_PRESETS))
    """Available presets, in cycling order."""

    @model_validator(mode="after")
    def validate_preset(self) -> "SidebarConfig":
        """Ensure preset names one of the configured presets."""
        if self.preset not in self.presets:
            raise ValueError(
                f"preset '{self.preset}' not in presets. Available: {self.presets}"
            )
        return self


class Config(BaseModel):
    """Root configuration model.

    Example config.json:
        {
            "cmds": ["gemini", "qwen"],
            "env": {"GEMINI_MODEL": "gemini-2.5-pro"},
            "bridge": {"port": 41000}
        }
    """

    model_config = ConfigDict(extra="forbid")

    cmds: list[str] = Field(default_factory=lambda: ["gemini", "qwen"])
    """CLI commands to offer, one terminal per command."""

    cmd: str | None = None
    """Single command; when set it replaces `cmds`."""

    env: dict[str, str] = {}
    """Extra environment variables passed to every CLI."""

    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    sidebar: SidebarConfig = Field(default_factory=SidebarConfig)

    @field_validator("cmds")
    @classmethod
    def _cmds_not_blank(cls, value: list[str]) -> list[str]:
        for cmd in value:
            if not cmd.strip():
                raise ValueError("cmds entries must be non-empty")
        return value

    @property
    def effective_cmds(self) -> list[str]:
        """Commands to spawn, honouring the single `cmd` override."""
        if self.cmd:
            return [self.cmd]
        return list(self.cmds)
