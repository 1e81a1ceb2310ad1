"""Terminal specs for the CLIs launched against the bridge.

One TerminalSpec is built per configured command. It carries the window
name, the environment the CLI needs to find the bridge, and a stable id
derived from both.
"""

from __future__ import annotations

import logging
import re
import shutil
import string
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ngc.config.schema import Config
from ngc.core.errors import ConfigError

logger = logging.getLogger(__name__)

CWD_BASE_MAX_LENGTH = 20

BRACKET_START = "\x1b[200~"
BRACKET_END = "\x1b[201~"

# Commands skipped when the binary is not installed
_OPTIONAL_BINARIES = ("gemini", "qwen")

_UNSAFE_ID_CHARS = re.compile(f"[\\s{re.escape(string.punctuation)}]")
_UNDERSCORE_RUNS = re.compile(r"_+")


@dataclass
class TerminalSpec:
    """Launch options for one CLI terminal.

    Attributes:
        index: 1-based position of the command in the configured list.
        cmd: Command line to run.
        name: Window name, "<cwdBase>-ngc-<index>(<cmd>)".
        env: Environment variables set for the CLI.
        id: Deterministic id built from cmd, env and index.
        preset: Sidebar style preset.
    """

    index: int
    cmd: str
    name: str
    env: dict[str, str] = field(default_factory=dict)
    id: str = ""
    preset: str = "right-fixed"


def cwd_base(cwd: str | Path) -> str:
    """Short, shell-safe label for the working directory."""
    base = re.sub(r"[\s:]", "_", Path(cwd).name)
    return base[:CWD_BASE_MAX_LENGTH]


def window_name(base: str, index: int, cmd: str) -> str:
    return f"{base}-ngc-{index}({cmd})"


def create_deterministic_id(cmd: str, env: dict[str, str], index: int | None = None) -> str:
    """Build an id that only depends on the command, its env and its index.

    Env keys are sorted, then whitespace and punctuation are replaced by
    underscores and runs of underscores collapse to one.
    """
    env_repr = "{" + ",".join(f'{key} = "{env[key]}"' for key in sorted(env)) + "}"
    raw = f"{cmd}:{env_repr}"
    if index is not None:
        raw += f":{index}"
    return _UNDERSCORE_RUNS.sub("_", _UNSAFE_ID_CHARS.sub("_", raw))


def bracketed_paste(text: str) -> str:
    """Wrap text so the receiving terminal treats it as one pasted block."""
    return f"{BRACKET_START}{text}{BRACKET_END}"


def build_terminal_specs(
    config: Config,
    cwd: str | Path,
    port: int,
    which: Callable[[str], str | None] = shutil.which,
) -> list[TerminalSpec]:
    """Build one TerminalSpec per configured command.

    Args:
        config: Loaded configuration (cmds, cmd override, env, sidebar preset).
        cwd: Workspace directory the CLIs are pointed at.
        port: Port the bridge is listening on.
        which: Executable lookup, shutil.which by default.

    Returns:
        Specs for every usable command, in configured order.

    Raises:
        ConfigError: If no command is usable.
    """
    workspace = str(cwd)
    base = cwd_base(cwd)
    specs: list[TerminalSpec] = []

    for index, cmd in enumerate(config.effective_cmds, start=1):
        if cmd in _OPTIONAL_BINARIES and which(cmd) is None:
            logger.info("Skipping %s: executable not found", cmd)
            continue

        env = dict(config.env)
        env["TERM_PROGRAM"] = "vscode"
        if "qwen" in cmd:
            env["QWEN_CODE_IDE_WORKSPACE_PATH"] = workspace
            env["QWEN_CODE_IDE_SERVER_PORT"] = str(port)
        else:
            env["GEMINI_CLI_IDE_WORKSPACE_PATH"] = workspace
            env["GEMINI_CLI_IDE_SERVER_PORT"] = str(port)

        specs.append(
            TerminalSpec(
                index=index,
                cmd=cmd,
                name=window_name(base, index, cmd),
                env=env,
                id=create_deterministic_id(cmd, env, index),
                preset=config.sidebar.preset,
            )
        )

    if not specs:
        raise ConfigError("No valid executable found for Gemini/Qwen")
    logger.debug("Terminal specs: %s", specs)
    return specs
