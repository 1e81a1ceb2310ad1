"""Drive CLI windows in the surrounding tmux session."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

from ngc.core.errors import TmuxError
from ngc.sidebar.terminal import TerminalSpec, bracketed_paste

logger = logging.getLogger(__name__)

PASTE_BUFFER = "ngcbuffer0"
SESSION_PREFIX = "tmux:"


@dataclass(frozen=True)
class TmuxWindow:
    name: str
    id: str


def in_tmux() -> bool:
    return bool(os.environ.get("TMUX"))


def env_prefix(env: dict[str, str]) -> str:
    """Render env assignments to prepend to a shell command."""
    return "".join(f"{key}={shlex.quote(value)} " for key, value in env.items())


class TmuxController:
    """Thin wrapper over the tmux binary.

    Every call runs tmux synchronously; a non-zero exit raises TmuxError.
    """

    def __init__(self, binary: str = "tmux", timeout: float | None = 5.0) -> None:
        self._binary = binary
        self._timeout = timeout

    def _run(self, args: Sequence[str], stdin: str | None = None) -> str:
        cmd = [self._binary, *args]
        logger.debug("Running %s", shlex.join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                input=stdin,
                text=True,
                capture_output=True,
                check=False,
                timeout=self._timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise TmuxError(list(args), -1, str(e)) from e
        if proc.returncode != 0:
            raise TmuxError(list(args), proc.returncode, proc.stderr or "")
        return proc.stdout or ""

    def list_windows(self) -> list[TmuxWindow]:
        output = self._run(["list-windows", "-F", "#{window_name},#{window_id}"])
        windows = []
        for line in output.splitlines():
            name, sep, window_id = line.rpartition(",")
            if sep:
                windows.append(TmuxWindow(name=name, id=window_id))
        return windows

    def find_window(self, name: str) -> TmuxWindow | None:
        for window in self.list_windows():
            if window.name == name:
                return window
        return None

    def spawn(self, spec: TerminalSpec) -> TmuxWindow | None:
        """Switch to the terminal's window, creating it if it does not exist.

        Returns:
            The existing window that was selected, or None if a new one was created.
        """
        existing = self.find_window(spec.name)
        if existing is not None:
            logger.debug("Selecting existing window %s (%s)", spec.name, existing.id)
            self._run(["select-window", "-t", existing.id])
            return existing

        logger.info("Creating tmux window %s", spec.name)
        self._run(["new-window", "-n", spec.name, env_prefix(spec.env) + spec.cmd])
        return None

    def send_text(self, target: str, text: str) -> None:
        """Paste text into a window as one bracketed block, then focus it."""
        if target.startswith(SESSION_PREFIX):
            target = target[len(SESSION_PREFIX):]
        self._run(["load-buffer", "-b", PASTE_BUFFER, "-"], stdin=bracketed_paste(text))
        self._run(["paste-buffer", "-b", PASTE_BUFFER, "-t", target])
        self._run(["select-window", "-t", target])

    def list_sessions(self, base: str) -> list[str]:
        """Names of ngc windows for this workspace, as "tmux:<name>"."""
        pattern = f"{base}-ngc-"
        return [
            f"{SESSION_PREFIX}{window.name}"
            for window in self.list_windows()
            if pattern in window.name
        ]
