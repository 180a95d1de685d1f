"""Running commands through the user's shell and quoting entries for it."""

from __future__ import annotations

import functools
import os
import re
import signal
import subprocess
import sys
from dataclasses import dataclass
from typing import List, Optional, Union

_CMD_SPECIAL = re.compile(r'[&|<>()@^%!"]')


def is_windows() -> bool:
    """Return True when running on Windows."""
    return sys.platform == "win32"


@dataclass(frozen=True)
class ShellCommand:
    """A prepared shell invocation that can be started as a subprocess."""

    args: Union[List[str], str]
    executable: Optional[str] = None
    setpgid: bool = False

    def start(self, **kwargs) -> subprocess.Popen:
        """Start the command; keyword arguments are passed to Popen."""
        options = dict(kwargs)
        if self.executable is not None:
            options.setdefault("executable", self.executable)
        if self.setpgid and not is_windows():
            options.setdefault("start_new_session", True)
        return subprocess.Popen(self.args, **options)


@functools.lru_cache(maxsize=None)
def _windows_shell() -> str:
    shell = os.environ.get("SHELL", "")
    if not shell:
        return "cmd"
    if "/" in shell:
        try:
            out = subprocess.run(
                ["cygpath", "-w", shell], capture_output=True, check=True, text=True
            ).stdout
        except (OSError, subprocess.CalledProcessError):
            return shell
        return out.strip("\n")
    return shell


def exec_command(command: str, setpgid: bool) -> ShellCommand:
    """Prepare command to run with $SHELL."""
    if is_windows():
        shell = _windows_shell()
    else:
        shell = os.environ.get("SHELL") or "sh"
    return exec_command_with(shell, command, setpgid)


def exec_command_with(shell: str, command: str, setpgid: bool) -> ShellCommand:
    """Prepare command to run with the given shell."""
    if is_windows():
        if "cmd" in shell:
            return ShellCommand(f' /v:on/s/c "{command}"', executable=shell)
        if "pwsh" in shell or "powershell" in shell:
            return ShellCommand([shell, "-NoProfile", "-Command", command])
        return ShellCommand([shell, "-c", command])
    return ShellCommand([shell, "-c", command], setpgid=setpgid)


def kill_command(process: subprocess.Popen) -> None:
    """Kill a started command, including its process group outside Windows."""
    if is_windows():
        process.kill()
    else:
        os.killpg(process.pid, signal.SIGKILL)


def quote_entry(entry: str, shell: Optional[str] = None) -> str:
    """Quote entry so that shell reads it back as a single word."""
    if not shell:
        shell = os.environ.get("SHELL", "")
    if not shell:
        shell = "cmd" if is_windows() else "sh"

    if "cmd" in shell:
        escaped = entry.replace("\\", "\\\\")
        escaped = '"' + escaped.replace('"', '\\"') + '"'
        return _CMD_SPECIAL.sub(lambda m: "^" + m.group(0), escaped)
    if "pwsh" in shell or "powershell" in shell:
        escaped = entry.replace('"', '\\"')
        return "'" + escaped.replace("'", "''") + "'"
    return "'" + entry.replace("'", "'\\''") + "'"