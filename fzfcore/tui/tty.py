"""Locating and opening the controlling terminal for input."""

from __future__ import annotations

import os
import sys
from typing import IO, Optional

from fzfcore.shell import is_windows

CONSOLE_DEVICE = "/dev/tty"

_DEV_PREFIXES = ("/dev/pts/", "/dev/")


def ttyname() -> str:
    """Return the path of the terminal device behind standard error, or ""."""
    if is_windows():
        return ""
    try:
        stderr_rdev = os.fstat(2).st_rdev
    except OSError:
        return ""

    for prefix in _DEV_PREFIXES:
        try:
            names = sorted(os.listdir(prefix))
        except OSError:
            continue
        for name in names:
            try:
                info = os.lstat(prefix + name)
            except OSError:
                continue
            if info.st_rdev == stderr_rdev:
                return prefix + name
    return ""


def _open_read_only(path: str) -> Optional[IO[bytes]]:
    try:
        return open(path, "rb", buffering=0)
    except OSError:
        return None


def _open_terminal() -> Optional[IO[bytes]]:
    handle = _open_read_only(CONSOLE_DEVICE)
    if handle is not None:
        return handle
    tty = ttyname()
    if tty:
        return _open_read_only(tty)
    return None


def tty_in():
    """Return the terminal opened for reading, falling back to standard input."""
    if is_windows():
        return sys.stdin
    handle = _open_terminal()
    return sys.stdin if handle is None else handle


def open_tty_in() -> Optional[IO[bytes]]:
    """Open the terminal for reading; exit with status 2 if that fails.

    Returns None on Windows, where the console is read by other means.
    """
    if is_windows():
        return None
    handle = _open_terminal()
    if handle is None:
        print("Failed to open " + CONSOLE_DEVICE, file=sys.stderr)
        raise SystemExit(2)
    return handle


def get_env_int(name: str, default: int) -> int:
    """Read an integer from the environment, using default if unset or invalid."""
    value = os.environ.get(name, "")
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default