"""Liveness checks against the OS process table.

A recorded pid counts as alive when a process with that id exists. The
process is not checked for being the expected agent, so a pid reused by
an unrelated process reads as alive.
"""

from __future__ import annotations

from pathlib import Path

import psutil

from agentctl.exceptions import PidFileError

# Pids are signed 32-bit values
MAX_PID = 2**31 - 1


def is_alive(pid: int) -> bool:
    """Return True if a process with *pid* currently exists.

    Zombies (exited but not yet reaped by their parent) count as gone.
    """
    if not 0 < pid <= MAX_PID:
        return False
    try:
        if not psutil.pid_exists(pid):
            return False
    except OverflowError:
        return False
    try:
        return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return False
    except psutil.AccessDenied:
        # Exists, but owned by someone we may not inspect
        return True


def read_recorded_pid(pid_path: Path) -> int | None:
    """Return the pid recorded in *pid_path*, or None if there is no file.

    Raises PidFileError if the file exists but is unreadable or does not
    hold a decimal integer.
    """
    try:
        raw = pid_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise PidFileError(f"Cannot read pid file {pid_path}: {e}") from e

    text = raw.strip()
    if not (text.isascii() and text.isdigit()):
        raise PidFileError(f"Pid file {pid_path} does not contain a pid: {text[:40]!r}")
    pid = int(text)
    if pid > MAX_PID:
        raise PidFileError(f"Pid file {pid_path} holds an out-of-range pid: {text[:40]}")
    return pid
