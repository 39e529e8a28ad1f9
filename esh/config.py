"""Compile-time style configuration and wait-status helpers."""

from __future__ import annotations

import sys

ASSERTIONS = True
BUILTIN_TIME = True
DEVFD_PATH = "/dev/fd/%d"
JOB_PROTECT = True
PROTECT_ENV = True
SHOW_DOT_FILES = False

_DEFAULT_PATH = ("/usr/ucb", "/usr/bin", "/bin", "")
_IRIX_PATH = ("/usr/bsd", "/usr/sbin", "/usr/bin", "/bin", "")
_OSF1_PATH = ("/usr/bin", "")
_BSD386_PATH = ("/usr/sbin", "/sbin", "/usr/bin", "/bin", "")


def initial_path() -> list[str]:
    """Return the default value of $path for a freshly started shell."""
    platform = sys.platform
    if platform.startswith("irix"):
        return list(_IRIX_PATH)
    if platform.startswith("osf1"):
        return list(_OSF1_PATH)
    if platform.startswith("386bsd"):
        return list(_BSD386_PATH)
    return list(_DEFAULT_PATH)


def wifsignaled(status: int) -> bool:
    """True if the wait status reports termination by a signal."""
    return (status & 0xFF) != 0


def wtermsig(status: int) -> int:
    """The signal number that terminated the process."""
    return status & 0x7F


def wcoredump(status: int) -> bool:
    """True if the terminated process dumped core."""
    return (status & 0x80) != 0


def wifexited(status: int) -> bool:
    """True if the process exited normally."""
    return not wifsignaled(status)


def wexitstatus(status: int) -> int:
    """The exit code of a normally exited process."""
    return (status >> 8) & 0xFF