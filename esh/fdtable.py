"""File descriptor bookkeeping: deferred operations and reserved descriptors."""

from __future__ import annotations

import contextlib
import errno
import os
from dataclasses import dataclass
from typing import Optional

from esh.errors import fail


def _close(fd: int) -> None:
    with contextlib.suppress(OSError):
        os.close(fd)


def move_fd(old: int, new: int) -> None:
    """Duplicate *old* onto *new* and close *old*."""
    if old == new:
        return
    try:
        os.dup2(old, new)
    except OSError as exc:
        fail("es:mvfd", f"dup2: {os.strerror(exc.errno or errno.EIO)}")
    _close(old)


@dataclass(eq=False)
class FdRef:
    """A mutable holder for a descriptor the shell keeps for itself."""

    fd: int


@dataclass
class _Reserve:
    ref: FdRef
    close_on_fork: bool


@dataclass
class _Defer:
    real: FdRef
    userfd: int


class FdTable:
    """Deferred descriptor operations and the shell's reserved descriptors.

    In the parent shell, redirections are recorded rather than done; they
    are applied when a child is about to run.  Reserved descriptors are
    moved out of the way when the user claims their number.
    """

    def __init__(self) -> None:
        self._deferred: list[_Defer] = []
        self._reserved: list[_Reserve] = []

    def register(self, ref: FdRef, close_on_fork: bool = True) -> None:
        """Reserve the descriptor held in *ref* for the shell."""
        if any(r.ref is ref for r in self._reserved):
            raise ValueError("descriptor reference is already registered")
        self._reserved.append(_Reserve(ref, close_on_fork))

    def unregister(self, ref: FdRef) -> None:
        """Give up the reservation of *ref*."""
        for index, reserve in enumerate(self._reserved):
            if reserve.ref is ref:
                self._reserved[index] = self._reserved[-1]
                self._reserved.pop()
                return
        raise ValueError(f"{ref!r} not on file descriptor reserved list")

    def _do_deferred(self, realfd: int, userfd: int) -> None:
        if userfd < 0:
            raise ValueError("negative user descriptor")
        self.release(userfd)
        if realfd == -1:
            _close(userfd)
        else:
            move_fd(realfd, userfd)

    def _push(self, parent: bool, realfd: int, userfd: int) -> Optional[int]:
        if not parent:
            self._do_deferred(realfd, userfd)
            return None
        defer = _Defer(FdRef(realfd), userfd)
        self._deferred.append(defer)
        self.register(defer.real, True)
        return len(self._deferred) - 1

    def defer_move(self, parent: bool, old: int, new: int) -> Optional[int]:
        """Arrange for *old* to become *new*; returns a ticket in the parent."""
        if old < 0 or new < 0:
            raise ValueError("negative file descriptor")
        return self._push(parent, old, new)

    def defer_close(self, parent: bool, fd: int) -> Optional[int]:
        """Arrange for *fd* to be closed; returns a ticket in the parent."""
        if fd < 0:
            raise ValueError("negative file descriptor")
        return self._push(parent, -1, fd)

    def undefer(self, ticket: Optional[int]) -> None:
        """Drop the most recent deferred operation, which must be *ticket*."""
        if ticket is None:
            return
        if not self._deferred or ticket != len(self._deferred) - 1:
            raise ValueError(f"ticket {ticket} is not the newest deferral")
        defer = self._deferred.pop()
        self.unregister(defer.real)
        if defer.real.fd != -1:
            _close(defer.real.fd)

    def fdmap(self, fd: int) -> Optional[int]:
        """The real descriptor behind user descriptor *fd*; None if closed."""
        for defer in reversed(self._deferred):
            if fd == defer.userfd:
                fd = defer.real.fd
                if fd == -1:
                    return None
        return fd

    def is_deferred(self, fd: int) -> bool:
        """True if *fd* is the target of a deferred operation."""
        return any(d.userfd == fd for d in self._deferred)

    def _remap(self) -> None:
        pending, self._deferred = self._deferred, []
        for defer in pending:
            self.unregister(defer.real)
            self._do_deferred(defer.real.fd, defer.userfd)

    def close_for_child(self) -> None:
        """Apply deferred operations and close reserved descriptors after a fork."""
        self._remap()
        for reserve in self._reserved:
            if reserve.close_on_fork:
                if reserve.ref.fd >= 3:
                    _close(reserve.ref.fd)
                reserve.ref.fd = -1

    def release(self, n: int) -> None:
        """Move any reserved descriptor numbered *n* to another number."""
        if n < 0:
            raise ValueError("negative file descriptor")
        for reserve in self._reserved:
            fd = reserve.ref.fd
            if fd == n:
                try:
                    reserve.ref.fd = os.dup(fd)
                except OSError as exc:
                    reserve.ref.fd = -1
                    fail("es:releasefd", os.strerror(exc.errno or errno.EIO))
                _close(fd)

    def new_fd(self) -> int:
        """Return a free descriptor number, 3 or above, that is not deferred."""
        i = 3
        while True:
            if not self.is_deferred(i):
                try:
                    fd = os.dup(i)
                except OSError as exc:
                    if exc.errno != errno.EBADF:
                        fail("$&newfd", f"newfd: {os.strerror(exc.errno or errno.EIO)}")
                    return i
                if self.is_deferred(fd):
                    n = self.new_fd()
                    _close(fd)
                    return n
                _close(fd)
                return fd
            i += 1