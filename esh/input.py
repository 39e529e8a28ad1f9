"""Input sources for the lexer: strings and file descriptors."""

from __future__ import annotations

import codecs
import contextlib
import errno
import os
import sys
from typing import Optional

from esh.errors import fail

MAXUNGET = 2
BUFSIZE = 4096


def locate(name: Optional[str], lineno: int, message: str, interactive: bool = False) -> str:
    """Prefix *message* with its source location unless input is interactive."""
    if interactive:
        return message
    return f"{name}:{lineno}: {message}"


class HistoryBuffer:
    """Collects the characters of one command as they are read."""

    def __init__(self) -> None:
        self._chars: list[str] = []

    def add(self, c: str) -> None:
        """Append one character."""
        self._chars.append(c)

    def dump(self) -> str:
        """Return the collected text without a final newline, and start over."""
        text = "".join(self._chars)
        self._chars = []
        if text.endswith("\n"):
            text = text[:-1]
        return text


class Input:
    """A character source with up to two characters of pushback.

    get() returns one character at a time, or None at end of input.
    """

    def __init__(self, name: Optional[str] = None, history: Optional[HistoryBuffer] = None) -> None:
        self.name = name
        self.history = history
        self.lineno = 1
        self.interactive = False
        self.echo = False
        self._buf = ""
        self._pos = 0
        self._ungot: list[Optional[str]] = []
        self._eof = False

    def __enter__(self) -> "Input":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _warn(self, message: str) -> None:
        print(
            "warning: " + locate(self.name, self.lineno, message, self.interactive),
            file=sys.stderr,
        )

    def _next(self) -> tuple[Optional[str], bool]:
        if self._ungot:
            return self._ungot.pop(), True
        if self._pos < len(self._buf):
            c = self._buf[self._pos]
            self._pos += 1
            return c, False
        if self._eof:
            return None, False
        c = self.fill()
        if c is None:
            self._eof = True
        return c, False

    def get(self) -> Optional[str]:
        """Read one character, skipping NULs; None means end of input."""
        while True:
            c, ungot = self._next()
            if c != "\0":
                break
            self._warn("null character ignored")
        if not ungot and c is not None:
            if self.history is not None:
                self.history.add(c)
            if self.echo:
                sys.stderr.write(c)
                sys.stderr.flush()
        return c

    def unget(self, c: Optional[str]) -> None:
        """Push back one character to be read again."""
        if len(self._ungot) >= MAXUNGET:
            raise ValueError(f"at most {MAXUNGET} characters can be pushed back")
        self._ungot.append(c)

    def fill(self) -> Optional[str]:
        """Refill the buffer and return its first character; None at end."""
        return None

    def close(self) -> None:
        """Release the source; further reads report end of input."""
        self._buf = ""
        self._pos = 0
        self._ungot.clear()
        self._eof = True


class StringInput(Input):
    """Input read from a string."""

    def __init__(self, text: str, name: Optional[str] = None, history: Optional[HistoryBuffer] = None) -> None:
        if text is None:
            raise ValueError("no text to read")
        super().__init__(text if name is None else name, history)
        self._buf = text

    def fill(self) -> Optional[str]:
        """A string has nothing beyond its text."""
        return None


class FdInput(Input):
    """Input read from a file descriptor, which is closed at end of input."""

    def __init__(self, fd: int, name: Optional[str] = None, history: Optional[HistoryBuffer] = None) -> None:
        super().__init__(f"fd {fd}" if name is None else name, history)
        self.fd = fd
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="surrogateescape")

    def _close_fd(self) -> None:
        if self.fd != -1:
            with contextlib.suppress(OSError):
                os.close(self.fd)
            self.fd = -1
        self.interactive = False

    def fill(self) -> Optional[str]:
        """Read the next block from the descriptor."""
        while self.fd != -1:
            try:
                data = os.read(self.fd, BUFSIZE)
            except OSError as exc:
                self._close_fd()
                fail("$&parse", f"{self.name or 'es'}: {os.strerror(exc.errno or errno.EIO)}")
            if not data:
                text = self._decoder.decode(b"", final=True)
                self._close_fd()
            else:
                text = self._decoder.decode(data)
            if text:
                self._buf = text
                self._pos = 1
                return text[0]
        return None

    def close(self) -> None:
        """Close the descriptor if it is still open."""
        self._close_fd()
        super().close()