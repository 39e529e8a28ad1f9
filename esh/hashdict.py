"""Open-addressing string dictionaries keyed by the shell's own hash."""

from __future__ import annotations

from typing import Any, Iterator, Optional

_INIT_DICT_SIZE = 2
_M32 = (1 << 32) - 1
_M64 = (1 << 64) - 1


def _remain(size: int) -> int:
    return (size * 2) // 3


def _bytes(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def strhash(str1: str, str2: Optional[str] = None) -> int:
    """Hash the catenation of *str1* and *str2* to an unsigned 64-bit value."""
    if str1 is None:
        raise ValueError("cannot hash a missing string")
    data = _bytes(str1) + (_bytes(str2) if str2 is not None else b"")
    n = 0
    for position, c in enumerate(data):
        step = position & 3
        if step == 0:
            n = (n + ((c << 17) ^ (c << 11) ^ (c << 5) ^ (c >> 1))) & _M64
        elif step == 1:
            n ^= (c << 14) + (c << 7) + (c << 4) + c
        elif step == 2:
            n ^= (((~c & _M32) << 11) & _M32) | ((c << 3) ^ (c >> 1))
        else:
            n = (n - ((c << 16) | (c << 9) | (c << 2) | (c & 3))) & _M64
    return n


class _Dead:
    __slots__ = ()

    def __repr__(self) -> str:
        return "DEAD"


_DEAD = _Dead()


class HashDict:
    """A string-keyed hash table using linear probing and tombstones.

    Storing None under a name removes it, mirroring the shell's
    convention that an empty definition is no definition.
    """

    def __init__(self) -> None:
        self._table: list = [None] * _INIT_DICT_SIZE
        self._remain = _remain(_INIT_DICT_SIZE)

    def _slot(self, name: str, hashed: Optional[int] = None) -> Optional[int]:
        mask = len(self._table) - 1
        n = strhash(name) if hashed is None else hashed
        while True:
            index = n & mask
            entry = self._table[index]
            if entry is None:
                return None
            if entry is not _DEAD and entry[0] == name:
                return index
            n += 1

    def get(self, name: str) -> Any:
        """Return the value stored under *name*, or None."""
        index = self._slot(name)
        return None if index is None else self._table[index][1]

    def get2(self, name1: str, name2: str) -> Any:
        """Look up the catenation of two names."""
        index = self._slot(name1 + name2, strhash(name1, name2))
        return None if index is None else self._table[index][1]

    def put(self, name: str, value: Any) -> None:
        """Store *value* under *name*; a value of None removes the name."""
        index = self._slot(name)
        if value is None:
            if index is not None:
                self._remove(index)
        elif index is not None:
            self._table[index] = (name, value)
        else:
            self._insert(name, value)

    def _insert(self, name: str, value: Any) -> None:
        if self._remain <= 1:
            self._grow()
        mask = len(self._table) - 1
        n = strhash(name)
        while True:
            index = n & mask
            entry = self._table[index]
            if entry is None:
                self._remain -= 1
                break
            if entry is _DEAD:
                break
            n += 1
        self._table[index] = (name, value)

    def _grow(self) -> None:
        old = self._table
        size = len(old) * 2
        self._table = [None] * size
        self._remain = _remain(size)
        for entry in old:
            if entry is not None and entry is not _DEAD:
                self._insert(*entry)

    def _remove(self, index: int) -> None:
        table = self._table
        mask = len(table) - 1
        table[index] = _DEAD
        n = index + 1
        while table[n & mask] is _DEAD:
            n += 1
        if table[n & mask] is not None:
            return
        n -= 1
        while table[n & mask] is _DEAD:
            table[n & mask] = None
            self._remain += 1
            n -= 1

    def items(self) -> list[tuple[str, Any]]:
        """All (name, value) pairs in table order."""
        return [e for e in self._table if e is not None and e is not _DEAD]

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self.items())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._slot(name) is not None

    def __len__(self) -> int:
        return len(self.items())