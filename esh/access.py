"""Access testing and path searching."""

from __future__ import annotations

import enum
import errno
import os
import stat
from functools import lru_cache
from typing import Any, Iterable, Optional

from esh.errors import fail

_USAGE = "access [-n name] [-1e] [-rwx] [-fdcblsp] path ..."
_OPTIONS = frozenset("bcdeflnprswx1")
_TAKES_ARGUMENT = frozenset("n")

_USER_SHIFT = 6
_GROUP_SHIFT = 3
_OTHER_SHIFT = 0


class FileType(enum.Enum):
    """The kind of file an access test requires."""

    ANY = 0
    REG = 1
    DIR = 2
    CHR = 3
    BLK = 4
    LNK = 5
    SOCK = 6
    FIFO = 7


class Permission(enum.IntFlag):
    """Permission bits as they appear in each rwx triple of a file mode."""

    READ = 4
    WRITE = 2
    EXEC = 1


# Character devices are accepted without a type check.
_TYPE_CHECKS = {
    FileType.REG: stat.S_ISREG,
    FileType.DIR: stat.S_ISDIR,
    FileType.BLK: stat.S_ISBLK,
    FileType.LNK: stat.S_ISLNK,
    FileType.SOCK: stat.S_ISSOCK,
    FileType.FIFO: stat.S_ISFIFO,
}

_TYPE_FLAGS = {
    "f": FileType.REG,
    "d": FileType.DIR,
    "c": FileType.CHR,
    "b": FileType.BLK,
    "l": FileType.LNK,
    "s": FileType.SOCK,
    "p": FileType.FIFO,
}

_PERM_FLAGS = {"r": Permission.READ, "w": Permission.WRITE, "x": Permission.EXEC}


def _text(item: Any) -> str:
    text = getattr(item, "text", item)
    if text is None:
        raise ValueError("expected a string argument")
    return str(text)


def _denied(path: str) -> PermissionError:
    return PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)


@lru_cache(maxsize=1)
def _group_set() -> frozenset:
    return frozenset(os.getgroups())


def _check_perm(st: os.stat_result, perm: int, path: str) -> None:
    if perm == 0:
        return
    uid = os.geteuid()
    if uid == 0:
        mask = (perm << _USER_SHIFT) | (perm << _GROUP_SHIFT) | (perm << _OTHER_SHIFT)
    elif uid == st.st_uid:
        mask = perm << _USER_SHIFT
    elif st.st_gid == os.getegid() or st.st_gid in _group_set():
        mask = perm << _GROUP_SHIFT
    else:
        mask = perm << _OTHER_SHIFT
    if (st.st_mode & mask) != mask:
        raise _denied(path)


def path_join(prefix: str, suffix: str) -> str:
    """Join two path parts with a single slash; an empty part is dropped."""
    if not prefix:
        return suffix
    if not suffix:
        return prefix
    return prefix + suffix if prefix.endswith("/") else prefix + "/" + suffix


def test_file(path: str, perm: int = Permission(0), ftype: FileType = FileType.ANY) -> None:
    """Raise OSError unless *path* exists, has type *ftype* and grants *perm*."""
    st = os.lstat(path) if ftype is FileType.LNK else os.stat(path)
    check = _TYPE_CHECKS.get(ftype)
    if check is not None and not check(st.st_mode):
        raise _denied(path)
    _check_perm(st, int(perm), path)


def _error_of(path: str, perm: int, ftype: FileType) -> int:
    try:
        test_file(path, perm, ftype)
    except OSError as exc:
        return exc.errno or errno.EIO
    return 0


def _parse_options(words: list[str]) -> tuple[list[tuple[str, Optional[str]]], list[str]]:
    options: list[tuple[str, Optional[str]]] = []
    i = 0
    while i < len(words):
        word = words[i]
        if word == "--":
            i += 1
            break
        if not word.startswith("-") or word == "-":
            break
        j = 1
        while j < len(word):
            c = word[j]
            j += 1
            if c not in _OPTIONS:
                fail("$&access", f"illegal option: -{c} -- usage: {_USAGE}")
            if c in _TAKES_ARGUMENT:
                if j < len(word):
                    arg = word[j:]
                else:
                    i += 1
                    if i >= len(words):
                        fail("$&access", f"option requires an argument: -{c} -- usage: {_USAGE}")
                    arg = words[i]
                options.append((c, arg))
                break
            options.append((c, None))
        i += 1
    return options, words[i:]


def access(args: Iterable[Any]) -> list[str]:
    """Run the access builtin over *args* and return its result list."""
    options, names = _parse_options([_text(a) for a in args])
    perm = Permission(0)
    ftype = FileType.ANY
    first = throws = False
    suffix: Optional[str] = None
    for flag, arg in options:
        if flag == "n":
            suffix = arg
        elif flag == "1":
            first = True
        elif flag == "e":
            throws = True
        elif flag in _PERM_FLAGS:
            perm |= _PERM_FLAGS[flag]
        else:
            ftype = _TYPE_FLAGS[flag]

    estatus = errno.ENOENT
    results: list[str] = []
    for name in names:
        if suffix is not None:
            name = path_join(name, suffix)
        error = _error_of(name, perm, ftype)
        if first:
            if error == 0:
                return [name]
            if error != errno.ENOENT:
                estatus = error
        else:
            results.append("0" if error == 0 else os.strerror(error))

    if first and throws:
        if suffix is not None:
            fail("$&access", f"{suffix}: {os.strerror(estatus)}")
        fail("$&access", os.strerror(estatus))
    return results


def check_executable(path: str) -> Optional[str]:
    """Return None if *path* is an executable regular file, else the reason."""
    error = _error_of(path, Permission.EXEC, FileType.REG)
    return None if error == 0 else os.strerror(error)