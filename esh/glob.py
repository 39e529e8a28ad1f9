"""Wildcard matching against the file system and tilde expansion."""

from __future__ import annotations

import enum
import os
import stat
from typing import Callable, Optional, Sequence, Union

from esh import config
from esh.errors import fail
from esh.terms import sort_terms


class QuoteFlag(enum.Enum):
    """Quoting of a whole word: every character quoted, or none."""

    QUOTED = "QUOTED"
    UNQUOTED = "RAW"


QUOTED = QuoteFlag.QUOTED
UNQUOTED = QuoteFlag.UNQUOTED

# A quote is a whole-word flag or a string of 'q' (quoted) and 'r' (raw),
# one letter per character of the word.
Quote = Union[QuoteFlag, str]
HomeLookup = Callable[[Optional[str]], Optional[Sequence[str]]]

_WILD = frozenset("*?[")


def _raw_string(quote: Quote, length: int) -> str:
    if quote is UNQUOTED:
        return "r" * length
    if quote is QUOTED:
        return "q" * length
    return quote


def has_tilde(s: str, quote: Quote) -> bool:
    """True if *s* starts with an unquoted ~."""
    if not s.startswith("~") or quote is QUOTED:
        return False
    return quote is UNQUOTED or quote[:1] == "r"


def has_wild(s: str, quote: Quote) -> bool:
    """True if some unquoted character of *s* is a wildcard."""
    if quote is QUOTED:
        return False
    if quote is UNQUOTED:
        return any(c in _WILD for c in s)
    return any(c in _WILD and r == "r" for c, r in zip(s, quote))


def is_hidden(name: str) -> bool:
    """True if a wildcard must not match *name* without an explicit dot."""
    if config.SHOW_DOT_FILES:
        return name in (".", "..")
    return name.startswith(".")


def _match_class(ch: str, pattern: str, q: str, i: int) -> Optional[tuple[int, bool]]:
    negate = i < len(pattern) and pattern[i] == "~" and q[i] == "r"
    if negate:
        i += 1
    start = i
    matched = False
    while True:
        if i >= len(pattern):
            return None
        c = pattern[i]
        if c == "]" and q[i] == "r" and i > start:
            break
        if (
            i + 2 < len(pattern)
            and pattern[i + 1] == "-"
            and q[i + 1] == "r"
            and not (pattern[i + 2] == "]" and q[i + 2] == "r")
        ):
            if c <= ch <= pattern[i + 2]:
                matched = True
            i += 3
        else:
            if c == ch:
                matched = True
            i += 1
    return i + 1, matched != negate


def _step(ch: str, pattern: str, q: str, pi: int) -> Optional[int]:
    c = pattern[pi]
    if q[pi] == "r":
        if c == "?":
            return pi + 1
        if c == "[":
            found = _match_class(ch, pattern, q, pi + 1)
            if found is not None:
                end, ok = found
                return end if ok else None
    return pi + 1 if c == ch else None


def _match(name: str, pattern: str, quote: Quote) -> bool:
    q = _raw_string(quote, len(pattern))
    si = pi = 0
    backtrack: Optional[tuple[int, int]] = None
    while True:
        if pi < len(pattern) and pattern[pi] == "*" and q[pi] == "r":
            pi += 1
            backtrack = (pi, si)
            continue
        if si == len(name):
            if pi == len(pattern):
                return True
        elif pi < len(pattern):
            nxt = _step(name[si], pattern, q, pi)
            if nxt is not None:
                pi, si = nxt, si + 1
                continue
        if backtrack is None or backtrack[1] >= len(name):
            return False
        pi, si = backtrack[0], backtrack[1] + 1
        backtrack = (pi, si)


def dir_match(prefix: str, dirname: str, pattern: str, quote: Quote) -> list[str]:
    """Names in *dirname* matching *pattern*, each preceded by *prefix*."""
    try:
        if not stat.S_ISDIR(os.stat(dirname).st_mode):
            return []
    except OSError:
        return []
    if not has_wild(pattern, quote):
        name = prefix + pattern
        try:
            os.lstat(name)
        except OSError:
            return []
        return [name]
    try:
        entries = [".", ".."] + os.listdir(dirname)
    except OSError:
        return []
    return [
        prefix + entry
        for entry in entries
        if _match(entry, pattern, quote)
        and (not is_hidden(entry) or pattern.startswith("."))
    ]


def _list_glob(dirs: list[str], pattern: str, quote: str, slashcount: int) -> list[str]:
    result: list[str] = []
    for directory in dirs:
        result.extend(dir_match(directory + "/" * slashcount, directory, pattern, quote))
    return result


def glob_one(pattern: str, quote: Quote) -> list[str]:
    """Expand one wildcard path against the file system, unsorted."""
    if quote is QUOTED:
        raise ValueError("a fully quoted word cannot be globbed")
    q = _raw_string(quote, len(pattern))
    n = len(pattern)
    absolute = pattern.startswith("/")
    i = 0
    if absolute:
        while i < n and pattern[i] == "/":
            i += 1
    else:
        while i < n and pattern[i] != "/":
            i += 1
    first, qfirst = pattern[:i], q[:i]
    if i == n:
        return dir_match("", ".", first, qfirst)

    matched = [first] if absolute else dir_match("", ".", first, qfirst)
    while True:
        start = i
        while i < n and pattern[i] == "/":
            i += 1
        slashcount = i - start
        start = i
        while i < n and pattern[i] != "/":
            i += 1
        matched = _list_glob(matched, pattern[start:i], q[start:i], slashcount)
        if i >= n or not matched:
            return matched


def expand_home(word: str, quote: Quote, home: Optional[HomeLookup]) -> tuple[str, Quote]:
    """Expand a leading ~ or ~user using *home*; returns the word and its quote."""
    if not has_tilde(word, quote):
        raise ValueError("word does not start with an unquoted ~")
    if home is None:
        return word, quote
    slash = word.find("/")
    if slash == -1:
        slash = len(word)
    user = word[1:slash] if slash > 1 else None
    values = home(user)
    if not values:
        return word, quote
    if len(values) > 1:
        fail("es:expandhome", "%home returned more than one value")
    dirname = str(getattr(values[0], "text", values[0]))
    if slash == len(word):
        return dirname, QUOTED
    rest = word[slash:]
    if quote is UNQUOTED:
        newquote: Quote = "q" * len(dirname) + "r" * len(rest)
    elif "r" not in quote:
        newquote = QUOTED
    else:
        newquote = "q" * len(dirname) + quote[slash:]
    return dirname + rest, newquote


def glob_list(
    words: Sequence[str],
    quotes: Sequence[Quote],
    home: Optional[HomeLookup] = None,
) -> list[str]:
    """Tilde-expand and glob a list of words with their quote flags."""
    if len(words) != len(quotes):
        raise ValueError("each word needs exactly one quote flag")
    words = list(words)
    quotes = list(quotes)
    doglobbing = False
    for index, (word, quote) in enumerate(zip(words, quotes)):
        if quote is QUOTED:
            continue
        if has_tilde(word, quote):
            word, quote = expand_home(word, quote, home)
            words[index], quotes[index] = word, quote
        if has_wild(word, quote):
            doglobbing = True
    if not doglobbing:
        return words

    result: list[str] = []
    for word, quote in zip(words, quotes):
        expanded = [] if not has_wild(word, quote) else glob_one(word, quote)
        if expanded:
            result.extend(sort_terms(expanded))
        else:
            result.append(word)
    return result