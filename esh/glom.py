"""Building word lists: concatenation, quote tracking and subscripts."""

from __future__ import annotations

from typing import Any, Sequence, Union

from esh.convert import format_term
from esh.errors import fail
from esh.glob import QUOTED, UNQUOTED, Quote
from esh.terms import Term, _strtol

Word = Union[Term, str]


def _text(item: Word) -> str:
    if isinstance(item, Term):
        return format_term(item)
    return item


def concat(left: Sequence[Word], right: Sequence[Word]) -> list[Term]:
    """Cartesian product concatenation of two lists of words."""
    return [Term(text=_text(a) + _text(b)) for a in left for b in right]


def _expand(quote: Quote, text: str) -> str:
    if quote is QUOTED:
        return "q" * len(text)
    if quote is UNQUOTED:
        return "r" * len(text)
    return quote


def qcat(q1: Quote, q2: Quote, s1: Word, s2: Word) -> Quote:
    """Combine the quote flags of two words that are being joined."""
    if q1 is QUOTED and q2 is QUOTED:
        return QUOTED
    if q1 is UNQUOTED and q2 is UNQUOTED:
        return UNQUOTED
    return _expand(q1, _text(s1)) + _expand(q2, _text(s2))


def qconcat(
    left: Sequence[Word],
    right: Sequence[Word],
    lquotes: Sequence[Quote],
    rquotes: Sequence[Quote],
) -> tuple[list[Term], list[Quote]]:
    """Like concat, but also produce the quote flags of every result."""
    if len(left) != len(lquotes) or len(right) != len(rquotes):
        raise ValueError("each word needs exactly one quote flag")
    words: list[Term] = []
    quotes: list[Quote] = []
    for a, qa in zip(left, lquotes):
        for b, qb in zip(right, rquotes):
            words.append(Term(text=_text(a) + _text(b)))
            quotes.append(qcat(qa, qb, a, b))
    return words, quotes


def _bound(word: str) -> int:
    value = _strtol(word)
    if value < 1:
        fail("es:subscript", f"bad subscript: {word}")
    return value


def subscript(items: Sequence[Any], subs: Sequence[Word]) -> list[Any]:
    """Select elements of *items* by 1-based indices and ``lo ... hi`` ranges."""
    items = list(items)
    words = [_text(s) for s in subs]
    length = len(items)
    result: list[Any] = []
    i = 0
    while i < len(words):
        if i == 0 and words[0] == "...":
            lo = 1
            is_range = True
            i = 1
        else:
            lo = _bound(words[i])
            i += 1
            is_range = i < len(words) and words[i] == "..."
            if is_range:
                i += 1
        if is_range:
            if i >= len(words):
                hi = length
            else:
                hi = min(_bound(words[i]), length)
                i += 1
        else:
            hi = lo
        if lo > length:
            continue
        result.extend(items[lo - 1:hi])
    return result