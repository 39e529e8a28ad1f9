"""Syntax trees, terms, closures and bindings."""

from __future__ import annotations

import enum
import string
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence, Union

from esh.errors import fail


class NodeKind(enum.Enum):
    ASSIGN = "Assign"
    CALL = "Call"
    CLOSURE = "Closure"
    CONCAT = "Concat"
    FOR = "For"
    LAMBDA = "Lambda"
    LET = "Let"
    LIST = "List"
    LOCAL = "Local"
    MATCH = "Match"
    EXTRACT = "Extract"
    PRIM = "Prim"
    QWORD = "Qword"
    THUNK = "Thunk"
    VAR = "Var"
    VARSUB = "Varsub"
    WORD = "Word"
    REDIR = "Redir"
    PIPE = "Pipe"


@dataclass
class Tree:
    """A parse tree node; word-like nodes keep their string in *left*."""

    kind: NodeKind
    left: object = None
    right: object = None


@dataclass(eq=False)
class Closure:
    """A tree together with the lexical bindings it closes over."""

    tree: Optional[Tree] = None
    binding: Optional["Binding"] = None

    def __repr__(self) -> str:
        kind = self.tree.kind.name if self.tree is not None else None
        names = [b.name for b in self.binding] if self.binding is not None else []
        return f"Closure(tree={kind}, bindings={names})"


@dataclass(frozen=True)
class Term:
    """A single value: either a string or a closure."""

    text: Optional[str] = None
    closure: Optional[Closure] = None

    def __post_init__(self) -> None:
        if self.text is None and self.closure is None:
            raise ValueError("a term needs a string or a closure")


@dataclass
class Binding:
    """One link of a chain of variable bindings."""

    name: str
    defn: Sequence[Term] = field(default_factory=tuple)
    next: Optional["Binding"] = None

    def __post_init__(self) -> None:
        self.defn = tuple(self.defn)

    def __iter__(self) -> Iterator["Binding"]:
        node: Optional[Binding] = self
        while node is not None:
            yield node
            node = node.next

    def lookup(self, name: str) -> Optional[tuple]:
        """Return the innermost definition of *name*, or None if unbound."""
        for node in self:
            if node.name == name:
                return node.defn
        return None


def reverse_bindings(binding: Optional[Binding]) -> Optional[Binding]:
    """Return a chain with the same links in the opposite order."""
    result: Optional[Binding] = None
    if binding is not None:
        for node in binding:
            result = Binding(node.name, node.defn, result)
    return result


def _strtol(text: str) -> int:
    """Parse an integer the way strtol(s, NULL, 0) does."""
    s = text.lstrip(" \t\n\v\f\r")
    sign = 1
    if s.startswith(("+", "-")):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if s[:2].lower() == "0x" and len(s) > 2 and s[2] in string.hexdigits:
        base, valid, s = 16, string.hexdigits, s[2:]
    elif s.startswith("0"):
        base, valid = 8, string.octdigits
    else:
        base, valid = 10, string.digits
    digits = []
    for c in s:
        if c not in valid:
            break
        digits.append(c)
    return sign * int("".join(digits), base) if digits else 0


def _tree_items(tree: Optional[Tree]) -> Iterator[object]:
    while tree is not None:
        if tree.kind is not NodeKind.LIST:
            raise ValueError(f"expected a list node, got {tree.kind.name}")
        yield tree.left
        tree = tree.right


def _unwrap(tree: Tree) -> Tree:
    if tree.kind is NodeKind.LIST and tree.right is None:
        return tree.left
    return tree


_chain: list[Closure] = []

_WORDS = (NodeKind.WORD, NodeKind.QWORD)


def _extract(tree: Optional[Tree], bindings: Optional[Binding]) -> Optional[Binding]:
    for defn in _tree_items(tree):
        if defn is None:
            continue
        name = defn.left
        if not isinstance(name, Tree) or name.kind not in _WORDS:
            raise ValueError("binding name must be a word")
        remaining = iter(reversed(list(_tree_items(defn.right))))
        terms: list[Term] = []
        for word in remaining:
            if word is None:
                raise ValueError("empty element in binding")
            if word.kind is NodeKind.PRIM:
                if word.left != "nestedbinding":
                    fail("$&parse", f"bad unquoted primitive in %closure: $&{word.left}")
                count_word = next(remaining, None)
                if (
                    count_word is None
                    or count_word.kind is not NodeKind.WORD
                    or (count := _strtol(count_word.left)) < 0
                ):
                    fail("$&parse", "improper use of $&nestedbinding")
                if count >= len(_chain):
                    fail("$&parse", f"bad count in $&nestedbinding: {count}")
                terms.append(Term(closure=_chain[-1 - count]))
            elif word.kind in _WORDS:
                terms.append(Term(text=word.left))
            else:
                raise ValueError(f"unexpected node in binding: {word.kind.name}")
        terms.reverse()
        bindings = Binding(name.left, terms, bindings)
    return bindings


def extract_bindings(tree: Tree) -> Closure:
    """Turn a parsed %closure(...) form into a Closure with its bindings."""
    if tree is None:
        raise ValueError("no tree to extract bindings from")
    tree = _unwrap(tree)
    me = Closure()
    bindings: Optional[Binding] = None
    _chain.append(me)
    try:
        while tree.kind is NodeKind.CLOSURE:
            bindings = _extract(tree.left, bindings)
            tree = tree.right
            if tree is None:
                fail("$&parse", "null body in %closure")
            tree = _unwrap(tree)
    finally:
        _chain.pop()
    me.tree = tree
    me.binding = bindings
    return me


def nth(items: Sequence, n: int):
    """Return the n-th element counting from 1, or None if there is none."""
    if n < 1 or n > len(items):
        return None
    return items[n - 1]


def _sort_key(item: Union[Term, str]) -> bytes:
    text = item.text if isinstance(item, Term) else item
    if text is None:
        raise ValueError("cannot sort a closure term")
    return text.encode("utf-8", "surrogateescape")


def sort_terms(items: Sequence[Union[Term, str]]) -> list:
    """Return the items sorted by their strings in byte order."""
    if len(items) <= 1:
        return list(items)
    return sorted(items, key=_sort_key)