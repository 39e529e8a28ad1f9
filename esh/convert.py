"""Conversion of trees, closures, terms and lists to their printed forms."""

from __future__ import annotations

import enum
from typing import Iterable, Optional, Union

from esh.terms import Closure, NodeKind, Term, Tree

ENV_SEPARATOR = "\001"
ENV_ESCAPE = "\002"

_NON_WORD = frozenset(b"\0\t\n #;&|^$=`'{}()<>\\")
_ESCAPES = {
    0x07: "\\a",
    0x08: "\\b",
    0x0C: "\\f",
    0x0A: "\\n",
    0x0D: "\\r",
    0x09: "\\t",
    0x1B: "\\e",
}
_WORDS = (NodeKind.WORD, NodeKind.QWORD)
_BINDING_KEYWORDS = {
    NodeKind.LOCAL: "local",
    NodeKind.LET: "let",
    NodeKind.FOR: "for",
    NodeKind.CLOSURE: "%closure",
}
_HEX = "0123456789abcdef"


class _State(enum.Enum):
    BEGIN = enum.auto()
    QUOTED = enum.auto()
    UNQUOTED = enum.auto()


def _bytes(text: str) -> bytes:
    return text.encode("utf-8", "surrogateescape")


def _getstr(item: Union[Term, str]) -> str:
    if isinstance(item, Term):
        if item.text is not None:
            return item.text
        return format_closure(item.closure)
    return item


def _isprint(c: int) -> bool:
    return 0x20 <= c < 0x7F


def quote_string(s: str, force: bool = False) -> str:
    """Quote *s* so the shell reads it back as one word; *force* always quotes."""
    data = _bytes(s)
    if not force and data and not any(c in _NON_WORD or c == 0x40 for c in data):
        return s
    out: list[str] = []
    state = _State.BEGIN
    for c in data:
        if not _isprint(c):
            if state is _State.QUOTED:
                out.append("'")
            if state is not _State.BEGIN:
                out.append("^")
            out.append(_ESCAPES.get(c, "\\%o" % c))
            state = _State.UNQUOTED
        else:
            if state is _State.UNQUOTED:
                out.append("^")
            if state is not _State.QUOTED:
                out.append("'")
            if c == 0x27:
                out.append("'")
            out.append(chr(c))
            state = _State.QUOTED
    if state is _State.BEGIN:
        out.append("''")
    elif state is _State.QUOTED:
        out.append("'")
    return "".join(out)


def format_list(items: Iterable[Union[Term, str]], sep: str = " ", altform: bool = False) -> str:
    """Join the strings of *items* with *sep*, quoting each if *altform*."""
    if altform:
        return sep.join(quote_string(_getstr(item)) for item in items)
    return sep.join(_getstr(item) for item in items)


def _treecount(tree: Optional[Tree]) -> int:
    if tree is None:
        return 0
    if tree.kind is NodeKind.LIST:
        return _treecount(tree.left) + _treecount(tree.right)
    return 1


def _list_items(tree: Optional[Tree]):
    while tree is not None:
        if tree.kind is not NodeKind.LIST:
            raise ValueError(f"expected a list node, got {tree.kind.name}")
        yield tree.left
        tree = tree.right


def _binding(out: list[str], keyword: str, tree: Tree) -> None:
    out.append(keyword + "(")
    sep = ""
    for assign in _list_items(tree.left):
        if assign is None or assign.kind is not NodeKind.ASSIGN:
            raise ValueError("binding element is not an assignment")
        out.append(sep)
        _tree(out, assign.left, True)
        out.append("=")
        _tree(out, assign.right, False)
        sep = ";"
    out.append(")")


def _tree(out: list[str], n: Optional[Tree], group: bool) -> None:
    while True:
        if n is None:
            if group:
                out.append("()")
            return
        kind = n.kind

        if kind is NodeKind.WORD:
            out.append(n.left)
            return
        if kind is NodeKind.QWORD:
            out.append(quote_string(n.left, True))
            return
        if kind is NodeKind.PRIM:
            out.append("$&" + n.left)
            return
        if kind is NodeKind.ASSIGN:
            _tree(out, n.left, True)
            out.append("=")
            n, group = n.right, False
            continue
        if kind is NodeKind.CONCAT:
            _tree(out, n.left, True)
            out.append("^")
            n, group = n.right, True
            continue
        if kind in (NodeKind.MATCH, NodeKind.EXTRACT):
            out.append("~ " if kind is NodeKind.MATCH else "~~ ")
            _tree(out, n.left, True)
            if n.right is not None:
                out.append(" ")
            n, group = n.right, False
            continue
        if kind is NodeKind.THUNK:
            out.append("{")
            _tree(out, n.left, False)
            out.append("}")
            return
        if kind is NodeKind.VARSUB:
            out.append("$")
            _tree(out, n.left, True)
            out.append("(")
            _tree(out, n.right, False)
            out.append(")")
            return
        if kind in _BINDING_KEYWORDS:
            _binding(out, _BINDING_KEYWORDS[kind], n)
            n, group = n.right, False
            continue
        if kind is NodeKind.CALL:
            t = n.left
            out.append("<=")
            if t is not None and t.kind in (NodeKind.THUNK, NodeKind.PRIM):
                n, group = t, False
                continue
            out.append("{")
            _tree(out, t, False)
            out.append("}")
            return
        if kind is NodeKind.VAR:
            out.append("$")
            n = n.left
            if _treecount(n) == 1:
                if n.kind in _WORDS or (
                    n.kind is NodeKind.LIST
                    and n.left is not None
                    and n.left.kind in _WORDS
                ):
                    continue
                out.append("(")
                _tree(out, n, True)
                out.append(")")
                return
            group = True
            continue
        if kind is NodeKind.LAMBDA:
            out.append("@ ")
            if n.left is None:
                out.append("*")
            else:
                _tree(out, n.left, False)
            out.append("{")
            _tree(out, n.right, False)
            out.append("}")
            return
        if kind is NodeKind.LIST:
            if not group:
                while n.right is not None:
                    _tree(out, n.left, False)
                    out.append(" ")
                    n = n.right
                n = n.left
                continue
            count = _treecount(n)
            if count == 0:
                out.append("()")
            elif count == 1:
                _tree(out, n.left, False)
                _tree(out, n.right, False)
            else:
                out.append("(")
                items = _list_items(n)
                _tree(out, next(items), False)
                for item in items:
                    out.append(" ")
                    _tree(out, item, False)
                out.append(")")
            return
        raise ValueError(f"bad node kind: {kind.name}")


def format_tree(tree: Optional[Tree], group: bool = False) -> str:
    """Print a tree as shell source; *group* parenthesises lists."""
    out: list[str] = []
    _tree(out, tree, group)
    return "".join(out)


def format_closure(closure: Closure, altform: bool = False) -> str:
    """Print a closure, with its %closure bindings if it has any."""
    if altform:
        return quote_string(format_closure(closure, False))
    out: list[str] = []
    if closure.binding is not None:
        chain = list(closure.binding)
        chain.reverse()
        parts = [
            quote_string(b.name) + "=" + format_list(b.defn, " ", altform=True)
            for b in chain
        ]
        out.append("%closure(" + ";".join(parts) + ")")
    _tree(out, closure.tree, False)
    return "".join(out)


def format_term(term: Term, altform: bool = False) -> str:
    """Print a term: its closure, or its string quoted if *altform*."""
    if term.closure is not None:
        return format_closure(term.closure, altform)
    return quote_string(term.text) if altform else term.text


def encode_name(name: str) -> str:
    """Make a variable name safe for the environment of other shells."""
    data = _bytes(name)
    out: list[str] = []
    for position, c in enumerate(data):
        following = data[position + 1] if position + 1 < len(data) else 0
        ch = chr(c)
        keep = ch.isascii() and (ch.isalpha() if position == 0 else ch.isalnum())
        if keep or (c == 0x5F and following != 0x5F):
            out.append(ch)
        else:
            out.append("__%02x" % c)
    return "".join(out)


def decode_name(name: str) -> str:
    """Undo encode_name."""
    data = _bytes(name)
    out = bytearray()
    i = 0
    while i < len(data):
        c = data[i]
        i += 1
        if c == 0x5F and data[i:i + 1] == b"_" and i + 2 < len(data) + 0:
            h1, h2 = chr(data[i + 1]), chr(data[i + 2])
            if h1 in _HEX and h2 in _HEX:
                c = (_HEX.index(h1) << 4) | _HEX.index(h2)
                i += 3
        out.append(c)
    return bytes(out).decode("utf-8", "surrogateescape")


def env_join(items: Iterable[Union[Term, str]]) -> str:
    """Merge a list into one environment string, escaping separators."""
    words = []
    for item in items:
        text = _getstr(item)
        words.append(
            "".join(
                ENV_ESCAPE + ch if ch in (ENV_ESCAPE, ENV_SEPARATOR) else ch
                for ch in text
            )
        )
    return ENV_SEPARATOR.join(words)