"""Shell exceptions: a thrown exception is a list of terms."""

from __future__ import annotations

from typing import Any, NoReturn, Sequence


def _text(term: Any) -> str:
    text = getattr(term, "text", term)
    return "" if text is None else str(text)


class EsError(Exception):
    """An exception raised inside the shell, carrying a list of terms."""

    def __init__(self, terms: Sequence[Any]) -> None:
        terms = list(terms)
        if not terms:
            raise ValueError("an exception needs at least one term")
        super().__init__(*terms)
        self.terms = terms

    def kind(self) -> str:
        """The name of the exception, such as 'error', 'exit' or 'return'."""
        return _text(self.terms[0])

    def __str__(self) -> str:
        if self.kind() == "error":
            return " ".join(_text(t) for t in self.terms[2:])
        return " ".join(_text(t) for t in self.terms)


def fail(origin: str, message: str) -> NoReturn:
    """Raise a user catchable error coming from *origin*."""
    raise EsError(["error", origin, message])