import pytest

from esh.errors import EsError, fail


def test_fail_builds_error_exception():
    with pytest.raises(EsError) as info:
        fail("$&access", "no such file")
    assert info.value.terms == ["error", "$&access", "no such file"]
    assert info.value.kind() == "error"


def test_error_message_is_rest_of_terms():
    with pytest.raises(EsError) as info:
        fail("es:eval", "max-eval-depth exceeded")
    assert str(info.value) == "max-eval-depth exceeded"


def test_non_error_exception_string():
    e = EsError(["exit", "3"])
    assert e.kind() == "exit"
    assert str(e) == "exit 3"


def test_empty_exception_rejected():
    with pytest.raises(ValueError):
        EsError([])


def test_kind_uses_term_text():
    class _Word:
        text = "break"

    assert EsError([_Word()]).kind() == "break"