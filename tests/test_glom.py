import pytest

from esh.errors import EsError
from esh.glob import QUOTED, UNQUOTED
from esh.glom import concat, qcat, qconcat, subscript
from esh.terms import Term

ITEMS = ["a", "b", "c", "d", "e"]


def texts(terms):
    return [t.text for t in terms]


def test_concat_is_cartesian_product():
    result = concat(["a", "b"], ["1", "2"])
    assert texts(result) == ["a1", "a2", "b1", "b2"]


def test_concat_accepts_terms():
    result = concat([Term(text="x")], [Term(text="y"), "z"])
    assert texts(result) == ["xy", "xz"]


def test_concat_with_empty_side_is_empty():
    assert concat([], ["a"]) == []
    assert concat(["a"], []) == []


def test_qcat_whole_word_flags():
    assert qcat(QUOTED, QUOTED, "ab", "c") is QUOTED
    assert qcat(UNQUOTED, UNQUOTED, "ab", "c") is UNQUOTED


def test_qcat_mixed_flags_expand_per_character():
    assert qcat(QUOTED, UNQUOTED, "ab", "c") == "qqr"
    assert qcat("rq", QUOTED, "xy", "zz") == "rq" + "qq"


def test_qcat_length_matches_joined_string():
    q = qcat(UNQUOTED, "qrq", "hello", "abc")
    assert len(q) == len("hello" + "abc")
    assert q.startswith("r" * len("hello"))


def test_qconcat_pairs_words_and_quotes():
    words, quotes = qconcat(["a", "b"], ["c"], [QUOTED, UNQUOTED], [UNQUOTED])
    assert texts(words) == ["ac", "bc"]
    assert quotes[0] == "qr"
    assert quotes[1] is UNQUOTED
    assert len(words) == len(quotes)


def test_qconcat_rejects_mismatched_quotes():
    with pytest.raises(ValueError):
        qconcat(["a"], ["b"], [], [QUOTED])


def test_subscript_single_index():
    assert subscript(ITEMS, ["2"]) == ["b"]


def test_subscript_range():
    assert subscript(ITEMS, ["2", "...", "4"]) == ["b", "c", "d"]


def test_subscript_leading_range():
    assert subscript(ITEMS, ["...", "2"]) == ["a", "b"]


def test_subscript_open_range():
    assert subscript(ITEMS, ["3", "..."]) == ["c", "d", "e"]


def test_subscript_range_clamped():
    assert subscript(ITEMS, ["4", "...", "99"]) == ["d", "e"]


def test_subscript_out_of_range_is_skipped():
    assert subscript(ITEMS, ["9"]) == []
    assert subscript([], ["...", "3"]) == []


def test_subscript_order_and_repeats():
    assert subscript(ITEMS, ["3", "1", "3"]) == ["c", "a", "c"]


def test_subscript_accepts_hex_indices():
    assert subscript(ITEMS, ["0x2"]) == ["b"]


def test_subscript_empty_subs():
    assert subscript(ITEMS, []) == []


@pytest.mark.parametrize("subs", [["0"], ["-1"], ["x"], ["1", "...", "0"]])
def test_subscript_bad(subs):
    with pytest.raises(EsError) as info:
        subscript(ITEMS, subs)
    assert info.value.kind() == "error"
    assert "bad subscript" in str(info.value)