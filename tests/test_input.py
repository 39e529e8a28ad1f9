import os

import pytest

from esh.errors import EsError
from esh.input import FdInput, HistoryBuffer, StringInput, locate


def read_all(source):
    chars = []
    while (c := source.get()) is not None:
        chars.append(c)
    return "".join(chars)


def test_locate_batch_and_interactive():
    assert locate("script", 3, "syntax error", False) == "script:3: syntax error"
    assert locate("script", 3, "syntax error", True) == "syntax error"


def test_history_buffer_strips_final_newline_and_resets():
    h = HistoryBuffer()
    for c in "echo hi\n":
        h.add(c)
    assert h.dump() == "echo hi"
    assert h.dump() == ""


def test_history_buffer_keeps_inner_newlines():
    h = HistoryBuffer()
    for c in "a\nb\n\n":
        h.add(c)
    assert h.dump() == "a\nb\n"


def test_string_input_reads_all_then_eof():
    src = StringInput("echo hi")
    assert read_all(src) == "echo hi"
    assert src.get() is None
    assert src.name == "echo hi"


def test_unget_is_last_in_first_out():
    src = StringInput("xyz")
    a = src.get()
    b = src.get()
    src.unget(a)
    src.unget(b)
    assert src.get() == b
    assert src.get() == a
    assert src.get() == "z"


def test_unget_limit():
    src = StringInput("abc")
    src.unget("a")
    src.unget("b")
    with pytest.raises(ValueError):
        src.unget("c")


def test_unget_eof():
    src = StringInput("")
    assert src.get() is None
    src.unget(None)
    assert src.get() is None


def test_history_records_only_fresh_characters():
    h = HistoryBuffer()
    src = StringInput("ls\n", history=h)
    c = src.get()
    src.unget(c)
    assert read_all(src) == "ls\n"
    assert h.dump() == "ls"


def test_null_characters_are_skipped_with_warning(capsys):
    src = StringInput("a\0b", name="t")
    assert read_all(src) == "ab"
    err = capsys.readouterr().err
    assert "warning: t:1: null character ignored" in err


def test_close_stops_reading():
    with StringInput("abc") as src:
        assert src.get() == "a"
        src.close()
        assert src.get() is None


def test_fd_input_reads_pipe_and_closes():
    r, w = os.pipe()
    text = "fn f { echo \u00e9 }\n"
    os.write(w, text.encode("utf-8"))
    os.close(w)
    src = FdInput(r)
    assert src.name == f"fd {r}"
    assert read_all(src) == text
    assert src.fd == -1
    assert src.get() is None


def test_fd_input_large_input():
    r, w = os.pipe()
    text = "x" * 3000 + "\n"
    os.write(w, text.encode())
    os.close(w)
    with FdInput(r, name="big") as src:
        assert read_all(src) == text


def test_fd_input_read_error(tmp_path):
    fd = os.open(tmp_path, os.O_RDONLY)
    src = FdInput(fd, name="dir")
    with pytest.raises(EsError) as info:
        src.get()
    assert info.value.terms[1] == "$&parse"
    assert str(info.value).startswith("dir: ")
    assert src.fd == -1


def test_fd_input_close_closes_descriptor():
    r, w = os.pipe()
    src = FdInput(r)
    src.close()
    os.close(w)
    assert src.fd == -1
    with pytest.raises(OSError):
        os.fstat(r)