import contextlib
import os

import pytest

from esh.errors import EsError
from esh.fdtable import FdRef, FdTable, move_fd


def _closed(fd):
    try:
        os.fstat(fd)
    except OSError:
        return True
    return False


@pytest.fixture
def pipe():
    r, w = os.pipe()
    extra = []
    yield r, w, extra
    for fd in (r, w, *extra):
        with contextlib.suppress(OSError):
            os.close(fd)


def _free_fd():
    fd = os.dup(0)
    os.close(fd)
    return fd


def test_move_fd(pipe):
    r, w, extra = pipe
    target = _free_fd()
    extra.append(target)
    move_fd(w, target)
    assert _closed(w)
    os.write(target, b"x")
    assert os.read(r, 1) == b"x"


def test_move_fd_same_is_noop(pipe):
    r, w, _ = pipe
    result = move_fd(w, w)
    assert result is None
    assert not _closed(w)
    os.write(w, b"a")
    assert os.read(r, 1) == b"a"


def test_defer_in_parent(pipe):
    r, w, _ = pipe
    table = FdTable()
    user = 50
    ticket = table.defer_move(True, w, user)
    assert ticket == 0
    assert table.fdmap(user) == w
    assert table.is_deferred(user)
    table.undefer(ticket)
    assert _closed(w)
    assert not table.is_deferred(user)
    assert table.fdmap(user) == user


def test_defer_close_maps_to_none():
    table = FdTable()
    ticket = table.defer_close(True, 60)
    assert table.fdmap(60) is None
    table.undefer(ticket)
    assert table.fdmap(60) == 60


def test_defer_not_in_parent_acts_now(pipe):
    r, w, extra = pipe
    table = FdTable()
    target = _free_fd()
    extra.append(target)
    assert table.defer_move(False, w, target) is None
    os.write(target, b"z")
    assert os.read(r, 1) == b"z"
    assert not table.is_deferred(target)


def test_undefer_out_of_order():
    table = FdTable()
    first = table.defer_close(True, 70)
    table.defer_close(True, 71)
    with pytest.raises(ValueError):
        table.undefer(first)


def test_register_twice_and_unregister_unknown(pipe):
    r, _, _ = pipe
    table = FdTable()
    ref = FdRef(r)
    table.register(ref, True)
    with pytest.raises(ValueError):
        table.register(ref, True)
    table.unregister(ref)
    with pytest.raises(ValueError):
        table.unregister(ref)


def test_release_moves_reserved(pipe):
    r, w, extra = pipe
    table = FdTable()
    ref = FdRef(r)
    table.register(ref, True)
    table.release(r)
    extra.append(ref.fd)
    assert _closed(r)
    os.write(w, b"y")
    assert os.read(ref.fd, 1) == b"y"


def test_close_for_child(pipe):
    r, w, _ = pipe
    table = FdTable()
    closing = FdRef(r)
    keeping = FdRef(w)
    table.register(closing, True)
    table.register(keeping, False)
    table.close_for_child()
    assert closing.fd == -1
    assert _closed(r)
    assert keeping.fd == w


def test_close_for_child_applies_deferrals(pipe):
    r, w, extra = pipe
    table = FdTable()
    target = _free_fd()
    extra.append(target)
    table.defer_move(True, w, target)
    table.close_for_child()
    assert not table.is_deferred(target)
    os.write(target, b"q")
    assert os.read(r, 1) == b"q"


def test_new_fd_is_free():
    table = FdTable()
    n = table.new_fd()
    assert n >= 3
    assert _closed(n)


def test_new_fd_skips_deferred():
    table = FdTable()
    n = table.new_fd()
    table.defer_close(True, n)
    m = table.new_fd()
    assert m != n
    assert _closed(m)
    assert not table.is_deferred(m)