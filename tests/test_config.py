import pytest

from esh import config


def test_initial_path_ends_with_current_directory():
    path = config.initial_path()
    assert path[-1] == ""
    assert "/usr/bin" in path


def test_initial_path_returns_fresh_list():
    first = config.initial_path()
    first.append("/extra")
    assert "/extra" not in config.initial_path()


@pytest.mark.parametrize("code", [0, 1, 42, 255])
def test_exit_status_round_trip(code):
    status = code << 8
    assert config.wifexited(status)
    assert not config.wifsignaled(status)
    assert config.wexitstatus(status) == code


@pytest.mark.parametrize("sig", [1, 2, 9, 15])
def test_signal_status(sig):
    assert config.wifsignaled(sig)
    assert not config.wifexited(sig)
    assert config.wtermsig(sig) == sig
    assert not config.wcoredump(sig)


@pytest.mark.parametrize("sig", [6, 11])
def test_core_dump_status(sig):
    status = sig | 0x80
    assert config.wcoredump(status)
    assert config.wtermsig(status) == sig