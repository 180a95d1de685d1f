import io
from datetime import timedelta
from unittest import mock

import pytest

from fzfcore.util import (
    AtomicBool,
    Slab,
    as_uint16,
    constrain,
    dur_within,
    is_tty,
    once,
    repeat_to_fill,
    runes_width,
    string_width,
    to_tty,
    truncate,
)

MAX_INT32 = 2**31 - 1
MIN_INT32 = -(2**31)
MIN_INT16 = -(2**15)


@pytest.mark.parametrize(
    "val, lo, hi, expected",
    [(-3, -1, 3, -1), (2, -1, 3, 2), (5, -1, 3, 3), (0, MIN_INT32, MAX_INT32, 0)],
)
def test_constrain(val, lo, hi, expected):
    assert constrain(val, lo, hi) == expected


@pytest.mark.parametrize(
    "val, expected",
    [
        (5, 5),
        (-10, 0),
        (65535, 65535),
        (MIN_INT32, 0),
        (MIN_INT16, 0),
        (65536, 65535),
    ],
)
def test_as_uint16(val, expected):
    assert as_uint16(val) == expected


def test_dur_within():
    assert dur_within(5, 1, 8) == 5
    second = timedelta(seconds=1)
    assert dur_within(timedelta(0), second, 3 * second) == second
    assert dur_within(10 * second, timedelta(0), second) == second


def test_once():
    o = once(False)
    assert o() is False
    assert o() is False

    o = once(True)
    assert o() is True
    assert o() is False


@pytest.mark.parametrize("limit, width, overflow", [(100, 5, -1), (3, 4, 3), (0, 1, 0)])
def test_runes_width(limit, width, overflow):
    assert runes_width("hello", 0, 0, limit) == (width, overflow)


def test_runes_width_accepts_char_list():
    assert runes_width(list("hello"), 0, 0, 100) == (5, -1)


def test_truncate():
    truncated, width = truncate("가나다라마", 7)
    assert truncated == "가나다"
    assert width == 6


def test_repeat_to_fill():
    assert repeat_to_fill("abcde", 10, 50) == "abcde" * 5
    assert repeat_to_fill("abcde", 10, 42) == "abcde" * 4 + "abcde"[:2]


def test_string_width():
    assert string_width("─") == 1


def test_string_width_counts_line_breaks():
    assert string_width("ab\r\n") == string_width("ab") + 2


def test_atomic_bool():
    assert AtomicBool(True).get() is True
    assert AtomicBool(False).get() is False

    ab = AtomicBool(True)
    assert ab.set(False) is False
    assert ab.get() is False


def test_slab_sizes_and_limits():
    slab = Slab(4, 3)
    assert len(slab.i16) == 4 and sum(slab.i16) == 0
    assert len(slab.i32) == 3 and sum(slab.i32) == 0
    with pytest.raises(OverflowError):
        slab.i16[0] = 40000


def test_is_tty_false_for_pipe():
    with mock.patch("sys.stdin", io.StringIO("")):
        assert is_tty() is False


def test_to_tty_false_for_buffer():
    with mock.patch("sys.stdout", io.StringIO()):
        assert to_tty() is False