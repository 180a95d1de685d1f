import pytest

from fzfcore.chars import runes_to_chars, to_chars


def test_to_chars_ascii():
    chars = to_chars(b"foobar")
    assert chars.is_bytes
    assert str(chars) == "foobar"


def test_chars_length():
    chars = to_chars("\tabc한글  ".encode())
    assert not chars.is_bytes
    assert len(chars) == 8
    assert chars.trim_length() == 5


def test_chars_to_string():
    text = "\tabc한글  "
    assert str(to_chars(text.encode())) == text


@pytest.mark.parametrize(
    "text, expected",
    [
        ("hello", 5),
        ("hello ", 5),
        ("hello  ", 5),
        (" hello", 5),
        ("  hello", 5),
        (" hello ", 5),
        ("  hello  ", 5),
        ("h   o", 5),
        ("  h   o  ", 5),
        ("         ", 0),
    ],
)
def test_trim_length(text, expected):
    assert to_chars(text.encode()).trim_length() == expected


def test_whitespace_counts_and_trim():
    chars = to_chars(b"  abc   ")
    assert chars.leading_whitespaces() == 2
    assert chars.trailing_whitespaces() == 3
    chars.trim_trailing_whitespaces()
    assert str(chars) == "  abc"


def test_get_and_to_runes():
    chars = runes_to_chars("한a")
    assert chars.get(0) == "한"
    assert chars.to_runes() == ["한", "a"]
    assert not chars.is_bytes


def test_runes_to_chars_from_code_points():
    assert str(runes_to_chars([ord("x"), ord("y")])) == "xy"


def test_prepend():
    chars = to_chars(b"bar")
    chars.prepend("foo")
    assert str(chars) == "foobar"
    assert chars.is_bytes
    chars.prepend("한")
    assert str(chars) == "한foobar"
    assert not chars.is_bytes


def test_invalid_utf8_is_replaced():
    chars = to_chars(b"a\xffb")
    assert str(chars) == "a\ufffdb"
    assert len(chars) == 3