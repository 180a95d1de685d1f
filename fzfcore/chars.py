"""Character sequences for candidate items, with whitespace trimming helpers."""

from __future__ import annotations

from typing import Iterable, List, Union

from fzfcore.util import as_uint16

_NOT_SPACE = frozenset("\x1c\x1d\x1e\x1f")


def _is_space(ch: str) -> bool:
    return ch.isspace() and ch not in _NOT_SPACE


class Chars:
    """Text of an item, remembering whether it was pure ASCII."""

    __slots__ = ("text", "is_bytes", "index", "_trim_length")

    def __init__(self, text: str, is_bytes: bool = False, index: int = 0) -> None:
        self.text = text
        self.is_bytes = is_bytes
        self.index = index
        self._trim_length = None

    def get(self, i: int) -> str:
        return self.text[i]

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return (
            f"Chars(text={self.text!r}, is_bytes={self.is_bytes}, "
            f"index={self.index})"
        )

    def trim_length(self) -> int:
        """Length after stripping leading and trailing whitespace (cached)."""
        if self._trim_length is None:
            trailing = self.trailing_whitespaces()
            if trailing == len(self.text):
                self._trim_length = 0
            else:
                leading = self.leading_whitespaces()
                self._trim_length = as_uint16(len(self.text) - trailing - leading)
        return self._trim_length

    def leading_whitespaces(self) -> int:
        count = 0
        for ch in self.text:
            if not _is_space(ch):
                break
            count += 1
        return count

    def trailing_whitespaces(self) -> int:
        count = 0
        for ch in reversed(self.text):
            if not _is_space(ch):
                break
            count += 1
        return count

    def trim_trailing_whitespaces(self) -> None:
        trailing = self.trailing_whitespaces()
        if trailing:
            self.text = self.text[: len(self.text) - trailing]

    def to_runes(self) -> List[str]:
        return list(self.text)

    def prepend(self, prefix: str) -> None:
        self.text = prefix + self.text
        self.is_bytes = self.is_bytes and prefix.isascii()


def to_chars(data: Union[bytes, bytearray, memoryview]) -> Chars:
    """Build Chars from UTF-8 bytes; invalid sequences become U+FFFD."""
    raw = bytes(data)
    if raw.isascii():
        return Chars(raw.decode("ascii"), is_bytes=True)
    return Chars(raw.decode("utf-8", errors="replace"), is_bytes=False)


def runes_to_chars(runes: Union[str, Iterable[Union[str, int]]]) -> Chars:
    """Build Chars from characters or code points."""
    if isinstance(runes, str):
        text = runes
    else:
        text = "".join(chr(r) if isinstance(r, int) else r for r in runes)
    return Chars(text, is_bytes=False)