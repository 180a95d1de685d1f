"""Display-width calculations, numeric helpers and small concurrency primitives."""

from __future__ import annotations

import sys
import threading
from array import array
from typing import Callable, Iterable, Tuple, TypeVar, Union

import regex
import wcwidth

MAX_UINT16 = 0xFFFF

_GRAPHEME = regex.compile(r"\X")

_T = TypeVar("_T")


def _rune_width(ch: str) -> int:
    width = wcwidth.wcwidth(ch)
    return width if width > 0 else 0


def _graphemes(text: str) -> list:
    return _GRAPHEME.findall(text)


def _cluster_width(cluster: str) -> int:
    # The width of the first character that takes up space wins.
    for ch in cluster:
        width = _rune_width(ch)
        if width > 0:
            return width
    return 0


def _as_text(text: Union[str, Iterable[str]]) -> str:
    return text if isinstance(text, str) else "".join(text)


def string_width(text: str) -> int:
    """Return the display width of text; every CR and LF counts as one column."""
    base = sum(_cluster_width(cluster) for cluster in _graphemes(text))
    return base + text.count("\n") + text.count("\r")


def runes_width(
    text: Union[str, Iterable[str]], prefix_width: int, tabstop: int, limit: int
) -> Tuple[int, int]:
    """Measure text, stopping once the width exceeds limit.

    Returns the width reached and the character index where the limit was
    crossed, or -1 if the whole text fits.
    """
    width = 0
    idx = 0
    for cluster in _graphemes(_as_text(text)):
        if cluster == "\t":
            w = tabstop - (prefix_width + width) % tabstop
        else:
            w = string_width(cluster)
        width += w
        if width > limit:
            return width, idx
        idx += len(cluster)
    return width, -1


def truncate(text: str, limit: int) -> Tuple[str, int]:
    """Cut text to at most limit columns; return the kept text and its width."""
    kept = []
    width = 0
    for cluster in _graphemes(text):
        w = string_width(cluster)
        if width + w > limit:
            break
        width += w
        kept.append(cluster)
    return "".join(kept), width


def constrain(val: _T, minimum: _T, maximum: _T) -> _T:
    """Clamp val between minimum and maximum."""
    if val < minimum:
        return minimum
    if val > maximum:
        return maximum
    return val


def as_uint16(val: int) -> int:
    """Clamp an integer into the unsigned 16-bit range."""
    if val > MAX_UINT16:
        return MAX_UINT16
    if val < 0:
        return 0
    return val


def dur_within(val: _T, minimum: _T, maximum: _T) -> _T:
    """Clamp a duration between minimum and maximum."""
    return constrain(val, minimum, maximum)


def is_tty() -> bool:
    """Return True if standard input is a terminal."""
    stream = sys.stdin
    return stream is not None and stream.isatty()


def to_tty() -> bool:
    """Return True if standard output is a terminal."""
    stream = sys.stdout
    return stream is not None and stream.isatty()


def once(next_response: bool) -> Callable[[], bool]:
    """Return a function that yields next_response on its first call, then False."""
    state = next_response

    def respond() -> bool:
        nonlocal state
        previous, state = state, False
        return previous

    return respond


def repeat_to_fill(text: str, length: int, limit: int) -> str:
    """Repeat text, whose display width is length, to fill limit columns."""
    times, rest = divmod(limit, length)
    output = text * times
    if rest > 0:
        extra = []
        for ch in text:
            rest -= _rune_width(ch)
            if rest < 0:
                break
            extra.append(ch)
            if rest == 0:
                break
        output += "".join(extra)
    return output


class AtomicBool:
    """A boolean guarded by a lock."""

    __slots__ = ("_state", "_lock")

    def __init__(self, initial_state: bool = False) -> None:
        self._state = bool(initial_state)
        self._lock = threading.Lock()

    def get(self) -> bool:
        with self._lock:
            return self._state

    def set(self, new_state: bool) -> bool:
        with self._lock:
            self._state = bool(new_state)
        return new_state


class Slab:
    """Preallocated scratch arrays of 16-bit and 32-bit integers."""

    __slots__ = ("i16", "i32")

    def __init__(self, size16: int, size32: int) -> None:
        self.i16 = array("h", [0]) * size16
        self.i32 = array("i", [0]) * size32