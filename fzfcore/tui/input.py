"""Decoding raw terminal input bytes into key and mouse events."""

from __future__ import annotations

import re
import time
from typing import Callable, List, Optional, Tuple

from fzfcore.tui.events import (
    DOUBLE_CLICK_DURATION,
    Event,
    EventType,
    MouseEvent,
    alt_key,
    ctrl_alt_key,
    key,
)

_ESC = EventType.ESC.value
_DEL = 127

_OFFSET_BEGIN = re.compile(rb"\x1b\[[0-9]+;[0-9]+R")
_MOUSE_END = re.compile(rb"[mM]")
_INTEGER = re.compile(r"[+-]?[0-9]+")

_SINGLE_BYTE = {
    EventType.CTRL_C.value: EventType.CTRL_C,
    EventType.CTRL_G.value: EventType.CTRL_G,
    EventType.CTRL_Q.value: EventType.CTRL_Q,
    _DEL: EventType.BSPACE,
    0: EventType.CTRL_SPACE,
    28: EventType.CTRL_BACKSLASH,
    29: EventType.CTRL_RIGHT_BRACKET,
    30: EventType.CTRL_CARET,
    31: EventType.CTRL_SLASH,
}

# Final byte of "ESC [ X" / "ESC O X" -> (plain, with Alt)
_ARROWS = {
    ord("D"): (EventType.LEFT, EventType.ALT_LEFT),
    ord("C"): (EventType.RIGHT, EventType.ALT_RIGHT),
    ord("B"): (EventType.DOWN, EventType.ALT_DOWN),
    ord("A"): (EventType.UP, EventType.ALT_UP),
}

_THREE_BYTE = {
    ord("Z"): EventType.BTAB,
    ord("H"): EventType.HOME,
    ord("F"): EventType.END,
    ord("P"): EventType.F1,
    ord("Q"): EventType.F2,
    ord("R"): EventType.F3,
    ord("S"): EventType.F4,
}

_TILDE_DIGIT = {
    ord("4"): EventType.END,
    ord("5"): EventType.PG_UP,
    ord("6"): EventType.PG_DN,
    ord("7"): EventType.HOME,
    ord("8"): EventType.END,
}

_F9_TO_F12 = {
    ord("0"): EventType.F9,
    ord("1"): EventType.F10,
    ord("3"): EventType.F11,
    ord("4"): EventType.F12,
}

_F1_TO_F8 = {
    ord("1"): EventType.F1,
    ord("2"): EventType.F2,
    ord("3"): EventType.F3,
    ord("4"): EventType.F4,
    ord("5"): EventType.F5,
    ord("7"): EventType.F6,
    ord("8"): EventType.F7,
    ord("9"): EventType.F8,
}

# Final byte of "ESC [ 1 ; m X" -> (alt, alt+shift, shift)
_MODIFIED_ARROWS = {
    ord("A"): (EventType.ALT_UP, EventType.ALT_S_UP, EventType.S_UP),
    ord("B"): (EventType.ALT_DOWN, EventType.ALT_S_DOWN, EventType.S_DOWN),
    ord("C"): (EventType.ALT_RIGHT, EventType.ALT_S_RIGHT, EventType.S_RIGHT),
    ord("D"): (EventType.ALT_LEFT, EventType.ALT_S_LEFT, EventType.S_LEFT),
}

_Parsed = Tuple[Event, int]


def _atoi(text: str, default: int) -> int:
    return int(text) if _INTEGER.fullmatch(text) else default


def _decode_rune(data: bytes) -> Tuple[str, int]:
    """Decode the first UTF-8 character; invalid input yields U+FFFD of size 1."""
    lead = data[0]
    if lead < 0x80:
        return chr(lead), 1
    if 0xC2 <= lead <= 0xDF:
        length = 2
    elif 0xE0 <= lead <= 0xEF:
        length = 3
    elif 0xF0 <= lead <= 0xF4:
        length = 4
    else:
        return "\ufffd", 1
    try:
        return bytes(data[:length]).decode("utf-8"), length
    except UnicodeDecodeError:
        return "\ufffd", 1


def _invalid() -> Event:
    return Event(EventType.INVALID)


class KeyReader:
    """Turns bytes read from a terminal into events.

    Bytes are either fed in with feed() or pulled from read_bytes, a callable
    that returns the next chunk of input (empty when nothing is available).
    """

    def __init__(
        self,
        read_bytes: Optional[Callable[[], bytes]] = None,
        *,
        mouse: bool = False,
        yoffset: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._read_bytes = read_bytes
        self.mouse = mouse
        self.yoffset = yoffset
        self._clock = clock
        self._buffer = bytearray()
        self._clicks: List[Tuple[int, int]] = []
        self._prev_down_time: Optional[float] = None

    def feed(self, data: bytes) -> None:
        """Append raw input bytes."""
        self._buffer.extend(data)

    def _fill(self) -> bool:
        if self._read_bytes is None:
            return False
        data = self._read_bytes()
        if not data:
            return False
        self._buffer.extend(data)
        return True

    def get_char(self) -> Event:
        """Decode and consume the next event.

        Raises EOFError if there is no input to decode.
        """
        if not self._buffer:
            self._fill()
        if not self._buffer:
            raise EOFError("no input available")
        event, size = self._parse()
        del self._buffer[:size]
        return event

    def _parse(self) -> _Parsed:
        lead = self._buffer[0]
        single = _SINGLE_BYTE.get(lead)
        if single is not None:
            return Event(single), 1
        if lead == _ESC:
            event, size = self._esc_sequence()
            # The sequence may be incomplete: read more and try once again.
            if event.type is EventType.INVALID and self._fill():
                event, size = self._esc_sequence()
            return event, size
        if lead <= EventType.CTRL_Z.value:
            return Event(EventType(lead)), 1
        char, size = _decode_rune(self._buffer)
        if char == "\ufffd":
            return Event(EventType.ESC), 1
        return key(char), size

    def _esc_sequence(self) -> _Parsed:
        buf = self._buffer
        if len(buf) < 2:
            return Event(EventType.ESC), 1

        match = _OFFSET_BEGIN.match(buf)
        if match:
            return _invalid(), match.end()

        if 1 <= buf[1] <= 26:
            return ctrl_alt_key(chr(buf[1] + ord("a") - 1)), 2

        alt = False
        if len(buf) > 2 and buf[1] == _ESC:
            del buf[0]
            alt = True

        second = buf[1]
        if second == _ESC:
            return Event(EventType.ESC), 2
        if second == _DEL:
            return Event(EventType.ALT_BS), 2
        if second in (ord("["), ord("O")):
            if len(buf) < 3:
                return _invalid(), 2
            parsed = self._csi_sequence(alt)
            if parsed is not None:
                return parsed

        char, size = _decode_rune(bytes(buf[1:]))
        return alt_key(char), 1 + size

    def _csi_sequence(self, alt: bool) -> Optional[_Parsed]:
        third = self._buffer[2]
        arrow = _ARROWS.get(third)
        if arrow is not None:
            plain, with_alt = arrow
            return Event(with_alt if alt else plain), 3
        simple = _THREE_BYTE.get(third)
        if simple is not None:
            return Event(simple), 3
        if third == ord("<"):
            return self._mouse_sequence(3)
        if ord("1") <= third <= ord("8"):
            if len(self._buffer) < 4:
                return _invalid(), 3
            return self._numbered_sequence(third)
        return None

    def _numbered_sequence(self, third: int) -> Optional[_Parsed]:
        buf = self._buffer
        fourth = buf[3]
        if third == ord("2"):
            if fourth == ord("~"):
                return Event(EventType.INSERT), 4
            size = 4
            if len(buf) > 4 and buf[4] == ord("~"):
                size = 5
                fkey = _F9_TO_F12.get(fourth)
                if fkey is not None:
                    return Event(fkey), 5
            # Bracketed paste markers: ESC[200~ and ESC[201~
            if (
                len(buf) > 5
                and fourth == ord("0")
                and buf[4] in (ord("0"), ord("1"))
                and buf[5] == ord("~")
            ):
                del buf[:6]
                return self.get_char(), 0
            return _invalid(), size
        if third == ord("3"):
            if fourth == ord("~"):
                return Event(EventType.DEL), 4
            size = 4
            if len(buf) == 6 and buf[5] == ord("~"):
                size = 6
                if buf[4] == ord("5"):
                    return Event(EventType.CTRL_DELETE), 6
                if buf[4] == ord("2"):
                    return Event(EventType.S_DELETE), 6
            return _invalid(), size
        plain = _TILDE_DIGIT.get(third)
        if plain is not None:
            return Event(plain), 4
        # third == '1'
        if fourth == ord("~"):
            return Event(EventType.HOME), 4
        if fourth in _F1_TO_F8:
            if len(buf) == 5 and buf[4] == ord("~"):
                return Event(_F1_TO_F8[fourth]), 5
            return _invalid(), 4
        if fourth == ord(";"):
            if len(buf) < 6:
                return _invalid(), 4
            modifier = buf[4]
            if modifier not in (ord("1"), ord("2"), ord("3"), ord("5")):
                return None
            alt = modifier == ord("3")
            alt_shift = modifier == ord("1") and buf[5] == ord("0")
            size = 6
            final = buf[5]
            if alt_shift:
                if len(buf) < 7:
                    return _invalid(), 6
                size = 7
                final = buf[6]
            variants = _MODIFIED_ARROWS.get(final)
            if variants is None:
                return None
            with_alt, with_alt_shift, with_shift = variants
            if alt:
                return Event(with_alt), size
            if alt_shift:
                return Event(with_alt_shift), size
            return Event(with_shift), size
        return None

    def _mouse_sequence(self, size: int) -> _Parsed:
        buf = self._buffer
        if len(buf) < 9 or not self.mouse:
            return _invalid(), size

        rest = bytes(buf[size:])
        found = _MOUSE_END.search(rest)
        if found is None:
            return _invalid(), size
        end = found.start()

        elems = rest[:end].decode("latin-1").split(";", 2)
        if len(elems) != 3:
            return _invalid(), size

        t = _atoi(elems[0], -1)
        x = _atoi(elems[1], -1) - 1
        y = _atoi(elems[2], -1) - 1 - self.yoffset
        if t < 0 or x < 0:
            return _invalid(), size
        size += end + 1

        down = rest[end] == ord("M")

        scroll = 0
        if t >= 64:
            t -= 64
            scroll = -1 if t & 0b1 == 1 else 1

        left = t & 0b11 == 0
        mod = t & 0b1100 > 0
        drag = t & 0b100000 > 0

        if scroll != 0:
            return Event(EventType.MOUSE, "", MouseEvent(y, x, scroll, False, False, False, mod)), size

        double = False
        if down and not drag:
            now = self._clock()
            if not left:
                self._clicks = []
            elif self._within_double_click(now):
                self._clicks.append((x, y))
            else:
                self._clicks = [(x, y)]
            self._prev_down_time = now
        elif (
            len(self._clicks) > 1
            and self._clicks[-2] == self._clicks[-1]
            and self._within_double_click(self._clock())
        ):
            double = True
            self._clicks = []
        return Event(EventType.MOUSE, "", MouseEvent(y, x, 0, left, down, double, mod)), size

    def _within_double_click(self, now: float) -> bool:
        if self._prev_down_time is None:
            return False
        return now - self._prev_down_time < DOUBLE_CLICK_DURATION