import pytest

from fzfcore.tui.events import Event, EventType, alt_key, ctrl_alt_key, key
from fzfcore.tui.input import KeyReader


def read(data, **kwargs):
    reader = KeyReader(**kwargs)
    reader.feed(data)
    return reader.get_char()


def read_all(data, **kwargs):
    reader = KeyReader(**kwargs)
    reader.feed(data)
    events = []
    while True:
        try:
            events.append(reader.get_char())
        except EOFError:
            return events


class FixedClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def test_plain_ascii_rune():
    assert read(b"a") == key("a")


def test_multibyte_rune_is_consumed_whole():
    reader = KeyReader()
    reader.feed("한".encode("utf-8"))
    assert reader.get_char() == key("한")
    with pytest.raises(EOFError):
        reader.get_char()


def test_empty_input_raises():
    with pytest.raises(EOFError):
        KeyReader().get_char()


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x01", EventType.CTRL_A),
        (b"\x03", EventType.CTRL_C),
        (b"\x09", EventType.TAB),
        (b"\x0d", EventType.CTRL_M),
        (b"\x1a", EventType.CTRL_Z),
        (b"\x7f", EventType.BSPACE),
        (b"\x00", EventType.CTRL_SPACE),
        (b"\x1c", EventType.CTRL_BACKSLASH),
        (b"\x1d", EventType.CTRL_RIGHT_BRACKET),
        (b"\x1e", EventType.CTRL_CARET),
        (b"\x1f", EventType.CTRL_SLASH),
        (b"\x1b", EventType.ESC),
    ],
)
def test_single_byte_keys(data, expected):
    assert read(data) == Event(expected)


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x1b[A", EventType.UP),
        (b"\x1bOB", EventType.DOWN),
        (b"\x1b[C", EventType.RIGHT),
        (b"\x1b[D", EventType.LEFT),
        (b"\x1b\x1b[A", EventType.ALT_UP),
        (b"\x1b\x1b[D", EventType.ALT_LEFT),
        (b"\x1b[Z", EventType.BTAB),
        (b"\x1b[H", EventType.HOME),
        (b"\x1b[F", EventType.END),
        (b"\x1bOP", EventType.F1),
        (b"\x1bOS", EventType.F4),
        (b"\x1b[2~", EventType.INSERT),
        (b"\x1b[3~", EventType.DEL),
        (b"\x1b[5~", EventType.PG_UP),
        (b"\x1b[6~", EventType.PG_DN),
        (b"\x1b[1~", EventType.HOME),
        (b"\x1b[4~", EventType.END),
        (b"\x1b[7~", EventType.HOME),
        (b"\x1b[8~", EventType.END),
        (b"\x1b[11~", EventType.F1),
        (b"\x1b[15~", EventType.F5),
        (b"\x1b[17~", EventType.F6),
        (b"\x1b[19~", EventType.F8),
        (b"\x1b[20~", EventType.F9),
        (b"\x1b[24~", EventType.F12),
        (b"\x1b[1;2A", EventType.S_UP),
        (b"\x1b[1;3B", EventType.ALT_DOWN),
        (b"\x1b[1;5D", EventType.S_LEFT),
        (b"\x1b[1;10C", EventType.ALT_S_RIGHT),
        (b"\x1b[3;5~", EventType.CTRL_DELETE),
        (b"\x1b[3;2~", EventType.S_DELETE),
        (b"\x1b\x7f", EventType.ALT_BS),
        (b"\x1b\x1b", EventType.ESC),
    ],
)
def test_escape_sequences(data, expected):
    assert read(data) == Event(expected)


def test_escape_sequences_are_consumed_exactly():
    events = read_all(b"ab\x1b[A\x1b[1;2Bz")
    assert events == [key("a"), key("b"), Event(EventType.UP), Event(EventType.S_DOWN), key("z")]


def test_alt_and_ctrl_alt_keys():
    assert read(b"\x1ba") == alt_key("a")
    assert read(b"\x1b\x01") == ctrl_alt_key("a")
    assert read("\x1b한".encode("utf-8")) == alt_key("한")


def test_invalid_utf8_reads_as_escape():
    assert read(b"\xff") == Event(EventType.ESC)


def test_bracketed_paste_markers_are_skipped():
    assert read_all(b"\x1b[200~x\x1b[201~") == [key("x")]


def test_cursor_position_report_is_discarded():
    reader = KeyReader()
    reader.feed(b"\x1b[12;34Rq")
    assert reader.get_char() == Event(EventType.INVALID)
    assert reader.get_char() == key("q")


def test_reads_from_source_when_empty():
    chunks = iter([b"zy"])
    reader = KeyReader(lambda: next(chunks, b""))
    assert reader.get_char() == key("z")
    assert reader.get_char() == key("y")


def test_incomplete_sequence_gets_second_chance():
    chunks = iter([b"A"])
    reader = KeyReader(lambda: next(chunks, b""))
    reader.feed(b"\x1b[")
    assert reader.get_char() == Event(EventType.UP)


def test_incomplete_sequence_without_source_is_invalid():
    assert read(b"\x1b[") == Event(EventType.INVALID)


def test_mouse_ignored_when_disabled():
    assert read(b"\x1b[<0;5;3M", mouse=False) == Event(EventType.INVALID)


def test_mouse_press_and_release():
    reader = KeyReader(mouse=True, clock=FixedClock())
    reader.feed(b"\x1b[<0;5;3M\x1b[<0;5;3m")
    press = reader.get_char()
    release = reader.get_char()
    assert press.type is EventType.MOUSE
    assert press.mouse_event.x + 1 == 5
    assert press.mouse_event.y + 1 == 3
    assert press.mouse_event.left and press.mouse_event.down
    assert not press.mouse_event.double
    assert release.mouse_event.left and not release.mouse_event.down
    assert not release.mouse_event.double
    with pytest.raises(EOFError):
        reader.get_char()


def test_double_click_detected_within_duration():
    reader = KeyReader(mouse=True, clock=FixedClock(10.0))
    reader.feed(b"\x1b[<0;5;3M\x1b[<0;5;3m" * 2)
    events = [reader.get_char() for _ in range(4)]
    assert [e.mouse_event.double for e in events] == [False, False, False, True]


def test_slow_clicks_are_not_double():
    clock = FixedClock(10.0)
    reader = KeyReader(mouse=True, clock=clock)
    reader.feed(b"\x1b[<0;5;3M\x1b[<0;5;3m")
    reader.get_char()
    reader.get_char()
    clock.now += 5.0
    reader.feed(b"\x1b[<0;5;3M\x1b[<0;5;3m")
    reader.get_char()
    assert reader.get_char().mouse_event.double is False


def test_right_button_is_not_left():
    event = read(b"\x1b[<2;5;3M", mouse=True, clock=FixedClock())
    assert event.mouse_event.left is False
    assert event.mouse_event.down is True


def test_scroll_directions_are_opposite():
    up = read(b"\x1b[<64;5;3M", mouse=True)
    down = read(b"\x1b[<65;5;3M", mouse=True)
    assert up.mouse_event.s == 1
    assert up.mouse_event.s == -down.mouse_event.s
    assert not up.mouse_event.left and not up.mouse_event.down


def test_modifier_flag():
    assert read(b"\x1b[<4;5;3M", mouse=True, clock=FixedClock()).mouse_event.mod is True
    assert read(b"\x1b[<0;5;3M", mouse=True, clock=FixedClock()).mouse_event.mod is False


def test_yoffset_shifts_rows():
    base = read(b"\x1b[<0;5;9M", mouse=True, clock=FixedClock())
    shifted = read(b"\x1b[<0;5;9M", mouse=True, yoffset=2, clock=FixedClock())
    assert base.mouse_event.y - shifted.mouse_event.y == 2
    assert base.mouse_event.x == shifted.mouse_event.x