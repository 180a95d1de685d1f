import string

import pytest

from fzfcore.tui.events import (
    Event,
    EventType,
    MouseEvent,
    TermSize,
    alt_key,
    ctrl_alt_key,
    key,
)


def test_control_keys_follow_ascii():
    assert EventType.RUNE.as_event().type == 0
    assert EventType.TAB.as_event().type == ord("\t")
    assert EventType.ESC.as_event().type == 27


def test_ctrl_letters_are_contiguous():
    for offset, letter in enumerate(string.ascii_lowercase):
        expected = EventType(EventType.CTRL_A + offset)
        name = "TAB" if letter == "i" else f"CTRL_{letter.upper()}"
        assert expected is EventType[name]
    assert EventType(EventType.CTRL_A + 25) is EventType.CTRL_Z


def test_event_types_are_unique():
    members = list(EventType)
    values = [member.value for member in members]
    events = [EventType.as_event(EventType(value)) for value in values]
    assert len(set(events)) == len(events)
    assert len(values) == len(set(values))
    assert values == sorted(values)
    assert events[0] == Event(EventType.RUNE, "", None)
    assert events[-1] == Event(EventType.CTRL_ALT, "", None)


def test_as_event():
    event = EventType.F1.as_event()
    assert event == Event(EventType.F1, "", None)


@pytest.mark.parametrize(
    "factory, event_type",
    [(key, EventType.RUNE), (alt_key, EventType.ALT), (ctrl_alt_key, EventType.CTRL_ALT)],
)
def test_key_constructors(factory, event_type):
    event = factory("x")
    assert event.type is event_type
    assert event.char == "x"
    assert event.mouse_event is None


def test_is_any():
    event = key("a")
    assert event.is_any(EventType.ALT, EventType.RUNE)
    assert not event.is_any(EventType.ALT, EventType.CTRL_ALT)
    assert not event.is_any()


def test_comparable_drops_mouse_event():
    mouse = MouseEvent(y=1, x=2, s=0, left=True, down=True, double=False, mod=False)
    event = Event(EventType.MOUSE, "", mouse)
    assert event != EventType.MOUSE.as_event()
    assert event.comparable() == EventType.MOUSE.as_event()
    assert event.comparable().mouse_event is None


def test_comparable_usable_as_key():
    bindings = {key("a").comparable(): "accept"}
    assert bindings[key("a")] == "accept"
    assert alt_key("a") not in bindings


def test_term_size_defaults():
    assert TermSize() == TermSize(0, 0, 0, 0)
    size = TermSize(lines=24, columns=80)
    assert (size.lines, size.columns) == (24, 80)