"""Colours, text attributes, colour themes and the palette derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import IntFlag

COL_UNDEFINED = -2
COL_DEFAULT = -1

COL_BLACK = 0
COL_RED = 1
COL_GREEN = 2
COL_YELLOW = 3
COL_BLUE = 4
COL_MAGENTA = 5
COL_CYAN = 6
COL_WHITE = 7

_RGB_FLAG = 1 << 24


class Attr(IntFlag):
    """Text attributes; REGULAR and CLEAR are markers rather than styles."""

    UNDEFINED = 0
    BOLD = 1
    DIM = 1 << 1
    ITALIC = 1 << 2
    UNDERLINE = 1 << 3
    BLINK = 1 << 4
    BLINK2 = 1 << 5
    REVERSE = 1 << 6
    STRIKE_THROUGH = 1 << 7
    REGULAR = 1 << 8
    CLEAR = 1 << 9


def is_24bit(color: int) -> bool:
    """Return True if color holds a 24-bit RGB value."""
    return color > 0 and (color & _RGB_FLAG) > 0


def _hex_component(text: str) -> int:
    try:
        return int(text, 16)
    except ValueError:
        return 0


def hex_to_color(rrggbb: str) -> int:
    """Convert "#rrggbb" into a 24-bit colour value.

    Components that are not valid hexadecimal count as zero; a string too
    short to hold all three components raises ValueError.
    """
    if len(rrggbb) < 7:
        raise ValueError(f"invalid colour {rrggbb!r}: expected #rrggbb")
    r = _hex_component(rrggbb[1:3])
    g = _hex_component(rrggbb[3:5])
    b = _hex_component(rrggbb[5:7])
    return _RGB_FLAG + (r << 16) + (g << 8) + b


@dataclass(frozen=True)
class ColorAttr:
    """A colour with its attributes, either of which may be left undefined."""

    color: int = COL_UNDEFINED
    attr: Attr = Attr.UNDEFINED


@dataclass(frozen=True)
class ColorPair:
    """Foreground and background colours with text attributes."""

    fg: int
    bg: int
    attr: Attr = Attr.UNDEFINED

    def has_bg(self) -> bool:
        """Return True if drawing with this pair paints a background."""
        if self.attr & Attr.REVERSE:
            return self.fg != COL_DEFAULT
        return self.bg != COL_DEFAULT

    def _merge(self, other: "ColorPair", except_color: int) -> "ColorPair":
        fg = other.fg if other.fg != except_color else self.fg
        bg = other.bg if other.bg != except_color else self.bg
        return ColorPair(fg, bg, Attr(self.attr | other.attr))

    def with_attr(self, attr: Attr) -> "ColorPair":
        """Return a copy with attr added."""
        return ColorPair(self.fg, self.bg, Attr(self.attr | attr))

    def merge_attr(self, other: "ColorPair") -> "ColorPair":
        """Return a copy with the attributes of other added."""
        return self.with_attr(other.attr)

    def merge(self, other: "ColorPair") -> "ColorPair":
        """Overlay other, keeping colours of self where other's are undefined."""
        return self._merge(other, COL_UNDEFINED)

    def merge_non_default(self, other: "ColorPair") -> "ColorPair":
        """Overlay other, keeping colours of self where other's are default."""
        return self._merge(other, COL_DEFAULT)


def _undefined() -> ColorAttr:
    return ColorAttr(COL_UNDEFINED, Attr.UNDEFINED)


@dataclass
class ColorTheme:
    """The colour of every interface element."""

    colored: bool = True
    input: ColorAttr = field(default_factory=_undefined)
    disabled: ColorAttr = field(default_factory=_undefined)
    fg: ColorAttr = field(default_factory=_undefined)
    bg: ColorAttr = field(default_factory=_undefined)
    preview_fg: ColorAttr = field(default_factory=_undefined)
    preview_bg: ColorAttr = field(default_factory=_undefined)
    dark_bg: ColorAttr = field(default_factory=_undefined)
    gutter: ColorAttr = field(default_factory=_undefined)
    prompt: ColorAttr = field(default_factory=_undefined)
    match: ColorAttr = field(default_factory=_undefined)
    current: ColorAttr = field(default_factory=_undefined)
    current_match: ColorAttr = field(default_factory=_undefined)
    spinner: ColorAttr = field(default_factory=_undefined)
    info: ColorAttr = field(default_factory=_undefined)
    cursor: ColorAttr = field(default_factory=_undefined)
    selected: ColorAttr = field(default_factory=_undefined)
    header: ColorAttr = field(default_factory=_undefined)
    separator: ColorAttr = field(default_factory=_undefined)
    scrollbar: ColorAttr = field(default_factory=_undefined)
    border: ColorAttr = field(default_factory=_undefined)
    preview_border: ColorAttr = field(default_factory=_undefined)
    preview_scrollbar: ColorAttr = field(default_factory=_undefined)
    border_label: ColorAttr = field(default_factory=_undefined)
    preview_label: ColorAttr = field(default_factory=_undefined)


@dataclass(frozen=True)
class Palette:
    """Colour pairs for each interface element, derived from a theme."""

    prompt: ColorPair
    normal: ColorPair
    input: ColorPair
    disabled: ColorPair
    match: ColorPair
    cursor: ColorPair
    cursor_empty: ColorPair
    selected: ColorPair
    current: ColorPair
    current_match: ColorPair
    current_cursor: ColorPair
    current_cursor_empty: ColorPair
    current_selected: ColorPair
    current_selected_empty: ColorPair
    spinner: ColorPair
    info: ColorPair
    header: ColorPair
    separator: ColorPair
    scrollbar: ColorPair
    border: ColorPair
    preview: ColorPair
    preview_border: ColorPair
    border_label: ColorPair
    preview_label: ColorPair
    preview_scrollbar: ColorPair
    preview_spinner: ColorPair


def empty_theme() -> ColorTheme:
    """A coloured theme with every element left undefined."""
    return ColorTheme(colored=True)


def no_color_theme() -> ColorTheme:
    """A theme that uses only default colours and text attributes."""
    theme = ColorTheme(
        colored=False,
        **{
            f.name: ColorAttr(COL_DEFAULT, Attr.UNDEFINED)
            for f in fields(ColorTheme)
            if f.name != "colored"
        },
    )
    theme.match = ColorAttr(COL_DEFAULT, Attr.UNDERLINE)
    theme.current = ColorAttr(COL_DEFAULT, Attr.REVERSE)
    theme.current_match = ColorAttr(COL_DEFAULT, Attr.REVERSE | Attr.UNDERLINE)
    return theme


def _base_theme(
    dark_bg, prompt, match, current, current_match, spinner,
    info, cursor, selected, header, border, border_label,
) -> ColorTheme:
    def c(color: int) -> ColorAttr:
        return ColorAttr(color, Attr.UNDEFINED)

    return ColorTheme(
        colored=True,
        input=c(COL_DEFAULT),
        fg=c(COL_DEFAULT),
        bg=c(COL_DEFAULT),
        dark_bg=c(dark_bg),
        prompt=c(prompt),
        match=c(match),
        current=c(current),
        current_match=c(current_match),
        spinner=c(spinner),
        info=c(info),
        cursor=c(cursor),
        selected=c(selected),
        header=c(header),
        border=c(border),
        border_label=c(border_label),
    )


def default16() -> ColorTheme:
    """The base theme for 16-colour terminals."""
    return _base_theme(
        dark_bg=COL_BLACK, prompt=COL_BLUE, match=COL_GREEN, current=COL_YELLOW,
        current_match=COL_GREEN, spinner=COL_GREEN, info=COL_WHITE,
        cursor=COL_RED, selected=COL_MAGENTA, header=COL_CYAN,
        border=COL_BLACK, border_label=COL_WHITE,
    )


def dark256() -> ColorTheme:
    """The base theme for 256-colour terminals with a dark background."""
    return _base_theme(
        dark_bg=236, prompt=110, match=108, current=254, current_match=151,
        spinner=148, info=144, cursor=161, selected=168, header=109,
        border=59, border_label=145,
    )


def light256() -> ColorTheme:
    """The base theme for 256-colour terminals with a light background."""
    return _base_theme(
        dark_bg=251, prompt=25, match=66, current=237, current_match=23,
        spinner=65, info=101, cursor=161, selected=168, header=31,
        border=145, border_label=59,
    )


def _overlay(base: ColorAttr, over: ColorAttr) -> ColorAttr:
    color = over.color if over.color != COL_UNDEFINED else base.color
    attr = over.attr if over.attr != Attr.UNDEFINED else base.attr
    return ColorAttr(color, attr)


_FROM_BASE = (
    "input", "fg", "bg", "dark_bg", "prompt", "match", "current",
    "current_match", "spinner", "info", "cursor", "selected", "header",
    "border", "border_label",
)

# Elements the base themes leave open, each inheriting from another element.
_DERIVED = (
    ("disabled", "input"),
    ("gutter", "dark_bg"),
    ("preview_fg", "fg"),
    ("preview_bg", "bg"),
    ("preview_label", "border_label"),
    ("preview_border", "border"),
    ("separator", "border"),
    ("scrollbar", "border"),
    ("preview_scrollbar", "preview_border"),
)


def init_theme(theme: ColorTheme, base_theme: ColorTheme, force_black: bool) -> Palette:
    """Fill the undefined parts of theme from base_theme and return its palette.

    theme is updated in place.
    """
    if force_black:
        theme.bg = ColorAttr(COL_BLACK, Attr.UNDEFINED)
    for name in _FROM_BASE:
        setattr(theme, name, _overlay(getattr(base_theme, name), getattr(theme, name)))
    for name, parent in _DERIVED:
        setattr(theme, name, _overlay(getattr(theme, parent), getattr(theme, name)))
    return init_palette(theme)


def init_palette(theme: ColorTheme) -> Palette:
    """Build the colour pairs for every interface element of theme."""

    def pair(fg: ColorAttr, bg: ColorAttr) -> ColorPair:
        bg_color = bg.color
        if fg.color == COL_DEFAULT and fg.attr & Attr.REVERSE:
            bg_color = COL_DEFAULT
        return ColorPair(fg.color, bg_color, fg.attr)

    blank = ColorAttr(theme.fg.color, Attr.REGULAR)

    return Palette(
        prompt=pair(theme.prompt, theme.bg),
        normal=pair(theme.fg, theme.bg),
        input=pair(theme.input, theme.bg),
        disabled=pair(theme.disabled, theme.bg),
        match=pair(theme.match, theme.bg),
        cursor=pair(theme.cursor, theme.gutter),
        cursor_empty=pair(blank, theme.gutter),
        selected=pair(theme.selected, theme.gutter),
        current=pair(theme.current, theme.dark_bg),
        current_match=pair(theme.current_match, theme.dark_bg),
        current_cursor=pair(theme.cursor, theme.dark_bg),
        current_cursor_empty=pair(blank, theme.dark_bg),
        current_selected=pair(theme.selected, theme.dark_bg),
        current_selected_empty=pair(blank, theme.dark_bg),
        spinner=pair(theme.spinner, theme.bg),
        info=pair(theme.info, theme.bg),
        header=pair(theme.header, theme.bg),
        separator=pair(theme.separator, theme.bg),
        scrollbar=pair(theme.scrollbar, theme.bg),
        border=pair(theme.border, theme.bg),
        border_label=pair(theme.border_label, theme.bg),
        preview_label=pair(theme.preview_label, theme.preview_bg),
        preview=pair(theme.preview_fg, theme.preview_bg),
        preview_border=pair(theme.preview_border, theme.preview_bg),
        preview_scrollbar=pair(theme.preview_scrollbar, theme.preview_bg),
        preview_spinner=pair(theme.spinner, theme.preview_bg),
    )