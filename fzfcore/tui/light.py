"""A renderer that draws inline with escape sequences on the terminal."""

from __future__ import annotations

import os
import re
import struct
import subprocess
import sys
import time
from typing import Callable, List, Optional, Sequence, TextIO, Tuple

import regex

from fzfcore.tui.border import BorderShape, BorderStyle
from fzfcore.tui.color import (
    COL_BLACK,
    COL_DEFAULT,
    COL_WHITE,
    Attr,
    ColorPair,
    ColorTheme,
    Palette,
    dark256,
    default16,
    init_palette,
    init_theme,
    is_24bit,
)
from fzfcore.tui.events import Event, EventType, FillReturn, TermSize
from fzfcore.tui.input import KeyReader
from fzfcore.tui.tty import CONSOLE_DEVICE, get_env_int, open_tty_in
from fzfcore.util import string_width

try:
    import fcntl
    import termios
except ImportError:  # not available on Windows
    fcntl = None
    termios = None

import wcwidth

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

DEFAULT_ESC_DELAY = 100
ESC_POLL_INTERVAL = 5
OFFSET_POLL_TRIES = 10
MAX_INPUT_BUFFER = 1024 * 1024

CR = "\x1b[2m␍"
LF = "\x1b[2m␊"

_ESC = EventType.ESC.value
_OFFSET = re.compile(rb"(.*)\x1b\[([0-9]+);([0-9]+)R")
_GRAPHEME = regex.compile(r"\X")


def _rune_width(ch: str) -> int:
    return max(wcwidth.wcwidth(ch), 0)


def _quot(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _rem(a: int, b: int) -> int:
    """Remainder with the sign of the dividend."""
    return a - _quot(a, b) * b


def _error_exit(message: str) -> None:
    print(message, file=sys.stderr)
    raise SystemExit(2)


def _cleanse(text: str) -> str:
    return text.replace("\x1b", "")


def attr_codes(attr: Attr) -> List[str]:
    """SGR parameters for the text attributes in attr."""
    if attr & Attr.CLEAR:
        return []
    table = (
        (Attr.BOLD, "1"),
        (Attr.DIM, "2"),
        (Attr.ITALIC, "3"),
        (Attr.UNDERLINE, "4"),
        (Attr.BLINK, "5"),
        (Attr.REVERSE, "7"),
        (Attr.STRIKE_THROUGH, "9"),
    )
    return [code for flag, code in table if attr & flag]


def color_codes(fg: int, bg: int) -> List[str]:
    """SGR parameters selecting the foreground and background colours."""
    codes = []
    for color, offset in ((fg, 0), (bg, 10)):
        if color == COL_DEFAULT:
            continue
        if is_24bit(color):
            r = (color >> 16) & 0xFF
            g = (color >> 8) & 0xFF
            b = color & 0xFF
            codes.append(f"{38 + offset};2;{r};{g};{b}")
        elif COL_BLACK <= color <= COL_WHITE:
            codes.append(str(color + 30 + offset))
        elif COL_WHITE < color < 16:
            codes.append(str(color + 90 + offset - 8))
        elif 16 <= color < 256:
            codes.append(f"{38 + offset};5;{color}")
    return codes


def wrap_line(
    text: str, prefix_length: int, max_width: int, tabstop: int
) -> List[Tuple[str, int]]:
    """Split a line into pieces fitting max_width columns.

    The first piece starts at column prefix_length. Tabs are expanded to
    spaces. Returns (text, display width) for each piece.
    """
    lines = []
    width = 0
    line = ""
    for cluster in _GRAPHEME.findall(text):
        if cluster == "\t":
            w = tabstop - (prefix_length + width) % tabstop
            cluster = " " * w
        elif cluster[0] == "\r":
            w = 1
        else:
            w = string_width(cluster)
        width += w

        if prefix_length + width <= max_width:
            line += cluster
        else:
            lines.append((line, width - w))
            line = cluster
            prefix_length = 0
            width = w
    lines.append((line, width))
    return lines


class LightRenderer:
    """Draws below the cursor (or on the alternate screen) with ANSI sequences."""

    def __init__(
        self,
        theme: ColorTheme,
        force_black: bool = False,
        mouse: bool = False,
        tabstop: int = 8,
        clear_on_exit: bool = True,
        fullscreen: bool = False,
        max_height_func: Optional[Callable[[int], int]] = None,
        *,
        tty=None,
        output: Optional[TextIO] = None,
    ) -> None:
        self.theme = theme
        self.force_black = force_black
        self.clear_on_exit = clear_on_exit
        self.tabstop = tabstop
        self.fullscreen = fullscreen
        self.max_height_func = max_height_func or (lambda height: height)
        self.esc_delay = DEFAULT_ESC_DELAY
        self.width = 0
        self.height = 0
        self.palette: Palette = init_palette(theme)
        self._tty = tty if tty is not None else open_tty_in()
        self._output = output
        self._queued: List[str] = []
        self._orig_state = None
        self._up_one_line = False
        self._y = 0
        self._x = 0
        self._reader = KeyReader(self._read_input, mouse=mouse)

    # -- properties shared with the input decoder --

    @property
    def mouse(self) -> bool:
        return self._reader.mouse

    @mouse.setter
    def mouse(self, value: bool) -> None:
        self._reader.mouse = value

    @property
    def yoffset(self) -> int:
        return self._reader.yoffset

    @yoffset.setter
    def yoffset(self, value: int) -> None:
        self._reader.yoffset = value

    @property
    def top(self) -> int:
        return self.yoffset

    # -- output --

    def pass_through(self, text: str) -> None:
        """Queue text to be written verbatim with the cursor saved and restored."""
        self._queued.append("\x1b7" + text + "\x1b8")

    def _stderr(self, text: str) -> None:
        self._stderr_internal(text, True, "")

    def _stderr_internal(self, text: str, allow_nlcr: bool, reset_code: str) -> None:
        out = []
        for ch in text:
            nlcr = ch in "\n\r"
            if ch >= " " or ch == "\x1b" or nlcr:
                if nlcr and not allow_nlcr:
                    out.append((CR if ch == "\r" else LF) + reset_code)
                elif ch != "\ufffd":
                    out.append(ch)
        self._queued.append("".join(out))

    def _csi(self, code: str) -> str:
        full = "\x1b[" + code
        self._stderr(full)
        return full

    def _flush(self) -> None:
        data = "".join(self._queued)
        if data:
            stream = self._output if self._output is not None else sys.stderr
            stream.write("\x1b[?25l" + data + "\x1b[?25h")
            stream.flush()
        self._queued.clear()

    # -- terminal control --

    def _fd(self) -> int:
        return self._tty.fileno()

    def _default_theme(self) -> ColorTheme:
        if "256" in os.environ.get("TERM", ""):
            return dark256()
        try:
            out = subprocess.run(
                ["tput", "colors"], capture_output=True, check=True, text=True
            ).stdout
        except (OSError, subprocess.CalledProcessError):
            return default16()
        try:
            colors = int(out.strip())
        except ValueError:
            colors = 16
        return dark256() if colors > 16 else default16()

    def _make_raw(self) -> None:
        fd = self._fd()
        attrs = termios.tcgetattr(fd)
        attrs[0] &= ~(
            termios.IGNBRK | termios.BRKINT | termios.PARMRK | termios.ISTRIP
            | termios.INLCR | termios.IGNCR | termios.ICRNL | termios.IXON
        )
        attrs[1] &= ~termios.OPOST
        attrs[2] &= ~(termios.CSIZE | termios.PARENB)
        attrs[2] |= termios.CS8
        attrs[3] &= ~(
            termios.ECHO | termios.ECHONL | termios.ICANON | termios.ISIG | termios.IEXTEN
        )
        attrs[6][termios.VMIN] = 1
        attrs[6][termios.VTIME] = 0
        termios.tcsetattr(fd, termios.TCSANOW, attrs)

    def _init_platform(self) -> None:
        if termios is None:
            raise OSError("terminal control is not supported on this platform")
        self._orig_state = termios.tcgetattr(self._fd())
        self._make_raw()

    def _setup_terminal(self) -> None:
        if termios is not None and self._orig_state is not None:
            try:
                self._make_raw()
            except termios.error:
                pass

    def _restore_terminal(self) -> None:
        if termios is not None and self._orig_state is not None:
            try:
                termios.tcsetattr(self._fd(), termios.TCSANOW, self._orig_state)
            except termios.error:
                pass

    def _update_terminal_size(self) -> None:
        try:
            size = os.get_terminal_size(self._fd())
        except (OSError, ValueError):
            self.width = get_env_int("COLUMNS", DEFAULT_WIDTH)
            self.height = self.max_height_func(get_env_int("LINES", DEFAULT_HEIGHT))
        else:
            self.width = size.columns
            self.height = self.max_height_func(size.lines)

    def size(self) -> TermSize:
        """Size of the terminal in cells and pixels; zeros if unknown."""
        if fcntl is None:
            return TermSize()
        try:
            packed = fcntl.ioctl(self._fd(), termios.TIOCGWINSZ, b"\0" * 8)
        except (OSError, ValueError):
            return TermSize()
        rows, cols, xpixel, ypixel = struct.unpack("HHHH", packed)
        return TermSize(rows, cols, xpixel, ypixel)

    # -- input --

    def _getch(self, nonblock: bool) -> Optional[int]:
        fd = self._fd()
        if nonblock:
            import select

            try:
                ready, _, _ = select.select([fd], [], [], 0)
            except (OSError, ValueError):
                return None
            if not ready:
                return None
        try:
            data = os.read(fd, 1)
        except OSError:
            return None
        return data[0] if data else None

    def _get_bytes(self, buffer: bytearray, nonblock: bool) -> bytearray:
        c = self._getch(nonblock)
        if c is None and not nonblock:
            self.close()
            _error_exit("Failed to read " + CONSOLE_DEVICE)

        polls = self.esc_delay // ESC_POLL_INTERVAL
        retries = polls if (c == _ESC or nonblock) else 0
        if c is not None:
            buffer.append(c)

        prev = c
        while True:
            c = self._getch(True)
            if c is None:
                if retries > 0:
                    retries -= 1
                    time.sleep(ESC_POLL_INTERVAL / 1000)
                    continue
                break
            if c == _ESC and prev != c:
                retries = polls
            else:
                retries = 0
            buffer.append(c)
            prev = c
            if len(buffer) > MAX_INPUT_BUFFER:
                self.close()
                raise RuntimeError(f"Input buffer overflow ({len(buffer)})")
        return buffer

    def _read_input(self) -> bytes:
        return bytes(self._get_bytes(bytearray(), False))

    def get_char(self) -> Event:
        """Block until the next key or mouse event and return it."""
        return self._reader.get_char()

    def _find_offset(self) -> Tuple[int, int]:
        self._csi("6n")
        self._flush()
        data = bytearray()
        for tries in range(OFFSET_POLL_TRIES):
            data = self._get_bytes(data, tries > 0)
            match = _OFFSET.search(bytes(data))
            if match:
                # Input typed before the report is kept for later.
                self._reader.feed(match.group(1))
                return int(match.group(2)) - 1, int(match.group(3)) - 1
        return -1, -1

    # -- lifecycle --

    def init(self) -> None:
        """Put the terminal in raw mode and make room for the interface."""
        self.esc_delay = get_env_int("ESCDELAY", DEFAULT_ESC_DELAY)
        try:
            self._init_platform()
        except (OSError, ValueError) as exc:
            _error_exit(str(exc))
        except Exception as exc:  # termios.error is not an OSError
            _error_exit(str(exc))
        self._update_terminal_size()
        self.palette = init_theme(self.theme, self._default_theme(), self.force_black)

        if self.fullscreen:
            self._smcup()
        else:
            # With --no-clear the lower part of the screen is kept for relaunching.
            if self.clear_on_exit:
                self._csi("J")
            y, x = self._find_offset()
            self.mouse = self.mouse and y >= 0
            if x > 0 and self.clear_on_exit:
                self._up_one_line = True
                self._make_space()
            for _ in range(1, self.max_y()):
                self._make_space()

        self._enable_mouse()
        self._csi(f"{self.max_y() - 1}A")
        self._csi("G")
        self._csi("K")
        if not self.clear_on_exit and not self.fullscreen:
            self._csi("s")
        if not self.fullscreen and self.mouse:
            self.yoffset, _ = self._find_offset()

    def resize(self, max_height_func: Callable[[int], int]) -> None:
        self.max_height_func = max_height_func

    def _make_space(self) -> None:
        self._stderr("\n")
        self._csi("G")

    def _move(self, y: int, x: int) -> None:
        if self._y < y:
            self._csi(f"{y - self._y}B")
        elif self._y > y:
            self._csi(f"{self._y - y}A")
        self._stderr("\r")
        if x > 0:
            self._csi(f"{x}C")
        self._y = y
        self._x = x

    def _origin(self) -> None:
        self._move(0, 0)

    def _smcup(self) -> None:
        self._csi("?1049h")

    def _rmcup(self) -> None:
        self._csi("?1049l")

    def _enable_mouse(self) -> None:
        if self.mouse:
            self._csi("?1000h")
            self._csi("?1002h")
            self._csi("?1006h")

    def _disable_mouse(self) -> None:
        if self.mouse:
            self._csi("?1000l")
            self._csi("?1002l")
            self._csi("?1006l")

    def pause(self, clear: bool) -> None:
        self._disable_mouse()
        self._restore_terminal()
        if clear:
            if self.fullscreen:
                self._rmcup()
            else:
                self._smcup()
                self._csi("H")
            self._flush()

    def resume(self, clear: bool, sigcont: bool) -> None:
        self._setup_terminal()
        if clear:
            if self.fullscreen:
                self._smcup()
            else:
                self._rmcup()
            self._enable_mouse()
            self._flush()
        elif sigcont and not self.fullscreen and self.mouse:
            # The offset taken at start-up is likely stale after CTRL-Z.
            self._disable_mouse()
            self.mouse = False

    def clear(self) -> None:
        if self.fullscreen:
            self._csi("H")
        self._origin()
        self._csi("J")
        self._flush()

    def need_scrollbar_redraw(self) -> bool:
        return False

    def refresh_windows(self, windows: Sequence["LightWindow"]) -> None:
        self._flush()

    def refresh(self) -> None:
        self._update_terminal_size()

    def close(self) -> None:
        if self.clear_on_exit:
            if self.fullscreen:
                self._rmcup()
            else:
                self._origin()
                if self._up_one_line:
                    self._csi("A")
                self._csi("J")
        elif not self.fullscreen:
            self._csi("u")
        self._disable_mouse()
        self._flush()
        self._restore_terminal()

    def max_x(self) -> int:
        return self.width

    def max_y(self) -> int:
        if self.height == 0:
            self._update_terminal_size()
        return self.height

    def new_window(
        self,
        top: int,
        left: int,
        width: int,
        height: int,
        preview: bool,
        border_style: BorderStyle,
    ) -> "LightWindow":
        if preview:
            fg, bg = self.theme.preview_fg.color, self.theme.preview_bg.color
        else:
            fg, bg = self.theme.fg.color, self.theme.bg.color
        window = LightWindow(
            self, top, left, width, height, preview, border_style, fg, bg
        )
        window.draw_border()
        return window


class LightWindow:
    """A rectangular region of a LightRenderer."""

    def __init__(
        self,
        renderer: LightRenderer,
        top: int,
        left: int,
        width: int,
        height: int,
        preview: bool,
        border: BorderStyle,
        fg: int = COL_DEFAULT,
        bg: int = COL_DEFAULT,
    ) -> None:
        self.renderer = renderer
        self.colored = renderer.theme.colored
        self.preview = preview
        self.border = border
        self.top = top
        self.left = left
        self.width = width
        self.height = height
        self.tabstop = renderer.tabstop
        self.fg = fg
        self.bg = bg
        self.posx = 0
        self.posy = 0

    @property
    def x(self) -> int:
        return self.posx

    @property
    def y(self) -> int:
        return self.posy

    def _border_color(self) -> ColorPair:
        palette = self.renderer.palette
        return palette.preview_border if self.preview else palette.border

    def draw_border(self) -> None:
        self._draw_border(False)

    def draw_hborder(self) -> None:
        self._draw_border(True)

    def _draw_border(self, only_horizontal: bool) -> None:
        shape = self.border.shape
        if shape in (
            BorderShape.ROUNDED, BorderShape.SHARP, BorderShape.BOLD,
            BorderShape.BLOCK, BorderShape.THIN_BLOCK, BorderShape.DOUBLE,
        ):
            self._draw_border_around(only_horizontal)
        elif shape is BorderShape.HORIZONTAL:
            self._draw_border_horizontal(True, True)
        elif shape is BorderShape.VERTICAL:
            if not only_horizontal:
                self._draw_border_vertical(True, True)
        elif shape is BorderShape.TOP:
            self._draw_border_horizontal(True, False)
        elif shape is BorderShape.BOTTOM:
            self._draw_border_horizontal(False, True)
        elif shape is BorderShape.LEFT:
            if not only_horizontal:
                self._draw_border_vertical(True, False)
        elif shape is BorderShape.RIGHT:
            if not only_horizontal:
                self._draw_border_vertical(False, True)

    def _draw_border_horizontal(self, top: bool, bottom: bool) -> None:
        color = self._border_color()
        hw = _rune_width(self.border.top)
        if top:
            self.move(0, 0)
            self.cprint(color, self.border.top * _quot(self.width, hw))
        if bottom:
            self.move(self.height - 1, 0)
            self.cprint(color, self.border.bottom * _quot(self.width, hw))

    def _draw_border_vertical(self, left: bool, right: bool) -> None:
        width = self.width - 2
        if not left or not right:
            width += 1
        color = self._border_color()
        for y in range(self.height):
            self.move(y, 0)
            if left:
                self.cprint(color, self.border.left)
            self.cprint(color, " " * width)
            if right:
                self.cprint(color, self.border.right)

    def _draw_border_around(self, only_horizontal: bool) -> None:
        b = self.border
        self.move(0, 0)
        color = self._border_color()
        hw = _rune_width(b.top)
        tcw = _rune_width(b.top_left) + _rune_width(b.top_right)
        bcw = _rune_width(b.bottom_left) + _rune_width(b.bottom_right)
        inner = self.width - tcw
        self.cprint(
            color,
            b.top_left + b.top * _quot(inner, hw) + " " * _rem(inner, hw) + b.top_right,
        )
        if not only_horizontal:
            vw = _rune_width(b.left)
            for y in range(1, self.height - 1):
                self.move(y, 0)
                self.cprint(color, b.left)
                self.cprint(color, " " * (self.width - vw * 2))
                self.cprint(color, b.right)
        self.move(self.height - 1, 0)
        inner = self.width - bcw
        self.cprint(
            color,
            b.bottom_left + b.bottom * _quot(inner, hw) + " " * _rem(inner, hw)
            + b.bottom_right,
        )

    def _csi(self, code: str) -> str:
        return self.renderer._csi(code)

    def _stderr_internal(self, text: str, allow_nlcr: bool, reset_code: str) -> None:
        self.renderer._stderr_internal(text, allow_nlcr, reset_code)

    def refresh(self) -> None:
        """Nothing to do: output is flushed by the renderer."""

    def close(self) -> None:
        """Nothing to release."""

    def enclose(self, y: int, x: int) -> bool:
        return (
            self.left <= x < self.left + self.width
            and self.top <= y < self.top + self.height
        )

    def move(self, y: int, x: int) -> None:
        self.posx = x
        self.posy = y
        self.renderer._move(self.top + y, self.left + x)

    def move_and_clear(self, y: int, x: int) -> None:
        self.move(y, x)
        # Spaces rather than erase-line, so a preview window on the right survives.
        self.print(" " * (self.width - x))
        self.move(y, x)

    def _csi_color(self, fg: int, bg: int, attr: Attr) -> Tuple[bool, str]:
        codes = attr_codes(attr) + color_codes(fg, bg)
        code = self._csi(";" + ";".join(codes) + "m")
        return bool(codes), code

    def print(self, text: str) -> None:
        self._cprint2(COL_DEFAULT, self.bg, Attr.REGULAR, text)

    def cprint(self, pair: ColorPair, text: str) -> None:
        _, code = self._csi_color(pair.fg, pair.bg, pair.attr)
        self._stderr_internal(_cleanse(text), False, code)
        self._csi("m")

    def _cprint2(self, fg: int, bg: int, attr: Attr, text: str) -> None:
        has_colors, code = self._csi_color(fg, bg, attr)
        self._stderr_internal(_cleanse(text), False, code)
        if has_colors:
            self._csi("m")

    def _fill(self, text: str, reset_code: str) -> FillReturn:
        all_lines = text.split("\n")
        for i, line in enumerate(all_lines):
            pieces = wrap_line(line, self.posx, self.width, self.tabstop)
            for j, (piece, display_width) in enumerate(pieces):
                self._stderr_internal(piece, False, reset_code)
                self.posx += display_width
                if j < len(pieces) - 1 or i < len(all_lines) - 1:
                    if self.posy + 1 >= self.height:
                        return FillReturn.SUSPEND
                    self.move_and_clear(self.posy, self.posx)
                    self.move(self.posy + 1, 0)
                    self.renderer._stderr(reset_code)
        if self.posx + 1 >= self.width:
            if self.posy + 1 >= self.height:
                return FillReturn.SUSPEND
            self.move(self.posy + 1, 0)
            self.renderer._stderr(reset_code)
            return FillReturn.NEXT_LINE
        return FillReturn.CONTINUE

    def _set_bg(self) -> str:
        if self.bg != COL_DEFAULT:
            _, code = self._csi_color(COL_DEFAULT, self.bg, Attr.REGULAR)
            return code
        # Clears the dim attribute left by a carriage-return marker.
        return "\x1b[m"

    def fill(self, text: str) -> FillReturn:
        self.move(self.posy, self.posx)
        return self._fill(text, self._set_bg())

    def cfill(self, fg: int, bg: int, attr: Attr, text: str) -> FillReturn:
        self.move(self.posy, self.posx)
        if fg == COL_DEFAULT:
            fg = self.fg
        if bg == COL_DEFAULT:
            bg = self.bg
        has_colors, reset_code = self._csi_color(fg, bg, attr)
        if has_colors:
            result = self._fill(text, reset_code)
            self._csi("m")
            return result
        return self._fill(text, self._set_bg())

    def finish_fill(self) -> None:
        if self.posy < self.height:
            self.move_and_clear(self.posy, self.posx)
        for y in range(self.posy + 1, self.height):
            self.move_and_clear(y, 0)

    def erase(self) -> None:
        self.draw_border()
        self.move(0, 0)
        self.finish_fill()
        self.move(0, 0)

    def erase_maybe(self) -> bool:
        return False