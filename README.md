# fzfcore

Building blocks for an interactive fuzzy finder.

## What is in it

- `fzfcore.tokenizer`: split a line into fields AWK style (runs of non-blanks with their trailing
  spaces and tabs), by a literal string (`Delimiter(string=...)`) or by a compiled regular
  expression (`Delimiter(regex=...)`). `parse_range` reads nth-expressions such as `3`, `..2`,
  `2..`, `1..-1` or `..` and raises `ValueError` for malformed ones or field 0. `transform` picks
  and merges fields for a list of `Range`s; `join_tokens` joins tokens back into text.
- `fzfcore.util`: terminal display width (`string_width`, where CR and LF count one column each,
  and `runes_width` with tab stops and a limit), `truncate` to a column width, `repeat_to_fill`,
  the clamps `constrain`, `dur_within` and `as_uint16`, `once`, `is_tty` / `to_tty`, the
  lock-guarded flag `AtomicBool` and the scratch arrays of `Slab`.
- `fzfcore.chars`: `Chars`, an item's text that remembers whether it was pure ASCII, with
  `trim_length`, `leading_whitespaces`, `trailing_whitespaces`, `trim_trailing_whitespaces`
  and `prepend`; build it with `to_chars` (UTF-8 bytes) or `runes_to_chars`.
- `fzfcore.eventbox`: `EventBox` keeps the latest value per event type; `set` wakes waiters
  unless the event is `unwatch`ed, `wait` runs a callback on the event dict, `wait_for` blocks
  until a given event is set, `peek` checks without waiting.
- `fzfcore.shell`: `exec_command` prepares a `ShellCommand` running a command line through
  `$SHELL` (`sh` if unset; `cmd`, PowerShell or a POSIX shell on Windows), `ShellCommand.start`
  launches it with `subprocess.Popen`, `kill_command` kills it (its whole process group outside
  Windows) and `quote_entry` quotes a string for `cmd`, PowerShell or a POSIX shell.
- `fzfcore.tui`:
  - `events`: `EventType`, `Event`, `MouseEvent`, `TermSize`, `FillReturn` and the helpers
    `key`, `alt_key`, `ctrl_alt_key`.
  - `border`: `BorderShape`, `BorderStyle`, `make_border_style` (box-drawing or ASCII
    characters) and `make_transparent_border`.
  - `color`: `Attr`, `ColorAttr`, `ColorPair`, `ColorTheme`, the base themes `default16`,
    `dark256`, `light256`, `empty_theme` and `no_color_theme`, `init_theme` which fills a theme
    from a base theme and returns its `Palette`, and `hex_to_color` / `is_24bit`.
  - `input`: `KeyReader` decodes raw terminal bytes (keys, escape sequences, SGR mouse reports,
    bracketed-paste markers) into events; feed it with `feed` or give it a reader callable.
  - `tty`: `ttyname`, `tty_in`, `open_tty_in` and `get_env_int`.
  - `light`: `LightRenderer` draws with plain ANSI sequences, inline below the cursor or, with
    `fullscreen=True`, on the alternate screen; its `LightWindow`s draw borders, print and fill
    wrapped text. `attr_codes`, `color_codes` and `wrap_line` are available on their own.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Tokenize a line and select fields:

```python
from fzfcore.tokenizer import Delimiter, parse_range, tokenize, transform, join_tokens

tokens = tokenize("  abc:  def:  ghi:  jkl", Delimiter())
ranges = [parse_range(expr) for expr in ("1..2", "3")]
print(join_tokens(transform(tokens, ranges)))  # "abc:  def:  ghi:  "
```

Measure and truncate text by terminal width:

```python
from fzfcore.util import string_width, truncate

string_width("─")           # 1
truncate("가나다라마", 7)     # ("가나다", 6)
```

Wait for an event set from another thread:

```python
import threading
from fzfcore.eventbox import EventBox

box = EventBox()
threading.Thread(target=lambda: box.set("done", 42)).start()
box.wait_for("done")
```

Decode terminal input:

```python
from fzfcore.tui.input import KeyReader
from fzfcore.tui.events import EventType

reader = KeyReader()
reader.feed(b"\x1b[A")
assert reader.get_char().type is EventType.UP
```

Parse a hex colour:

```python
from fzfcore.tui.color import hex_to_color, is_24bit

colour = hex_to_color("#102030")
assert is_24bit(colour)
```

## What it does not do

This is a library of parts, not a finder. It has no fuzzy matching or scoring, no reader of
candidate lists, no interactive selection screen and no command-line program. `LightRenderer`
relies on POSIX terminal control (`termios`); there is no renderer for the Windows console.