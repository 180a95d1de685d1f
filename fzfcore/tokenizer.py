"""Splitting lines into fields and selecting fields by nth-expressions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence

from fzfcore.chars import Chars

RANGE_ELLIPSIS = 0

_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Range:
    """A field range; RANGE_ELLIPSIS marks an open end."""

    begin: int
    end: int

    @classmethod
    def of(cls, begin: int, end: int) -> "Range":
        """Build a range, normalising 1 as begin and -1 as end to open ends."""
        if begin == 1:
            begin = RANGE_ELLIPSIS
        if end == -1:
            end = RANGE_ELLIPSIS
        return cls(begin, end)


@dataclass(frozen=True)
class Token:
    """A field of a line and the number of characters that precede it."""

    text: Chars
    prefix_length: int

    def __str__(self) -> str:
        return f"Token{{text: {self.text!r}, prefixLength: {self.prefix_length}}}"


@dataclass(frozen=True)
class Delimiter:
    """Field delimiter: a literal string, a regular expression, or neither (AWK style)."""

    regex: Optional[Pattern[str]] = None
    string: Optional[str] = None


def _make_chars(text: str) -> Chars:
    return Chars(text, is_bytes=text.isascii())


def _parse_int(text: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def parse_range(text: str) -> Range:
    """Parse an nth-expression such as "3", "..2", "2..", "1..-1" or "..".

    Raises ValueError if the expression is malformed or refers to field 0.
    """
    try:
        if text == "..":
            return Range.of(RANGE_ELLIPSIS, RANGE_ELLIPSIS)
        if text.startswith(".."):
            end = _parse_int(text[2:])
            if end == 0:
                raise ValueError("field index 0")
            return Range.of(RANGE_ELLIPSIS, end)
        if text.endswith(".."):
            begin = _parse_int(text[:-2])
            if begin == 0:
                raise ValueError("field index 0")
            return Range.of(begin, RANGE_ELLIPSIS)
        if ".." in text:
            parts = text.split("..")
            if len(parts) != 2:
                raise ValueError("too many ranges")
            begin, end = _parse_int(parts[0]), _parse_int(parts[1])
            if begin == 0 or end == 0:
                raise ValueError("field index 0")
            return Range.of(begin, end)
        n = _parse_int(text)
        if n == 0:
            raise ValueError("field index 0")
        return Range.of(n, n)
    except ValueError as exc:
        raise ValueError(f"invalid nth-expression {text!r}: {exc}") from None


def _with_prefix_lengths(tokens: Sequence[str], begin: int) -> List[Token]:
    result = []
    prefix_length = begin
    for token in tokens:
        chars = _make_chars(token)
        result.append(Token(chars, prefix_length))
        prefix_length += len(chars)
    return result


def _awk_tokenize(text: str) -> tuple:
    """Split into fields of non-blanks followed by blanks (space and tab)."""
    tokens = []
    prefix_length = 0
    in_field = False
    in_blanks = False
    begin = end = 0
    for idx, ch in enumerate(text):
        white = ch in " \t"
        if not in_field:
            if white:
                prefix_length += 1
            else:
                in_field, begin, end = True, idx, idx + 1
        elif not in_blanks:
            end = idx + 1
            if white:
                in_blanks = True
        elif white:
            end = idx + 1
        else:
            tokens.append(text[begin:end])
            in_blanks, begin, end = False, idx, idx + 1
    if begin < end:
        tokens.append(text[begin:end])
    return tokens, prefix_length


def _split_after(text: str, sep: str) -> List[str]:
    if sep == "":
        return list(text)
    parts = text.split(sep)
    return [part + sep for part in parts[:-1]] + [parts[-1]]


def tokenize(text: str, delimiter: Delimiter) -> List[Token]:
    """Split text into tokens according to delimiter."""
    if delimiter.string is None and delimiter.regex is None:
        tokens, prefix_length = _awk_tokenize(text)
        return _with_prefix_lengths(tokens, prefix_length)

    if delimiter.string is not None:
        return _with_prefix_lengths(_split_after(text, delimiter.string), 0)

    tokens = []
    begin = 0
    for match in delimiter.regex.finditer(text):
        tokens.append(text[begin : match.end()])
        begin = match.end()
    if begin < len(text):
        tokens.append(text[begin:])
    return _with_prefix_lengths(tokens, 0)


def join_tokens(tokens: Sequence[Token]) -> str:
    """Concatenate the text of the tokens."""
    return "".join(str(token.text) for token in tokens)


def transform(tokens: Sequence[Token], with_nth: Sequence[Range]) -> List[Token]:
    """Select and merge tokens for each range, as done for --with-nth."""
    num_tokens = len(tokens)
    result = []
    for rng in with_nth:
        parts: List[Chars] = []
        min_idx = 0
        if rng.begin == rng.end:
            idx = rng.begin
            if idx == RANGE_ELLIPSIS:
                parts.append(_make_chars(join_tokens(tokens)))
            else:
                if idx < 0:
                    idx += num_tokens + 1
                if 1 <= idx <= num_tokens:
                    min_idx = idx - 1
                    parts.append(tokens[idx - 1].text)
        else:
            if rng.begin == RANGE_ELLIPSIS:
                begin, end = 1, rng.end
                if end < 0:
                    end += num_tokens + 1
            elif rng.end == RANGE_ELLIPSIS:
                begin, end = rng.begin, num_tokens
                if begin < 0:
                    begin += num_tokens + 1
            else:
                begin, end = rng.begin, rng.end
                if begin < 0:
                    begin += num_tokens + 1
                if end < 0:
                    end += num_tokens + 1
            min_idx = max(0, begin - 1)
            parts.extend(
                tokens[idx - 1].text
                for idx in range(begin, end + 1)
                if 1 <= idx <= num_tokens
            )

        if not parts:
            merged = Chars("", is_bytes=True)
        elif len(parts) == 1:
            merged = Chars(parts[0].text, is_bytes=parts[0].is_bytes)
        else:
            merged = _make_chars("".join(str(part) for part in parts))

        prefix_length = tokens[min_idx].prefix_length if min_idx < num_tokens else 0
        result.append(Token(merged, prefix_length))
    return result