"""Building blocks of a fuzzy finder: tokenizing, text width, events, shell commands and a terminal UI."""

__version__ = "0.1.0"