"""Shell-like splitting of configuration lines into words."""

from __future__ import annotations

from itertools import islice
from typing import Iterator

_BLANK = " \t"


def iter_words(line: str) -> Iterator[str]:
    """Yield the words of ``line``.

    Words are separated by spaces or tabs. Double quotes group text with
    embedded blanks, and a backslash makes the next character literal.
    A line of only blanks yields a single empty word.
    """
    pos = 0
    end = len(line)
    while pos < end:
        while pos < end and line[pos] in _BLANK:
            pos += 1
        chars: list[str] = []
        while pos < end and line[pos] not in _BLANK:
            if line[pos] == '"':
                pos += 1
                while pos < end and line[pos] != '"':
                    if line[pos] == "\\":
                        pos += 1
                    if pos < end:
                        chars.append(line[pos])
                        pos += 1
                if pos < end:
                    pos += 1
            else:
                if line[pos] == "\\":
                    pos += 1
                    if pos >= end:
                        break
                chars.append(line[pos])
                pos += 1
        while pos < end and line[pos] in _BLANK:
            pos += 1
        yield "".join(chars)


def split_line(line: str, limit: int) -> list[str]:
    """Split ``line`` into at most ``limit + 1`` words."""
    return list(islice(iter_words(line), max(limit + 1, 0)))