"""Turning assembly source text into rows of tokens."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from cwasm.op import COMMENT_CHAR, LABEL_CHARS
from cwasm.text import clean_str, split_words

_HEADER_SEPARATORS = " \t;"
_BODY_SEPARATORS = " \t,"
_EMPTY_ROW = " "


def is_empty_line(line: str) -> bool:
    """Tell whether ``line`` holds nothing but spaces and tabs."""
    return all(char in " \t" for char in line)


def is_label_name(text: str) -> bool:
    """Tell whether every character but the last is a valid label character."""
    return all(char in LABEL_CHARS for char in text[:-1])


def valid_quoted(text: str) -> bool:
    """Check a header value: a quoted string may only be followed by blanks or a comment."""
    if not text.startswith('"'):
        return True
    closing = text.find('"', 1)
    if closing == -1:
        return False
    for char in text[closing + 1:]:
        if char == COMMENT_CHAR:
            break
        if char != " ":
            return False
    return True


def split_source(lines: Iterable[str]) -> list[list[str]]:
    """Split source lines into token rows.

    Blank lines become a single-space row. The first two non-blank lines are
    split on blanks and semicolons, every later one on blanks and commas.
    """
    rows: list[list[str]] = []
    content_lines = 0
    for raw in lines:
        line = clean_str(raw, "\n") if "\n" in raw else raw
        if is_empty_line(line):
            rows.append([_EMPTY_ROW])
            continue
        separators = _HEADER_SEPARATORS if content_lines < 2 else _BODY_SEPARATORS
        rows.append(split_words(line, separators))
        content_lines += 1
    return rows


def merge_header_tokens(tokens: list[str]) -> list[str]:
    """Join everything after the first token back into one space-separated value."""
    if len(tokens) > 2:
        return [tokens[0], " ".join(tokens[1:])]
    return list(tokens)


def read_source(path: str | os.PathLike[str]) -> list[list[str]]:
    """Read an assembly file and split it into token rows."""
    data = Path(path).read_bytes().decode("utf-8", "surrogateescape")
    pieces = data.split("\n")
    if pieces and pieces[-1] == "":
        pieces.pop()
    return split_source(pieces)