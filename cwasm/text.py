"""Small string helpers used while reading assembly source."""

from __future__ import annotations

import re

_DIGITS = frozenset("0123456789")
_INT_LIMIT = 4294967295


def split_words(text: str, separators: str) -> list[str]:
    """Split ``text`` on any run of the given separator characters."""
    if not separators:
        return [text] if text else []
    pattern = "[" + re.escape(separators) + "]+"
    return [word for word in re.split(pattern, text) if word]


def clean_str(text: str, separators: str) -> str:
    """Drop outer separators and collapse inner runs of them to one space."""
    return " ".join(split_words(text, separators))


def is_digit(text: str) -> bool:
    """Tell whether ``text`` is an optional minus sign followed by digits only."""
    body = text[1:] if text.startswith("-") else text
    return all(char in _DIGITS for char in body)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


def get_number(text: str) -> int:
    """Read the first number in ``text``, signed by the minus signs before it.

    Values of 4294967295 and above read as 0; the result wraps to 32 bits.
    Text without any digit reads as 0.
    """
    match = re.search(r"[0-9]+", text)
    if match is None:
        return 0
    negative = text[:match.start()].count("-") % 2 == 1
    result = int(match.group())
    if result >= _INT_LIMIT:
        return 0
    return _to_int32(-result if negative else result)


def prefix_matches(first: str, second: str, length: int) -> bool:
    """Tell whether the first ``length`` characters of both strings agree."""
    if length <= 0:
        return True
    return first[:length] == second[:length]