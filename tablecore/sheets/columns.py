"""
Spreadsheet column addresses.

Columns are numbered from 1 and written in bijective base-26: there is no
zero digit, so ``A``..``Z`` are 1..26, ``AA`` is 27, ``ZZ`` is 702 and
``AAA`` is 703.
"""

from __future__ import annotations

import re

from tablecore.errors import ColumnAddressError

_LETTERS_RE = re.compile(r"[A-Za-z]+")
_BASE = 26


def number_to_letters(n: int) -> str:
    """Convert a 1-based column number to its letter address (1 -> ``A``)."""
    if isinstance(n, bool) or not isinstance(n, int):
        raise ColumnAddressError(f"Column number must be an int, got {type(n).__name__}")
    if n < 1:
        raise ColumnAddressError(f"Column number must be >= 1, got {n}")

    letters = []
    while n > 0:
        n, rem = divmod(n - 1, _BASE)
        letters.append(chr(ord("A") + rem))
    return "".join(reversed(letters))


def letters_to_number(letters: str) -> int:
    """Convert a letter address to its 1-based column number (``AA`` -> 27)."""
    if not isinstance(letters, str):
        raise ColumnAddressError(f"Column letters must be a str, got {type(letters).__name__}")
    if not _LETTERS_RE.fullmatch(letters):
        raise ColumnAddressError(f"Invalid column letters: {letters!r}")
    text = letters.upper()

    number = 0
    for ch in text:
        number = number * _BASE + (ord(ch) - ord("A") + 1)
    return number
