"""String predicates for values read from configuration files."""

from __future__ import annotations

import string as _string

_DECIMAL = frozenset(_string.digits)
_HEXADECIMAL = frozenset(_string.hexdigits + "xX")


def is_decimal(string: str | None) -> bool:
    """Return True when every character is an ASCII digit (empty counts)."""
    if string is None:
        return False
    return all(ch in _DECIMAL for ch in string)


def is_hexadecimal(string: str | None) -> bool:
    """Return True when every character is a hex digit or ``x``/``X``.

    The marker is accepted at any position, so both ``0x1F`` and ``1x2``
    pass; the empty string passes as well.
    """
    if string is None:
        return False
    return all(ch in _HEXADECIMAL for ch in string)
