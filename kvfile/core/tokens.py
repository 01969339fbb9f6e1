"""Line trimming and key matching shared by the reader and the writer."""

from __future__ import annotations

import re

LINE_SIZE = 512
DELIMITERS = " =,\t\r\n"

# C-locale isspace()
WHITESPACE = " \t\n\v\f\r"
_EOL = re.compile(r"[\r\n]")
_TOKEN = re.compile(r"[^ =,\t\r\n]+")


def trim_string(line: str, limit: int = LINE_SIZE) -> str:
    """Return ``line`` without its end-of-line marker and surrounding whitespace.

    Only the first ``limit - 1`` characters are considered, the same bound a
    fixed line buffer imposes. Leading CR/LF characters are skipped before the
    line is cut at the next CR or LF, so ``"a\\rb"`` trims to ``"a"``.
    """
    text = line[: max(limit - 1, 0)].lstrip("\r\n")
    text = _EOL.split(text, 1)[0]
    return text.strip(WHITESPACE)


def is_truncated(line: str, limit: int = LINE_SIZE) -> bool:
    """Return True when ``trim_string`` would drop content past ``limit``."""
    return len(line.rstrip("\r\n")) > limit - 1


def value_pos(line: str, key: str) -> int | None:
    """Return the offset of the value token when ``line`` defines ``key``.

    The first token must equal ``key`` exactly and a second token must
    follow it; otherwise ``None`` is returned.
    """
    if not line or not key:
        return None

    tokens = _TOKEN.finditer(line)
    first = next(tokens, None)
    if first is None or first.group() != key:
        return None

    second = next(tokens, None)
    if second is None:
        return None
    return second.start()


def has_delimiter(text: str) -> bool:
    return any(ch in DELIMITERS for ch in text)


__all__ = [
    "DELIMITERS",
    "LINE_SIZE",
    "WHITESPACE",
    "has_delimiter",
    "is_truncated",
    "trim_string",
    "value_pos",
]
