"""Read-only key lookup."""

from __future__ import annotations

import logging
import os

from kvfile.core.errors import (
    ArgumentError,
    CapacityError,
    FileError,
    KvError,
    NotFoundError,
    Status,
)
from kvfile.core.tokens import LINE_SIZE, is_truncated, trim_string, value_pos

LOGGER = logging.getLogger(__name__)

ENCODING = "utf-8"
ERRORS = "surrogateescape"


def check_path(path: str | os.PathLike[str]) -> str:
    target = os.fspath(path) if path is not None else ""
    if not target:
        raise ArgumentError("path must be a non-empty string")
    return target


def read_value(
    path: str | os.PathLike[str],
    key: str,
    size: int = LINE_SIZE,
    *,
    line_size: int = LINE_SIZE,
    logger: logging.Logger | None = None,
) -> str:
    """Return the value of the first line defining ``key``.

    Raises ``ArgumentError`` for bad input or an unopenable file,
    ``NotFoundError`` when no line matches, ``CapacityError`` when the value
    is longer than ``size`` and ``FileError`` when reading fails part way.
    """
    log = logger or LOGGER
    target = check_path(path)
    if not key or size is None or size <= 0:
        log.debug("rejected lookup: key=%r size=%r", key, size)
        raise ArgumentError("key must be non-empty and size positive")

    try:
        handle = open(target, "r", encoding=ENCODING, errors=ERRORS, newline="\n")
    except OSError as exc:
        log.debug("open %s failed: %s", target, exc)
        raise ArgumentError(f"cannot open {target}: {exc.strerror}") from exc

    with handle:
        try:
            for lineno, raw in enumerate(handle, start=1):
                if is_truncated(raw, line_size):
                    log.warning("%s:%d longer than %d characters, truncated", target, lineno, line_size - 1)
                line = trim_string(raw, line_size)
                pos = value_pos(line, key)
                if pos is None:
                    continue

                value = line[pos:]
                if len(value) > size:
                    log.debug("value for %r is %d characters, capacity %d", key, len(value), size)
                    raise CapacityError(f"value for {key!r} exceeds {size} characters")
                return value
        except OSError as exc:
            log.debug("read %s failed: %s", target, exc)
            raise FileError(f"cannot read {target}: {exc}") from exc

    raise NotFoundError(f"{key!r} not found in {target}")


def get_value(
    path: str | os.PathLike[str],
    key: str,
    size: int = LINE_SIZE,
    *,
    line_size: int = LINE_SIZE,
    logger: logging.Logger | None = None,
) -> tuple[Status, str | None]:
    """Status-code form of :func:`read_value`; the value is None on failure."""
    log = logger or LOGGER
    try:
        value = read_value(path, key, size, line_size=line_size, logger=log)
    except KvError as exc:
        if exc.status != Status.NOT_FOUND:
            log.info("get %r from %s: %s", key, path, exc)
        return exc.status, None
    return Status.OK, value


__all__ = ["check_path", "get_value", "read_value"]
