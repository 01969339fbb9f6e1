"""Create-or-update of a single key with a full-file rewrite.

Every call reads the whole file into a staging buffer and replaces the
target with the buffer's content, so the cost grows with the file size.
That is acceptable for small configuration files only.

By default the target is truncated and rewritten in place; an interruption
after the truncation leaves an empty or partial file. ``atomic=True`` stages
the content in a temporary file next to the target and renames it into place.
"""

from __future__ import annotations

import io
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import TextIO

from kvfile.core.errors import (
    ArgumentError,
    CapacityError,
    FileError,
    KvError,
    Status,
)
from kvfile.core.reader import ENCODING, ERRORS, check_path
from kvfile.core.tokens import (
    LINE_SIZE,
    WHITESPACE,
    has_delimiter,
    is_truncated,
    trim_string,
    value_pos,
)

LOGGER = logging.getLogger(__name__)


def _umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _validate(key: str, value: str, line_size: int) -> None:
    """Reject entries that would not read back unchanged."""
    if not key or not value:
        raise ArgumentError("key and value must be non-empty")
    if has_delimiter(key) or any(ch in WHITESPACE for ch in key):
        raise ArgumentError(f"key {key!r} contains a delimiter or whitespace character")
    if "\r" in value or "\n" in value:
        raise ArgumentError("value must not contain line breaks")
    if value.strip(WHITESPACE) != value or has_delimiter(value[0]):
        raise ArgumentError("value must not start with a delimiter or end with whitespace")
    if len(key) + 1 + len(value) > line_size - 1:
        raise ArgumentError(f"entry is longer than {line_size - 1} characters")


def _stage(
    target: str,
    key: str,
    value: str,
    line_size: int,
    log: logging.Logger,
) -> io.StringIO:
    """Return a buffer holding the rewritten file content."""
    entry = f"{key}={value}\n"
    staging = io.StringIO(newline="\n")
    found = False

    try:
        handle = open(target, "r", encoding=ENCODING, errors=ERRORS, newline="\n")
    except FileNotFoundError:
        log.debug("%s does not exist, creating it", target)
        handle = None
    except OSError as exc:
        raise FileError(f"cannot read {target}: {exc.strerror}") from exc

    if handle is not None:
        with handle:
            try:
                for lineno, raw in enumerate(handle, start=1):
                    if is_truncated(raw, line_size):
                        log.warning("%s:%d longer than %d characters, truncated", target, lineno, line_size - 1)
                    line = trim_string(raw, line_size)
                    if not line:
                        continue
                    if value_pos(line, key) is None:
                        staging.write(line + "\n")
                    else:
                        staging.write(entry)
                        found = True
            except OSError as exc:
                raise FileError(f"cannot read {target}: {exc}") from exc

    if not found:
        staging.write(entry)
    return staging


def _copy(staging: io.StringIO, handle: TextIO, target: str) -> None:
    try:
        staging.seek(0)
    except (OSError, ValueError) as exc:
        raise FileError("cannot rewind staging buffer") from exc

    for line in staging:
        try:
            handle.write(line)
        except OSError as exc:
            raise CapacityError(f"write to {target} failed: {exc}") from exc


def _replace_in_place(staging: io.StringIO, target: str) -> None:
    try:
        handle = open(target, "w", encoding=ENCODING, errors=ERRORS, newline="\n")
    except OSError as exc:
        raise ArgumentError(f"cannot open {target} for writing: {exc.strerror}") from exc

    try:
        with handle:
            _copy(staging, handle, target)
    except OSError as exc:
        # flush on close
        raise CapacityError(f"write to {target} failed: {exc}") from exc


def _replace_atomic(staging: io.StringIO, target: str) -> None:
    directory = Path(target).resolve().parent
    try:
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".kvfile-", suffix=".tmp")
    except OSError as exc:
        raise ArgumentError(f"cannot create a temporary file in {directory}: {exc.strerror}") from exc

    tmp = Path(tmp_name)
    try:
        try:
            with open(fd, "w", encoding=ENCODING, errors=ERRORS, newline="\n") as handle:
                _copy(staging, handle, target)
            if os.path.exists(target):
                shutil.copymode(target, tmp)
            else:
                tmp.chmod(0o666 & ~_umask())
        except OSError as exc:
            raise CapacityError(f"write to {tmp} failed: {exc}") from exc
        try:
            os.replace(tmp, target)
        except OSError as exc:
            raise ArgumentError(f"cannot replace {target}: {exc.strerror}") from exc
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


def write_value(
    path: str | os.PathLike[str],
    key: str,
    value: str,
    *,
    atomic: bool = False,
    line_size: int = LINE_SIZE,
    logger: logging.Logger | None = None,
) -> None:
    """Set ``key`` to ``value`` in ``path``, creating the file if needed.

    Every line defining ``key`` is replaced by ``key=value``; when none does,
    the entry is appended. Empty lines are dropped and other lines are kept
    in their trimmed form.
    """
    log = logger or LOGGER
    target = check_path(path)
    _validate(key, value, line_size)

    try:
        staging = _stage(target, key, value, line_size, log)
    except MemoryError as exc:
        raise CapacityError("cannot allocate staging buffer") from exc

    with staging:
        if atomic:
            _replace_atomic(staging, target)
        else:
            _replace_in_place(staging, target)
    log.debug("set %r in %s", key, target)


def set_value(
    path: str | os.PathLike[str],
    key: str,
    value: str,
    *,
    atomic: bool = False,
    line_size: int = LINE_SIZE,
    logger: logging.Logger | None = None,
) -> Status:
    """Status-code form of :func:`write_value`."""
    log = logger or LOGGER
    try:
        write_value(path, key, value, atomic=atomic, line_size=line_size, logger=log)
    except KvError as exc:
        log.warning("set %r in %s: %s", key, path, exc)
        return exc.status
    return Status.OK


__all__ = ["set_value", "write_value"]
