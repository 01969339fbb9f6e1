"""Status codes and the exceptions that carry them."""

from __future__ import annotations

from enum import IntEnum


class Status(IntEnum):
    """Closed set of results returned by the public operations."""

    OK = 0
    OUT_OF_MEMORY = -1
    ARGUMENT_ERROR = -2
    FILE_ERROR = -3
    NOT_FOUND = -4


class KvError(Exception):
    """Base class for every failure raised by the core modules."""

    status = Status.FILE_ERROR


class CapacityError(KvError):
    """A value does not fit, or a buffer could not be produced or written."""

    status = Status.OUT_OF_MEMORY


class ArgumentError(KvError, ValueError):
    """The caller passed an unusable path, key, value or size."""

    status = Status.ARGUMENT_ERROR


class FileError(KvError):
    """I/O failure other than the file simply being absent."""

    status = Status.FILE_ERROR


class NotFoundError(KvError):
    """The key is not defined in the file."""

    status = Status.NOT_FOUND


__all__ = [
    "ArgumentError",
    "CapacityError",
    "FileError",
    "KvError",
    "NotFoundError",
    "Status",
]
