"""Core functionality for kvfile."""

from . import errors, flags, reader, security, settings, tokens, util, writer

__all__ = [
    "errors",
    "flags",
    "reader",
    "security",
    "settings",
    "tokens",
    "util",
    "writer",
]
