"""Boolean toggles read from the environment or a settings mapping."""

from __future__ import annotations

import os
from collections.abc import Mapping

_ON_VALUES = {"1", "true", "yes", "y", "on"}


def is_on(value: str | None) -> bool:
    return (value or "").strip().lower() in _ON_VALUES


def flag(name: str, default: str = "0", source: Mapping[str, str | None] | None = None) -> bool:
    """Return True when ``name`` resolves to an on-value in ``source``."""
    values = os.environ if source is None else source
    raw = values.get(name)
    return is_on(default if raw is None else raw)
