"""Runtime configuration for the command line tools and the server."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

from kvfile.core.flags import flag
from kvfile.core.tokens import LINE_SIZE

ENV_PATH = Path(".env")
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    path: Path = Path("kv.conf")
    line_size: int = LINE_SIZE
    atomic_write: bool = False
    log_level: str = "INFO"
    log_file: Path | None = None
    write_rate_limit: int = 60
    write_rate_window: int = 60

    def resolve_path(self, arg: str) -> Path:
        """Map the CLI placeholder ``-`` to the configured file."""
        return self.path if arg == "-" else Path(arg)


def _int(values: Mapping[str, str | None], name: str, default: int) -> int:
    raw = values.get(name)
    if raw in (None, ""):
        return default
    try:
        number = int(raw)
    except ValueError:
        LOGGER.warning("%s=%r is not an integer, using %d", name, raw, default)
        return default
    if number <= 0:
        LOGGER.warning("%s=%d must be positive, using %d", name, number, default)
        return default
    return number


def load_env(env_path: Path | None = ENV_PATH) -> Mapping[str, str | None]:
    """Load key/value pairs from the local environment file."""
    if env_path is None or not env_path.exists():
        return {}
    return dotenv_values(env_path)


def load_settings(
    env_path: Path | None = ENV_PATH,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build settings from the process environment, then ``.env``, then defaults."""
    values: dict[str, str | None] = dict(load_env(env_path))
    values.update(os.environ if environ is None else environ)

    log_file = values.get("KVFILE_LOG_FILE")
    return Settings(
        path=Path(values.get("KVFILE_PATH") or Settings.path),
        line_size=_int(values, "KVFILE_LINE_SIZE", LINE_SIZE),
        atomic_write=flag("KVFILE_ATOMIC_WRITE", "0", values),
        log_level=(values.get("LOG_LEVEL") or "INFO").upper(),
        log_file=Path(log_file) if log_file else None,
        write_rate_limit=_int(values, "KVFILE_WRITE_RATE_LIMIT", Settings.write_rate_limit),
        write_rate_window=_int(values, "KVFILE_WRITE_RATE_WINDOW", Settings.write_rate_window),
    )
