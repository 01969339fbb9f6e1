"""CLI helper to create or update one key in a key-value configuration file."""
from __future__ import annotations

import argparse

from kvfile.core.logging import setup_logger
from kvfile.core.settings import load_settings
from kvfile.core.writer import set_value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Store a value under a key, rewriting the file.")
    parser.add_argument("file", help="Configuration file, or '-' for KVFILE_PATH")
    parser.add_argument("key", help="Key to set")
    parser.add_argument("value", help="New value")
    parser.add_argument(
        "--atomic",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Replace the file through a temporary copy (default: KVFILE_ATOMIC_WRITE)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    setup_logger(settings.log_level, settings.log_file)

    atomic = settings.atomic_write if args.atomic is None else args.atomic
    status = set_value(
        settings.resolve_path(args.file),
        args.key,
        args.value,
        atomic=atomic,
        line_size=settings.line_size,
    )
    return -int(status)


if __name__ == "__main__":
    raise SystemExit(main())
