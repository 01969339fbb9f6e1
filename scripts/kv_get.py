"""CLI helper to look up one key in a key-value configuration file."""
from __future__ import annotations

import argparse

from kvfile.core.errors import Status
from kvfile.core.logging import setup_logger
from kvfile.core.reader import get_value
from kvfile.core.settings import load_settings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the value stored under a key.")
    parser.add_argument("file", help="Configuration file, or '-' for KVFILE_PATH")
    parser.add_argument("key", help="Key to look up")
    parser.add_argument("--size", type=int, default=None, help="Largest value accepted, in characters")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    setup_logger(settings.log_level, settings.log_file)

    size = args.size if args.size is not None else settings.line_size
    status, value = get_value(
        settings.resolve_path(args.file),
        args.key,
        size,
        line_size=settings.line_size,
    )
    if status == Status.OK:
        print(value)
    return -int(status)


if __name__ == "__main__":
    raise SystemExit(main())
