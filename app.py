"""Flask entry point serving one key-value configuration file over HTTP."""

from __future__ import annotations

import logging
import threading
from typing import Any

from flask import Flask, jsonify, request

from kvfile.core.errors import Status
from kvfile.core.logging import setup_logger
from kvfile.core.reader import get_value
from kvfile.core.security import RateLimiter
from kvfile.core.settings import load_settings
from kvfile.core.writer import set_value

settings = load_settings()
LOGGER = logging.getLogger("kvfile.server")

HTTP_STATUS = {
    Status.OUT_OF_MEMORY: 413,
    Status.ARGUMENT_ERROR: 400,
    Status.FILE_ERROR: 500,
    Status.NOT_FOUND: 404,
}

server = Flask(__name__)
write_limiter = RateLimiter(settings.write_rate_limit, settings.write_rate_window)
write_lock = threading.Lock()


def _error(status: Status) -> Any:
    body = {"ok": False, "error": status.name.lower()}
    return jsonify(body), HTTP_STATUS.get(status, 500)


@server.get("/health")
def healthcheck() -> Any:
    """Return a basic health payload."""
    return jsonify({"ok": True})


@server.get("/values/<key>")
def read_entry(key: str) -> Any:
    status, value = get_value(settings.path, key, settings.line_size, line_size=settings.line_size)
    if status != Status.OK:
        return _error(status)
    return jsonify({"key": key, "value": value})


@server.put("/values/<key>")
def write_entry(key: str) -> Any:
    client = request.remote_addr or "unknown"
    if not write_limiter.allow(client):
        LOGGER.warning("rewrite of %s throttled for %s", settings.path, client)
        response = jsonify({"ok": False, "error": "rate_limited"})
        response.status_code = 429
        response.headers["Retry-After"] = str(write_limiter.retry_after(client))
        return response

    payload = request.get_json(silent=True)
    value = payload.get("value") if isinstance(payload, dict) else None
    if not isinstance(value, str):
        return _error(Status.ARGUMENT_ERROR)

    with write_lock:
        status = set_value(
            settings.path,
            key,
            value,
            atomic=settings.atomic_write,
            line_size=settings.line_size,
        )
    if status != Status.OK:
        return _error(status)
    LOGGER.info("updated %s in %s", key, settings.path)
    response = jsonify({"ok": True})
    response.headers["X-RateLimit-Remaining"] = str(write_limiter.remaining(client))
    return response


if __name__ == "__main__":
    setup_logger(settings.log_level, settings.log_file)
    server.run(debug=True)
