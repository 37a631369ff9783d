"""JSON logging for the auth service.

Every record carries the request id of the request that produced it, and
credential material (bearer headers, JWTs, refresh token values) is masked
before it reaches a handler.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")

# ``extra=`` keys promoted to top-level JSON fields
EXTRA_KEYS = (
    "event",
    "outcome",
    "user_id",
    "endpoint",
    "method",
    "path",
    "status",
    "elapsed_ms",
)

# Per-request values kept on ``flask.g``
REQUEST_STATE = ("request_id", "request_started", "principal")

REDACTED = "[redacted]"

_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE)
_JWT_RE = re.compile(r"\beyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*")
_UUID_RE = re.compile(
    r"\b[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\b", re.IGNORECASE
)


def redact(text: str) -> str:
    """
    Mask token material in a log line.

    Refresh tokens are UUIDs, access tokens are JWTs; both are replaced.

    :param text: Rendered log message.
    :returns: The message with every token replaced by ``[redacted]``.
    """
    text = _BEARER_RE.sub(rf"\g<1>{REDACTED}", text)
    text = _JWT_RE.sub(REDACTED, text)
    return _UUID_RE.sub(REDACTED, text)


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        if record.exc_info:
            payload["exc_info"] = redact(self.formatException(record.exc_info))
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Ensure a ``request_id`` attribute is always present on log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


class TokenRedactionFilter(logging.Filter):
    """Freeze the record's message with token values masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        record.msg = redact(message)
        record.args = None
        return True


def ensure_request_id() -> str:
    """Return the current request identifier, generating one when necessary."""

    if has_request_context():
        if hasattr(g, "request_id"):
            return g.request_id  # type: ignore[return-value]
        for header in CORRELATION_HEADERS:
            value = request.headers.get(header)
            if value:
                g.request_id = value
                return value
        request_id = str(uuid4())
        g.request_id = request_id
        return request_id
    return str(uuid4())


def configure_logging(level: str | int = "INFO") -> None:
    """Send JSON lines to stdout from the root logger."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())
    handler.addFilter(TokenRedactionFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    root.setLevel(level)


def init_app(app: Flask) -> None:
    """
    Correlate requests and log one ``request.completed`` line per request.

    The completion line carries the caller's user id when a protected
    endpoint resolved a principal.
    """

    app.logger.addFilter(RequestIdFilter())
    access_log = logging.getLogger("auth_service.access")

    def _start_request() -> None:
        # An app context can outlive one request (shell, tests); start clean
        for key in REQUEST_STATE:
            g.pop(key, None)
        ensure_request_id()
        g.request_started = time.perf_counter()

    # Ahead of every other hook (Flask-Limiter included)
    app.before_request_funcs.setdefault(None, []).insert(0, _start_request)

    @app.after_request
    def _finish_request(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = g.get("request_started")
        principal = g.get("principal")
        access_log.info(
            "request.completed",
            extra={
                "event": "request.completed",
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "user_id": getattr(principal, "user_id", None),
                "elapsed_ms": (
                    round((time.perf_counter() - started) * 1000, 2) if started else None
                ),
            },
        )
        return response


__all__ = [
    "JSONFormatter",
    "TokenRedactionFilter",
    "configure_logging",
    "ensure_request_id",
    "init_app",
    "redact",
]
