"""RFC 7807 problem responses for the auth API.

Every failure leaves the service as ``application/problem+json`` carrying a
stable ``code`` and the request id. Rejected bearer credentials additionally
get an RFC 6750 ``WWW-Authenticate`` challenge.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from auth_service.core.logger import ensure_request_id

log = logging.getLogger(__name__)

# Stable codes for statuses raised by Werkzeug/Flask-Limiter
HTTP_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}

# Headers from an HTTPException worth forwarding (Retry-After, X-RateLimit-*, Allow)
_FORWARDED_HEADERS = ("retry-after", "allow", "x-ratelimit-")


def problem(
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details body.

    :param status: HTTP status code.
    :param code: Stable, machine-readable error code.
    :param message: Client-safe summary.
    :param details: Optional structured details (e.g. field errors).
    :returns: The problem dictionary, ``request_id`` included.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path if request else None,
        "code": code,
    }
    if details:
        body["details"] = details
    body["request_id"] = ensure_request_id()
    return body


def problem_response(
    body: dict[str, Any], headers: dict[str, str] | None = None
) -> tuple[Response, int]:
    """Render ``body`` as ``application/problem+json`` with its status."""
    resp = jsonify(body)
    resp.mimetype = "application/problem+json"
    for name, value in (headers or {}).items():
        resp.headers[name] = value
    return resp, int(body["status"])


class APIError(Exception):
    """
    Error raised by the HTTP layer and rendered as a problem response.

    Parameters
    ----------
    message : str
        Client-safe description.
    status_code : int, optional
        HTTP status. Defaults to ``400``.
    code : str, optional
        Stable snake_case identifier.
    details : dict[str, Any] | None, optional
        Structured payload placed under ``details``.
    headers : dict[str, str] | None, optional
        Extra response headers (e.g. ``WWW-Authenticate``).
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}
        self.headers = headers or {}

    def to_problem(self) -> dict[str, Any]:
        return problem(self.status_code, self.code, self.message, self.details or None)


class NotFound(APIError):
    """404 for unknown accounts."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND, code="not_found")


class Conflict(APIError):
    """409, e.g. a username that is already registered."""

    def __init__(self, message: str = "Conflict", code: str = "conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT, code=code)


class Unauthorized(APIError):
    """401 with a Bearer challenge naming ``code`` as the RFC 6750 error."""

    def __init__(self, message: str = "Unauthorized", code: str = "unauthorized") -> None:
        challenge = 'Bearer realm="auth"'
        if code == "invalid_token":
            challenge += f', error="invalid_token", error_description="{message}"'
        super().__init__(
            message,
            status_code=HTTPStatus.UNAUTHORIZED,
            code=code,
            headers={"WWW-Authenticate": challenge},
        )


class Forbidden(APIError):
    """403 for refresh tokens that are unknown or expired."""

    def __init__(self, message: str = "Forbidden", code: str = "forbidden") -> None:
        super().__init__(message, status_code=HTTPStatus.FORBIDDEN, code=code)


def _forwarded_headers(err: HTTPException) -> dict[str, str]:
    return {
        name: value
        for name, value in err.get_headers()
        if name.lower().startswith(_FORWARDED_HEADERS)
    }


def init_app(app: Flask) -> None:
    """
    Register the problem+json error handlers.

    Notes
    -----
    - :class:`ServiceError` is mapped through
      :meth:`BaseService.translate_exceptions` first.
    - 5xx are logged with ``exc_info``; 4xx as warnings.
    """
    from auth_service.services._shared.base import BaseService
    from auth_service.services._shared.errors import ServiceError

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "api.error",
            extra={"event": "api.error", "outcome": err.code, "status": err.status_code},
        )
        return problem_response(err.to_problem(), err.headers)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        translated = BaseService.translate_exceptions(err)
        if not isinstance(translated, APIError):  # pragma: no cover - translate covers ServiceError
            raise err
        return handle_api_error(translated)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = HTTP_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        elif status == HTTPStatus.TOO_MANY_REQUESTS:
            message = f"Too many attempts: {err.description}"
        else:
            message = (err.description or code.replace("_", " ").capitalize()).strip()
        level = log.error if status >= 500 else log.warning
        level("http.error", extra={"event": "http.error", "outcome": code, "status": status})
        return problem_response(problem(status, code, message), _forwarded_headers(err))

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        log.warning(
            "validation.error",
            extra={"event": "validation.error", "outcome": ",".join(sorted(err.messages))},
        )
        return problem_response(
            problem(
                HTTPStatus.UNPROCESSABLE_ENTITY,
                "validation_error",
                "Validation failed",
                {"errors": err.messages},
            )
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        log.error("db.integrity_error", exc_info=True)
        return problem_response(problem(HTTPStatus.CONFLICT, "conflict", "Resource conflict"))

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        log.error("db.unavailable", exc_info=True)
        return problem_response(
            problem(
                HTTPStatus.SERVICE_UNAVAILABLE,
                "service_unavailable",
                "Service temporarily unavailable",
            )
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        log.error("unhandled.error", exc_info=True)
        return problem_response(
            problem(HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error")
        )
