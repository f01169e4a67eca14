# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hashlib
import secrets
import time
from typing import Any

from flask import Flask, Response, g, request

from authapp.shared.config import load_config
from authapp.shared.logging import clear_correlation_id, logger, set_correlation_id

SENSITIVE_HEADERS = {"authorization", "cookie", "x-csrf-token"}
SENSITIVE_FIELDS = ("password", "token", "secret", "csrf")


def _get_client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    return request.remote_addr or "unknown"


def _sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    sanitized = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            sanitized[key] = f"<hashed:{hashlib.sha256(value.encode()).hexdigest()[:8]}>"
        else:
            sanitized[key] = value
    return sanitized


def _sanitize_fields(params: dict[str, Any]) -> dict[str, Any]:
    return {
        key: "<redacted>" if any(s in key.lower() for s in SENSITIVE_FIELDS) else value
        for key, value in params.items()
    }


def configure_request_logging(app: Flask) -> None:
    debug_mode = load_config().debug_logging

    @app.before_request
    def _before_request() -> None:
        correlation_id = request.headers.get("X-Request-ID") or secrets.token_urlsafe(8)
        set_correlation_id(correlation_id)
        g.correlation_id = correlation_id
        g.request_start_time = time.perf_counter()

        if debug_mode:
            logger.info(
                f"Request started: {request.method} {request.path} from {_get_client_ip()}, "
                f"query={_sanitize_fields(dict(request.args))}, "
                f"form={_sanitize_fields(request.form.to_dict())}, "
                f"headers={_sanitize_headers(dict(request.headers))}"
            )
        else:
            logger.info(f"Request: {request.method} {request.path} from {_get_client_ip()}")

    @app.after_request
    def _after_request(response: Response) -> Response:
        start_time = getattr(g, "request_start_time", time.perf_counter())
        duration_ms = (time.perf_counter() - start_time) * 1000.0
        user_id = getattr(g, "user_id", None)
        logger.info(
            f"Response: {request.method} {request.path} status={response.status_code} "
            f"in {duration_ms:.1f} ms user={user_id}"
        )
        response.headers.setdefault("X-Request-ID", getattr(g, "correlation_id", "-"))
        return response

    @app.teardown_request
    def _teardown_request(exc: BaseException | None) -> None:
        if exc is not None:
            logger.error(
                f"Request error: {type(exc).__name__} on {request.method} {request.path}"
            )
        clear_correlation_id()


__all__ = ["configure_request_logging"]
