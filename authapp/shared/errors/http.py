# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, Response, g, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from authapp.shared.config import load_config
from authapp.shared.logging import logger

from .base import AppError, InfrastructureError


def _wants_json() -> bool:
    return request.path.startswith("/api/") or request.is_json


def _client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def handle_app_error(error: AppError) -> tuple[Response | str, HTTPStatus]:
    if _wants_json():
        return jsonify(error.to_dict()), error.status
    return render_template("error.html", message=error.message), error.status


def register_error_handler(
    app: Flask, *, default_status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
) -> None:
    config = load_config()
    debug_mode = config.debug_logging

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        if isinstance(exc, InfrastructureError):
            logger.error(
                f"Infrastructure error {exc.code} on {request.method} {request.path} "
                f"context={dict(exc.context or {})} cause={exc.__cause__!r}"
            )
        else:
            logger.warning(f"Handled application error {exc.code} on {request.method} {request.path}")
        return handle_app_error(exc)

    @app.errorhandler(HTTPException)
    def _handle_http(exc: HTTPException):
        return exc

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        user_id = getattr(g, "user_id", None)

        if debug_mode:
            logger.exception(
                f"Unhandled exception: {request.method} {request.path} "
                f"from {_client_ip()}, user={user_id}, "
                f"query={dict(request.args)}, body_size={len(request.get_data())}"
            )
        else:
            logger.error(f"Error: {type(exc).__name__} on {request.method} {request.path}")

        if _wants_json():
            return jsonify({"error": "internal_error"}), default_status
        return (
            render_template("error.html", message="Something went wrong, please try again later"),
            default_status,
        )


__all__ = ["handle_app_error", "register_error_handler"]
