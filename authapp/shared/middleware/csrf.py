# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import hmac
import secrets
from collections.abc import Callable
from functools import wraps

from flask import Flask, g, render_template, request

from authapp.shared.config import load_config

SAFE_METHODS: tuple[str, ...] = ("GET", "HEAD", "OPTIONS")
CSRF_COOKIE = "csrf_token"


def _is_enabled() -> bool:
    return load_config().security.enable_csrf


def current_csrf_token() -> str:
    token = getattr(g, "csrf_token", None)
    if not token:
        token = request.cookies.get(CSRF_COOKIE, "") or secrets.token_urlsafe(32)
        g.csrf_token = token
    return token


def configure_csrf(app: Flask) -> None:
    @app.context_processor
    def _inject_csrf():
        return {"csrf_enabled": _is_enabled(), "csrf_token": current_csrf_token}

    if not _is_enabled():
        return

    @app.after_request
    def _ensure_csrf_cookie(resp):
        token = getattr(g, "csrf_token", None)
        if token and request.cookies.get(CSRF_COOKIE) != token:
            config = load_config()
            resp.set_cookie(
                CSRF_COOKIE,
                token,
                httponly=False,
                samesite=config.security.cookie_samesite,
                secure=config.security.cookie_secure,
                max_age=60 * 60 * 24 * 7,
            )
        return resp


def csrf_protect(f: Callable):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not _is_enabled():
            return f(*args, **kwargs)
        if request.method in SAFE_METHODS:
            return f(*args, **kwargs)
        submitted = (
            request.headers.get("X-CSRF-Token") or request.form.get(CSRF_COOKIE) or ""
        ).strip()
        cookie = (request.cookies.get(CSRF_COOKIE) or "").strip()
        if not submitted or not cookie or not hmac.compare_digest(submitted, cookie):
            return render_template("error.html", message="Form expired, please retry"), 403
        return f(*args, **kwargs)

    return wrapper


__all__ = ["configure_csrf", "csrf_protect", "current_csrf_token"]
