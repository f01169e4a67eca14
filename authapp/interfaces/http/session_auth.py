# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Session cookie plumbing shared by the HTML controllers."""

from __future__ import annotations

from functools import wraps

from flask import Response, g, redirect, request, url_for

from authapp.domain.users.entities import IssuedSession
from authapp.shared.config import AppConfig
from authapp.shared.logging import logger


def client_ip() -> str | None:
    ip_address = request.headers.get("X-Forwarded-For", request.remote_addr)
    if ip_address and "," in ip_address:
        ip_address = ip_address.split(",")[0].strip()
    return ip_address


def read_session_token(config: AppConfig) -> str:
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[7:].strip()
    return request.cookies.get(config.session.cookie_name, "")


def set_session_cookie(
    response: Response, issued: IssuedSession, config: AppConfig, *, remember_me: bool
) -> None:
    response.set_cookie(
        config.session.cookie_name,
        issued.token,
        httponly=True,
        samesite=config.security.cookie_samesite,
        secure=config.security.cookie_secure,
        max_age=config.session.ttl_seconds if remember_me else None,
    )


def clear_session_cookie(response: Response, config: AppConfig) -> None:
    response.delete_cookie(
        config.session.cookie_name,
        httponly=True,
        samesite=config.security.cookie_samesite,
        secure=config.security.cookie_secure,
    )


def login_required(f):
    """Resolve the session to a user or redirect to the login form.

    Wraps controller methods; the controller must expose ``_auth_service``
    and ``_config``. The resolved ``UserProfile`` lands in ``g.current_user``.
    """

    @wraps(f)
    def inner(self, *a, **kw):
        token = read_session_token(self._config)
        user = self._auth_service.current_user(token)
        if user is None:
            logger.debug(f"Session invalid on {request.method} {request.path}, redirecting")
            response = redirect(url_for("auth.login_form"))
            if token:
                clear_session_cookie(response, self._config)
            return response

        g.user_id = user.id
        g.current_user = user
        return f(self, *a, **kw)

    return inner


__all__ = [
    "clear_session_cookie",
    "client_ip",
    "login_required",
    "read_session_token",
    "set_session_cookie",
]
