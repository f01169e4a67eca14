# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, redirect, render_template, request, url_for
from pydantic import ValidationError as PydanticValidationError
from werkzeug.datastructures import FileStorage

from authapp.application.services.auth_service import AuthService
from authapp.application.use_cases.users.register_user import ImageUpload, RegisterCommand
from authapp.domain.users.exceptions import (AccountLockedError, DuplicateUserError,
                                             InvalidCredentialsError)
from authapp.infrastructure.audit import AuditAction, audit_log
from authapp.interfaces.http.dto.auth import LoginForm, RegisterForm
from authapp.interfaces.http.session_auth import (clear_session_cookie, client_ip,
                                                  read_session_token, set_session_cookie)
from authapp.shared.config import AppConfig
from authapp.shared.errors import ValidationError
from authapp.shared.errors.validation import describe_pydantic_errors
from authapp.shared.logging import logger
from authapp.shared.middleware.csrf import csrf_protect
from authapp.shared.middleware.rate_limit import rate_limit


def _image_from_request() -> ImageUpload | None:
    upload: FileStorage | None = request.files.get("image")
    if upload is None or not upload.filename:
        return None
    return ImageUpload(filename=upload.filename, content=upload.read())


class AuthController:
    def __init__(self, *, auth_service: AuthService, config: AppConfig) -> None:
        self._auth_service = auth_service
        self._config = config

    def register_form(self) -> str:
        return render_template("register.html", errors=[], form={})

    @rate_limit(limit=5, window_seconds=60.0)
    @csrf_protect
    def register(self) -> Response | tuple[str, int]:
        raw = request.form.to_dict()
        echo = {"email": raw.get("email", ""), "username": raw.get("username", "")}
        try:
            dto = RegisterForm.model_validate(raw)
        except PydanticValidationError as exc:
            return render_template(
                "register.html", errors=describe_pydantic_errors(exc), form=echo
            ), HTTPStatus.BAD_REQUEST

        command = RegisterCommand(
            email=dto.email,
            username=dto.username,
            password=dto.password,
            image=_image_from_request(),
        )
        try:
            user = self._auth_service.register(command)
        except (ValidationError, DuplicateUserError) as exc:
            audit_log(
                AuditAction.REGISTER_FAILED,
                ip_address=client_ip(),
                details={"reason": exc.code},
                success=False,
            )
            return render_template(
                "register.html", errors=[exc.message], form=echo
            ), HTTPStatus.BAD_REQUEST

        audit_log(
            AuditAction.REGISTER,
            user_id=user.id,
            ip_address=client_ip(),
            details={"username": user.username, "image": bool(user.profile_image)},
            success=True,
        )
        logger.info(f"auth.register: ok user_id={user.id}")
        return redirect(url_for("auth.login_form"))

    def login_form(self) -> str:
        return render_template("login.html", error=None, form={})

    @rate_limit(limit=10, window_seconds=60.0)
    @csrf_protect
    def login(self) -> Response | tuple[str, int]:
        raw = request.form.to_dict()
        echo = {"email": raw.get("email", "")}
        ip_address = client_ip()
        try:
            dto = LoginForm.model_validate(raw)
        except PydanticValidationError:
            return render_template(
                "login.html", error=InvalidCredentialsError().message, form=echo
            ), HTTPStatus.BAD_REQUEST

        try:
            issued = self._auth_service.login(dto.email, dto.password, ip_address)
        except InvalidCredentialsError as exc:
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"error": exc.code},
                success=False,
            )
            return render_template(
                "login.html", error=exc.message, form=echo
            ), HTTPStatus.BAD_REQUEST
        except AccountLockedError as exc:
            audit_log(
                AuditAction.LOGIN_LOCKED,
                ip_address=ip_address,
                details=dict(exc.context or {}),
                success=False,
            )
            return render_template(
                "login.html", error=exc.message, form=echo
            ), HTTPStatus.TOO_MANY_REQUESTS

        audit_log(
            AuditAction.LOGIN_SUCCESS,
            user_id=issued.user_id,
            ip_address=ip_address,
            details={"remember_me": dto.remember_me},
            success=True,
        )

        response = redirect(url_for("dashboard.dashboard"))
        set_session_cookie(response, issued, self._config, remember_me=dto.remember_me)
        logger.info(f"auth.login: ok user_id={issued.user_id} remember_me={dto.remember_me}")
        return response

    @csrf_protect
    def logout(self) -> Response:
        token = read_session_token(self._config)
        self._auth_service.logout(token)

        audit_log(
            AuditAction.LOGOUT,
            ip_address=client_ip(),
            details={"authenticated": bool(token)},
            success=True,
        )

        response = redirect(url_for("dashboard.index"))
        clear_session_cookie(response, self._config)
        logger.info("auth.logout: ok")
        return response

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__)
        bp.add_url_rule("/register", "register_form", view_func=self.register_form, methods=["GET"])
        bp.add_url_rule("/register", "register", view_func=self.register, methods=["POST"])
        bp.add_url_rule("/login", "login_form", view_func=self.login_form, methods=["GET"])
        bp.add_url_rule("/login", "login", view_func=self.login, methods=["POST"])
        bp.add_url_rule("/logout", "logout", view_func=self.logout, methods=["POST"])
        return bp
