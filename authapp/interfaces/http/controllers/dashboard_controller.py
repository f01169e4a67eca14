# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import mimetypes

from flask import Blueprint, Response, abort, g, render_template, url_for

from authapp.application.services.auth_service import AuthService
from authapp.domain.users.entities import UserProfile
from authapp.infrastructure.storage import StoragePort
from authapp.interfaces.http.session_auth import login_required
from authapp.shared.config import AppConfig
from authapp.shared.logging import logger


class DashboardController:
    def __init__(
        self, *, auth_service: AuthService, storage: StoragePort, config: AppConfig
    ) -> None:
        self._auth_service = auth_service
        self._storage = storage
        self._config = config

    def index(self) -> str:
        return render_template("index.html")

    @login_required
    def dashboard(self) -> str:
        user: UserProfile = g.current_user
        image_url = (
            url_for("dashboard.upload", reference=user.profile_image)
            if user.profile_image
            else None
        )
        return render_template("dashboard.html", username=user.username, image_url=image_url)

    @login_required
    def upload(self, reference: str) -> Response:
        if reference != g.current_user.profile_image:
            abort(404)
        try:
            data = self._storage.read_bytes(reference)
        except (FileNotFoundError, ValueError):
            logger.warning(f"dashboard.upload: missing or invalid reference user={g.user_id}")
            abort(404)
        mimetype = mimetypes.guess_type(reference)[0] or "application/octet-stream"
        return Response(data, mimetype=mimetype)

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("dashboard", __name__)
        bp.add_url_rule("/", "index", view_func=self.index, methods=["GET"])
        bp.add_url_rule("/dashboard", "dashboard", view_func=self.dashboard, methods=["GET"])
        bp.add_url_rule(
            "/uploads/<path:reference>", "upload", view_func=self.upload, methods=["GET"]
        )
        return bp
