# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Flask

from authapp.infrastructure.container import Container, container
from authapp.infrastructure.db import init_db
from authapp.interfaces.http.controllers.misc_controller import MiscController
from authapp.shared.config import load_config
from authapp.shared.logging import logger, setup_logging
from authapp.shared.middleware.csrf import configure_csrf
from authapp.shared.middleware.error_handler import configure_error_handling
from authapp.shared.middleware.request_logger import configure_request_logging

_config = load_config()

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=()",
}
HSTS_POLICY = "max-age=31536000; includeSubDomains"


def create_app(app_container: Container | None = None) -> Flask:
    setup_logging(debug_mode=_config.debug_logging)
    init_db()

    deps = app_container or container
    deps.session_manager.purge_expired()

    app = Flask(__name__)
    configure_error_handling(app)
    configure_csrf(app)
    configure_request_logging(app)

    app.config.update(
        SECRET_KEY=_config.secret_key,
        # multipart overhead on top of the image itself
        MAX_CONTENT_LENGTH=_config.uploads.max_bytes + 64 * 1024,
    )

    app.register_blueprint(MiscController().as_blueprint())
    app.register_blueprint(deps.auth_controller.as_blueprint())
    app.register_blueprint(deps.dashboard_controller.as_blueprint())

    @app.after_request
    def _security_headers(resp):
        for header, value in SECURITY_HEADERS.items():
            resp.headers.setdefault(header, value)
        if _config.security.enable_hsts:
            resp.headers.setdefault("Strict-Transport-Security", HSTS_POLICY)
        return resp

    logger.info(f"Flask app initialized hasher={_config.password_hasher} ttl={_config.session.ttl_seconds}s")
    return app


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=_config.port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
