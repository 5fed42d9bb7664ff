# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from flask import Flask, send_from_directory
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from userauth.infrastructure.container import Container, container
from userauth.infrastructure.db import init_db
from userauth.shared.logging import logger, setup_logging
from userauth.shared.middleware.error_handler import configure_error_handling
from userauth.shared.middleware.request_logger import configure_request_logging


def _register_media_route(app: Flask, deps: Container) -> None:
    media = deps.config.media
    if media.cloudinary_enabled() or not media.base_url.startswith("/"):
        return

    root = media.root.resolve()

    @app.get(f"{media.base_url.rstrip('/')}/<path:filename>")
    def _serve_media(filename: str):
        return send_from_directory(root, filename)


def create_app(deps: Container | None = None) -> Flask:
    deps = deps or container
    config = deps.config

    init_db()
    setup_logging(debug_mode=config.debug_logging)

    deps.admin_setup.setup_admin_user(config.admin_email)

    app = Flask(__name__)
    app.config.update(MAX_CONTENT_LENGTH=config.media.max_bytes + 64 * 1024)
    if config.security.trusted_proxy_count:
        hops = config.security.trusted_proxy_count
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops)
    configure_error_handling(app)
    configure_request_logging(app)

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}}
    }
    if any(o != "*" for o in config.security.allowed_origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    app.register_blueprint(deps.auth_controller.as_blueprint())
    app.register_blueprint(deps.users_controller.as_blueprint())
    _register_media_route(app, deps)

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        resp.headers.setdefault(
            "Permissions-Policy",
            "geolocation=(), microphone=(), camera=(), payment=(), usb=()",
        )

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )

        return resp

    logger.info("Flask app initialized")
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
