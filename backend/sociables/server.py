from __future__ import annotations

import logging
import random
import sys
from pathlib import Path

from flask import Flask, send_from_directory
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.catalog import CardCatalog
from .game.registry import RoomRegistry
from .game.service import GameService
from .realtime.handlers import register_socketio_handlers
from .realtime.ratelimit import CooldownLimiter
from .realtime.sweeper import start_sweeper
from .routes.admin import bp as admin_bp
from .routes.cards import bp as cards_bp
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)


def _default_async_mode() -> str:
    # eventlet has known compatibility issues on Windows and Python >= 3.13
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(config: type = Config) -> tuple[Flask, SocketIO]:
    dist_dir = Path(__file__).resolve().parents[2] / "frontend" / "dist"

    static_folder = str(dist_dir) if dist_dir.exists() else None
    static_url_path = "/" if dist_dir.exists() else None

    app = Flask(
        __name__,
        static_folder=static_folder,
        static_url_path=static_url_path,
    )
    app.config.from_object(config)
    _configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=app.config.get("SOCKETIO_ASYNC_MODE") or _default_async_mode(),
    )

    catalog = CardCatalog.load(app.config.get("CARD_CATALOG_PATH", ""))
    registry = RoomRegistry()
    service = GameService(
        registry,
        catalog,
        rng=random.Random(),
        inactive_timeout_ms=int(app.config.get("ROOM_INACTIVE_TIMEOUT_SEC", 300)) * 1000,
    )
    limiter = CooldownLimiter(int(app.config.get("ACTION_COOLDOWN_MS", 1000)))
    app.extensions["sociables"] = {"service": service, "socketio": socketio, "limiter": limiter}

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(cards_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api")

    register_socketio_handlers(
        socketio,
        service,
        limiter,
        max_name_length=int(app.config.get("MAX_NAME_LENGTH", 20)),
    )

    if app.config.get("SWEEP_ENABLED", True):
        start_sweeper(socketio, service, float(app.config.get("SWEEP_INTERVAL_SEC", 0.5)))

    app.logger.info("Sociables ready: %d cards, async mode %s", len(catalog.base_order()), socketio.async_mode)

    if dist_dir.exists():
        @app.get("/")
        def index():
            return send_from_directory(dist_dir, "index.html")

        @app.get("/<path:path>")
        def static_proxy(path: str):
            file_path = dist_dir / path
            if file_path.exists() and file_path.is_file():
                return send_from_directory(dist_dir, path)
            return send_from_directory(dist_dir, "index.html")

    return app, socketio
