import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Admin veneer (disabled when empty)
    ADMIN_KEY = os.environ.get("ADMIN_KEY", "")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Sweep loop
    SWEEP_ENABLED = os.environ.get("SWEEP_ENABLED", "1") == "1"
    SWEEP_INTERVAL_SEC = float(os.environ.get("SWEEP_INTERVAL_SEC", "0.5"))
    ROOM_INACTIVE_TIMEOUT_SEC = int(os.environ.get("ROOM_INACTIVE_TIMEOUT_SEC", "300"))

    # Double-submit guard per connection and action (0 disables)
    ACTION_COOLDOWN_MS = int(os.environ.get("ACTION_COOLDOWN_MS", "1000"))

    # Game
    MAX_NAME_LENGTH = int(os.environ.get("MAX_NAME_LENGTH", "20"))
    CARD_CATALOG_PATH = os.environ.get("CARD_CATALOG_PATH", "")

    # Empty picks eventlet where it works, threading elsewhere
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    # Dev server (app.py)
    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", "5000"))
    FLASK_DEBUG = os.environ.get("FLASK_DEBUG", "0") == "1"
    ALLOW_UNSAFE_WERKZEUG = os.environ.get("ALLOW_UNSAFE_WERKZEUG", "1") == "1"
