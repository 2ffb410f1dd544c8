import os
import sys
from pathlib import Path

from dotenv import load_dotenv


def _wants_eventlet() -> bool:
    mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    return not sys.platform.startswith("win") and sys.version_info < (3, 13) and mode in ("", "eventlet")


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    # must patch before flask and the engine import threading
    if _wants_eventlet():
        import eventlet

        eventlet.monkey_patch()

    from sociables.server import create_app

    app, socketio = create_app()
    cfg = app.config

    app.logger.info("Sociables listening on %s:%d", cfg["HOST"], cfg["PORT"])
    socketio.run(
        app,
        host=cfg["HOST"],
        port=cfg["PORT"],
        debug=cfg["FLASK_DEBUG"],
        allow_unsafe_werkzeug=cfg["ALLOW_UNSAFE_WERKZEUG"],
        use_reloader=False,
    )


if __name__ == "__main__":
    main()
