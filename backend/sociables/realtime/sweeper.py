from __future__ import annotations

import logging

from flask_socketio import SocketIO

from ..game.service import GameService
from .events import dispatch


logger = logging.getLogger(__name__)


def sweep_once(socketio: SocketIO, service: GameService) -> int:
    events = service.tick()
    dispatch(socketio, events)
    return len(events)


def start_sweeper(socketio: SocketIO, service: GameService, interval_sec: float = 0.5):
    """Runs the time-driven transitions for every room until the process exits."""

    def _runner() -> None:
        logger.info("[sweep] started, interval %.2fs", interval_sec)
        while True:
            try:
                sweep_once(socketio, service)
            except Exception:
                logger.exception("[sweep] tick failed")
            socketio.sleep(interval_sec)

    return socketio.start_background_task(_runner)
