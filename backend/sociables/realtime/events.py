from __future__ import annotations

from typing import Iterable

from flask_socketio import SocketIO

from ..game.events import Event


def dispatch(socketio: SocketIO, events: Iterable[Event]) -> None:
    """Pushes engine events out through the Socket.IO server, in order."""
    for event in events:
        socketio.emit(event.name, event.payload, to=event.to)
        if event.leave is not None:
            sid, room_code = event.leave
            socketio.server.leave_room(sid, room_code, namespace="/")
        if event.close_room is not None:
            socketio.close_room(event.close_room)
