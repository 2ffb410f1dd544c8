from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from .. import errors
from ..game.snapshot import room_public_state

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<code>")
def get_room(code: str):
    service = current_app.extensions["sociables"]["service"]
    with service.registry.lock:
        room = service.registry.get(code.strip().upper())
        if not room:
            return jsonify({"error": errors.ROOM_NOT_FOUND}), 404
        return jsonify(room_public_state(room))
