from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from .. import errors
from ..errors import GameError
from ..game.catalog import card_to_dict
from ..realtime.events import dispatch

bp = Blueprint("admin", __name__)


def _authorized() -> bool:
    key = current_app.config.get("ADMIN_KEY", "")
    if not key:
        return False
    return request.headers.get("X-Admin-Key", "") == key


def _ext() -> dict:
    return current_app.extensions["sociables"]


def _error(e: GameError):
    status = 404 if e.code.endswith("_not_found") else 400
    return jsonify({"error": e.code}), status


@bp.before_request
def _require_key():
    if not _authorized():
        return jsonify({"error": errors.UNAUTHORIZED}), 401
    return None


@bp.get("/admin/rooms")
def admin_rooms():
    return jsonify({"rooms": _ext()["service"].admin_rooms()})


@bp.post("/admin/rooms/<code>/kick")
def admin_kick(code: str):
    data = request.get_json(silent=True) or {}
    player_id = str(data.get("playerId", "")).strip()
    if not player_id:
        return jsonify({"error": errors.INVALID_PAYLOAD}), 400

    try:
        outcome = _ext()["service"].admin_kick(code.strip().upper(), player_id)
    except GameError as e:
        return _error(e)
    dispatch(_ext()["socketio"], outcome.events)
    return jsonify({"ok": True})


@bp.post("/admin/rooms/<code>/close")
def admin_close(code: str):
    try:
        outcome = _ext()["service"].admin_close(code.strip().upper())
    except GameError as e:
        return _error(e)
    dispatch(_ext()["socketio"], outcome.events)
    return jsonify({"ok": True})


@bp.post("/admin/rooms/<code>/cards")
def admin_add_cards(code: str):
    data = request.get_json(silent=True) or {}
    try:
        outcome = _ext()["service"].admin_add_cards(code.strip().upper(), data.get("cardIds"))
    except GameError as e:
        return _error(e)
    dispatch(_ext()["socketio"], outcome.events)
    return jsonify({"ok": True, **outcome.result})


@bp.get("/admin/cards")
def admin_list_cards():
    catalog = _ext()["service"].catalog
    return jsonify({"cards": [card_to_dict(c) for c in catalog.custom_cards()]})


@bp.post("/admin/cards")
def admin_save_card():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": errors.INVALID_PAYLOAD}), 400

    try:
        card, created = _ext()["service"].catalog.save_custom(data)
    except ValueError as e:
        return jsonify({"error": errors.INVALID_PAYLOAD, "message": str(e)}), 400
    return jsonify({"ok": True, "card": card_to_dict(card)}), 201 if created else 200


@bp.delete("/admin/cards/<card_id>")
def admin_delete_card(card_id: str):
    if not _ext()["service"].catalog.delete_custom(card_id):
        return jsonify({"error": errors.CARD_NOT_FOUND}), 404
    return jsonify({"ok": True})
