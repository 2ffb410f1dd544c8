from __future__ import annotations

import logging
import re
from typing import Any, Callable

from flask import request
from flask_socketio import SocketIO, join_room

from .. import errors
from ..errors import GameError
from ..game.events import Outcome
from ..game.service import GameService
from .events import dispatch
from .ratelimit import CooldownLimiter


logger = logging.getLogger(__name__)

_ROOM_CODE_RE = re.compile(r"^[A-Z0-9]{6}$")
_PLAYER_ID_RE = re.compile(r"^[A-Za-z0-9_-]{6,21}$")


def _payload(data: Any) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise GameError(errors.INVALID_PAYLOAD)
    return data


def _room_code(payload: dict) -> str:
    code = str(payload.get("roomCode") or "").strip().upper()
    if not _ROOM_CODE_RE.match(code):
        raise GameError(errors.INVALID_ROOM_CODE)
    return code


def _player_id(payload: dict, key: str = "playerId") -> str:
    pid = str(payload.get(key) or "").strip()
    if not _PLAYER_ID_RE.match(pid):
        raise GameError(errors.INVALID_PLAYER_ID)
    return pid


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise GameError(errors.INVALID_PAYLOAD, f"{key} is required")
    return value.strip()


def _validate_name(name: Any, max_length: int) -> str:
    n = name.strip() if isinstance(name, str) else ""
    if not n or len(n) > max_length:
        raise GameError(errors.INVALID_NAME, f"Name must be 1-{max_length} characters")
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        raise GameError(errors.INVALID_NAME)
    if any(ord(ch) < 32 for ch in n):
        raise GameError(errors.INVALID_NAME)
    return n


def register_socketio_handlers(
    socketio: SocketIO,
    service: GameService,
    limiter: CooldownLimiter,
    max_name_length: int = 20,
) -> None:
    def _respond(action: str, run: Callable[[dict], Outcome], data: Any, limited: bool = False, join: bool = False):
        """Runs one action and turns it into the ack dict; errors never escape."""
        try:
            payload = _payload(data)
            if limited and not limiter.allow(request.sid, action):
                raise GameError(errors.TOO_MANY_REQUESTS, "Slow down")
            outcome = run(payload)
        except GameError as e:
            logger.debug("[%s] rejected for %s: %s", action, request.sid, e.code)
            return e.to_dict()

        if join:
            join_room(outcome.result["roomCode"])
        dispatch(socketio, outcome.events)
        return {"ok": True, **outcome.result}

    @socketio.on("room:create")
    def room_create(data=None):
        def run(p: dict) -> Outcome:
            name = _validate_name(p.get("name"), max_name_length)
            return service.create_room(name, sid=request.sid)

        return _respond("room:create", run, data, limited=True, join=True)

    @socketio.on("room:join")
    def room_join(data=None):
        def run(p: dict) -> Outcome:
            code = _room_code(p)
            name = _validate_name(p.get("name"), max_name_length)
            return service.join_room(code, name, spectator=bool(p.get("spectator")), sid=request.sid)

        return _respond("room:join", run, data, limited=True, join=True)

    @socketio.on("room:sync")
    def room_sync(data=None):
        def run(p: dict) -> Outcome:
            code = _room_code(p)
            outcome = service.sync(code, request.sid)
            join_room(code)
            return outcome

        return _respond("room:sync", run, data)

    @socketio.on("player:reconnect")
    def player_reconnect(data=None):
        def run(p: dict) -> Outcome:
            return service.reconnect(_room_code(p), _player_id(p), request.sid)

        return _respond("player:reconnect", run, data, join=True)

    @socketio.on("turn:draw")
    def turn_draw(data=None):
        def run(p: dict) -> Outcome:
            return service.draw(_room_code(p), _player_id(p), sid=request.sid)

        return _respond("turn:draw", run, data, limited=True)

    @socketio.on("card:resolve")
    def card_resolve(data=None):
        def run(p: dict) -> Outcome:
            return service.resolve(
                _room_code(p),
                _player_id(p),
                _text(p, "cardId"),
                p.get("resolution"),
                sid=request.sid,
            )

        return _respond("card:resolve", run, data, limited=True)

    @socketio.on("ack:confirm")
    def ack_confirm(data=None):
        def run(p: dict) -> Outcome:
            return service.confirm_ack(_room_code(p), _player_id(p), _text(p, "ackId"), sid=request.sid)

        return _respond("ack:confirm", run, data)

    @socketio.on("interaction:rps:choose")
    def rps_choose(data=None):
        def run(p: dict) -> Outcome:
            return service.duel_choose(_room_code(p), _player_id(p), _text(p, "choice"), sid=request.sid)

        return _respond("interaction:rps:choose", run, data)

    @socketio.on("interaction:wyr:vote")
    def wyr_vote(data=None):
        def run(p: dict) -> Outcome:
            return service.vote_cast(_room_code(p), _player_id(p), _text(p, "vote"), sid=request.sid)

        return _respond("interaction:wyr:vote", run, data)

    @socketio.on("turn:nudge")
    def turn_nudge(data=None):
        def run(p: dict) -> Outcome:
            return service.nudge(
                _room_code(p),
                _player_id(p, "fromPlayerId"),
                _player_id(p, "toPlayerId"),
                sid=request.sid,
            )

        return _respond("turn:nudge", run, data, limited=True)

    @socketio.on("room:updateSettings")
    def room_update_settings(data=None):
        def run(p: dict) -> Outcome:
            return service.update_settings(_room_code(p), _player_id(p), p.get("patch"), sid=request.sid)

        return _respond("room:updateSettings", run, data)

    @socketio.on("room:setDeck")
    def room_set_deck(data=None):
        def run(p: dict) -> Outcome:
            return service.set_deck(_room_code(p), _player_id(p), p.get("deckOrder"), sid=request.sid)

        return _respond("room:setDeck", run, data)

    @socketio.on("host:kick")
    def host_kick(data=None):
        def run(p: dict) -> Outcome:
            return service.kick(_room_code(p), _player_id(p, "targetPlayerId"), request.sid)

        return _respond("host:kick", run, data)

    @socketio.on("host:close-room")
    def host_close_room(data=None):
        def run(p: dict) -> Outcome:
            return service.close_by_host(_room_code(p), request.sid)

        return _respond("host:close-room", run, data)

    @socketio.on("disconnect")
    def on_disconnect(*_args):
        limiter.forget(request.sid)
        outcome = service.disconnect(request.sid)
        dispatch(socketio, outcome.events)
