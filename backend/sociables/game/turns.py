from __future__ import annotations

from .. import errors
from ..errors import GameError
from .models import Player, Room


def active_players(room: Room) -> list[Player]:
    """Players eligible for turn rotation, in seat order."""
    return sorted((p for p in room.players if not p.is_spectator), key=lambda p: p.seat_index)


def _at_seat(players: list[Player], seat: int) -> Player | None:
    for p in players:
        if p.seat_index == seat:
            return p
    return None


def current_turn_player(room: Room) -> Player | None:
    return _at_seat(active_players(room), room.turn_index)


def assert_turn_holder(room: Room, player_id: str) -> Player:
    current = current_turn_player(room)
    if current is None:
        raise GameError(errors.NO_TURN_PLAYER)
    if current.id != player_id:
        raise GameError(errors.NOT_YOUR_TURN)
    return current


def is_host(room: Room, player_id: str) -> bool:
    host = _at_seat(active_players(room), 0)
    return host is not None and host.id == player_id


def _seat_after(players: list[Player], seat: int) -> Player:
    # Seats stay ragged after departures; take the next occupied one, wrapping.
    for p in players:
        if p.seat_index > seat:
            return p
    return players[0]


def advance(room: Room) -> str:
    """Passes the turn on and returns the new turn holder id ("" if none)."""
    ap = active_players(room)
    if not ap:
        room.turn_index = 0
        return ""

    # With dense seats this is (turn_index + 1) % len(ap).
    holder = _seat_after(ap, room.turn_index)
    room.turn_index = holder.seat_index
    return holder.id


def realign(room: Room) -> str:
    """Moves turn_index onto an occupied seat after someone left."""
    ap = active_players(room)
    if not ap:
        room.turn_index = 0
        return ""
    holder = _at_seat(ap, room.turn_index)
    if holder is None:
        holder = _seat_after(ap, room.turn_index)
        room.turn_index = holder.seat_index
    return holder.id
