from __future__ import annotations

import logging
import uuid
from threading import RLock

from .. import errors
from ..errors import GameError
from .models import DrinkStats, Duel, GroupVote, Player, Room
from .turns import realign


logger = logging.getLogger(__name__)

ROOM_CODE_LENGTH = 6
PLAYER_ID_LENGTH = 10


def _new_room_code() -> str:
    return uuid.uuid4().hex[:ROOM_CODE_LENGTH].upper()


def _new_player_id() -> str:
    return uuid.uuid4().hex[:PLAYER_ID_LENGTH]


class RoomRegistry:
    """Owns every live room and the connection -> identity bindings.

    One instance per process. ``lock`` guards both maps and every room
    reachable through them; callers hold it across a whole action.
    """

    def __init__(self) -> None:
        self.lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._connections: dict[str, tuple[str, str]] = {}

    # Rooms

    def create_room(self, host_name: str, sid: str | None, deck_order: list[str], now_ms: int) -> tuple[Room, Player]:
        with self.lock:
            code = _new_room_code()
            while code in self._rooms:
                code = _new_room_code()

            host = Player(id=_new_player_id(), name=host_name, seat_index=0, sid=sid)
            room = Room(
                code=code,
                deck_order=list(deck_order),
                created_at_ms=now_ms,
                last_activity_ms=now_ms,
                players=[host],
                drink_stats={host.id: DrinkStats()},
            )
            self._rooms[code] = room
            if sid:
                self.bind(sid, code, host.id)
            return room, host

    def get(self, code: str) -> Room | None:
        with self.lock:
            return self._rooms.get(code)

    def require(self, code: str) -> Room:
        room = self.get(code)
        if room is None:
            raise GameError(errors.ROOM_NOT_FOUND)
        return room

    def list_rooms(self) -> list[Room]:
        with self.lock:
            return list(self._rooms.values())

    def close_room(self, code: str) -> Room | None:
        """Removes the room and every connection bound to it."""
        with self.lock:
            room = self._rooms.pop(code, None)
            if room is None:
                return None
            for sid, (room_code, _) in list(self._connections.items()):
                if room_code == code:
                    del self._connections[sid]
            return room

    def touch(self, room: Room, now_ms: int) -> None:
        room.last_activity_ms = now_ms

    def inactive_rooms(self, now_ms: int, window_ms: int) -> list[Room]:
        with self.lock:
            return [r for r in self._rooms.values() if now_ms - r.last_activity_ms >= window_ms]

    # Members

    @staticmethod
    def name_taken(room: Room, name: str) -> bool:
        wanted = name.casefold()
        return any(m.name.casefold() == wanted for m in (*room.players, *room.spectators))

    @staticmethod
    def _free_seat(room: Room) -> int:
        taken = {p.seat_index for p in room.players}
        seat = 0
        while seat in taken:
            seat += 1
        return seat

    def join(self, room: Room, name: str, spectator: bool, sid: str | None, now_ms: int) -> Player:
        with self.lock:
            if self.name_taken(room, name):
                raise GameError(errors.NAME_TAKEN, "This name is already taken in this room")

            if spectator:
                member = Player(id=_new_player_id(), name=name, seat_index=-1, mode="spectator", sid=sid)
                room.spectators.append(member)
            else:
                member = Player(id=_new_player_id(), name=name, seat_index=self._free_seat(room), sid=sid)
                room.players.append(member)

            room.drink_stats[member.id] = DrinkStats()
            if sid:
                self.bind(sid, room.code, member.id)
            self.touch(room, now_ms)
            return member

    def reconnect(self, room: Room, player_id: str, sid: str, now_ms: int) -> Player:
        with self.lock:
            member = room.find_member(player_id)
            if member is None:
                raise GameError(errors.PLAYER_NOT_FOUND)
            if member.sid and member.sid != sid:
                self._connections.pop(member.sid, None)
            member.connected = True
            member.sid = sid
            self.bind(sid, room.code, player_id)
            self.touch(room, now_ms)
            return member

    def remove_player(self, room: Room, player_id: str) -> Player:
        """Drops a seated player (kick). The turn moves on if it was theirs.

        A duel they were in is cancelled and their vote is withdrawn; the
        caller decides whether that ends the turn.
        """
        with self.lock:
            player = room.find_player(player_id)
            if player is None:
                raise GameError(errors.PLAYER_NOT_FOUND)

            room.players = [p for p in room.players if p.id != player_id]
            room.drink_stats.pop(player_id, None)
            room.active_effects.roles_by_player_id.pop(player_id, None)
            room.active_effects.curses_by_player_id.pop(player_id, None)
            if player.sid:
                self._connections.pop(player.sid, None)

            room.pending_acks = [a for a in room.pending_acks if a.assigned_to != player_id]

            if room.current_draw is not None and room.current_draw.drawn_by == player_id:
                room.current_draw = None
                room.turn_timer = None
            if isinstance(room.interaction, Duel) and player_id in room.interaction.participants:
                room.interaction = None
            if isinstance(room.interaction, GroupVote):
                room.interaction.votes.pop(player_id, None)
            realign(room)
            return player

    # Connections

    def bind(self, sid: str, room_code: str, player_id: str) -> None:
        with self.lock:
            self._connections[sid] = (room_code, player_id)

    def binding(self, sid: str) -> tuple[str, str] | None:
        with self.lock:
            return self._connections.get(sid)

    def unbind(self, sid: str) -> tuple[str, str] | None:
        with self.lock:
            return self._connections.pop(sid, None)

    def connection_count(self) -> int:
        with self.lock:
            return len(self._connections)

    def disconnect(self, sid: str) -> tuple[Room, Player, bool] | None:
        """Handles a dropped connection.

        Returns (room, member, room_closed) or None when the connection was
        not bound. The host leaving closes the room; players stay seated so
        they can reconnect; spectators are dropped.
        """
        with self.lock:
            bound = self.unbind(sid)
            if bound is None:
                return None
            room_code, player_id = bound
            room = self._rooms.get(room_code)
            if room is None:
                return None

            player = room.find_player(player_id)
            if player is not None:
                if player.seat_index == 0:
                    self.close_room(room_code)
                    logger.info("[room-close] %s host disconnected", room_code)
                    return room, player, True
                if player.sid == sid:
                    player.connected = False
                    player.sid = None
                return room, player, False

            spectator = room.find_member(player_id)
            if spectator is None:
                return None
            room.spectators = [s for s in room.spectators if s.id != player_id]
            return room, spectator, False
