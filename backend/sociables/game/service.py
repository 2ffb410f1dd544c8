from __future__ import annotations

import logging
import random
import time
from typing import Callable

from .. import errors
from ..errors import GameError
from . import acks, interactions
from .catalog import CardCatalog, card_to_dict
from .deck import draw_card, sanitize_deck_order
from .events import Event, Outcome
from .history import push_log
from .models import CurrentDraw, Duel, GroupVote, Player, Room
from .registry import RoomRegistry
from .resolution import Resolution, announce, apply_card, apply_drink_stats, validate
from .snapshot import room_admin_summary, room_public_state
from .timer import NUDGE_THRESHOLD_MS, nudge_key, start_timer
from .turns import advance, assert_turn_holder, is_host


logger = logging.getLogger(__name__)

SYSTEM_NAME = "Sociables"
TIMEOUT_PENALTY_DRINKS = 1
THEMES = ("obsidian", "wood", "neon", "dungeon")
_BOOL_SETTINGS = {
    "safeMode": "safe_mode",
    "dynamicWeighting": "dynamic_weighting",
    "sfx": "sfx",
    "haptics": "haptics",
}


def now_ms() -> int:
    return int(time.time() * 1000)


class GameService:
    """Every player, admin and time-driven action on rooms.

    Each call validates completely before touching a room, mutates it while
    holding the registry lock, and returns an Outcome: the caller's result
    plus the events to broadcast. The transport layer does the emitting.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        catalog: CardCatalog,
        clock: Callable[[], int] = now_ms,
        rng: random.Random | None = None,
        inactive_timeout_ms: int = 5 * 60 * 1000,
    ) -> None:
        self.registry = registry
        self.catalog = catalog
        self.clock = clock
        self.rng = rng or random.Random()
        self.inactive_timeout_ms = inactive_timeout_ms

    # Event helpers

    @staticmethod
    def _state(room: Room) -> Event:
        return Event("room:state", {"room": room_public_state(room)}, to=room.code)

    @staticmethod
    def _effect(room: Room, message: str) -> Event:
        return Event("effect:applied", {"room": room_public_state(room), "message": message}, to=room.code)

    @staticmethod
    def _turn_changed(room: Room, player_id: str) -> Event:
        return Event("turn:changed", {"turnIndex": room.turn_index, "playerId": player_id}, to=room.code)

    @staticmethod
    def _closed(code: str, message: str) -> Event:
        return Event("room:closed", {"message": message}, to=code, close_room=code)

    def _check_identity(self, room: Room, player_id: str, sid: str | None) -> None:
        if sid is None:
            return
        if self.registry.binding(sid) != (room.code, player_id):
            raise GameError(errors.PLAYER_NOT_FOUND)

    def _bound_player(self, room: Room, sid: str) -> str:
        bound = self.registry.binding(sid)
        if bound is None or bound[0] != room.code:
            raise GameError(errors.PLAYER_NOT_FOUND)
        return bound[1]

    def _require_host(self, room: Room, player_id: str) -> None:
        if not is_host(room, player_id):
            raise GameError(errors.NOT_HOST)

    def _finish_turn(self, room: Room, message: str) -> list[Event]:
        next_player_id = advance(room)
        return [self._effect(room, message), self._turn_changed(room, next_player_id), self._state(room)]

    # Lifecycle

    def create_room(self, name: str, sid: str | None = None) -> Outcome:
        with self.registry.lock:
            now = self.clock()
            room, host = self.registry.create_room(name, sid, self.catalog.base_order(), now)
            push_log(room, "system", f"{name} created the room.", now, actor_id=host.id)
            logger.info("[room-create] %s by %s", room.code, host.id)
            return Outcome({"roomCode": room.code, "playerId": host.id}, [self._state(room)])

    def join_room(self, code: str, name: str, spectator: bool = False, sid: str | None = None) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            now = self.clock()
            member = self.registry.join(room, name, spectator, sid, now)
            suffix = " as spectator" if spectator else ""
            push_log(room, "system", f"{member.name} joined{suffix}.", now, actor_id=member.id)
            return Outcome({"roomCode": room.code, "playerId": member.id}, [self._state(room)])

    def sync(self, code: str, sid: str) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            state = room_public_state(room)
            return Outcome({"room": state}, [Event("room:state", {"room": state}, to=sid)])

    def reconnect(self, code: str, player_id: str, sid: str) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            now = self.clock()
            member = self.registry.reconnect(room, player_id, sid, now)
            push_log(room, "system", f"{member.name} reconnected.", now, actor_id=member.id)
            return Outcome({"roomCode": room.code, "playerId": member.id}, [self._state(room)])

    def disconnect(self, sid: str) -> Outcome:
        with self.registry.lock:
            dropped = self.registry.disconnect(sid)
            if dropped is None:
                return Outcome()
            room, member, closed = dropped
            if closed:
                return Outcome({"closed": True}, [self._closed(room.code, "Host disconnected")])
            push_log(room, "system", f"{member.name} disconnected.", self.clock(), actor_id=member.id)
            return Outcome({}, [self._state(room)])

    # Turns

    def draw(self, code: str, player_id: str, sid: str | None = None) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            self._check_identity(room, player_id, sid)
            assert_turn_holder(room, player_id)
            if room.current_draw is not None:
                raise GameError(errors.UNRESOLVED_CARD)
            if room.interaction is not None:
                raise GameError(errors.INTERACTION_ACTIVE)
            card = draw_card(room, self.catalog, self.rng)

            now = self.clock()
            room.draw_index += 1
            room.discard.append(card.id)
            room.current_draw = CurrentDraw(card_id=card.id, drawn_by=player_id)
            room.nudged_turn_key = None
            room.turn_timer = start_timer(card, now)
            push_log(room, "draw", f"{room.player_name(player_id)} drew: {card.title}", now, actor_id=player_id, card_id=card.id)
            self.registry.touch(room, now)

            drawn = Event("card:drawn", {"card": card_to_dict(card), "drawnByPlayerId": player_id}, to=room.code)
            return Outcome({"cardId": card.id}, [drawn, self._state(room)])

    def resolve(self, code: str, player_id: str, card_id: str, payload=None, sid: str | None = None) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            self._check_identity(room, player_id, sid)
            resolution = Resolution.from_payload(payload)
            assert_turn_holder(room, player_id)
            if room.current_draw is None:
                raise GameError(errors.NO_ACTIVE_DRAW)
            if room.current_draw.card_id != card_id:
                raise GameError(errors.CARD_MISMATCH)
            if room.current_draw.drawn_by != player_id:
                raise GameError(errors.NOT_DRAWER)
            card = self.catalog.get(card_id)
            if card is None:
                raise GameError(errors.CARD_NOT_FOUND)
            resolution = validate(room, card, resolution)

            now = self.clock()
            kind = card.resolution.kind
            if kind in ("rockPaperScissors", "wouldYouRather"):
                if kind == "rockPaperScissors":
                    message = interactions.start_duel(room, card, player_id, resolution.target_player_id, now)
                else:
                    message = interactions.start_vote(room, card, player_id, now)
                push_log(room, "resolve", message, now, actor_id=player_id, card_id=card.id)
                self.registry.touch(room, now)
                return Outcome({}, [self._effect(room, message), self._state(room)])

            headline = announce(room, card, player_id, resolution)
            effect_message = apply_card(room, card, player_id, resolution)
            apply_drink_stats(room, card, player_id, resolution)
            push_log(room, "resolve", f"{headline}. {effect_message}", now, actor_id=player_id, card_id=card.id)
            room.current_draw = None
            room.turn_timer = None

            new_acks = acks.build_acks(card, player_id, resolution, now)
            room.pending_acks.extend(new_acks)
            self.registry.touch(room, now)

            message = f"{headline}. {effect_message}"
            if new_acks:
                message += " (Confirmation needed from selected player(s), game continues.)"
            return Outcome({"ackIds": [a.ack_id for a in new_acks]}, self._finish_turn(room, message))

    def confirm_ack(self, code: str, player_id: str, ack_id: str, sid: str | None = None) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            self._check_identity(room, player_id, sid)
            now = self.clock()
            ack = acks.confirm(room, ack_id, player_id, now)
            if ack is None:
                return Outcome({"alreadyConfirmed": True})

            name = room.player_name(player_id)
            push_log(room, "ack", f"{name} confirmed: {ack.card_title}", now, actor_id=player_id, card_id=ack.card_id)
            self.registry.touch(room, now)
            return Outcome({}, [self._effect(room, f"{name} confirmed."), self._state(room)])

    def duel_choose(self, code: str, player_id: str, choice: str, sid: str | None = None) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            self._check_identity(room, player_id, sid)
            now = self.clock()
            message = interactions.choose(room, player_id, str(choice or "").strip().lower(), now)
            self.registry.touch(room, now)
            if message is None:
                return Outcome({}, [self._state(room)])
            return Outcome({"resolved": True}, self._finish_turn(room, message))

    def vote_cast(self, code: str, player_id: str, vote: str, sid: str | None = None) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            self._check_identity(room, player_id, sid)
            now = self.clock()
            message = interactions.cast_vote(room, player_id, vote, now)
            self.registry.touch(room, now)
            if message is None:
                return Outcome({}, [self._state(room)])
            return Outcome({"resolved": True}, self._finish_turn(room, message))

    def nudge(self, code: str, from_player_id: str, to_player_id: str, sid: str | None = None) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            self._check_identity(room, from_player_id, sid)
            if room.find_member(to_player_id) is None:
                raise GameError(errors.PLAYER_NOT_FOUND)

            now = self.clock()
            from_name = room.player_name(from_player_id)
            push_log(room, "nudge", f"{from_name} nudged {room.player_name(to_player_id)}.", now, actor_id=from_player_id)
            self.registry.touch(room, now)
            nudged = Event(
                "player:nudged",
                {"roomCode": room.code, "toPlayerId": to_player_id, "fromName": from_name},
                to=room.code,
            )
            return Outcome({}, [nudged, self._state(room)])

    # Host controls

    def update_settings(self, code: str, player_id: str, patch, sid: str | None = None) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            self._check_identity(room, player_id, sid)
            self._require_host(room, player_id)
            if not isinstance(patch, dict):
                raise GameError(errors.INVALID_PAYLOAD, "patch must be an object")

            changes: dict[str, object] = {}
            for key, attr in _BOOL_SETTINGS.items():
                if key in patch:
                    if not isinstance(patch[key], bool):
                        raise GameError(errors.INVALID_PAYLOAD, f"{key} must be a boolean")
                    changes[attr] = patch[key]
            if "theme" in patch:
                if patch["theme"] not in THEMES:
                    raise GameError(errors.INVALID_PAYLOAD, "unknown theme")
                changes["theme"] = patch["theme"]

            for attr, value in changes.items():
                setattr(room.settings, attr, value)
            now = self.clock()
            push_log(room, "setting", f"{room.player_name(player_id)} updated settings.", now, actor_id=player_id)
            self.registry.touch(room, now)
            return Outcome({}, [self._state(room)])

    def set_deck(self, code: str, player_id: str, deck_order, sid: str | None = None) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            self._check_identity(room, player_id, sid)
            self._require_host(room, player_id)
            clean = sanitize_deck_order(deck_order, self.catalog)
            if not clean:
                raise GameError(errors.EMPTY_DECK)

            room.settings.custom_deck_order = clean
            room.draw_index = 0
            room.discard = []
            room.current_draw = None
            room.turn_timer = None
            now = self.clock()
            push_log(
                room,
                "deck",
                f"{room.player_name(player_id)} loaded a custom deck ({len(clean)} cards).",
                now,
                actor_id=player_id,
            )
            self.registry.touch(room, now)
            return Outcome({"deckSize": len(clean)}, [self._state(room)])

    def _kick(self, room: Room, target_player_id: str, by: str, actor_id: str) -> list[Event]:
        duel = room.interaction if isinstance(room.interaction, Duel) else None
        target = self.registry.remove_player(room, target_player_id)
        now = self.clock()
        push_log(room, "system", f"{target.name} was kicked by {by}.", now, actor_id=actor_id)
        self.registry.touch(room, now)

        out: list[Event] = []
        if target.sid:
            out.append(
                Event(
                    "kicked",
                    {"message": f"You were kicked by the {by}"},
                    to=target.sid,
                    leave=(target.sid, room.code),
                )
            )
        out.extend(self._after_departure(room, target, duel, now))
        return out

    def _after_departure(self, room: Room, target: Player, duel: Duel | None, now: int) -> list[Event]:
        # a challenger leaving already hands the turn on through realign
        if duel is not None and target.id == duel.opponent:
            message = f"{target.name} left the duel. Turn passes."
            push_log(room, "system", message, now, card_id=duel.card_id)
            return self._finish_turn(room, message)

        vote = room.interaction
        if isinstance(vote, GroupVote) and interactions.vote_complete(room, vote):
            message = interactions.finalize_vote(room, vote, now)
            if vote.started_by == target.id:
                return [self._effect(room, message), self._state(room)]
            return self._finish_turn(room, message)
        return [self._state(room)]

    def kick(self, code: str, target_player_id: str, sid: str) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            player_id = self._bound_player(room, sid)
            self._require_host(room, player_id)
            if target_player_id == player_id:
                raise GameError(errors.CANNOT_KICK_SELF)
            return Outcome({}, self._kick(room, target_player_id, "host", player_id))

    def close_by_host(self, code: str, sid: str) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            player_id = self._bound_player(room, sid)
            self._require_host(room, player_id)
            self.registry.close_room(room.code)
            logger.info("[room-close] %s closed by host", room.code)
            return Outcome({}, [self._closed(room.code, "Room closed by host")])

    # Admin veneer

    def admin_rooms(self) -> list[dict]:
        with self.registry.lock:
            return [room_admin_summary(r) for r in self.registry.list_rooms()]

    def admin_kick(self, code: str, player_id: str) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            outcome = Outcome({}, self._kick(room, player_id, "admin", "admin"))
            logger.info("[admin] kicked %s from %s", player_id, code)
            return outcome

    def admin_close(self, code: str) -> Outcome:
        with self.registry.lock:
            if self.registry.close_room(code) is None:
                raise GameError(errors.ROOM_NOT_FOUND)
            logger.info("[admin] closed %s", code)
            return Outcome({}, [self._closed(code, "Room closed by admin")])

    def admin_add_cards(self, code: str, card_ids) -> Outcome:
        with self.registry.lock:
            room = self.registry.require(code)
            wanted = card_ids if isinstance(card_ids, list) else []
            added = [c.id for c in (self.catalog.get_custom(str(cid)) for cid in wanted) if c is not None]
            if not added:
                raise GameError(errors.CARD_NOT_FOUND, "No valid cards found")

            base = room.settings.custom_deck_order or room.deck_order
            room.settings.custom_deck_order = [*base, *added]
            now = self.clock()
            push_log(room, "deck", f"Admin added {len(added)} custom cards to the deck.", now, actor_id="admin")
            self.registry.touch(room, now)
            return Outcome({"added": len(added)}, [self._state(room)])

    # Time

    def tick(self, now: int | None = None) -> list[Event]:
        """Applies every time-driven transition that is due at ``now``."""
        with self.registry.lock:
            now = self.clock() if now is None else now
            out: list[Event] = []
            for room in self.registry.inactive_rooms(now, self.inactive_timeout_ms):
                self.registry.close_room(room.code)
                logger.info("[sweep] removing inactive room %s", room.code)
                out.append(self._closed(room.code, "Room closed due to inactivity"))
            for room in self.registry.list_rooms():
                out.extend(self._tick_room(room, now))
            return out

    def _tick_room(self, room: Room, now: int) -> list[Event]:
        outcome = interactions.expire_if_due(room, now)
        if outcome is not None:
            return self._finish_turn(room, outcome)

        timer = room.turn_timer
        if timer is None:
            return []
        draw = room.current_draw
        if draw is None:
            room.turn_timer = None
            return [self._state(room)]
        if not timer.enabled:
            return []

        if timer.ends_at_ms > now:
            key = nudge_key(room)
            if timer.ends_at_ms - now <= NUDGE_THRESHOLD_MS and room.nudged_turn_key != key:
                room.nudged_turn_key = key
                push_log(room, "nudge", f"Reminder sent to {room.player_name(draw.drawn_by)}.", now, actor_id=draw.drawn_by)
                nudged = Event(
                    "player:nudged",
                    {"roomCode": room.code, "toPlayerId": draw.drawn_by, "fromName": SYSTEM_NAME},
                    to=room.code,
                )
                return [nudged, self._state(room)]
            return []

        name = room.player_name(draw.drawn_by)
        room.stats_for(draw.drawn_by).taken += TIMEOUT_PENALTY_DRINKS
        push_log(room, "system", f"Time's up. {name} takes 1 drink.", now, actor_id=draw.drawn_by)
        room.current_draw = None
        room.turn_timer = None
        return self._finish_turn(room, f"Time's up. {name} takes 1 drink. Turn passes.")
