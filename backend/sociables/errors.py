from __future__ import annotations


INVALID_PAYLOAD = "invalid_payload"
INVALID_ROOM_CODE = "invalid_room_code"
INVALID_PLAYER_ID = "invalid_player_id"
INVALID_NAME = "invalid_name"

ROOM_NOT_FOUND = "room_not_found"
CARD_NOT_FOUND = "card_not_found"
ACK_NOT_FOUND = "ack_not_found"
PLAYER_NOT_FOUND = "player_not_found"

NOT_HOST = "not_host"
NOT_YOUR_TURN = "not_your_turn"
NOT_YOUR_ACK = "not_your_ack"
NOT_DRAWER = "not_drawer"
NO_TURN_PLAYER = "no_turn_player"
NOT_PARTICIPANT = "not_participant"
SPECTATORS_CANNOT_VOTE = "spectators_cannot_vote"
CANNOT_KICK_SELF = "cannot_kick_self"
UNAUTHORIZED = "unauthorized"

UNRESOLVED_CARD = "unresolved_card"
INTERACTION_ACTIVE = "interaction_active"
NO_ACTIVE_DRAW = "no_active_draw"
CARD_MISMATCH = "card_mismatch"
NO_INTERACTION = "no_interaction"

MISSING_TARGET = "missing_target"
MISSING_TARGETS = "missing_targets"
MISSING_RULE_TEXT = "missing_rule_text"
INVALID_TARGET = "invalid_target"
INVALID_CHOICE = "invalid_choice"
INVALID_VOTE = "invalid_vote"
NAME_TAKEN = "name_taken"
EMPTY_DECK = "empty_deck"

TOO_MANY_REQUESTS = "too_many_requests"


class GameError(Exception):
    """A rejected action. Raised before any room state is touched."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code = code
        self.message = message

    def to_dict(self) -> dict:
        payload = {"ok": False, "error": self.code}
        if self.message:
            payload["message"] = self.message
        return payload
