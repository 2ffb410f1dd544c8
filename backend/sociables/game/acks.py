from __future__ import annotations

import uuid

from .. import errors
from ..errors import GameError
from .models import AckMeta, Card, PendingAck, Room
from .resolution import Resolution


ACK_KINDS = frozenset({"chooseTarget", "chooseTargetAndNumber", "chooseTwoTargets"})
# confirmed ids remembered for repeat confirmations, oldest dropped first
CONFIRMED_ACK_LIMIT = 200


def requires_ack(card: Card) -> bool:
    return card.resolution.kind in ACK_KINDS


def create_ack(
    card: Card,
    created_by: str,
    assigned_to: str,
    now_ms: int,
    meta: AckMeta | None = None,
) -> PendingAck:
    return PendingAck(
        ack_id=uuid.uuid4().hex[:8],
        created_at_ms=now_ms,
        card_id=card.id,
        card_title=card.title,
        instruction=card.body,
        created_by=created_by,
        assigned_to=assigned_to,
        meta=meta,
    )


def build_acks(card: Card, created_by: str, resolution: Resolution, now_ms: int) -> list[PendingAck]:
    """One receipt per distinct targeted player; empty for untargeted cards."""
    if not requires_ack(card):
        return []

    targets = list(dict.fromkeys(resolution.targets))
    acks = []
    for target in targets:
        meta = AckMeta(
            kind=card.resolution.kind,
            number_value=resolution.number_value,
            rule_text=resolution.rule_text or None,
            targets=list(targets),
        )
        acks.append(create_ack(card, created_by, target, now_ms, meta=meta))
    return acks


def confirm(room: Room, ack_id: str, player_id: str, now_ms: int) -> PendingAck | None:
    """Confirms a receipt and prunes it.

    Returns the confirmed receipt, or None when the assignee already
    confirmed it earlier (nothing to broadcast).
    """
    assignee = room.confirmed_acks.get(ack_id)
    if assignee is not None:
        if assignee != player_id:
            raise GameError(errors.NOT_YOUR_ACK)
        return None

    ack = next((a for a in room.pending_acks if a.ack_id == ack_id), None)
    if ack is None:
        raise GameError(errors.ACK_NOT_FOUND)
    if ack.assigned_to != player_id:
        raise GameError(errors.NOT_YOUR_ACK)

    ack.status = "confirmed"
    ack.confirmed_at_ms = now_ms
    room.pending_acks = [a for a in room.pending_acks if a.status != "confirmed"]
    room.confirmed_acks[ack_id] = player_id
    while len(room.confirmed_acks) > CONFIRMED_ACK_LIMIT:
        del room.confirmed_acks[next(iter(room.confirmed_acks))]
    return ack
