from __future__ import annotations

import random
from collections import Counter

from .. import errors
from ..errors import GameError
from .catalog import CardCatalog
from .models import Card, Room


RECENT_WINDOW = 8
RECENT_CARD_FACTOR = 0.25
CLUSTER_FACTOR = 0.65
MIN_WEIGHT = 0.05

BASE_WEIGHTS: dict[str, float] = {
    "forfeit": 1.0,
    "rule": 1.1,
    "role": 1.0,
    "curse": 0.9,
    "event": 1.0,
    "joker": 0.9,
    "setup": 0.8,
    "endgame": 0.6,
}
SAFE_MODE_FORFEIT_WEIGHT = 0.7


def deck_order(room: Room) -> list[str]:
    return room.settings.custom_deck_order or room.deck_order


def _forfeit_penalty(recent_forfeits: int) -> float:
    if recent_forfeits >= 4:
        return 0.5
    if recent_forfeits >= 3:
        return 0.7
    return 1.0


def card_weights(room: Room, catalog: CardCatalog) -> list[tuple[str, float]]:
    """Weights for every drawable card in the room's deck order.

    Recently discarded cards and over-represented types are pushed down so
    the same card or the same kind of card does not keep coming back.
    """
    recent = room.discard[-RECENT_WINDOW:]
    recent_ids = set(recent)
    type_counts: Counter[str] = Counter()
    for card_id in recent:
        card = catalog.get(card_id)
        if card is not None:
            type_counts[card.type] += 1

    base = dict(BASE_WEIGHTS)
    if room.settings.safe_mode:
        base["forfeit"] = SAFE_MODE_FORFEIT_WEIGHT
    forfeit_penalty = _forfeit_penalty(type_counts["forfeit"])

    weighted: list[tuple[str, float]] = []
    for card_id in deck_order(room):
        card = catalog.get(card_id)
        if card is None:
            continue
        w = base.get(card.type, 1.0)
        if card.id in recent_ids:
            w *= RECENT_CARD_FACTOR
        if card.type == "forfeit":
            w *= forfeit_penalty
        if type_counts[card.type] >= 2:
            w *= CLUSTER_FACTOR
        weighted.append((card.id, max(MIN_WEIGHT, w)))
    return weighted


def pick_weighted(weighted: list[tuple[str, float]], rng: random.Random) -> str | None:
    if not weighted:
        return None
    total = sum(w for _, w in weighted)
    r = rng.random() * total
    for card_id, w in weighted:
        r -= w
        if r <= 0:
            return card_id
    # float rounding can leave a sliver
    return weighted[-1][0]


def pick_sequential(room: Room) -> str | None:
    order = deck_order(room)
    if not order:
        return None
    return order[room.draw_index % len(order)]


def draw_card(room: Room, catalog: CardCatalog, rng: random.Random) -> Card:
    if room.settings.dynamic_weighting:
        card_id = pick_weighted(card_weights(room, catalog), rng)
    else:
        card_id = pick_sequential(room)

    card = catalog.get(card_id) if card_id else None
    if card is None:
        raise GameError(errors.CARD_NOT_FOUND)
    return card


def sanitize_deck_order(order, catalog: CardCatalog) -> list[str]:
    if not isinstance(order, list):
        return []
    return [card_id for card_id in order if isinstance(card_id, str) and card_id in catalog]
