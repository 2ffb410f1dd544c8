from __future__ import annotations

import json
import uuid
from pathlib import Path
from threading import RLock

from .cards import DEFAULT_CARDS
from .models import CARD_TYPES, EFFECT_KINDS, RESOLUTION_KINDS, Card, CardResolution


def _int(raw, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def resolution_from_dict(data: dict | None) -> CardResolution:
    data = data or {}
    kind = str(data.get("kind", "none"))
    if kind not in RESOLUTION_KINDS:
        raise ValueError(f"unknown resolution kind: {kind}")
    return CardResolution(
        kind=kind,  # type: ignore[arg-type]
        min=_int(data.get("min"), 0),
        max=_int(data.get("max"), 0),
        num_min=_int(data.get("numMin"), 1),
        num_max=_int(data.get("numMax"), 10),
        max_len=_int(data.get("maxLen"), 80),
    )


def card_from_dict(data: dict) -> Card:
    card_id = str(data.get("id", "")).strip()
    if not card_id:
        raise ValueError("card id is required")

    card_type = str(data.get("type", "forfeit"))
    if card_type not in CARD_TYPES:
        raise ValueError(f"unknown card type: {card_type}")

    effect = str(data.get("effect", "default"))
    if effect not in EFFECT_KINDS:
        raise ValueError(f"unknown effect kind: {effect}")

    return Card(
        id=card_id,
        type=card_type,  # type: ignore[arg-type]
        title=str(data.get("title", "")).strip() or "Card",
        body=str(data.get("body", "")),
        resolution=resolution_from_dict(data.get("resolution")),
        effect=effect,  # type: ignore[arg-type]
    )


def card_to_dict(card: Card) -> dict:
    r = card.resolution
    resolution: dict = {"kind": r.kind}
    if r.kind in ("chooseTarget", "chooseTwoTargets", "rockPaperScissors"):
        resolution.update({"min": r.min, "max": r.max})
    if r.kind in ("chooseNumber", "chooseTargetAndNumber"):
        resolution.update({"numMin": r.num_min, "numMax": r.num_max})
    if r.kind == "createRuleText":
        resolution["maxLen"] = r.max_len
    return {
        "id": card.id,
        "type": card.type,
        "title": card.title,
        "body": card.body,
        "resolution": resolution,
        "effect": card.effect,
    }


class CardCatalog:
    """The base deck plus custom cards added through the admin veneer.

    Base cards never change after startup. Custom cards can be saved and
    deleted; a room deck that still names a deleted card fails to draw it.
    """

    def __init__(self, cards: list[Card]) -> None:
        self._lock = RLock()
        self._base: dict[str, Card] = {}
        for card in cards:
            if card.id in self._base:
                raise ValueError(f"duplicate card id: {card.id}")
            self._base[card.id] = card
        self._custom: dict[str, Card] = {}

    @classmethod
    def from_dicts(cls, items: list[dict]) -> "CardCatalog":
        return cls([card_from_dict(item) for item in items])

    @classmethod
    def load(cls, path: str = "") -> "CardCatalog":
        if not path:
            return cls.from_dicts(DEFAULT_CARDS)
        with Path(path).open(encoding="utf-8") as fh:
            items = json.load(fh)
        if not isinstance(items, list):
            raise ValueError("card catalog must be a JSON list")
        return cls.from_dicts(items)

    def get(self, card_id: str) -> Card | None:
        with self._lock:
            return self._base.get(card_id) or self._custom.get(card_id)

    def __contains__(self, card_id: str) -> bool:
        return self.get(card_id) is not None

    def base_order(self) -> list[str]:
        return list(self._base.keys())

    def base_cards(self) -> list[Card]:
        return list(self._base.values())

    def custom_cards(self) -> list[Card]:
        with self._lock:
            return list(self._custom.values())

    def get_custom(self, card_id: str) -> Card | None:
        with self._lock:
            return self._custom.get(card_id)

    def save_custom(self, data: dict) -> tuple[Card, bool]:
        """Creates or replaces a custom card. Returns (card, created)."""
        payload = dict(data or {})
        card_id = str(payload.get("id") or "").strip()
        if card_id and card_id in self._base:
            raise ValueError("base cards are read-only")
        if not card_id:
            card_id = f"custom-{uuid.uuid4().hex[:12]}"
        payload["id"] = card_id
        payload.setdefault("title", "Custom Card")
        payload.setdefault("body", "Custom card description")

        card = card_from_dict(payload)
        with self._lock:
            created = card_id not in self._custom
            self._custom[card_id] = card
        return card, created

    def delete_custom(self, card_id: str) -> bool:
        with self._lock:
            return self._custom.pop(card_id, None) is not None
