from __future__ import annotations

import math
import re
import uuid
from dataclasses import dataclass

from .. import errors
from ..errors import GameError
from .models import Card, CurrentEvent, Room, Rule


TARGETED_KINDS = frozenset({"chooseTarget", "chooseTargetAndNumber", "rockPaperScissors"})
NUMBER_KINDS = frozenset({"chooseNumber", "chooseTargetAndNumber"})

SAFE_MODE_DRINK_FACTOR = 0.5


@dataclass(frozen=True)
class Resolution:
    """Player input for resolving a drawn card."""

    target_player_id: str = ""
    target_player_id2: str = ""
    number_value: int | None = None
    rule_text: str = ""

    @classmethod
    def from_payload(cls, payload) -> "Resolution":
        if payload is None:
            return cls()
        if not isinstance(payload, dict):
            raise GameError(errors.INVALID_PAYLOAD, "resolution must be an object")

        number_raw = payload.get("numberValue")
        number_value: int | None = None
        if number_raw is not None and number_raw != "":
            try:
                number_value = int(number_raw)
            except (TypeError, ValueError):
                raise GameError(errors.INVALID_PAYLOAD, "numberValue must be a number")

        return cls(
            target_player_id=str(payload.get("targetPlayerId") or "").strip(),
            target_player_id2=str(payload.get("targetPlayerId2") or "").strip(),
            number_value=number_value,
            rule_text=str(payload.get("ruleText") or "").strip(),
        )

    @property
    def targets(self) -> list[str]:
        return [t for t in (self.target_player_id, self.target_player_id2) if t]


def _require_player(room: Room, player_id: str) -> None:
    player = room.find_player(player_id)
    if player is None or player.is_spectator:
        raise GameError(errors.INVALID_TARGET)


def validate(room: Room, card: Card, resolution: Resolution) -> Resolution:
    """Checks the input a card needs and returns it normalized.

    Nothing on the room is touched here; every rejection happens before
    resolution starts mutating state.
    """
    kind = card.resolution.kind

    if kind in TARGETED_KINDS:
        if not resolution.target_player_id:
            raise GameError(errors.MISSING_TARGET)
        _require_player(room, resolution.target_player_id)

    if kind == "chooseTwoTargets":
        t1, t2 = resolution.target_player_id, resolution.target_player_id2
        if not t1 or not t2 or t1 == t2:
            raise GameError(errors.MISSING_TARGETS)
        _require_player(room, t1)
        _require_player(room, t2)

    rule_text = resolution.rule_text
    if kind == "createRuleText":
        if not rule_text:
            raise GameError(errors.MISSING_RULE_TEXT)
        rule_text = rule_text[: card.resolution.max_len].strip()

    number_value = resolution.number_value
    if kind in NUMBER_KINDS:
        lo, hi = card.resolution.num_min, card.resolution.num_max
        number_value = lo if number_value is None else max(lo, min(hi, number_value))

    return Resolution(
        target_player_id=resolution.target_player_id,
        target_player_id2=resolution.target_player_id2 if kind == "chooseTwoTargets" else "",
        number_value=number_value,
        rule_text=rule_text,
    )


def announce(room: Room, card: Card, drawer_id: str, resolution: Resolution) -> str:
    drawer = room.player_name(drawer_id)
    kind = card.resolution.kind
    if kind == "chooseTwoTargets":
        return (
            f"{drawer} chose {room.player_name(resolution.target_player_id)} and "
            f"{room.player_name(resolution.target_player_id2)}: {card.title}"
        )
    if kind in TARGETED_KINDS:
        return f"{drawer} chose {room.player_name(resolution.target_player_id)}: {card.title}"
    return f"{drawer} resolved: {card.title}"


def _new_rule_id() -> str:
    return f"rule_{uuid.uuid4().hex[:12]}"


def apply_card(room: Room, card: Card, by_player_id: str, resolution: Resolution) -> str:
    """Applies a card to the room's standing effects and describes what happened."""
    effects = room.active_effects
    target = resolution.target_player_id

    if card.effect == "cleanseCurse":
        effects.curses_by_player_id.pop(target, None)
        return f"Curse cleared from {room.player_name(target)}."

    if card.effect == "resetRoles":
        effects.roles_by_player_id = {}
        return "All roles cleared."

    if card.effect == "transferCurse":
        source, dest = resolution.target_player_id, resolution.target_player_id2
        curse = effects.curses_by_player_id.get(source)
        if not curse:
            return f"No curse to transfer from {room.player_name(source)}."
        effects.curses_by_player_id[dest] = curse
        del effects.curses_by_player_id[source]
        return f"Curse transferred from {room.player_name(source)} to {room.player_name(dest)}."

    if card.effect == "clearRules":
        effects.rules = []
        return "All rules cleared."

    if card.type == "rule":
        if card.resolution.kind == "createRuleText":
            effects.rules.append(Rule(id=_new_rule_id(), text=resolution.rule_text, created_by=by_player_id))
            return f'New rule added: "{resolution.rule_text}"'
        effects.rules.append(Rule(id=_new_rule_id(), text=card.body, created_by=by_player_id))
        return f"Rule activated: {card.title}"

    if card.type == "role":
        effects.roles_by_player_id[target] = card.title
        return f"Role assigned to {room.player_name(target)}: {card.title}"

    if card.type == "curse":
        effects.curses_by_player_id[target] = card.title
        return f"Curse applied to {room.player_name(target)}: {card.title}"

    if card.type in ("event", "joker"):
        effects.current_event = CurrentEvent(id=card.id, title=card.title)
        return f"{card.title} is active."

    return f"Resolved: {card.title}"


def _first_number(text: str) -> int | None:
    m = re.search(r"\d+", text)
    return int(m.group(0)) if m else None


def scaled_drinks(room: Room, n: int) -> int:
    factor = SAFE_MODE_DRINK_FACTOR if room.settings.safe_mode else 1.0
    return max(1, math.ceil(n * factor))


def apply_drink_stats(room: Room, card: Card, drawer_id: str, resolution: Resolution) -> None:
    """Best-effort drink tally inferred from the card's wording."""
    text = f"{card.title} {card.body}".lower()
    kind = card.resolution.kind
    if "drink" not in text:
        return

    if kind in ("chooseTarget", "chooseTargetAndNumber"):
        if kind == "chooseTargetAndNumber":
            base = resolution.number_value or 0
        else:
            base = _first_number(text) or 1
        n = scaled_drinks(room, base)
        room.stats_for(drawer_id).given += n
        if resolution.target_player_id:
            room.stats_for(resolution.target_player_id).taken += n
        return

    if kind == "chooseTwoTargets":
        n = scaled_drinks(room, _first_number(text) or 1)
        room.stats_for(drawer_id).given += n * 2
        for target in resolution.targets:
            room.stats_for(target).taken += n
        return

    if "take" in text:
        base = _first_number(text)
        if base:
            room.stats_for(drawer_id).taken += scaled_drinks(room, base)
