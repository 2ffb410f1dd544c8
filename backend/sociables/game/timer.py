from __future__ import annotations

from .models import Card, Room, TurnTimer


NUDGE_THRESHOLD_MS = 15_000
MIN_SECONDS = 20
MAX_SECONDS = 90

LONG_ROUND_HINTS = (
    "go around",
    "truth circle",
    "confessional",
    "vote",
    "category",
    "speed round",
    "draw nonstop",
    "for one round",
)

_KIND_EXTRA_SECONDS = {
    "chooseTarget": 10,
    "rockPaperScissors": 10,
    "chooseNumber": 10,
    "chooseTargetAndNumber": 20,
    "chooseTwoTargets": 25,
}


def compute_timer(card: Card) -> tuple[int, str | None]:
    """Returns (seconds, disabled_reason). Zero seconds means no timer."""
    if card.resolution.kind == "createRuleText":
        return 0, "Custom rule entry"

    text = f"{card.title} {card.body}".lower()
    if any(hint in text for hint in LONG_ROUND_HINTS):
        return 0, "Long round / discussion card"

    seconds = 30
    if card.type in ("rule", "role", "curse", "joker"):
        seconds = 45
    if card.type == "event":
        seconds = 60
    seconds += _KIND_EXTRA_SECONDS.get(card.resolution.kind, 0)
    return max(MIN_SECONDS, min(MAX_SECONDS, seconds)), None


def start_timer(card: Card, now_ms: int) -> TurnTimer:
    seconds, reason = compute_timer(card)
    if not seconds:
        return TurnTimer(enabled=False, seconds_total=0, ends_at_ms=0, reason=reason)
    return TurnTimer(enabled=True, seconds_total=seconds, ends_at_ms=now_ms + seconds * 1000)


def nudge_key(room: Room) -> str | None:
    if room.current_draw is None:
        return None
    return f"{room.current_draw.card_id}:{room.current_draw.drawn_by}:{room.turn_index}"
