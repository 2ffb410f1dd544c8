from __future__ import annotations

import re

from .. import errors
from ..errors import GameError
from .history import push_log
from .models import Card, Duel, GroupVote, Room
from .turns import active_players


DUEL_DURATION_MS = 60_000
VOTE_DURATION_MS = 75_000

RPS_CHOICES = ("rock", "paper", "scissors")
BEATS = {"rock": "scissors", "paper": "rock", "scissors": "paper"}
RPS_EMOJI = {"rock": "🪨", "paper": "📄", "scissors": "✂️"}

VOTE_OPTIONS = ("A", "B")
PENALTY_DRINKS = 1


def start_duel(room: Room, card: Card, challenger_id: str, opponent_id: str, now_ms: int) -> str:
    if opponent_id == challenger_id or opponent_id not in {p.id for p in active_players(room)}:
        raise GameError(errors.INVALID_TARGET)

    room.current_draw = None
    room.turn_timer = None
    room.interaction = Duel(
        card_id=card.id,
        started_by=challenger_id,
        opponent=opponent_id,
        created_at_ms=now_ms,
        expires_at_ms=now_ms + DUEL_DURATION_MS,
    )
    return (
        f"{room.player_name(challenger_id)} challenged {room.player_name(opponent_id)} "
        f"to Rock Paper Scissors. Both players choose 🪨/📄/✂️ now."
    )


def parse_vote_options(body: str) -> tuple[str, str]:
    lines = [line.strip() for line in (body or "").splitlines() if line.strip()]
    a_line = next((line for line in lines if re.match(r"^a\)", line, re.I)), None)
    b_line = next((line for line in lines if re.match(r"^b\)", line, re.I)), None)
    if a_line is None:
        a_line = lines[0] if lines else "Option A"
    if b_line is None:
        b_line = lines[1] if len(lines) > 1 else "Option B"
    return re.sub(r"^a\)\s*", "", a_line, flags=re.I), re.sub(r"^b\)\s*", "", b_line, flags=re.I)


def start_vote(room: Room, card: Card, starter_id: str, now_ms: int) -> str:
    option_a, option_b = parse_vote_options(card.body)
    room.current_draw = None
    room.turn_timer = None
    room.interaction = GroupVote(
        card_id=card.id,
        started_by=starter_id,
        created_at_ms=now_ms,
        expires_at_ms=now_ms + VOTE_DURATION_MS,
        option_a=option_a,
        option_b=option_b,
    )
    return (
        f"{room.player_name(starter_id)} started a Would You Rather vote. "
        f"Everyone vote now. Minority drinks 1 (tie = everyone drinks 1)."
    )


def _penalize(room: Room, player_ids) -> None:
    for pid in player_ids:
        room.stats_for(pid).taken += PENALTY_DRINKS


def _finish(room: Room, message: str, card_id: str, now_ms: int) -> str:
    push_log(room, "system", message, now_ms, card_id=card_id)
    room.interaction = None
    return message


def duel_loser(choice_a: str, choice_b: str) -> str | None:
    """Returns "a", "b", or None on a tie."""
    if choice_a == choice_b:
        return None
    return "b" if BEATS[choice_a] == choice_b else "a"


def _resolve_duel(room: Room, duel: Duel, now_ms: int) -> str:
    a, b = duel.participants
    ca, cb = duel.choices[a], duel.choices[b]
    message = (
        f"{room.player_name(a)} played {RPS_EMOJI[ca]}. "
        f"{room.player_name(b)} played {RPS_EMOJI[cb]}."
    )
    loser = duel_loser(ca, cb)
    if loser is None:
        _penalize(room, (a, b))
        message += " It's a tie, both drink 1."
    else:
        loser_id = a if loser == "a" else b
        _penalize(room, (loser_id,))
        message += f" {room.player_name(loser_id)} loses and drinks 1."
    return _finish(room, message, duel.card_id, now_ms)


def choose(room: Room, player_id: str, choice: str, now_ms: int) -> str | None:
    """Records a duel choice. Returns the outcome once both have chosen."""
    duel = room.interaction
    if not isinstance(duel, Duel):
        raise GameError(errors.NO_INTERACTION)
    if player_id not in duel.participants:
        raise GameError(errors.NOT_PARTICIPANT)
    if choice not in RPS_CHOICES:
        raise GameError(errors.INVALID_CHOICE)

    duel.choices[player_id] = choice
    if all(pid in duel.choices for pid in duel.participants):
        return _resolve_duel(room, duel, now_ms)
    return None


def _expire_duel(room: Room, duel: Duel, now_ms: int) -> str:
    a, b = duel.participants
    if a in duel.choices and b in duel.choices:
        return _resolve_duel(room, duel, now_ms)

    message = "Rock Paper Scissors timed out. "
    if a in duel.choices:
        _penalize(room, (b,))
        message += f"{room.player_name(b)} didn't choose, drinks 1."
    elif b in duel.choices:
        _penalize(room, (a,))
        message += f"{room.player_name(a)} didn't choose, drinks 1."
    else:
        _penalize(room, (a, b))
        message += "No choices, both drink 1."
    return _finish(room, message, duel.card_id, now_ms)


def finalize_vote(room: Room, vote: GroupVote, now_ms: int) -> str:
    voters = [p.id for p in active_players(room)]
    votes_a = [pid for pid in voters if vote.votes.get(pid) == "A"]
    votes_b = [pid for pid in voters if vote.votes.get(pid) == "B"]

    message = f"Would You Rather results: A ({len(votes_a)}) vs B ({len(votes_b)}). "
    if len(votes_a) == len(votes_b):
        _penalize(room, voters)
        message += "Tie, everyone drinks 1."
    else:
        side, minority = ("A", votes_a) if len(votes_a) < len(votes_b) else ("B", votes_b)
        _penalize(room, minority)
        names = ", ".join(room.player_name(pid) for pid in minority)
        message += f"Minority ({side}) drinks 1: {names}."
    return _finish(room, message, vote.card_id, now_ms)


def vote_complete(room: Room, vote: GroupVote) -> bool:
    return all(p.id in vote.votes for p in active_players(room))


def cast_vote(room: Room, player_id: str, vote_value: str, now_ms: int) -> str | None:
    """Records a vote. Returns the outcome once every active player voted."""
    vote = room.interaction
    if not isinstance(vote, GroupVote):
        raise GameError(errors.NO_INTERACTION)
    voters = [p.id for p in active_players(room)]
    if player_id not in voters:
        raise GameError(errors.SPECTATORS_CANNOT_VOTE)
    value = str(vote_value or "").strip().upper()
    if value not in VOTE_OPTIONS:
        raise GameError(errors.INVALID_VOTE)

    vote.votes[player_id] = value
    if vote_complete(room, vote):
        return finalize_vote(room, vote, now_ms)
    return None


def expire_if_due(room: Room, now_ms: int) -> str | None:
    """Resolves an interaction whose deadline passed. Returns the outcome."""
    inter = room.interaction
    if inter is None or inter.expires_at_ms > now_ms:
        return None
    if isinstance(inter, Duel):
        return _expire_duel(room, inter, now_ms)
    return finalize_vote(room, inter, now_ms)
