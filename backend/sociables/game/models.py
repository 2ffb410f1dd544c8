from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union, get_args


CardType = Literal[
    "forfeit",
    "rule",
    "role",
    "curse",
    "event",
    "joker",
    "setup",
    "endgame",
    "duel",
    "vote",
]

ResolutionKind = Literal[
    "none",
    "chooseTarget",
    "chooseTwoTargets",
    "chooseNumber",
    "chooseTargetAndNumber",
    "createRuleText",
    "rockPaperScissors",
    "wouldYouRather",
]

EffectKind = Literal[
    "default",
    "cleanseCurse",
    "resetRoles",
    "transferCurse",
    "clearRules",
]

PlayerMode = Literal["player", "spectator"]
AckStatus = Literal["pending", "confirmed"]
LogType = Literal["system", "draw", "resolve", "ack", "nudge", "setting", "deck"]

RESOLUTION_KINDS: frozenset[str] = frozenset(get_args(ResolutionKind))
CARD_TYPES: frozenset[str] = frozenset(get_args(CardType))
EFFECT_KINDS: frozenset[str] = frozenset(get_args(EffectKind))


@dataclass(frozen=True)
class CardResolution:
    kind: ResolutionKind = "none"
    min: int = 0
    max: int = 0
    num_min: int = 1
    num_max: int = 10
    max_len: int = 80


@dataclass(frozen=True)
class Card:
    id: str
    type: CardType
    title: str
    body: str
    resolution: CardResolution = field(default_factory=CardResolution)
    effect: EffectKind = "default"


@dataclass
class Player:
    id: str
    name: str
    seat_index: int
    connected: bool = True
    mode: PlayerMode = "player"
    sid: str | None = None

    @property
    def is_spectator(self) -> bool:
        return self.mode == "spectator"


@dataclass
class CurrentDraw:
    card_id: str
    drawn_by: str


@dataclass
class Rule:
    id: str
    text: str
    created_by: str


@dataclass
class CurrentEvent:
    id: str
    title: str


@dataclass
class ActiveEffects:
    rules: list[Rule] = field(default_factory=list)
    roles_by_player_id: dict[str, str] = field(default_factory=dict)
    curses_by_player_id: dict[str, str] = field(default_factory=dict)
    current_event: CurrentEvent | None = None


@dataclass
class TurnTimer:
    enabled: bool
    seconds_total: int
    ends_at_ms: int
    reason: str | None = None


@dataclass
class AckMeta:
    kind: str
    number_value: int | None = None
    rule_text: str | None = None
    targets: list[str] = field(default_factory=list)


@dataclass
class PendingAck:
    ack_id: str
    created_at_ms: int
    card_id: str
    card_title: str
    instruction: str
    created_by: str
    assigned_to: str
    status: AckStatus = "pending"
    confirmed_at_ms: int | None = None
    meta: AckMeta | None = None


@dataclass
class Duel:
    card_id: str
    started_by: str
    opponent: str
    created_at_ms: int
    expires_at_ms: int
    choices: dict[str, str] = field(default_factory=dict)
    kind: Literal["rps"] = "rps"

    @property
    def participants(self) -> tuple[str, str]:
        return self.started_by, self.opponent


@dataclass
class GroupVote:
    card_id: str
    started_by: str
    created_at_ms: int
    expires_at_ms: int
    option_a: str = "Option A"
    option_b: str = "Option B"
    votes: dict[str, str] = field(default_factory=dict)
    kind: Literal["wyr"] = "wyr"


Interaction = Union[Duel, GroupVote]


@dataclass
class DrinkStats:
    given: int = 0
    taken: int = 0


@dataclass
class LogItem:
    ts: int
    type: LogType
    text: str
    actor_id: str | None = None
    card_id: str | None = None


@dataclass
class RoomSettings:
    safe_mode: bool = False
    dynamic_weighting: bool = True
    theme: str = "obsidian"
    sfx: bool = True
    haptics: bool = True
    custom_deck_order: list[str] = field(default_factory=list)


@dataclass
class Room:
    code: str
    deck_order: list[str]
    created_at_ms: int
    last_activity_ms: int
    draw_index: int = 0
    discard: list[str] = field(default_factory=list)
    players: list[Player] = field(default_factory=list)
    spectators: list[Player] = field(default_factory=list)
    turn_index: int = 0
    current_draw: CurrentDraw | None = None
    active_effects: ActiveEffects = field(default_factory=ActiveEffects)
    turn_timer: TurnTimer | None = None
    interaction: Interaction | None = None
    pending_acks: list[PendingAck] = field(default_factory=list)
    # ack id -> assignee, for idempotent repeat confirmations
    confirmed_acks: dict[str, str] = field(default_factory=dict)
    drink_stats: dict[str, DrinkStats] = field(default_factory=dict)
    settings: RoomSettings = field(default_factory=RoomSettings)
    log: list[LogItem] = field(default_factory=list)
    nudged_turn_key: str | None = None

    def find_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def find_member(self, player_id: str) -> Player | None:
        """Looks up a player or a spectator."""
        found = self.find_player(player_id)
        if found is not None:
            return found
        for s in self.spectators:
            if s.id == player_id:
                return s
        return None

    def player_name(self, player_id: str | None) -> str:
        member = self.find_member(player_id) if player_id else None
        return member.name if member else "Player"

    def stats_for(self, player_id: str) -> DrinkStats:
        stats = self.drink_stats.get(player_id)
        if stats is None:
            stats = DrinkStats()
            self.drink_stats[player_id] = stats
        return stats
