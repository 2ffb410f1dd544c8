import pytest

from conftest import rig_deck, seat_players
from sociables.errors import GameError
from sociables.game.interactions import DUEL_DURATION_MS, VOTE_DURATION_MS, duel_loser, parse_vote_options


def _start_duel(service, names=("Ana", "Ben", "Cat")):
    code, ids = seat_players(service, list(names))
    room = rig_deck(service, code, ["i1"])
    service.draw(code, ids[0])
    outcome = service.resolve(code, ids[0], "i1", {"targetPlayerId": ids[1]})
    return code, ids, room, outcome


def _start_vote(service, names):
    code, ids = seat_players(service, list(names))
    room = rig_deck(service, code, ["i2"])
    service.draw(code, ids[0])
    service.resolve(code, ids[0], "i2")
    return code, ids, room


def test_duel_loser_table():
    assert duel_loser("rock", "scissors") == "b"
    assert duel_loser("scissors", "rock") == "a"
    assert duel_loser("paper", "rock") == "b"
    assert duel_loser("paper", "paper") is None


def test_vote_options_come_from_the_body():
    assert parse_vote_options("A) Tea\nB) Coffee") == ("Tea", "Coffee")
    assert parse_vote_options("") == ("Option A", "Option B")


def test_launching_a_duel_holds_the_turn(service):
    code, ids, room, outcome = _start_duel(service)
    assert outcome.names() == ["effect:applied", "room:state"]
    assert room.current_draw is None
    assert room.interaction.opponent == ids[1]
    assert room.turn_index == 0
    with pytest.raises(GameError) as exc:
        service.draw(code, ids[0])
    assert exc.value.code == "interaction_active"


def test_cannot_duel_yourself(service):
    code, ids = seat_players(service, ["Ana", "Ben"])
    room = rig_deck(service, code, ["i1"])
    service.draw(code, ids[0])
    with pytest.raises(GameError) as exc:
        service.resolve(code, ids[0], "i1", {"targetPlayerId": ids[0]})
    assert exc.value.code == "invalid_target"
    assert room.current_draw is not None
    assert room.interaction is None


def test_rock_beats_scissors(service):
    code, ids, room, _ = _start_duel(service)
    assert service.duel_choose(code, ids[0], "rock").names() == ["room:state"]
    outcome = service.duel_choose(code, ids[1], "scissors")
    assert outcome.names() == ["effect:applied", "turn:changed", "room:state"]
    assert room.drink_stats[ids[1]].taken == 1
    assert room.drink_stats[ids[0]].taken == 0
    assert room.interaction is None
    assert room.turn_index == 1


def test_duel_tie_both_drink(service):
    code, ids, room, _ = _start_duel(service)
    service.duel_choose(code, ids[0], "rock")
    service.duel_choose(code, ids[1], "rock")
    assert room.drink_stats[ids[0]].taken == 1
    assert room.drink_stats[ids[1]].taken == 1


def test_duel_rejects_outsiders_and_bad_choices(service):
    code, ids, room, _ = _start_duel(service)
    for pid, choice, err in [
        (ids[2], "rock", "not_participant"),
        (ids[0], "lizard", "invalid_choice"),
    ]:
        with pytest.raises(GameError) as exc:
            service.duel_choose(code, pid, choice)
        assert exc.value.code == err
    assert room.interaction.choices == {}


def test_choice_without_duel(service):
    code, ids = seat_players(service, ["Ana", "Ben"])
    with pytest.raises(GameError) as exc:
        service.duel_choose(code, ids[0], "rock")
    assert exc.value.code == "no_interaction"


def test_expired_duel_penalizes_whoever_did_not_choose(service, clock):
    code, ids, room, _ = _start_duel(service)
    service.duel_choose(code, ids[0], "paper")
    events = service.tick(clock.now + DUEL_DURATION_MS)
    assert [e.name for e in events] == ["effect:applied", "turn:changed", "room:state"]
    assert room.drink_stats[ids[1]].taken == 1
    assert room.drink_stats[ids[0]].taken == 0
    assert service.tick(clock.now + DUEL_DURATION_MS + 1000) == []


def test_vote_minority_drinks(service):
    code, ids, room = _start_vote(service, ["Ana", "Ben", "Cat", "Dan", "Eve"])
    for pid in ids[:3]:
        service.vote_cast(code, pid, "a")
    service.vote_cast(code, ids[3], "B")
    outcome = service.vote_cast(code, ids[4], "B")
    assert outcome.result == {"resolved": True}
    assert [room.drink_stats[pid].taken for pid in ids] == [0, 0, 0, 1, 1]
    assert room.interaction is None
    assert room.turn_index == 1


def test_vote_tie_everyone_drinks(service):
    code, ids, room = _start_vote(service, ["Ana", "Ben", "Cat", "Dan"])
    for pid, choice in zip(ids, "AABB"):
        service.vote_cast(code, pid, choice)
    assert [room.drink_stats[pid].taken for pid in ids] == [1, 1, 1, 1]


def test_spectators_cannot_vote(service):
    code, ids, room = _start_vote(service, ["Ana", "Ben"])
    watcher = service.join_room(code, "Watcher", spectator=True).result["playerId"]
    with pytest.raises(GameError) as exc:
        service.vote_cast(code, watcher, "A")
    assert exc.value.code == "spectators_cannot_vote"
    with pytest.raises(GameError) as exc:
        service.vote_cast(code, ids[0], "C")
    assert exc.value.code == "invalid_vote"


def test_vote_finalizes_on_expiry(service, clock):
    code, ids, room = _start_vote(service, ["Ana", "Ben", "Cat"])
    service.vote_cast(code, ids[0], "A")
    events = service.tick(clock.now + VOTE_DURATION_MS)
    assert "turn:changed" in [e.name for e in events]
    # 1 A vs 0 B: the empty side is the minority, nobody is on it
    assert [room.drink_stats[pid].taken for pid in ids] == [0, 0, 0]
    assert room.interaction is None


def test_expired_duel_without_choices_penalizes_both(service, clock):
    code, ids, room, _ = _start_duel(service)
    events = service.tick(clock.now + DUEL_DURATION_MS)
    assert [e.name for e in events] == ["effect:applied", "turn:changed", "room:state"]
    assert room.drink_stats[ids[0]].taken == 1
    assert room.drink_stats[ids[1]].taken == 1
    assert room.drink_stats[ids[2]].taken == 0
    assert room.turn_index == 1

    assert service.tick(clock.now + DUEL_DURATION_MS + 500) == []
    assert room.turn_index == 1


def test_kicking_the_last_holdout_settles_the_vote(service):
    code, ids, room = _start_vote(service, ["Ana", "Ben", "Cat"])
    service.vote_cast(code, ids[0], "A")
    service.vote_cast(code, ids[1], "A")

    outcome = service.admin_kick(code, ids[2])
    assert outcome.names() == ["effect:applied", "turn:changed", "room:state"]
    assert room.interaction is None
    assert room.turn_index == 1


def test_kicked_voter_is_not_counted(service):
    code, ids, room = _start_vote(service, ["Ana", "Ben", "Cat", "Dan"])
    service.vote_cast(code, ids[0], "A")
    service.vote_cast(code, ids[3], "B")

    outcome = service.admin_kick(code, ids[3])
    assert outcome.names() == ["room:state"]
    assert ids[3] not in room.interaction.votes

    service.vote_cast(code, ids[1], "A")
    service.vote_cast(code, ids[2], "B")
    assert room.interaction is None
    assert [room.drink_stats[pid].taken for pid in ids[:3]] == [0, 0, 1]


def test_kicking_the_duel_opponent_passes_the_turn(service):
    code, ids, room, _ = _start_duel(service)
    outcome = service.admin_kick(code, ids[1])
    assert outcome.names() == ["effect:applied", "turn:changed", "room:state"]
    assert room.interaction is None
    assert room.turn_index == 2
    assert room.drink_stats[ids[0]].taken == 0


def test_kicking_the_challenger_moves_the_turn_once(service):
    code, ids, room, _ = _start_duel(service)
    outcome = service.admin_kick(code, ids[0])
    assert outcome.names() == ["room:state"]
    assert room.interaction is None
    assert room.turn_index == 1
