import pytest

from sociables.errors import GameError
from sociables.game.models import Player, Room
from sociables.game.turns import advance, assert_turn_holder, current_turn_player, is_host, realign


def _room(*seats):
    players = [Player(id=f"p{s}", name=f"P{s}", seat_index=s) for s in seats]
    return Room(code="ABC123", deck_order=[], created_at_ms=0, last_activity_ms=0, players=players)


def test_advance_walks_dense_seats_and_wraps():
    room = _room(0, 1, 2)
    assert [advance(room) for _ in range(4)] == ["p1", "p2", "p0", "p1"]


def test_advance_skips_empty_seats():
    room = _room(0, 2, 5)
    room.turn_index = 2
    assert advance(room) == "p5"
    assert advance(room) == "p0"


def test_advance_ignores_spectators():
    room = _room(0, 1)
    room.spectators.append(Player(id="s1", name="Watcher", seat_index=-1, mode="spectator"))
    assert advance(room) == "p1"
    assert advance(room) == "p0"


def test_no_players_means_no_turn_holder():
    room = _room()
    assert advance(room) == ""
    assert room.turn_index == 0
    with pytest.raises(GameError) as exc:
        assert_turn_holder(room, "p0")
    assert exc.value.code == "no_turn_player"


def test_only_the_turn_holder_passes():
    room = _room(0, 1)
    assert assert_turn_holder(room, "p0").id == "p0"
    with pytest.raises(GameError) as exc:
        assert_turn_holder(room, "p1")
    assert exc.value.code == "not_your_turn"


def test_realign_moves_off_a_vacated_seat():
    room = _room(0, 1, 2)
    room.turn_index = 1
    room.players = [p for p in room.players if p.id != "p1"]
    assert realign(room) == "p2"
    assert current_turn_player(room).id == "p2"


def test_host_is_seat_zero():
    room = _room(0, 1)
    assert is_host(room, "p0")
    assert not is_host(room, "p1")
