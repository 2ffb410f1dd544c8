from conftest import TestConfig
from sociables.server import create_app


def _names(client):
    return [pkt["name"] for pkt in client.get_received()]


def _last(client, name):
    payloads = [pkt["args"][0] for pkt in client.get_received() if pkt["name"] == name]
    return payloads[-1] if payloads else None


def _room_with_guest(connect):
    host = connect()
    created = host.emit("room:create", {"name": "Ana"}, callback=True)
    guest = connect()
    joined = guest.emit("room:join", {"roomCode": created["roomCode"].lower(), "name": "Ben"}, callback=True)
    host.get_received()
    guest.get_received()
    return host, guest, created, joined


def test_create_and_join_broadcast_state(connect):
    host = connect()
    created = host.emit("room:create", {"name": "Ana"}, callback=True)
    assert created["ok"] is True
    assert len(created["roomCode"]) == 6
    assert "room:state" in _names(host)

    guest = connect()
    joined = guest.emit("room:join", {"roomCode": created["roomCode"], "name": "Ben"}, callback=True)
    assert joined["ok"] is True
    state = _last(host, "room:state")
    assert [p["name"] for p in state["room"]["players"]] == ["Ana", "Ben"]
    assert state["room"]["turnPlayerId"] == created["playerId"]


def test_bad_payloads_are_rejected_in_the_ack(connect):
    c = connect()
    assert c.emit("room:create", {"name": "<script>"}, callback=True) == {"ok": False, "error": "invalid_name"}
    assert c.emit("room:create", {"name": "x" * 21}, callback=True)["error"] == "invalid_name"
    assert c.emit("room:join", {"roomCode": "nope", "name": "Ben"}, callback=True)["error"] == "invalid_room_code"
    assert c.emit("room:join", {"roomCode": "ABC123", "name": "Ben"}, callback=True)["error"] == "room_not_found"
    assert c.emit("turn:draw", "garbage", callback=True)["error"] == "invalid_payload"
    assert c.emit("turn:draw", {"roomCode": "ABC123", "playerId": "!"}, callback=True)["error"] == "invalid_player_id"


def test_draw_and_resolve_round_trip(connect):
    host, guest, created, joined = _room_with_guest(connect)
    code, ana = created["roomCode"], created["playerId"]

    out_of_turn = guest.emit("turn:draw", {"roomCode": code, "playerId": joined["playerId"]}, callback=True)
    assert out_of_turn == {"ok": False, "error": "not_your_turn"}

    drew = host.emit("turn:draw", {"roomCode": code, "playerId": ana}, callback=True)
    assert drew["ok"] is True
    drawn = _last(guest, "card:drawn")
    assert drawn["card"]["id"] == drew["cardId"]
    assert drawn["drawnByPlayerId"] == ana


def test_a_connection_cannot_act_for_someone_else(connect):
    host, guest, created, _ = _room_with_guest(connect)
    ack = guest.emit("turn:draw", {"roomCode": created["roomCode"], "playerId": created["playerId"]}, callback=True)
    assert ack == {"ok": False, "error": "player_not_found"}


def test_sync_sends_the_snapshot_to_the_caller(connect):
    host, _, created, _ = _room_with_guest(connect)
    watcher = connect()
    ack = watcher.emit("room:sync", {"roomCode": created["roomCode"]}, callback=True)
    assert ack["ok"] is True
    assert ack["room"]["roomCode"] == created["roomCode"]
    assert "room:state" in _names(watcher)


def test_nudge_is_broadcast(connect):
    host, guest, created, joined = _room_with_guest(connect)
    ack = guest.emit(
        "turn:nudge",
        {"roomCode": created["roomCode"], "fromPlayerId": joined["playerId"], "toPlayerId": created["playerId"]},
        callback=True,
    )
    assert ack == {"ok": True}
    nudged = _last(host, "player:nudged")
    assert nudged == {"roomCode": created["roomCode"], "toPlayerId": created["playerId"], "fromName": "Ben"}


def test_host_kick_notifies_the_target(connect):
    host, guest, created, joined = _room_with_guest(connect)
    ack = host.emit("host:kick", {"roomCode": created["roomCode"], "targetPlayerId": joined["playerId"]}, callback=True)
    assert ack == {"ok": True}
    assert _last(guest, "kicked") == {"message": "You were kicked by the host"}
    state = _last(host, "room:state")
    assert [p["name"] for p in state["room"]["players"]] == ["Ana"]


def test_guest_cannot_close_the_room(connect):
    host, guest, created, _ = _room_with_guest(connect)
    ack = guest.emit("host:close-room", {"roomCode": created["roomCode"]}, callback=True)
    assert ack == {"ok": False, "error": "not_host"}


def test_host_close_notifies_everyone(connect, flask_app):
    host, guest, created, _ = _room_with_guest(connect)
    ack = host.emit("host:close-room", {"roomCode": created["roomCode"]}, callback=True)
    assert ack == {"ok": True}
    assert _last(guest, "room:closed") == {"message": "Room closed by host"}
    registry = flask_app.extensions["sociables"]["service"].registry
    assert registry.get(created["roomCode"]) is None


def test_host_disconnect_closes_the_room(connect):
    host, guest, created, _ = _room_with_guest(connect)
    host.disconnect()
    assert _last(guest, "room:closed") == {"message": "Host disconnected"}


def test_reconnect_rebinds_a_player(connect):
    host, guest, created, joined = _room_with_guest(connect)
    guest.disconnect()
    state = _last(host, "room:state")
    ben = next(p for p in state["room"]["players"] if p["name"] == "Ben")
    assert ben["connected"] is False

    again = connect()
    ack = again.emit(
        "player:reconnect",
        {"roomCode": created["roomCode"], "playerId": joined["playerId"]},
        callback=True,
    )
    assert ack == {"ok": True, "roomCode": created["roomCode"], "playerId": joined["playerId"]}
    state = _last(again, "room:state")
    ben = next(p for p in state["room"]["players"] if p["name"] == "Ben")
    assert ben["connected"] is True


class CooldownConfig(TestConfig):
    ACTION_COOLDOWN_MS = 60_000


def test_repeated_action_hits_the_cooldown():
    app, sio = create_app(CooldownConfig)
    c = sio.test_client(app, flask_test_client=app.test_client())
    try:
        first = c.emit("room:create", {"name": "Ana"}, callback=True)
        second = c.emit("room:create", {"name": "Ana"}, callback=True)
    finally:
        c.disconnect()
    assert first["ok"] is True
    assert second["error"] == "too_many_requests"
