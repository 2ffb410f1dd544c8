import importlib

import pytest

from conftest import seat_players


ADMIN = {"X-Admin-Key": "test-admin"}


@pytest.fixture()
def service(flask_app):
    return flask_app.extensions["sociables"]["service"]


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json() == {"ok": True, "rooms": 0, "connections": 0}


def test_room_snapshot(client, service):
    code, ids = seat_players(service, ["Ana", "Ben"])
    res = client.get(f"/api/rooms/{code.lower()}")
    assert res.status_code == 200
    body = res.get_json()
    assert body["roomCode"] == code
    assert body["turnPlayerId"] == ids[0]
    assert "sid" not in body["players"][0]

    assert client.get("/api/rooms/ZZZZZZ").status_code == 404


def test_card_catalog(client):
    cards = client.get("/api/cards").get_json()["cards"]
    ids = {c["id"] for c in cards}
    assert {"f1", "r1", "i1", "i2"} <= ids
    duel = next(c for c in cards if c["id"] == "i1")
    assert duel["resolution"]["kind"] == "rockPaperScissors"


def test_admin_requires_key(client):
    assert client.get("/api/admin/rooms").status_code == 401
    assert client.get("/api/admin/rooms", headers={"X-Admin-Key": "wrong"}).status_code == 401


def test_admin_disabled_without_key(flask_app, client):
    flask_app.config["ADMIN_KEY"] = ""
    assert client.get("/api/admin/rooms", headers={"X-Admin-Key": ""}).status_code == 401


def test_admin_lists_and_closes_rooms(client, service):
    code, _ = seat_players(service, ["Ana", "Ben"])
    rooms = client.get("/api/admin/rooms", headers=ADMIN).get_json()["rooms"]
    assert rooms[0]["roomCode"] == code
    assert rooms[0]["hostName"] == "Ana"
    assert rooms[0]["playerCount"] == 2

    assert client.post(f"/api/admin/rooms/{code}/close", headers=ADMIN).status_code == 200
    assert service.registry.get(code) is None
    assert client.post(f"/api/admin/rooms/{code}/close", headers=ADMIN).status_code == 404


def test_admin_kick(client, service):
    code, ids = seat_players(service, ["Ana", "Ben"])
    res = client.post(f"/api/admin/rooms/{code}/kick", json={"playerId": ids[1]}, headers=ADMIN)
    assert res.status_code == 200
    assert [p.id for p in service.registry.get(code).players] == [ids[0]]

    res = client.post(f"/api/admin/rooms/{code}/kick", json={"playerId": ids[1]}, headers=ADMIN)
    assert res.status_code == 404
    assert client.post(f"/api/admin/rooms/{code}/kick", json={}, headers=ADMIN).status_code == 400


def test_admin_custom_cards(client, service):
    res = client.post(
        "/api/admin/cards",
        json={"type": "forfeit", "title": "Shot", "body": "Take 2 drinks.", "resolution": {"kind": "none"}},
        headers=ADMIN,
    )
    assert res.status_code == 201
    card_id = res.get_json()["card"]["id"]
    assert card_id.startswith("custom-")

    res = client.post("/api/admin/cards", json={"id": card_id, "title": "Double Shot"}, headers=ADMIN)
    assert res.status_code == 200
    listed = client.get("/api/admin/cards", headers=ADMIN).get_json()["cards"]
    assert [c["title"] for c in listed] == ["Double Shot"]

    assert client.post("/api/admin/cards", json={"id": "f1"}, headers=ADMIN).status_code == 400
    assert client.post("/api/admin/cards", json={"type": "nonsense"}, headers=ADMIN).status_code == 400

    code, _ = seat_players(service, ["Ana"])
    res = client.post(f"/api/admin/rooms/{code}/cards", json={"cardIds": [card_id]}, headers=ADMIN)
    assert res.get_json() == {"ok": True, "added": 1}

    assert client.delete(f"/api/admin/cards/{card_id}", headers=ADMIN).status_code == 200
    assert client.delete(f"/api/admin/cards/{card_id}", headers=ADMIN).status_code == 404


def test_dev_server_settings_come_from_env(monkeypatch):
    from sociables import config

    monkeypatch.setenv("HOST", "127.0.0.1")
    monkeypatch.setenv("PORT", "6123")
    monkeypatch.setenv("FLASK_DEBUG", "1")
    try:
        cfg = importlib.reload(config).Config
        assert (cfg.HOST, cfg.PORT, cfg.FLASK_DEBUG) == ("127.0.0.1", 6123, True)
    finally:
        monkeypatch.undo()
        importlib.reload(config)
