import random

import pytest

from sociables.game.catalog import CardCatalog
from sociables.game.registry import RoomRegistry
from sociables.game.service import GameService
from sociables.server import create_app


START_MS = 1_700_000_000_000


class TestConfig:
    TESTING = True
    SECRET_KEY = "test-secret"
    CORS_ORIGINS = "*"
    ADMIN_KEY = "test-admin"
    TRUST_PROXY_HEADERS = False
    LOG_LEVEL = "WARNING"
    SOCKETIO_ASYNC_MODE = "threading"
    SWEEP_ENABLED = False
    SWEEP_INTERVAL_SEC = 0.5
    ROOM_INACTIVE_TIMEOUT_SEC = 300
    ACTION_COOLDOWN_MS = 0
    MAX_NAME_LENGTH = 20
    CARD_CATALOG_PATH = ""


class FakeClock:
    def __init__(self, start: int = START_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def catalog():
    return CardCatalog.load()


@pytest.fixture()
def service(clock, catalog):
    return GameService(RoomRegistry(), catalog, clock=clock, rng=random.Random(7))


def seat_players(service, names):
    """Creates a room hosted by names[0] and seats the rest. Returns (code, ids)."""
    outcome = service.create_room(names[0])
    code = outcome.result["roomCode"]
    ids = [outcome.result["playerId"]]
    for name in names[1:]:
        ids.append(service.join_room(code, name).result["playerId"])
    return code, ids


def rig_deck(service, code, card_ids):
    """Makes draws follow ``card_ids`` in order."""
    room = service.registry.get(code)
    room.settings.custom_deck_order = list(card_ids)
    room.settings.dynamic_weighting = False
    room.draw_index = 0
    return room


@pytest.fixture()
def flask_app():
    application, _ = create_app(TestConfig)
    return application


@pytest.fixture()
def sio(flask_app):
    return flask_app.extensions["sociables"]["socketio"]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app, sio):
    clients = []

    def _connect():
        c = sio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(c)
        return c

    yield _connect
    for c in clients:
        if c.is_connected():
            c.disconnect()
