from collections import deque

import pytest

from dicepot import create_app
from dicepot.config import TestConfig
from dicepot.core.loader import GameRules
from dicepot.domain.engine import GameEngine
from dicepot.domain.models.models import Player, Room


class ScriptedRandom:
    """Random source that replays fixed die faces and code characters."""

    def __init__(self, faces=(), letters=""):
        self.faces = deque(faces)
        self.letters = deque(letters)

    def randint(self, a, b):
        face = self.faces.popleft()
        assert a <= face <= b
        return face

    def choice(self, seq):
        ch = self.letters.popleft()
        assert ch in seq
        return ch


def make_room(*names, started=True, code="ABCD") -> Room:
    room = Room(code=code, players=[Player(id=n.lower(), name=n) for n in names])
    room.started = started
    return room


def make_engine(room: Room, *faces) -> GameEngine:
    return GameEngine(room, GameRules(), ScriptedRandom(faces))


@pytest.fixture
def app():
    return create_app(TestConfig)


@pytest.fixture
def service(app):
    return app.extensions["dicepot"]
