# dicepot/domain/types.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Protocol


class RoomPhase(Enum):
    LOBBY = auto()
    IN_PROGRESS = auto()


class CommandType(Enum):
    START_GAME = auto()
    ROLL_DICE = auto()
    BANK_NOW = auto()
    RESTART_GAME = auto()
    JOIN = auto()
    DISCONNECT = auto()


@dataclass(frozen=True)
class Command:
    type: CommandType
    actor_id: str
    name: Optional[str] = None  # JOIN only


class Target(Enum):
    """Who receives an outbound event."""

    ROOM = "room"
    SENDER = "sender"


class RandomSource(Protocol):
    """The subset of random.Random the game needs."""

    def randint(self, a: int, b: int) -> int: ...
    def choice(self, seq): ...
