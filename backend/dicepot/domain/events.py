# dicepot/domain/events.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict

from .types import Target

ROOM_JOINED = "roomJoined"
GAME_STATE = "gameState"
DICE_ROLLED = "diceRolled"
LUCKY_7 = "lucky7"
BUST = "bust"
DOUBLES = "doubles"
ERROR = "error"


@dataclass(frozen=True)
class GameEvent:
    """One outbound message produced by a command."""

    name: str
    data: Dict[str, Any] = field(default_factory=dict)
    target: Target = Target.ROOM


def game_state(room) -> GameEvent:
    return GameEvent(GAME_STATE, room.to_dict())


def room_joined(room) -> GameEvent:
    return GameEvent(
        ROOM_JOINED,
        {"roomCode": room.code, "state": room.to_dict()},
        target=Target.SENDER,
    )


def dice_rolled(roll) -> GameEvent:
    return GameEvent(DICE_ROLLED, roll.to_dict())


def lucky_seven(bonus: int) -> GameEvent:
    return GameEvent(LUCKY_7, {"message": f"LUCKY 7! +{bonus} to pot!"})


def bust() -> GameEvent:
    return GameEvent(BUST, {"message": "BUST! Pot reset to 0"})


def doubles(multiplier: int) -> GameEvent:
    word = "doubled" if multiplier == 2 else f"x{multiplier}"
    return GameEvent(DOUBLES, {"message": f"DOUBLES! Pot {word}!"})


def error(message: str) -> GameEvent:
    return GameEvent(ERROR, {"message": message}, target=Target.SENDER)
