from __future__ import annotations

from .models.models import DiceRoll
from .types import RandomSource

FACES = 6


def roll_die(rng: RandomSource) -> int:
    return rng.randint(1, FACES)


def roll_dice(rng: RandomSource) -> DiceRoll:
    """Two independent uniform dice."""
    return DiceRoll(roll_die(rng), roll_die(rng))
