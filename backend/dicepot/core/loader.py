from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict
import string

import yaml

DEFAULT_RULES_FILE = Path(__file__).resolve().parent.parent / "data" / "rules.yml"


@dataclass(frozen=True)
class GameRules:
    """Table constants. Defaults are the classic rules."""

    max_players: int = 8
    room_code_length: int = 4
    room_code_alphabet: str = string.ascii_uppercase
    max_name_length: int = 20
    lucky_number: int = 7
    lucky_bonus: int = 70
    lucky_roll_window: int = 3
    doubles_multiplier: int = 2

    @classmethod
    def from_raw(cls, raw: Dict[str, Any] | None) -> "GameRules":
        raw = raw or {}
        known = {f.name: f.type for f in fields(cls)}
        unknown = set(raw) - set(known)
        if unknown:
            raise ValueError(f"Unknown rule keys: {sorted(unknown)}")

        rules = cls(**raw)
        if rules.max_players < 1:
            raise ValueError("max_players must be at least 1")
        if rules.room_code_length < 1 or not rules.room_code_alphabet:
            raise ValueError("room codes need a length and an alphabet")
        if rules.lucky_bonus < 0 or rules.doubles_multiplier < 1:
            raise ValueError("pot modifiers must not shrink the pot below zero")
        return rules


def load_rules(path: Path | str | None = None) -> GameRules:
    path = Path(path) if path else DEFAULT_RULES_FILE
    with path.open(encoding="utf8") as f:
        return GameRules.from_raw(yaml.safe_load(f))
