from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..types import RoomPhase


# ───────────────── DiceRoll ─────────────────
@dataclass(frozen=True, slots=True)
class DiceRoll:
    d1: int
    d2: int

    def __post_init__(self):
        for face in (self.d1, self.d2):
            if not 1 <= face <= 6:
                raise ValueError(f"Die face out of range: {face}")

    @property
    def sum(self) -> int:
        return self.d1 + self.d2

    @property
    def is_double(self) -> bool:
        return self.d1 == self.d2

    def to_dict(self) -> Dict[str, int]:
        return {"d1": self.d1, "d2": self.d2, "sum": self.sum}


# ───────────────── Player ─────────────────
@dataclass(slots=True)
class Player:
    id: str  # connection sid
    name: str
    score: int = 0
    has_banked: bool = False

    def reset(self) -> None:
        self.score = 0
        self.has_banked = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "hasBanked": self.has_banked,
        }


# ── Room  (state only, the engine owns the rules) ──────────
@dataclass
class Room:
    code: str
    players: List[Player] = field(default_factory=list)

    pot: int = 0
    round: int = 1
    current_player_index: int = 0
    started: bool = False
    last_roll: Optional[DiceRoll] = None
    roll_count: int = 0

    @property
    def phase(self) -> RoomPhase:
        return RoomPhase.IN_PROGRESS if self.started else RoomPhase.LOBBY

    @property
    def host(self) -> Optional[Player]:
        return self.players[0] if self.players else None

    @property
    def current_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.current_player_index]

    def is_empty(self) -> bool:
        return not self.players

    def get_player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def index_of(self, player_id: str) -> int:
        for i, p in enumerate(self.players):
            if p.id == player_id:
                return i
        return -1

    def all_banked(self) -> bool:
        return all(p.has_banked for p in self.players)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roomCode": self.code,
            "pot": self.pot,
            "round": self.round,
            "currentPlayerIndex": self.current_player_index,
            "started": self.started,
            "lastRoll": self.last_roll.to_dict() if self.last_roll else None,
            "rollCount": self.roll_count,
            "players": [p.to_dict() for p in self.players],
        }
