"""In-memory room store. Lives as long as the process, nothing is persisted."""

from __future__ import annotations
import threading
from typing import Dict, Optional

from ...domain.models.models import Room


class InMemoryRoomStore:
    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._locks: Dict[str, threading.RLock] = {}
        # guards the key set; per-room state is guarded by lock_for(code)
        self._registry_lock = threading.RLock()

    # ── room CRUD ───────────────────────────────────────────────
    def create(self, code: str, room: Room) -> None:
        with self._registry_lock:
            if code in self._rooms:
                raise KeyError(f"Room code already in use: {code}")
            self._rooms[code] = room
            self._locks[code] = threading.RLock()

    def get(self, code: str) -> Optional[Room]:
        return self._rooms.get(code)

    def delete(self, code: str) -> None:
        with self._registry_lock:
            self._rooms.pop(code, None)
            self._locks.pop(code, None)

    # ── helpers ────────────────────────────────────────────────
    def lock_for(self, code: str) -> Optional[threading.RLock]:
        return self._locks.get(code)

    @property
    def registry_lock(self) -> threading.RLock:
        return self._registry_lock

    def __contains__(self, code: object) -> bool:
        return code in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
