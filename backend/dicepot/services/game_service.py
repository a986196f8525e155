from __future__ import annotations
import logging
import random
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dicepot.core.loader import GameRules
from dicepot.domain import events
from dicepot.domain.engine import GameEngine
from dicepot.domain.errors import InvalidName, InvalidRoomCode, RoomNotFound
from dicepot.domain.events import GameEvent
from dicepot.domain.models.models import Player, Room
from dicepot.domain.types import Command, CommandType, RandomSource
from dicepot.infrastructure.memory.repo import InMemoryRoomStore
from dicepot.infrastructure.room_codes import generate_room_code

log = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Events to deliver for one command, plus the room they belong to.

    ``departed`` is set when the connection left another room on the way
    (joining a second room); its events go to that old room.
    """

    room_code: str
    events: List[GameEvent] = field(default_factory=list)
    departed: Optional["CommandResult"] = None
    room_closed: bool = False


class GameService:
    """Use-case layer: routes connections to rooms and runs the engine.

    Every command against a room runs under that room's lock, so two
    connections in the same room never interleave. Rooms are independent.
    Each connection also has its own lock, held for the whole command
    (routing lookup, engine run, route update), so a disconnect can never
    land between seating a player and recording where it sits.
    Lock order: connection -> room -> store registry.
    """

    def __init__(
        self,
        store: Optional[InMemoryRoomStore] = None,
        rules: Optional[GameRules] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.store = store if store is not None else InMemoryRoomStore()
        self.rules = rules or GameRules()
        self._rng = rng or random.Random()
        # sid -> room code; routing only, the store owns the rooms
        self._sid_room: Dict[str, str] = {}
        self._sid_locks: Dict[str, threading.RLock] = {}
        self._routes_lock = threading.Lock()

    # ───────────────── Lobby ────────────────────────────────────────
    def create_room(self, sid: str, name: Any) -> CommandResult:
        name = self._clean_name(name)

        with self._sid_lock(sid):
            with self.store.registry_lock:
                code = generate_room_code(
                    self.store,
                    self._rng,
                    length=self.rules.room_code_length,
                    alphabet=self.rules.room_code_alphabet,
                )
                room = Room(code=code, players=[Player(id=sid, name=name)])
                self.store.create(code, room)

            log.info("room %s created by %s (%s)", code, name, sid)
            departed = self._leave_previous(sid, code)
            self._sid_room[sid] = code
            return CommandResult(code, [events.room_joined(room)], departed=departed)

    def join_room(self, sid: str, room_code: Any, name: Any) -> CommandResult:
        name = self._clean_name(name)
        code = self._clean_code(room_code)

        with self._sid_lock(sid):
            if self._sid_room.get(sid) == code:
                room = self._require_room(code)
                return CommandResult(code, [events.room_joined(room)])

            result = self._run(code, Command(CommandType.JOIN, sid, name=name))
            log.info("%s (%s) joined room %s", name, sid, code)
            result.departed = self._leave_previous(sid, code)
            self._sid_room[sid] = code
            return result

    # ───────────────── Gameplay ─────────────────────────────────────
    def start_game(self, sid: str, room_code: Any = None) -> CommandResult:
        return self._command(sid, room_code, CommandType.START_GAME)

    def roll_dice(self, sid: str, room_code: Any = None) -> CommandResult:
        return self._command(sid, room_code, CommandType.ROLL_DICE)

    def bank_now(self, sid: str, room_code: Any = None) -> CommandResult:
        return self._command(sid, room_code, CommandType.BANK_NOW)

    def restart_game(self, sid: str, room_code: Any = None) -> CommandResult:
        return self._command(sid, room_code, CommandType.RESTART_GAME)

    def room_of(self, sid: str) -> Optional[str]:
        return self._sid_room.get(sid)

    # ───────────────── Disconnect ───────────────────────────────────
    def disconnect(self, sid: str) -> Optional[CommandResult]:
        try:
            with self._sid_lock(sid):
                code = self._sid_room.pop(sid, None)
                if code is None:
                    return None
                try:
                    return self._run(code, Command(CommandType.DISCONNECT, sid))
                except RoomNotFound:
                    return None
        finally:
            with self._routes_lock:
                self._sid_locks.pop(sid, None)

    # ───────────────── Internals ───────────────────────────────────
    def _sid_lock(self, sid: str) -> threading.RLock:
        with self._routes_lock:
            return self._sid_locks.setdefault(sid, threading.RLock())

    def _command(self, sid: str, room_code: Any, kind: CommandType) -> CommandResult:
        with self._sid_lock(sid):
            return self._run(self._route(sid, room_code), Command(kind, sid))

    def _run(self, code: str, command: Command) -> CommandResult:
        room = self._require_room(code)
        lock = self.store.lock_for(code)
        if lock is None:
            raise RoomNotFound()

        with lock:
            # the room may have been emptied while we waited
            if self.store.get(code) is not room:
                raise RoomNotFound()

            out = GameEngine(room, self.rules, self._rng).execute(command)

            closed = False
            if room.is_empty():
                self.store.delete(code)
                closed = True
                log.info("room %s closed (last player left)", code)

        return CommandResult(code, out, room_closed=closed)

    def _leave_previous(self, sid: str, new_code: str) -> Optional[CommandResult]:
        old = self._sid_room.get(sid)
        if old is None or old == new_code:
            return None
        try:
            return self._run(old, Command(CommandType.DISCONNECT, sid))
        except RoomNotFound:
            return None

    def _route(self, sid: str, room_code: Any) -> str:
        code = self._sid_room.get(sid)
        if code is None:
            raise RoomNotFound()
        # a connection may only act in the room it sits in
        if room_code is not None and str(room_code).strip().upper() != code:
            raise RoomNotFound()
        return code

    def _require_room(self, code: str) -> Room:
        return self.store.get(code) or self._not_found()

    def _clean_name(self, name: Any) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidName()
        name = name.strip()
        if len(name) > self.rules.max_name_length:
            raise InvalidName(
                f"Name must be at most {self.rules.max_name_length} characters"
            )
        return name

    def _clean_code(self, room_code: Any) -> str:
        if not isinstance(room_code, str):
            raise InvalidRoomCode()
        code = room_code.strip().upper()
        if len(code) != self.rules.room_code_length or any(
            ch not in self.rules.room_code_alphabet for ch in code
        ):
            raise InvalidRoomCode()
        return code

    @staticmethod
    def _not_found() -> Room:
        raise RoomNotFound()
