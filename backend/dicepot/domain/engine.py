# dicepot/domain/engine.py
from __future__ import annotations
import logging
import random
from typing import Callable, Dict, List, Optional

from dicepot.core.loader import GameRules
from dicepot.domain import events
from dicepot.domain.dice import roll_dice
from dicepot.domain.errors import (
    AlreadyBanked,
    GameNotStarted,
    NotAuthorized,
    NotYourTurn,
    RoomFull,
)
from dicepot.domain.events import GameEvent
from dicepot.domain.models.models import Player, Room
from dicepot.domain.types import Command, CommandType, RandomSource, RoomPhase

log = logging.getLogger(__name__)


class GameEngine:
    """Rules of one room.

    The engine mutates its ``Room`` in place and returns the events the
    command produced, in the order clients must see them. It never talks to
    the network and never touches the room store; callers serialize access.
    """

    def __init__(
        self,
        room: Room,
        rules: Optional[GameRules] = None,
        rng: Optional[RandomSource] = None,
    ):
        self.room = room
        self.rules = rules or GameRules()
        self._rng = rng or random.Random()
        self._handlers: Dict[CommandType, Callable[[Command], List[GameEvent]]] = {
            CommandType.JOIN: self._join,
            CommandType.START_GAME: self._start_game,
            CommandType.ROLL_DICE: self._roll_dice,
            CommandType.BANK_NOW: self._bank_now,
            CommandType.RESTART_GAME: self._restart_game,
            CommandType.DISCONNECT: self._disconnect,
        }

    def execute(self, command: Command) -> List[GameEvent]:
        """Apply a command; raises a GameError subclass when it is rejected."""
        return self._handlers[command.type](command)

    # ======== lobby ========
    def _join(self, command: Command) -> List[GameEvent]:
        if len(self.room.players) >= self.rules.max_players:
            raise RoomFull()

        # late joiners simply enter the rotation
        self.room.players.append(Player(id=command.actor_id, name=command.name))
        return [events.room_joined(self.room), events.game_state(self.room)]

    def _start_game(self, command: Command) -> List[GameEvent]:
        # any member may start; only restart is host-only
        self._reset()
        self.room.started = True
        log.debug("room %s started with %d players", self.room.code, len(self.room.players))
        return [events.game_state(self.room)]

    def _restart_game(self, command: Command) -> List[GameEvent]:
        host = self.room.host
        if host is None or host.id != command.actor_id:
            raise NotAuthorized()

        self._reset()
        log.debug("room %s restarted by host", self.room.code)
        return [events.game_state(self.room)]

    def _disconnect(self, command: Command) -> List[GameEvent]:
        idx = self.room.index_of(command.actor_id)
        if idx == -1:
            return []

        del self.room.players[idx]
        if self.room.is_empty():
            self.room.current_player_index = 0
            return []

        # clamp, not remap: a departure after the current index can hand the
        # turn to the first seat
        if self.room.current_player_index >= len(self.room.players):
            self.room.current_player_index = 0
        return [events.game_state(self.room)]

    # ======== turns ========
    def _roll_dice(self, command: Command) -> List[GameEvent]:
        player = self._require_turn(command.actor_id)
        if player.has_banked:
            raise AlreadyBanked()

        room, rules = self.room, self.rules
        room.roll_count += 1
        roll = roll_dice(self._rng)
        room.last_roll = roll

        out = [events.dice_rolled(roll)]
        in_lucky_window = room.roll_count <= rules.lucky_roll_window
        round_ended = False

        if roll.sum == rules.lucky_number:
            if in_lucky_window:
                room.pot += rules.lucky_bonus
                out.append(events.lucky_seven(rules.lucky_bonus))
            else:
                room.pot = 0
                self.start_new_round()
                out.append(events.bust())
                round_ended = True
        elif not in_lucky_window and roll.is_double:
            room.pot *= rules.doubles_multiplier
            out.append(events.doubles(rules.doubles_multiplier))
        else:
            room.pot += roll.sum

        if not round_ended:
            self.move_to_next_player()

        out.append(events.game_state(room))
        return out

    def _bank_now(self, command: Command) -> List[GameEvent]:
        player = self._require_turn(command.actor_id)
        if player.has_banked:
            return []

        # the pot stays on the table for everyone still rolling
        player.score += self.room.pot
        player.has_banked = True
        self.move_to_next_player()
        return [events.game_state(self.room)]

    def move_to_next_player(self) -> bool:
        """Advance to the next player who has not banked.

        Returns True when everybody had banked and a new round was started.
        """
        room = self.room
        count = len(room.players)
        attempts = 0
        while True:
            room.current_player_index = (room.current_player_index + 1) % count
            attempts += 1
            if not room.players[room.current_player_index].has_banked or attempts >= count:
                break

        if room.all_banked():
            self.start_new_round()
            return True
        return False

    def start_new_round(self) -> None:
        room = self.room
        room.round += 1
        room.pot = 0
        room.last_roll = None
        room.roll_count = 0
        for p in room.players:
            p.has_banked = False
        room.current_player_index = (room.current_player_index + 1) % len(room.players)
        log.debug("room %s entering round %d", room.code, room.round)

    # ======== helpers ========
    def _require_turn(self, actor_id: str) -> Player:
        if self.room.phase is RoomPhase.LOBBY:
            raise GameNotStarted()
        current = self.room.current_player
        if current is None or current.id != actor_id:
            raise NotYourTurn()
        return current

    def _reset(self) -> None:
        room = self.room
        room.round = 1
        room.pot = 0
        room.current_player_index = 0
        room.last_roll = None
        room.roll_count = 0
        for p in room.players:
            p.reset()
