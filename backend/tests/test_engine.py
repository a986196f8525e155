import random

import pytest

from conftest import ScriptedRandom, make_engine, make_room
from dicepot.core.loader import GameRules
from dicepot.domain.engine import GameEngine
from dicepot.domain.errors import (
    AlreadyBanked,
    GameNotStarted,
    NotAuthorized,
    NotYourTurn,
    RoomFull,
)
from dicepot.domain.models.models import DiceRoll
from dicepot.domain.types import Command, CommandType, Target


def roll(eng, actor):
    return eng.execute(Command(CommandType.ROLL_DICE, actor))


def bank(eng, actor):
    return eng.execute(Command(CommandType.BANK_NOW, actor))


def names(evts):
    return [e.name for e in evts]


# ───────────────── lobby ─────────────────
def test_join_appends_player_and_answers_sender_then_room():
    room = make_room("Alice", started=False)
    eng = make_engine(room)

    out = eng.execute(Command(CommandType.JOIN, "bob", name="Bob"))

    assert [p.name for p in room.players] == ["Alice", "Bob"]
    assert room.players[1].score == 0 and not room.players[1].has_banked
    assert names(out) == ["roomJoined", "gameState"]
    assert out[0].target is Target.SENDER
    assert out[0].data["roomCode"] == "ABCD"
    assert out[1].target is Target.ROOM


def test_join_rejected_when_room_is_full():
    room = make_room(*[f"P{i}" for i in range(8)])
    with pytest.raises(RoomFull):
        make_engine(room).execute(Command(CommandType.JOIN, "late", name="Late"))
    assert len(room.players) == 8


def test_join_mid_game_enters_rotation():
    room = make_room("Alice", "Bob")
    eng = make_engine(room, 1, 2, 1, 3)
    roll(eng, "alice")
    eng.execute(Command(CommandType.JOIN, "carol", name="Carol"))
    roll(eng, "bob")
    assert room.current_player.name == "Carol"


def test_start_game_resets_everything_and_any_member_may_start():
    room = make_room("Alice", "Bob", started=False)
    room.pot, room.round, room.roll_count, room.current_player_index = 40, 3, 5, 1
    room.last_roll = DiceRoll(2, 3)
    room.players[0].score, room.players[1].has_banked = 12, True

    out = make_engine(room).execute(Command(CommandType.START_GAME, "bob"))

    assert room.started
    assert (room.pot, room.round, room.roll_count, room.current_player_index) == (0, 1, 0, 0)
    assert room.last_roll is None
    assert all(p.score == 0 and not p.has_banked for p in room.players)
    assert names(out) == ["gameState"]


def test_restart_requires_first_seat():
    room = make_room("Alice", "Bob")
    room.pot = 10
    with pytest.raises(NotAuthorized):
        make_engine(room).execute(Command(CommandType.RESTART_GAME, "bob"))
    assert room.pot == 10


def test_restart_by_host_resets_and_keeps_started():
    room = make_room("Alice", "Bob")
    room.pot, room.round, room.current_player_index = 99, 4, 1
    room.players[1].score = 50

    make_engine(room).execute(Command(CommandType.RESTART_GAME, "alice"))

    assert room.started
    assert (room.pot, room.round, room.current_player_index) == (0, 1, 0)
    assert room.players[1].score == 0


# ───────────────── rolling ─────────────────
def test_roll_rejected_before_start():
    room = make_room("Alice", started=False)
    with pytest.raises(GameNotStarted):
        roll(make_engine(room, 1, 1), "alice")


def test_roll_out_of_turn_changes_nothing():
    room = make_room("Alice", "Bob")
    with pytest.raises(NotYourTurn):
        roll(make_engine(room, 1, 2), "bob")
    assert room.roll_count == 0 and room.pot == 0 and room.last_roll is None


def test_roll_by_banked_current_player_is_rejected():
    room = make_room("Alice", "Bob")
    room.players[0].has_banked = True
    with pytest.raises(AlreadyBanked):
        roll(make_engine(room, 1, 2), "alice")


def test_lucky_seven_then_plain_roll_scenario():
    room = make_room("Alice", started=False)
    eng = make_engine(room, 3, 4, 2, 3)
    eng.execute(Command(CommandType.JOIN, "bob", name="Bob"))
    eng.execute(Command(CommandType.START_GAME, "alice"))

    out = roll(eng, "alice")
    assert names(out) == ["diceRolled", "lucky7", "gameState"]
    assert out[0].data == {"d1": 3, "d2": 4, "sum": 7}
    assert room.pot == 70 and room.round == 1
    assert room.current_player.name == "Bob"

    out = roll(eng, "bob")
    assert names(out) == ["diceRolled", "gameState"]
    assert room.pot == 75 and room.roll_count == 2
    assert room.current_player.name == "Alice"
    assert out[-1].data["lastRoll"] == {"d1": 2, "d2": 3, "sum": 5}


def test_double_inside_lucky_window_just_adds():
    room = make_room("Alice", "Bob")
    room.pot, room.roll_count = 20, 2
    roll(make_engine(room, 2, 2), "alice")
    assert room.pot == 24


def test_double_after_third_roll_doubles_pot():
    room = make_room("Alice", "Bob")
    room.pot, room.roll_count = 20, 3
    out = roll(make_engine(room, 2, 2), "alice")
    assert names(out) == ["diceRolled", "doubles", "gameState"]
    assert room.pot == 40 and room.roll_count == 4
    assert room.current_player_index == 1


def test_plain_roll_after_third_roll_adds_sum():
    room = make_room("Alice", "Bob")
    room.pot, room.roll_count = 10, 5
    roll(make_engine(room, 1, 2), "alice")
    assert room.pot == 13


def test_seven_after_third_roll_busts_and_starts_new_round():
    room = make_room("Alice", "Bob", "Carol")
    room.pot, room.roll_count = 50, 3
    room.players[1].has_banked = True
    room.players[1].score = 30

    out = roll(make_engine(room, 3, 4), "alice")

    assert names(out) == ["diceRolled", "bust", "gameState"]
    assert room.pot == 0 and room.round == 2 and room.roll_count == 0
    assert room.last_roll is None
    assert not any(p.has_banked for p in room.players)
    assert room.players[1].score == 30
    # round start moves exactly one seat from the roller
    assert room.current_player_index == 1


def test_game_state_is_broadcast_last_on_every_branch():
    for faces in [(1, 2), (3, 4), (5, 5)]:
        room = make_room("Alice", "Bob")
        room.roll_count = 4
        out = roll(make_engine(room, *faces), "alice")
        assert out[0].name == "diceRolled"
        assert out[-1].name == "gameState"
        assert all(e.target is Target.ROOM for e in out)


# ───────────────── banking & rotation ─────────────────
def test_bank_moves_pot_into_score_without_clearing_it():
    room = make_room("Alice", "Bob")
    room.pot = 30
    out = bank(make_engine(room), "alice")
    alice = room.players[0]
    assert alice.score == 30 and alice.has_banked
    assert room.pot == 30
    assert room.current_player_index == 1
    assert names(out) == ["gameState"]


def test_bank_out_of_turn():
    room = make_room("Alice", "Bob")
    with pytest.raises(NotYourTurn):
        bank(make_engine(room), "bob")


def test_bank_twice_is_a_silent_noop():
    room = make_room("Alice", "Bob")
    room.pot = 5
    room.players[0].has_banked = True
    assert bank(make_engine(room), "alice") == []
    assert room.players[0].score == 0


def test_rotation_skips_banked_players():
    room = make_room("Alice", "Bob")
    room.pot = 30
    eng = make_engine(room, 1, 2)
    bank(eng, "alice")
    roll(eng, "bob")
    assert room.pot == 33
    assert room.current_player.name == "Bob"


def test_everyone_banked_starts_new_round_scenario():
    room = make_room("Alice", "Bob")
    eng = make_engine(room, 1, 2, 2, 4)

    roll(eng, "alice")
    bank(eng, "bob")
    assert room.players[1].score == 3
    assert room.current_player.name == "Alice"

    roll(eng, "alice")
    assert room.pot == 9
    assert room.current_player.name == "Alice"

    bank(eng, "alice")
    assert room.players[0].score == 9
    assert room.round == 2 and room.pot == 0 and room.roll_count == 0
    assert not any(p.has_banked for p in room.players)
    assert room.current_player_index == 1


def test_move_to_next_player_reports_round_end():
    room = make_room("Alice", "Bob")
    eng = make_engine(room)
    assert eng.move_to_next_player() is False
    for p in room.players:
        p.has_banked = True
    assert eng.move_to_next_player() is True
    assert room.round == 2


# ───────────────── disconnect ─────────────────
def test_disconnect_of_current_last_seat_wraps_to_first():
    room = make_room("Alice", "Bob", "Carol")
    room.current_player_index = 2
    out = make_engine(room).execute(Command(CommandType.DISCONNECT, "carol"))
    assert [p.name for p in room.players] == ["Alice", "Bob"]
    assert room.current_player_index == 0
    assert names(out) == ["gameState"]


def test_disconnect_before_current_seat_clamps_not_remaps():
    room = make_room("Alice", "Bob", "Carol")
    room.current_player_index = 1
    make_engine(room).execute(Command(CommandType.DISCONNECT, "alice"))
    # index kept: the turn silently passes to Carol
    assert room.current_player.name == "Carol"


def test_disconnect_last_player_empties_room():
    room = make_room("Alice")
    out = make_engine(room).execute(Command(CommandType.DISCONNECT, "alice"))
    assert room.is_empty() and out == []


def test_disconnect_unknown_connection_is_ignored():
    room = make_room("Alice")
    assert make_engine(room).execute(Command(CommandType.DISCONNECT, "ghost")) == []
    assert len(room.players) == 1


# ───────────────── invariants ─────────────────
@pytest.mark.parametrize("seed", range(5))
def test_invariants_hold_through_random_play(seed):
    chooser = random.Random(seed)
    room = make_room("Alice", "Bob", "Carol", "Dan")
    eng = GameEngine(room, GameRules(), random.Random(seed + 100))
    seen_rounds = {1}
    joined = 0

    for _ in range(300):
        actor = room.current_player.id
        before_round = room.round
        pick = chooser.random()
        later_seats = room.players[room.current_player_index + 1 :]
        if pick < 0.05 and len(room.players) < 8:
            joined += 1
            eng.execute(Command(CommandType.JOIN, f"new{joined}", name=f"New{joined}"))
        elif pick < 0.10 and later_seats:
            # seats after the current one; the current player keeps the turn
            leaver = chooser.choice(later_seats)
            eng.execute(Command(CommandType.DISCONNECT, leaver.id))
            assert room.current_player.id == actor
        elif pick < 0.30:
            bank(eng, actor)
        else:
            roll(eng, actor)

        assert 1 <= len(room.players) <= 8

        assert 0 <= room.current_player_index < len(room.players)
        assert room.pot >= 0
        if room.round != before_round:
            assert room.round == before_round + 1
            assert room.pot == 0 and room.roll_count == 0
            assert not any(p.has_banked for p in room.players)
        seen_rounds.add(room.round)

    assert len(seen_rounds) > 1


def test_scripted_random_drives_dice():
    rng = ScriptedRandom(faces=[6, 6])
    room = make_room("Alice", "Bob")
    out = roll(GameEngine(room, GameRules(), rng), "alice")
    assert out[0].data["sum"] == 12
