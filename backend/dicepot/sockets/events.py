import logging

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from ..domain import events
from ..domain.errors import GameError
from ..domain.types import Target
from ..services.game_service import CommandResult, GameService

log = logging.getLogger(__name__)

# event name -> GameService method taking (sid, room_code)
GAME_COMMANDS = {
    "startGame": "start_game",
    "rollDice": "roll_dice",
    "bankNow": "bank_now",
    "restartGame": "restart_game",
}


# ── helpers ─────────────────────────────────────────────────
def _service() -> GameService:
    return current_app.extensions["dicepot"]


def _room_id(code: str) -> str:
    return f"room:{code}"


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def _deliver(sio, result: CommandResult) -> None:
    """Send the result's events in order: sender-only or to the whole room."""
    for event in result.events:
        if event.target is Target.SENDER:
            emit(event.name, event.data, to=request.sid)
        else:
            sio.emit(event.name, event.data, to=_room_id(result.room_code))


def _reject(event_name: str, err: GameError) -> None:
    log.warning("[%s] %s rejected: %s", event_name, request.sid, err.message)
    event = events.error(err.message)
    emit(event.name, event.data, to=request.sid)


def _enter(sio, result: CommandResult) -> None:
    if result.departed is not None:
        leave_room(_room_id(result.departed.room_code))
        _deliver(sio, result.departed)
    join_room(_room_id(result.room_code))
    _deliver(sio, result)


# ───────────────── events ──────────────────────────────────
def register_events(sio):
    if getattr(sio, "_dicepot_registered", False):
        # already queued on the shared SocketIO instance
        return
    sio._dicepot_registered = True

    # ---------- connect / disconnect -----------------------
    @sio.event
    def connect(*_args):
        log.info("[connect] %s", request.sid)

    @sio.event
    def disconnect(*_args):
        log.info("[disconnect] %s", request.sid)
        result = _service().disconnect(request.sid)
        if result:
            _deliver(sio, result)

    # ---------- lobby --------------------------------------
    @sio.on("createRoom")
    def create_room(data=None):
        try:
            result = _service().create_room(request.sid, _payload(data).get("name"))
        except GameError as e:
            return _reject("createRoom", e)
        _enter(sio, result)

    @sio.on("joinRoom")
    def join_room_event(data=None):
        data = _payload(data)
        try:
            result = _service().join_room(
                request.sid, data.get("roomCode"), data.get("name")
            )
        except GameError as e:
            return _reject("joinRoom", e)
        _enter(sio, result)

    # ---------- gameplay -----------------------------------
    def _command(event_name: str, method: str):
        def on_command(data=None):
            try:
                handler = getattr(_service(), method)
                result = handler(request.sid, _payload(data).get("roomCode"))
            except GameError as e:
                return _reject(event_name, e)
            _deliver(sio, result)

        sio.on_event(event_name, on_command)

    for event_name, method in GAME_COMMANDS.items():
        _command(event_name, method)
