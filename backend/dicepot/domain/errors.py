"""Client-input errors. Each is reported to the offending connection only."""


class GameError(ValueError):
    code = "game_error"
    default_message = "Invalid command"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class RoomNotFound(GameError):
    code = "room_not_found"
    default_message = "Room not found"


class RoomFull(GameError):
    code = "room_full"
    default_message = "Room is full"


class NotYourTurn(GameError):
    code = "not_your_turn"
    default_message = "Not your turn"


class AlreadyBanked(GameError):
    code = "already_banked"
    default_message = "You have already banked this round"


class NotAuthorized(GameError):
    code = "not_authorized"
    default_message = "Only the first player can restart"


class GameNotStarted(GameError):
    code = "game_not_started"
    default_message = "Game has not started"


class InvalidName(GameError):
    code = "invalid_name"
    default_message = "Please enter your name"


class InvalidRoomCode(GameError):
    code = "invalid_room_code"
    default_message = "Please enter a valid 4-letter room code"
