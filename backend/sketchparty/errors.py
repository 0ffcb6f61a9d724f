from __future__ import annotations


class GameError(Exception):
    """Base class for everything the game core raises on purpose."""

    code = "game_error"
    message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_payload(self) -> dict:
        return {"error": self.code, "message": self.message}


class ValidationError(GameError):
    """Rejected request. Raised before any state is mutated."""

    code = "invalid_request"
    message = "Invalid request"


class RoomNotFound(ValidationError):
    code = "room_not_found"
    message = "Room not found"


class RoomFull(ValidationError):
    code = "room_full"
    message = "Room is full"


class NotEnoughPlayers(ValidationError):
    code = "not_enough_players"
    message = "At least two players are needed to start"


class GameInProgress(ValidationError):
    code = "game_in_progress"
    message = "A game is already running in this room"


class NotLoggedIn(ValidationError):
    code = "not_logged_in"
    message = "Log in first"


class NotInRoom(ValidationError):
    code = "not_in_room"
    message = "You are not in a room"


class StoreUnavailable(GameError):
    """The profile store could not complete a read or write."""

    code = "store_unavailable"
    message = "Profile store unavailable"
