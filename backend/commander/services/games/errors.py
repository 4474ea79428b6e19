class GameError(Exception):
    """Base class for errors surfaced to the player."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GameValidationError(GameError):
    """Bad player input: empty name, unknown tier, color or direction."""

    status_code = 400


class GameStateError(GameError):
    """The request does not fit the table's current phase."""

    status_code = 409


class SessionNotFound(GameError):
    status_code = 404
