"""Client-input errors raised by the registry and the game engine.

None of these are fatal: the gateway reports them to the requesting
connection only and game state is left untouched.
"""


class GameError(Exception):
    """Base class for rejected game requests."""

    code = "game_error"
    default_message = "Invalid request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class GameNotFoundError(GameError):
    code = "not_found"
    default_message = "Game not found"


class GameFullError(GameError):
    code = "full"
    default_message = "Game is full"


class PlayerNotFoundError(GameError):
    code = "player_not_found"
    default_message = "Player not found in game"


class NotYourTurnError(GameError):
    code = "not_your_turn"
    default_message = "Not your turn"


class InvalidStateError(GameError):
    """The game is not in a state where the request makes sense."""

    code = "invalid_state"
    default_message = "Invalid game state"


class InvalidMoveError(GameError):
    """Unknown move name passed straight to the engine.

    Gateway clients never see this code: move names are checked while
    the payload is validated and come back as ``invalid_payload``.
    """

    code = "invalid_move"
    default_message = "Invalid move type"
