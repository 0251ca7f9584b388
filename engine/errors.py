"""Exception taxonomy shared by the game engines.

Setup problems (bad question banks, malformed grids, a broken buff catalog)
raise ``ConfigurationError`` straight away. Illegal lifecycle calls raise
``InvalidStateError``. Everyday interaction mistakes such as clicking a
non-adjacent cell never raise; they come back as result objects.
"""


class GameError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(GameError, ValueError):
    """Raised when a game is set up with invalid content or settings."""


class InvalidStateError(GameError):
    """Raised when an operation is not allowed in the game's current state."""

    def __init__(self, message: str, status: str | None = None):
        details = {"status": status} if status else None
        super().__init__(message, details)
        self.status = status
