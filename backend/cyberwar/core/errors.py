# =============================================================================
# Cyber Wargame Engine - Errors
# =============================================================================
"""
Typed failures raised by move validation.

Every error carries a short machine-readable ``code`` so the collaborator
layer can report it without string matching.
"""

from typing import Any, Dict, Optional


class GameError(Exception):
    """Base class for all rule violations"""

    code = "game_error"

    def __init__(self, message: str, move_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.move_id = move_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "error": self.message,
            "code": self.code,
            "move_id": self.move_id,
        }


class GameAlreadyOverError(GameError):
    """A move was submitted after the game ended"""

    code = "game_over"


class InvalidMoveError(GameError):
    """The move cannot be played in the current state"""

    code = "invalid_move"


class UnknownMoveError(InvalidMoveError):
    code = "unknown_move"


class InsufficientResourcesError(InvalidMoveError):
    code = "insufficient_resources"

    def __init__(self, message: str, move_id: Optional[str] = None,
                 required: int = 0, available: int = 0):
        super().__init__(message, move_id)
        self.required = required
        self.available = available

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["required"] = self.required
        data["available"] = self.available
        return data


class MoveNotAvailableError(InvalidMoveError):
    code = "move_not_available"


class OutOfTurnError(InvalidMoveError):
    code = "out_of_turn"
