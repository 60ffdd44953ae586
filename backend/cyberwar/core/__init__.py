# =============================================================================
# Core Game Module
# =============================================================================
"""
Core game engine components including:
- Game state representation
- Catalogs and network topology
- Move validation and combat resolution
- Game sessions
"""

from .enums import (
    PlayerRole, Criticality, MoveKind, SecondaryEffect, ConfidenceLevel
)
from .errors import (
    GameError, GameAlreadyOverError, InvalidMoveError, UnknownMoveError,
    InsufficientResourcesError, MoveNotAvailableError, OutOfTurnError
)
from .data_structures import (
    NetworkNode, AttackDefinition, DefenseDefinition, Move, PlayerState,
    GameConfig, AttackOutcome, DefenseOutcome
)
from .game_state import GameState
from .catalog import Catalog, TOPOLOGIES, get_topology, load_catalog, new_game_state
from .actions import MoveValidator, CombatResolver, check_victory
from .game_engine import GameSession, GameEvent, GameEventType, TurnReport, create_session

__all__ = [
    # Enums
    "PlayerRole", "Criticality", "MoveKind", "SecondaryEffect", "ConfidenceLevel",
    # Errors
    "GameError", "GameAlreadyOverError", "InvalidMoveError", "UnknownMoveError",
    "InsufficientResourcesError", "MoveNotAvailableError", "OutOfTurnError",
    # Data structures
    "NetworkNode", "AttackDefinition", "DefenseDefinition", "Move", "PlayerState",
    "GameConfig", "AttackOutcome", "DefenseOutcome",
    # Core classes
    "GameState", "Catalog", "MoveValidator", "CombatResolver",
    "GameSession", "GameEvent", "GameEventType", "TurnReport",
    # Convenience functions
    "load_catalog", "new_game_state", "get_topology", "TOPOLOGIES",
    "check_victory", "create_session",
]
