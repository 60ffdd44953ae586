# =============================================================================
# Cyber Wargame Engine - Game Session
# =============================================================================
"""
Session object that orchestrates one game.
Holds the state, the resolver and the analytics that live alongside it, and
runs the attacker -> predictor -> AI defender -> odds flow for a turn.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .actions import CombatResolver
from .catalog import Catalog, load_catalog, new_game_state
from .data_structures import (
    AttackDefinition, AttackOutcome, DefenseDefinition, DefenseOutcome,
    GameConfig, Move
)
from .enums import PlayerRole
from .errors import GameAlreadyOverError, GameError, OutOfTurnError
from .game_state import GameState

logger = logging.getLogger(__name__)


class GameEventType(Enum):
    """Types of events that can be emitted by a session"""
    GAME_STARTED = auto()
    MOVE_PERFORMED = auto()
    MOVE_REJECTED = auto()
    TURN_SKIPPED = auto()
    GAME_OVER = auto()
    GAME_RESET = auto()


@dataclass
class GameEvent:
    """Represents a game event for logging and UI updates"""
    event_type: GameEventType
    turn: int
    player_role: Optional[PlayerRole] = None
    move_id: Optional[str] = None
    message: str = ""
    data: dict = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "type": self.event_type.name,
            "turn": self.turn,
            "player": self.player_role.name if self.player_role else None,
            "move_id": self.move_id,
            "message": self.message,
            "data": self.data,
            "timestamp": self.timestamp,
        }


@dataclass
class TurnReport:
    """Everything produced by one attacker + defender exchange"""
    attack: AttackOutcome
    defense: Optional[DefenseOutcome] = None
    defender_skipped: bool = False
    predictions: Dict[str, Any] = field(default_factory=dict)
    win_probability: Dict[str, Any] = field(default_factory=dict)
    state: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "attack": self.attack.to_dict(),
            "defense": self.defense.to_dict() if self.defense else None,
            "defender_skipped": self.defender_skipped,
            "predictions": self.predictions,
            "win_probability": self.win_probability,
            "game_state": self.state,
        }


class GameSession:
    """
    One independent game.

    Example usage:
        session = GameSession()
        report = session.play_turn("dos")
        while not session.state.game_over:
            ...
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        catalog: Optional[Catalog] = None,
        topology: Optional[Iterable[Mapping[str, Any]]] = None,
    ):
        """Initialize the session with optional custom configuration"""
        # Imported here: the ai package itself imports from core
        from ..ai.attack_predictor import AttackPredictor
        from ..ai.minmax_agent import MinimaxAI
        from ..ai.win_probability import WinProbabilityEstimator

        self.config = config or GameConfig()
        self.catalog = catalog or load_catalog()
        self.topology = list(topology) if topology is not None else None

        self.resolver = CombatResolver(self.catalog)
        self.predictor = AttackPredictor(history_limit=self.config.history_limit)
        self.ai = MinimaxAI(self.catalog, depth=self.config.search_depth)
        self.estimator = WinProbabilityEstimator()

        self.event_listeners: Dict[GameEventType, List[Callable]] = {}
        self.event_history: List[GameEvent] = []

        self.state: GameState = self._new_state()
        self._emit_event(GameEvent(
            event_type=GameEventType.GAME_STARTED,
            turn=self.state.turn,
            message="Game started",
            data={"node_count": len(self.state.nodes)},
        ))

    def _new_state(self) -> GameState:
        return new_game_state(self.config, self.catalog, self.topology)

    # =========================================================================
    # Moves
    # =========================================================================

    def submit_attack(self, attack_id: str) -> AttackOutcome:
        """Apply an attacker move and feed it to the predictor"""
        outcome = self._apply(Move.attack(attack_id))
        self.predictor.update_history(outcome.attack, self.state)
        return outcome

    def submit_defense(self, defense_id: str) -> DefenseOutcome:
        """Apply a defender move chosen by the caller"""
        return self._apply(Move.defense(defense_id))

    def play_defender_turn(self) -> Optional[DefenseOutcome]:
        """
        Let the AI choose and play the defender's move.
        Returns None when the defender had no legal move and the turn was skipped.
        """
        if self.state.game_over:
            raise GameAlreadyOverError("Game has ended")
        if self.state.current_player != PlayerRole.DEFENDER:
            raise OutOfTurnError("Not defender's turn")

        defense = self.ai.get_best_move(self.state)
        if defense is None:
            self.skip_turn()
            return None
        return self.submit_defense(defense.id)

    def skip_turn(self):
        """Pass for the player to move"""
        role = self.state.current_player
        self.resolver.skip_turn(self.state)
        self._emit_event(GameEvent(
            event_type=GameEventType.TURN_SKIPPED,
            turn=self.state.turn,
            player_role=role,
            message=f"{role} had no legal move",
        ))
        self._check_game_over()

    def play_turn(self, attack_id: str) -> TurnReport:
        """
        Run a full exchange: the attack, the AI defense, then the summaries.
        """
        attack = self.submit_attack(attack_id)

        defense = None
        skipped = False
        if not self.state.game_over:
            defense = self.play_defender_turn()
            skipped = defense is None

        return TurnReport(
            attack=attack,
            defense=defense,
            defender_skipped=skipped,
            predictions=self.prediction_summary(),
            win_probability=self.win_probability().to_dict(),
            state=self.snapshot(),
        )

    def _apply(self, move: Move):
        try:
            outcome = self.resolver.apply(self.state, move)
        except GameError as exc:
            self._emit_event(GameEvent(
                event_type=GameEventType.MOVE_REJECTED,
                turn=self.state.turn,
                player_role=move.kind.role,
                move_id=move.move_id,
                message=exc.message,
                data={"code": exc.code},
            ))
            raise

        self._emit_event(GameEvent(
            event_type=GameEventType.MOVE_PERFORMED,
            turn=self.state.turn,
            player_role=move.kind.role,
            move_id=move.move_id,
            message=f"{move.kind.role} played {move.move_id}",
            data=outcome.to_dict(),
        ))
        self._check_game_over()
        return outcome

    def _check_game_over(self):
        if self.state.game_over:
            self._emit_event(GameEvent(
                event_type=GameEventType.GAME_OVER,
                turn=self.state.turn,
                player_role=self.state.winner,
                message=f"Game Over! {self.state.winner.name} wins!",
            ))

    def reset(self) -> GameState:
        """Start over with a fresh state and an empty predictor"""
        self.state = self._new_state()
        self.predictor.reset()
        self._emit_event(GameEvent(
            event_type=GameEventType.GAME_RESET,
            turn=self.state.turn,
            message="Game reset",
        ))
        return self.state

    # =========================================================================
    # Queries
    # =========================================================================

    def available_attacks(self) -> List[AttackDefinition]:
        """Attacks the attacker can currently afford"""
        return self.resolver.legal_moves(self.state, PlayerRole.ATTACKER)

    def prediction_summary(self) -> Dict[str, Any]:
        """Forecast of the attacker's next move"""
        summary = self.predictor.get_prediction_summary(self.available_attacks(), self.state)
        summary["stats"] = self.predictor.get_stats()
        return summary

    def prediction_analysis(self) -> Dict[str, Any]:
        return self.predictor.get_detailed_analysis(self.available_attacks(), self.state)

    def win_probability(self):
        return self.estimator.estimate(self.state)

    def suggest_defense(self) -> Optional[DefenseDefinition]:
        """
        The defense the AI would play now, without playing it.
        None when the defender is not to move or has no legal defense.
        """
        if self.state.game_over or self.state.current_player != PlayerRole.DEFENDER:
            return None
        return self.ai.get_best_move(self.state)

    def snapshot(self) -> Dict[str, Any]:
        """Serializable copy of the current state"""
        return self.state.to_dict()

    # =========================================================================
    # Event System
    # =========================================================================

    def add_event_listener(self, event_type: GameEventType, callback: Callable[[GameEvent], None]):
        """Register a callback for a specific event type"""
        self.event_listeners.setdefault(event_type, []).append(callback)

    def _emit_event(self, event: GameEvent):
        """Emit an event to all registered listeners"""
        self.event_history.append(event)
        logger.debug("%s: %s", event.event_type.name, event.message)

        for callback in self.event_listeners.get(event.event_type, []):
            try:
                callback(event)
            except Exception:
                logger.exception("Event listener failed for %s", event.event_type.name)

    def get_event_history(self,
                          event_type: Optional[GameEventType] = None,
                          limit: Optional[int] = None) -> List[GameEvent]:
        """Get event history, optionally filtered by type"""
        events = self.event_history
        if event_type is not None:
            events = [e for e in events if e.event_type == event_type]
        if limit is not None:
            events = events[-limit:]
        return events


def create_session(config: Optional[GameConfig] = None) -> GameSession:
    """Convenience constructor with default catalogs and topology"""
    return GameSession(config=config)
