# =============================================================================
# Cyber Wargame Engine - MinMax AI Agent
# =============================================================================
"""
Hand-coded MinMax algorithm with Alpha-Beta pruning for the defender.

The defender is the maximizing player. Every hypothetical future is built
on its own state clone, so sibling branches never see each other's moves.
Pruning is a pure speed-up: with ``use_pruning=False`` the same tree is
searched full-width and yields the same scores.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.actions import CombatResolver
from ..core.catalog import Catalog
from ..core.data_structures import DefenseDefinition, Move
from ..core.enums import PlayerRole
from ..core.game_state import GameState

logger = logging.getLogger(__name__)


# =============================================================================
# State Evaluator
# =============================================================================

class StateEvaluator:
    """
    Scores a state from the defender's point of view.
    Positive values favor the defender; terminal states are +/- infinity.
    """

    # Weights for different evaluation factors
    WEIGHTS = {
        "security": 40.0,
        "resource_diff": 0.5,
        "resource_cap": 20.0,
        "critical_protected": 20.0,
        "coverage": 5.0,
        "coverage_cap": 20.0,
        "variety": 2.0,
        "weakness_penalty": 10.0,
    }

    RECENT_ATTACKS = 3

    def evaluate(self, state: GameState) -> float:
        """
        Evaluate a state.

        Args:
            state: Game state to evaluate

        Returns:
            Evaluation score (positive = good for the defender)
        """
        if state.game_over:
            if state.winner == PlayerRole.DEFENDER:
                return MinimaxAI.INF
            return MinimaxAI.NEG_INF

        w = self.WEIGHTS
        defenses = state.defender.history
        recent = state.attacker.recent_types(self.RECENT_ATTACKS)

        score = state.security_ratio * w["security"]

        resource_diff = (state.defender.resources - state.attacker.resources) * w["resource_diff"]
        score += min(resource_diff, w["resource_cap"])

        critical = state.critical_nodes
        if critical:
            protected = sum(1 for n in critical if n.protected)
            score += (protected / len(critical)) * w["critical_protected"]

        score += self.coverage_score(defenses, recent)
        score += w["variety"] * len({d.type for d in defenses})

        last_attack = state.attacker.last_move
        if last_attack is not None:
            best = max((d.effectiveness_against(last_attack.type) for d in defenses), default=0.0)
            score -= w["weakness_penalty"] * (1.0 - best)

        return score

    def coverage_score(self, defenses: List[DefenseDefinition], attack_types: List[str]) -> float:
        """How well owned defenses answer recent attack types, capped at 20"""
        total = sum(d.effectiveness_against(t) for d in defenses for t in attack_types)
        return min(self.WEIGHTS["coverage_cap"], self.WEIGHTS["coverage"] * total)


# =============================================================================
# MinMax Agent
# =============================================================================

@dataclass
class SearchStats:
    """Statistics for one best-move search"""
    nodes_searched: int = 0
    nodes_pruned: int = 0
    depth: int = 0
    time_ms: float = 0.0
    best_score: Optional[float] = None
    tied_moves: List[str] = field(default_factory=list)
    best_move: Optional[str] = None

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization"""
        return {
            "nodes_searched": self.nodes_searched,
            "nodes_pruned": self.nodes_pruned,
            "depth": self.depth,
            "time_ms": round(self.time_ms, 3),
            "best_score": _finite_or_label(self.best_score),
            "tied_moves": list(self.tied_moves),
            "best_move": self.best_move,
        }


class MinimaxAI:
    """
    Depth-bounded MinMax with Alpha-Beta pruning choosing the defender's move.

    Example usage:
        ai = MinimaxAI(catalog, depth=3)
        defense = ai.get_best_move(state)
        if defense is None:
            resolver.skip_turn(state)
    """

    # Constants
    INF = float('inf')
    NEG_INF = float('-inf')

    DIVERSITY_PENALTY = 0.5

    def __init__(
        self,
        catalog: Catalog,
        depth: int = 3,
        use_pruning: bool = True,
        evaluator: Optional[StateEvaluator] = None
    ):
        """
        Initialize the MinMax agent.

        Args:
            catalog: Catalog used to resolve simulated moves
            depth: Fixed search depth in plies
            use_pruning: Whether to cut branches with alpha-beta
            evaluator: Heuristic used at the horizon
        """
        self.catalog = catalog
        self.depth = depth
        self.use_pruning = use_pruning
        self.evaluator = evaluator or StateEvaluator()
        self.resolver = CombatResolver(catalog)

        self.nodes_searched = 0
        self.nodes_pruned = 0
        self.last_stats = SearchStats()

    def evaluate(self, state: GameState) -> float:
        return self.evaluator.evaluate(state)

    def get_best_move(self, state: GameState) -> Optional[DefenseDefinition]:
        """
        Find the defender's best defense.

        Args:
            state: Current game state, defender to move

        Returns:
            Chosen defense definition, or None when no defense is legal
            (the caller skips the turn)
        """
        start = time.time()
        self.nodes_searched = 0
        self.nodes_pruned = 0
        self.last_stats = SearchStats(depth=self.depth)

        if state.game_over or state.current_player != PlayerRole.DEFENDER:
            logger.warning("get_best_move called when the defender cannot move")
            return None

        candidates = self.resolver.legal_moves(state, PlayerRole.DEFENDER)
        if not candidates:
            return None

        best_score: Optional[float] = None
        tied: List[DefenseDefinition] = []
        alpha, beta = self.NEG_INF, self.INF

        for defense in candidates:
            child, _ = self.resolver.simulate(state, Move.defense(defense.id))
            # Root children get a full window so tied scores are exact values
            score = self.minimax(child, self.depth - 1, False, self.NEG_INF, self.INF)

            if best_score is None or score > best_score:
                best_score = score
                tied = [defense]
            elif score == best_score:
                tied.append(defense)

            alpha = max(alpha, score)
            if self.use_pruning and beta <= alpha:
                self.nodes_pruned += 1
                break

        best = self._break_tie(state, tied)

        self.last_stats = SearchStats(
            nodes_searched=self.nodes_searched,
            nodes_pruned=self.nodes_pruned,
            depth=self.depth,
            time_ms=(time.time() - start) * 1000,
            best_score=best_score,
            tied_moves=[d.id for d in tied],
            best_move=best.id,
        )
        logger.debug("Best defense %s (score %s, %d nodes, %d pruned)",
                     best.id, best_score, self.nodes_searched, self.nodes_pruned)
        return best

    def minimax(
        self, state: GameState, depth: int,
        maximizing: bool, alpha: float = NEG_INF, beta: float = INF
    ) -> float:
        """
        The core MinMax algorithm with Alpha-Beta pruning.

        Args:
            state: Current game state
            depth: Remaining search depth
            maximizing: True at a defender ply
            alpha: Best score for maximizer found so far
            beta: Best score for minimizer found so far

        Returns:
            Evaluation score for this position
        """
        self.nodes_searched += 1

        if depth <= 0 or state.game_over:
            return self.evaluate(state)

        if maximizing:
            moves = self.resolver.legal_moves(state, PlayerRole.DEFENDER)
            if not moves:
                return self.evaluate(state)

            best_score = self.NEG_INF
            for defense in moves:
                child, _ = self.resolver.simulate(state, Move.defense(defense.id))
                score = self.minimax(child, depth - 1, False, alpha, beta)
                best_score = max(best_score, score)

                alpha = max(alpha, score)
                if self.use_pruning and beta <= alpha:
                    self.nodes_pruned += 1
                    break
            return best_score

        moves = self.resolver.legal_moves(state, PlayerRole.ATTACKER)
        if not moves:
            return self.evaluate(state)

        best_score = self.INF
        for attack in moves:
            child, _ = self.resolver.simulate(state, Move.attack(attack.id))
            score = self.minimax(child, depth - 1, True, alpha, beta)
            best_score = min(best_score, score)

            beta = min(beta, score)
            if self.use_pruning and beta <= alpha:
                self.nodes_pruned += 1
                break
        return best_score

    def _break_tie(self, state: GameState, tied: List[DefenseDefinition]) -> DefenseDefinition:
        """
        Prefer defenses that answer recent attacks and add variety.
        The first of equally ranked moves wins.
        """
        if len(tied) == 1:
            return tied[0]

        recent = state.attacker.recent_types(StateEvaluator.RECENT_ATTACKS)
        deployed = state.defender.history

        def rank(defense: DefenseDefinition) -> float:
            coverage = sum(defense.effectiveness_against(t) for t in recent)
            same_type = sum(1 for d in deployed if d.type == defense.type)
            return coverage - self.DIVERSITY_PENALTY * same_type

        return max(tied, key=rank)

    def get_search_stats(self) -> Dict:
        """Get statistics from the most recent search"""
        return self.last_stats.to_dict()


def _finite_or_label(value: Optional[float]):
    if value is None:
        return None
    if value == float('inf'):
        return "inf"
    if value == float('-inf'):
        return "-inf"
    return round(value, 4)


# =============================================================================
# Convenience Functions
# =============================================================================

def create_minmax_agent(catalog: Catalog, depth: int = 3) -> MinimaxAI:
    """
    Create a MinMax agent with the given search depth.
    """
    return MinimaxAI(catalog=catalog, depth=depth)
