# =============================================================================
# Cyber Wargame Engine - Win Probability
# =============================================================================
"""
Heuristic attacker/defender win-percentage split.

Five weighted signals (summing to 100) are accumulated for both sides and
normalized; override floors then apply in order for clearly decided
positions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from ..core.enums import ConfidenceLevel, PlayerRole
from ..core.game_state import GameState


SIGNAL_WEIGHTS = {
    "security": 35.0,
    "resources": 25.0,
    "critical_nodes": 20.0,
    "coverage": 10.0,
    "momentum": 10.0,
}

MOMENTUM_SHARE = 0.7
RECENT_ATTACKS = 3

ATTACKER_FLOOR_COLLAPSE = 85.0
DEFENDER_FLOOR_HIGH_SECURITY = 80.0
ATTACKER_FLOOR_PRESSURE = 75.0


@dataclass
class WinProbability:
    """Win-percentage split with its per-factor breakdown"""
    attacker: float
    defender: float
    factors: Dict[str, Dict[str, float]] = field(default_factory=dict)
    confidence: ConfidenceLevel = ConfidenceLevel.LOW
    overrides: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "attacker": round(self.attacker, 2),
            "defender": round(self.defender, 2),
            "factors": {
                name: {side: round(value, 4) for side, value in split.items()}
                for name, split in self.factors.items()
            },
            "confidence": self.confidence.value,
            "overrides": list(self.overrides),
        }


class WinProbabilityEstimator:
    """
    Stateless estimator over a GameState.
    """

    def estimate(self, state: GameState) -> WinProbability:
        """
        Compute the attacker/defender win percentages.

        Args:
            state: Game state to assess

        Returns:
            WinProbability summing to 100
        """
        confidence = self._confidence(state.turn)

        if state.game_over:
            attacker_wins = state.winner == PlayerRole.ATTACKER
            return WinProbability(
                attacker=100.0 if attacker_wins else 0.0,
                defender=0.0 if attacker_wins else 100.0,
                confidence=confidence,
            )

        factors = {
            "security": self._security_signal(state),
            "resources": self._resource_signal(state),
            "critical_nodes": self._critical_signal(state),
            "coverage": self._coverage_signal(state),
            "momentum": self._momentum_signal(state),
        }

        totals = np.array([
            [split["attacker"], split["defender"]] for split in factors.values()
        ]).sum(axis=0)
        combined = float(totals.sum())
        if combined > 0:
            attacker = float(totals[0]) / combined * 100
        else:
            attacker = 50.0
        defender = 100.0 - attacker

        overrides = []
        config = state.config
        security = state.security_level

        if security <= 1 and attacker < ATTACKER_FLOOR_COLLAPSE:
            attacker, defender = ATTACKER_FLOOR_COLLAPSE, 100.0 - ATTACKER_FLOOR_COLLAPSE
            overrides.append("security_collapse")
        if security >= config.high_security_threshold and defender < DEFENDER_FLOOR_HIGH_SECURITY:
            defender, attacker = DEFENDER_FLOOR_HIGH_SECURITY, 100.0 - DEFENDER_FLOOR_HIGH_SECURITY
            overrides.append("high_security")
        if (state.attacker.resources >= 10 and security <= 3
                and attacker < ATTACKER_FLOOR_PRESSURE):
            attacker, defender = ATTACKER_FLOOR_PRESSURE, 100.0 - ATTACKER_FLOOR_PRESSURE
            overrides.append("attacker_pressure")

        return WinProbability(
            attacker=attacker,
            defender=defender,
            factors=factors,
            confidence=confidence,
            overrides=overrides,
        )

    # =========================================================================
    # Signals
    # =========================================================================

    def _security_signal(self, state: GameState) -> Dict[str, float]:
        weight = SIGNAL_WEIGHTS["security"]
        ratio = min(1.0, max(0.0, state.security_ratio))
        return {"attacker": weight * (1 - ratio), "defender": weight * ratio}

    def _resource_signal(self, state: GameState) -> Dict[str, float]:
        weight = SIGNAL_WEIGHTS["resources"]
        attacker, defender = state.attacker.resources, state.defender.resources
        total = attacker + defender
        if total <= 0:
            return {"attacker": weight / 2, "defender": weight / 2}
        return {"attacker": weight * attacker / total, "defender": weight * defender / total}

    def _critical_signal(self, state: GameState) -> Dict[str, float]:
        weight = SIGNAL_WEIGHTS["critical_nodes"]
        critical = state.critical_nodes
        protected = sum(1 for n in critical if n.protected)
        attacked = sum(1 for n in critical if n.attacked)
        total = protected + attacked
        if total == 0:
            return {"attacker": weight / 2, "defender": weight / 2}
        return {"attacker": weight * attacked / total, "defender": weight * protected / total}

    def _coverage_signal(self, state: GameState) -> Dict[str, float]:
        weight = SIGNAL_WEIGHTS["coverage"]
        recent = state.attacker.recent_types(RECENT_ATTACKS)
        defenses = state.defender.history
        if not recent or not defenses:
            return {"attacker": 0.0, "defender": 0.0}

        best = [max(d.effectiveness_against(t) for d in defenses) for t in recent]
        return {"attacker": 0.0, "defender": weight * float(np.mean(best))}

    def _momentum_signal(self, state: GameState) -> Dict[str, float]:
        weight = SIGNAL_WEIGHTS["momentum"]
        leading, trailing = weight * MOMENTUM_SHARE, weight * (1 - MOMENTUM_SHARE)
        if state.security_level > state.config.security_midpoint:
            return {"attacker": trailing, "defender": leading}
        return {"attacker": leading, "defender": trailing}

    @staticmethod
    def _confidence(turn: int) -> ConfidenceLevel:
        if turn > 5:
            return ConfidenceLevel.HIGH
        if turn > 2:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW


def estimate_win_probability(state: GameState) -> WinProbability:
    """Convenience wrapper around WinProbabilityEstimator"""
    return WinProbabilityEstimator().estimate(state)
