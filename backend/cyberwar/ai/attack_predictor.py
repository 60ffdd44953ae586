# =============================================================================
# Cyber Wargame Engine - Attack Predictor
# =============================================================================
"""
Online model forecasting the attacker's next move.

The predictor keeps a bounded window of attack records and two statistics
derived from it: a first-order transition count between consecutive attack
types and a per-type frequency count. Both are rebuilt from the window on
every update, which stays cheap while the window is capped.

Six factors are scored per candidate attack and combined with fixed weights:

    transition  P(candidate type | last type) from the transition counts
    frequency   share of the window with the candidate's type
    resource    how comfortably the attacker can pay for it
    efficiency  success rate plus a bonus per exposed node
    recency     penalty for types used in the last three attacks
    security    pressure from a still-high security level on costly attacks
"""

import logging
import time
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..core.data_structures import AttackDefinition
from ..core.enums import ConfidenceLevel
from ..core.game_state import GameState

logger = logging.getLogger(__name__)


FACTOR_NAMES: Tuple[str, ...] = (
    "transition", "frequency", "resource", "efficiency", "recency", "security"
)

FACTOR_WEIGHTS = np.array([0.25, 0.20, 0.15, 0.20, 0.10, 0.10])

DEFAULT_SUCCESS_RATE = 0.5


@dataclass
class AttackRecord:
    """One observed attack with the context it was played in"""
    id: str
    name: str
    type: str
    cost: int
    success_rate: float
    turn: int
    timestamp: float = field(default_factory=time.time)
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AttackPrediction:
    """Forecast for a single candidate attack"""
    attack: AttackDefinition
    probability: float
    confidence: ConfidenceLevel
    factors: Dict[str, float]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "attack_id": self.attack.id,
            "attack_name": self.attack.name,
            "attack_type": self.attack.type,
            "probability": self.probability,
            "confidence": self.confidence.value,
            "factors": dict(self.factors),
        }


class AttackPredictor:
    """
    Forecasts the attacker's next move from its move history.

    The history lives independently of any GameState and is cleared by
    ``reset`` when a new game starts.
    """

    def __init__(self, history_limit: int = 50):
        self.history_limit = history_limit
        self.attack_history: Deque[AttackRecord] = deque(maxlen=history_limit)
        self.transition_matrix: Counter = Counter()
        self.attack_frequency: Counter = Counter()
        self.last_update_time = time.time()

    # =========================================================================
    # History
    # =========================================================================

    def update_history(self, attack: AttackDefinition, state: GameState):
        """
        Record an attack; the oldest record is evicted past the cap.
        """
        record = AttackRecord(
            id=attack.id,
            name=attack.name,
            type=attack.type,
            cost=attack.cost,
            success_rate=attack.success_rate,
            turn=state.turn,
            context={
                "security_level": state.security_level,
                "attacker_resources": state.attacker.resources,
                "available_attacks": sorted(state.attacker.available_moves),
            },
        )
        self.attack_history.append(record)
        self._update_transition_matrix()
        self._update_frequency_map()
        self.last_update_time = time.time()

    def _update_transition_matrix(self):
        self.transition_matrix.clear()
        types = [r.type for r in self.attack_history]
        for prev_type, cur_type in zip(types, types[1:]):
            self.transition_matrix[(prev_type, cur_type)] += 1

    def _update_frequency_map(self):
        self.attack_frequency.clear()
        self.attack_frequency.update(r.type for r in self.attack_history)

    def reset(self):
        """Forget everything learned so far"""
        self.attack_history.clear()
        self.transition_matrix.clear()
        self.attack_frequency.clear()
        self.last_update_time = time.time()

    # =========================================================================
    # Prediction
    # =========================================================================

    def predict_next_attack(
        self, candidates: Sequence[AttackDefinition], state: GameState
    ) -> List[AttackPrediction]:
        """
        Rank candidate attacks by how likely the attacker is to play them.

        Args:
            candidates: Attacks the attacker can currently play
            state: Current game state

        Returns:
            Predictions sorted by probability (descending, stable on ties);
            probabilities sum to 1 for a non-empty candidate set
        """
        if not candidates:
            return []

        n = len(candidates)
        if not self.attack_history:
            return [
                AttackPrediction(
                    attack=attack,
                    probability=1.0 / n,
                    confidence=ConfidenceLevel.LOW,
                    factors={
                        "transition": 0.0,
                        "frequency": 0.0,
                        "resource": 1.0 / n,
                        "efficiency": attack.success_rate or DEFAULT_SUCCESS_RATE,
                        "recency": 0.0,
                        "security": self._security_factor(attack, state),
                    },
                )
                for attack in candidates
            ]

        factor_rows = np.array([self._factor_vector(a, state) for a in candidates])
        raw_scores = factor_rows @ FACTOR_WEIGHTS

        total = float(raw_scores.sum())
        if total > 0:
            probabilities = raw_scores / total
        else:
            probabilities = np.full(n, 1.0 / n)

        predictions = []
        for attack, row, raw, probability in zip(candidates, factor_rows, raw_scores, probabilities):
            factors = {name: float(value) for name, value in zip(FACTOR_NAMES, row)}
            predictions.append(AttackPrediction(
                attack=attack,
                probability=float(probability),
                confidence=self.calculate_confidence(float(raw), factors),
                factors=factors,
            ))

        return sorted(predictions, key=lambda p: -p.probability)

    def calculate_prediction_factors(self, attack: AttackDefinition, state: GameState) -> Dict[str, float]:
        """Named factor values for one candidate"""
        return dict(zip(FACTOR_NAMES, self._factor_vector(attack, state)))

    def _factor_vector(self, attack: AttackDefinition, state: GameState) -> List[float]:
        return [
            self._transition_probability(attack),
            self._frequency_score(attack),
            self._resource_score(attack, state),
            self._efficiency_score(attack, state),
            self._recency_score(attack),
            self._security_factor(attack, state),
        ]

    def _transition_probability(self, attack: AttackDefinition) -> float:
        if not self.attack_history:
            return 0.0
        last_type = self.attack_history[-1].type
        from_last = sum(
            count for (prev_type, _), count in self.transition_matrix.items()
            if prev_type == last_type
        )
        if from_last == 0:
            return 0.0
        return self.transition_matrix[(last_type, attack.type)] / from_last

    def _frequency_score(self, attack: AttackDefinition) -> float:
        if not self.attack_history:
            return 0.0
        return self.attack_frequency[attack.type] / len(self.attack_history)

    def _resource_score(self, attack: AttackDefinition, state: GameState) -> float:
        if attack.cost <= 0:
            return 1.0
        ratio = state.attacker.resources / attack.cost
        return min(ratio / 5, 1.0)

    def _efficiency_score(self, attack: AttackDefinition, state: GameState) -> float:
        base = attack.success_rate or DEFAULT_SUCCESS_RATE
        exposed = len(state.vulnerable_nodes(attack.type))
        return min(base + 0.1 * exposed, 1.0)

    def _recency_score(self, attack: AttackDefinition) -> float:
        recent = list(self.attack_history)[-3:]
        count = sum(1 for r in recent if r.type == attack.type)
        return max(0.0, 1.0 - count * 0.3)

    def _security_factor(self, attack: AttackDefinition, state: GameState) -> float:
        return state.security_ratio * (attack.cost / 10)

    @staticmethod
    def calculate_confidence(probability: float, factors: Dict[str, float]) -> ConfidenceLevel:
        """Label how much to trust a prediction"""
        mean_factor = float(np.mean(list(factors.values()))) if factors else 0.0
        score = (probability + mean_factor) / 2

        if score >= 0.8:
            return ConfidenceLevel.VERY_HIGH
        if score >= 0.6:
            return ConfidenceLevel.HIGH
        if score >= 0.4:
            return ConfidenceLevel.MEDIUM
        if score >= 0.2:
            return ConfidenceLevel.LOW
        return ConfidenceLevel.VERY_LOW

    # =========================================================================
    # Reporting
    # =========================================================================

    def get_recent_pattern(self) -> str:
        """Describe the attacker's behaviour over the last five attacks"""
        if len(self.attack_history) < 2:
            return "Insufficient data"

        types = [r.type for r in list(self.attack_history)[-5:]]
        unique = set(types)

        if len(unique) == 1:
            return f"Repeating {types[0]} attacks"
        if len(unique) == len(types):
            return "Diverse attack strategy"
        return f"Favoring {_most_frequent(types)} attacks"

    def get_most_used_type(self) -> str:
        if not self.attack_history:
            return "None"
        return _most_frequent([r.type for r in self.attack_history])

    def get_prediction_summary(
        self, candidates: Sequence[AttackDefinition], state: GameState
    ) -> Dict[str, Any]:
        """Ranked forecast plus an aggregate summary, percentages rounded"""
        predictions = self.predict_next_attack(candidates, state)

        if not predictions:
            return {
                "predictions": [],
                "summary": {
                    "most_likely": "No attacks available",
                    "confidence": "N/A",
                    "total_attacks": len(self.attack_history),
                    "recent_pattern": "No pattern detected",
                },
            }

        top = predictions[0]
        rows = []
        for prediction in predictions:
            row = prediction.to_dict()
            row["probability"] = round(prediction.probability * 100)
            rows.append(row)

        return {
            "predictions": rows,
            "summary": {
                "most_likely": top.attack.name,
                "confidence": top.confidence.value,
                "total_attacks": len(self.attack_history),
                "recent_pattern": self.get_recent_pattern(),
            },
        }

    def get_detailed_analysis(
        self, candidates: Sequence[AttackDefinition], state: GameState
    ) -> Dict[str, Any]:
        """Per-factor breakdown for every candidate plus history statistics"""
        predictions = self.predict_next_attack(candidates, state)
        stats = self.get_stats()

        return {
            "detailed_analysis": [
                {
                    "attack": p.attack.to_dict(),
                    "probability": round(p.probability * 100),
                    "factors": {k: round(v * 100) for k, v in p.factors.items()},
                }
                for p in predictions
            ],
            "history_stats": {
                "total_attacks": stats["total_attacks"],
                "unique_types": stats["unique_attack_types"],
                "avg_cost": round(stats["avg_attack_cost"], 1),
                "most_used_type": stats["most_used_type"],
            },
        }

    def get_stats(self) -> Dict[str, Any]:
        """Aggregate statistics over the history window"""
        costs = [r.cost for r in self.attack_history]
        return {
            "total_attacks": len(self.attack_history),
            "unique_attack_types": len(self.attack_frequency),
            "avg_attack_cost": float(np.mean(costs)) if costs else 0.0,
            "most_used_type": self.get_most_used_type(),
            "transition_count": len(self.transition_matrix),
            "last_update": self.last_update_time,
        }


def _most_frequent(types: List[str]) -> Optional[str]:
    """Most common type; ties go to the type seen first"""
    counts = Counter(types)
    best, best_count = None, 0
    for attack_type in types:
        if counts[attack_type] > best_count:
            best, best_count = attack_type, counts[attack_type]
    return best
