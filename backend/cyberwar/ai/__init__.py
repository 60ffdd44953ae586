# =============================================================================
# AI Module
# =============================================================================
"""
Decision and analytics components for the Cyber Wargame Engine.

Contains:
- MinimaxAI: MinMax with Alpha-Beta pruning choosing the defender's move
- AttackPredictor: online forecast of the attacker's next move
- WinProbabilityEstimator: heuristic attacker/defender odds
"""

from .minmax_agent import (
    MinimaxAI,
    StateEvaluator,
    SearchStats,
    create_minmax_agent,
)
from .attack_predictor import (
    AttackPredictor,
    AttackPrediction,
    AttackRecord,
)
from .win_probability import (
    WinProbability,
    WinProbabilityEstimator,
    estimate_win_probability,
)

__all__ = [
    # MinMax Agent
    "MinimaxAI",
    "StateEvaluator",
    "SearchStats",
    "create_minmax_agent",

    # Prediction
    "AttackPredictor",
    "AttackPrediction",
    "AttackRecord",

    # Odds
    "WinProbability",
    "WinProbabilityEstimator",
    "estimate_win_probability",
]
