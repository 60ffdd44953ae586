# =============================================================================
# Cyber Wargame Engine - Backend Package
# =============================================================================
"""
Cyber Wargame Engine

A turn-based attacker-vs-defender wargame over an abstract network,
featuring a MinMax defender with Alpha-Beta pruning, an online attack
predictor and a heuristic win-probability estimator.
"""

__version__ = "0.1.0"
