"""
Analysis Routes

REST API endpoints for the read-only analytics of a game:
- Next-attack predictions and their factor breakdown
- Win probability
- AI defense suggestion
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Path
from pydantic import BaseModel

from ...core import PlayerRole
from .games import get_session

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class SuggestionResponse(BaseModel):
    """Defense the AI would play, with the search statistics behind it"""
    game_id: str
    suggestion: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None
    search_stats: Dict[str, Any] = {}


# =============================================================================
# API Endpoints
# =============================================================================

@router.get("/{game_id}/attack-predictions")
async def get_attack_predictions(game_id: str = Path(..., description="Game ID")):
    """
    Ranked forecast of the attacker's next move.
    """
    session = get_session(game_id)
    return session.prediction_summary()


@router.get("/{game_id}/prediction-analysis")
async def get_prediction_analysis(game_id: str = Path(..., description="Game ID")):
    """
    Per-factor breakdown for every candidate attack plus history statistics.
    """
    session = get_session(game_id)
    return session.prediction_analysis()


@router.get("/{game_id}/win-probability")
async def get_win_probability(game_id: str = Path(..., description="Game ID")):
    """
    Attacker/defender win percentages with their contributing factors.
    """
    session = get_session(game_id)
    return session.win_probability().to_dict()


@router.get("/{game_id}/ai-suggestion", response_model=SuggestionResponse)
async def get_ai_suggestion(game_id: str = Path(..., description="Game ID")):
    """
    Ask the MinMax defender for its move without playing it.
    """
    session = get_session(game_id)
    state = session.state

    if state.game_over:
        return SuggestionResponse(game_id=game_id, reason="Game is over")
    if state.current_player != PlayerRole.DEFENDER:
        return SuggestionResponse(game_id=game_id, reason="Not defender's turn")

    defense = session.suggest_defense()
    return SuggestionResponse(
        game_id=game_id,
        suggestion=defense.to_dict() if defense else None,
        reason=None if defense else "No legal defense",
        search_stats=session.ai.get_search_stats(),
    )
