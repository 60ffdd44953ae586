"""
Game Routes

REST API endpoints for game management:
- Create/list/get/delete games
- Submit attacker and defender moves
- Let the AI defend
- Reset a game
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, Path, Query
from pydantic import BaseModel, Field

from ...core import GameConfig, GameSession, get_topology

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Pydantic Models for Request/Response
# =============================================================================

class CreateGameRequest(BaseModel):
    """Request model for creating a new game"""
    search_depth: Optional[int] = Field(default=None, ge=1, le=5, description="MinMax search depth")
    max_security: Optional[float] = Field(default=None, gt=0, description="Override maximum security")
    legacy_catalog_mutation: bool = Field(default=False, description="Reproduce shared-catalog hardening")
    topology: str = Field(default="default", description="Named network topology (default or guarded)")

    class Config:
        json_schema_extra = {
            "example": {
                "search_depth": 3,
                "legacy_catalog_mutation": False
            }
        }


class AttackRequest(BaseModel):
    """Request model for an attacker move"""
    attack_id: str = Field(..., description="Attack catalog id")
    auto_defend: bool = Field(default=True, description="Let the AI answer immediately")

    class Config:
        json_schema_extra = {
            "example": {
                "attack_id": "dos",
                "auto_defend": True
            }
        }


class DefenseRequest(BaseModel):
    """Request model for a manual defender move"""
    defense_id: str = Field(..., description="Defense catalog id")


class GameStateResponse(BaseModel):
    """Response model for game state"""
    game_id: str
    turn: int
    current_player: str
    network: Dict[str, Any]
    attacker: Dict[str, Any]
    defender: Dict[str, Any]
    game_over: bool
    winner: Optional[str] = None


class MoveResponse(BaseModel):
    """Response model for a resolved move or exchange"""
    game_state: GameStateResponse
    attack: Optional[Dict[str, Any]] = None
    defense: Optional[Dict[str, Any]] = None
    defender_skipped: bool = False
    predictions: Optional[Dict[str, Any]] = None
    win_probability: Dict[str, Any]


# =============================================================================
# Game Storage (In-Memory)
# =============================================================================

games_store: Dict[str, GameSession] = {}


def get_session(game_id: str) -> GameSession:
    """Look up a session or answer 404"""
    session = games_store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return session


def game_state_to_response(session: GameSession, game_id: str) -> GameStateResponse:
    """Convert session state to API response"""
    return GameStateResponse(game_id=game_id, **session.snapshot())


def _config_from_request(request: CreateGameRequest) -> GameConfig:
    config = GameConfig.from_env()
    if request.search_depth is not None:
        config.search_depth = request.search_depth
    if request.max_security is not None:
        config.max_security = request.max_security
        config.high_security_threshold = min(config.high_security_threshold, request.max_security)
    config.legacy_catalog_mutation = request.legacy_catalog_mutation
    return config


# =============================================================================
# API Endpoints
# =============================================================================

@router.post("/", response_model=GameStateResponse)
async def create_new_game(request: Optional[CreateGameRequest] = None):
    """
    Create a new game session.

    Returns the initial game state.
    """
    request = request or CreateGameRequest()
    try:
        topology = get_topology(request.topology)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    session = GameSession(config=_config_from_request(request), topology=topology)
    game_id = str(uuid.uuid4())
    games_store[game_id] = session

    logger.info("Created game %s", game_id)
    return game_state_to_response(session, game_id)


@router.get("/", response_model=List[Dict[str, Any]])
async def list_games(
    active_only: bool = Query(default=True, description="Only return active games")
):
    """
    List all game sessions.
    """
    games = []
    for game_id, session in games_store.items():
        is_active = not session.state.game_over
        if active_only and not is_active:
            continue
        games.append({
            "game_id": game_id,
            "turn": session.state.turn,
            "current_player": session.state.current_player.name,
            "is_active": is_active,
        })
    return games


@router.get("/{game_id}", response_model=GameStateResponse)
async def get_game(game_id: str = Path(..., description="Game ID")):
    """
    Get the current state of a game.
    """
    return game_state_to_response(get_session(game_id), game_id)


@router.post("/{game_id}/attack", response_model=MoveResponse)
async def execute_attack(
    game_id: str = Path(..., description="Game ID"),
    request: AttackRequest = Body(...)
):
    """
    Submit the attacker's move; by default the AI defender answers.

    Returns both resolutions, the next-attack forecast and the odds.
    """
    session = get_session(game_id)

    if request.auto_defend:
        report = session.play_turn(request.attack_id)
        return MoveResponse(
            game_state=game_state_to_response(session, game_id),
            attack=report.attack.to_dict(),
            defense=report.defense.to_dict() if report.defense else None,
            defender_skipped=report.defender_skipped,
            predictions=report.predictions,
            win_probability=report.win_probability,
        )

    attack = session.submit_attack(request.attack_id)
    return MoveResponse(
        game_state=game_state_to_response(session, game_id),
        attack=attack.to_dict(),
        win_probability=session.win_probability().to_dict(),
    )


@router.post("/{game_id}/defend", response_model=MoveResponse)
async def execute_ai_defense(game_id: str = Path(..., description="Game ID")):
    """
    Let the AI make the defender's move (skips the turn if none is legal).
    """
    session = get_session(game_id)
    defense = session.play_defender_turn()

    return MoveResponse(
        game_state=game_state_to_response(session, game_id),
        defense=defense.to_dict() if defense else None,
        defender_skipped=defense is None,
        predictions=session.prediction_summary() if not session.state.game_over else None,
        win_probability=session.win_probability().to_dict(),
    )


@router.post("/{game_id}/defense", response_model=MoveResponse)
async def execute_defense(
    game_id: str = Path(..., description="Game ID"),
    request: DefenseRequest = Body(...)
):
    """
    Submit a defender move chosen by the player.
    """
    session = get_session(game_id)
    defense = session.submit_defense(request.defense_id)

    return MoveResponse(
        game_state=game_state_to_response(session, game_id),
        defense=defense.to_dict(),
        win_probability=session.win_probability().to_dict(),
    )


@router.post("/{game_id}/skip", response_model=GameStateResponse)
async def skip_turn(game_id: str = Path(..., description="Game ID")):
    """
    Pass the turn for the player to move.
    """
    session = get_session(game_id)
    session.skip_turn()
    return game_state_to_response(session, game_id)


@router.post("/{game_id}/reset", response_model=GameStateResponse)
async def reset_game(game_id: str = Path(..., description="Game ID")):
    """
    Reset a game to its initial state and clear the predictor.
    """
    session = get_session(game_id)
    session.reset()
    return game_state_to_response(session, game_id)


@router.delete("/{game_id}")
async def delete_game(game_id: str = Path(..., description="Game ID")):
    """
    Delete a game session.
    """
    get_session(game_id)
    del games_store[game_id]
    return {"message": "Game deleted", "game_id": game_id}


@router.get("/{game_id}/history", response_model=List[Dict[str, Any]])
async def get_game_history(game_id: str = Path(..., description="Game ID")):
    """
    Get the event history of a game.
    """
    session = get_session(game_id)
    return [
        dict(event.to_dict(), index=i)
        for i, event in enumerate(session.event_history)
    ]
