"""
HTTP front end for game sessions: app factory, routers and the mapping of
engine errors onto JSON error bodies.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..core import TOPOLOGIES, GameConfig, GameError
from .routes import analysis, games

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DESCRIPTION = (
    "Attacker vs defender wargame over a small network. The attacker moves "
    "through the API; a MinMax defender may answer, and every turn reports "
    "next-attack forecasts and win odds."
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = GameConfig.from_env()
    logger.info("Game API up (search depth %d, topologies: %s)",
                config.search_depth, ", ".join(TOPOLOGIES))
    yield
    logger.info("Game API stopped with %d open games", len(games.games_store))


app = FastAPI(
    title="Cyber Wargame Engine API",
    description=DESCRIPTION,
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(games.router, prefix="/api/games", tags=["Games"])
app.include_router(analysis.router, prefix="/api/analysis", tags=["Analysis"])


# =============================================================================
# Service Endpoints
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Cyber Wargame Engine API",
        "version": __version__,
        "documentation": "/api/docs",
        "health": "/health",
        "topologies": list(TOPOLOGIES),
        "endpoints": {
            "games": "/api/games",
            "analysis": "/api/analysis"
        }
    }


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "service": "cyber-wargame-engine-api",
        "version": __version__,
        "active_games": len(games.games_store)
    }


# =============================================================================
# Error Mapping
# =============================================================================

def _error_body(status_code: int, message, code: str = None) -> JSONResponse:
    content = {"error": message, "status_code": status_code}
    if code is not None:
        content["code"] = code
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(GameError)
async def game_error_handler(request, exc: GameError):
    """Rejected moves are client errors carrying the engine's error code"""
    return _error_body(400, exc.message, exc.code)


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    return _error_body(exc.status_code, exc.detail)


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return _error_body(500, "Internal server error")
