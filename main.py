"""FastAPI app entry point for Wordplay Server."""

from fastapi import FastAPI

from api.card_game import router as card_game_router
from api.sessions import SessionStore
from api.word_grid import router as word_grid_router
from config import LOG_FILE, LOG_LEVEL, MAX_SESSIONS
from logging_config import setup_logging

setup_logging(level=LOG_LEVEL, log_file=LOG_FILE)

app = FastAPI(
    title="Wordplay Server",
    description="Card-buff quiz and letter-grid word games for vocabulary practice",
    version="0.1.0",
)

app.state.card_games = SessionStore(MAX_SESSIONS)
app.state.word_grids = SessionStore(MAX_SESSIONS)

app.include_router(card_game_router, prefix="/card-game", tags=["Card Game"])
app.include_router(word_grid_router, prefix="/word-grid", tags=["Word Grid"])


@app.get("/")
def root() -> dict:
    """Root endpoint returning server info."""
    return {"name": "Wordplay Server", "version": "0.1.0", "status": "running"}


@app.get("/health")
def health() -> dict:
    """Health check endpoint."""
    return {
        "healthy": True,
        "card_games": len(app.state.card_games),
        "word_grids": len(app.state.word_grids),
    }
