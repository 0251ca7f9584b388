"""Word grid session endpoints: load a grid, trace paths, submit words."""

import logging
import random

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from api.sessions import SessionStore
from config import END_WHEN_ALL_FOUND, GRID_SIZE, GRID_TIME_LIMIT
from engine import word_grid
from engine.errors import ConfigurationError
from models.actions import GridGameResult, SubmitResult
from models.game_state import GameWord, GridGameState

logger = logging.getLogger(__name__)

router = APIRouter()


class StartWordGridRequest(BaseModel):
    """Request body for starting a word grid session."""
    letters: list[list[str]]
    words: list[GameWord]
    grid_size: int = GRID_SIZE
    time_limit: float = GRID_TIME_LIMIT
    end_when_all_found: bool = END_WHEN_ALL_FOUND


class CellClickRequest(BaseModel):
    row: int
    col: int


class TickRequest(BaseModel):
    delta_seconds: float = Field(ge=0)


class SubmitResponse(BaseModel):
    result: SubmitResult
    score: int
    is_game_over: bool


def _get_sessions(request: Request) -> SessionStore:
    """Get the word grid session store from app state."""
    return request.app.state.word_grids


def _state_payload(state: GridGameState) -> dict:
    payload = state.model_dump(mode="json")
    payload["current_word"] = word_grid.current_word(state)
    return payload


@router.post("")
def start_word_grid(body: StartWordGridRequest, request: Request) -> dict:
    """Start a new word grid session with generated letters and words."""
    sessions = _get_sessions(request)
    try:
        state = word_grid.create_game(body.grid_size, body.time_limit, body.end_when_all_found)
        word_grid.set_grid(state, body.letters, body.words)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session_id = sessions.add(state, random.Random())
    logger.info("Word grid session %s created", session_id)
    return {"session_id": session_id, "state": _state_payload(state)}


@router.get("/{session_id}")
def get_word_grid(session_id: str, request: Request) -> dict:
    """Get the current state of a word grid session."""
    sessions = _get_sessions(request)
    with sessions.lock:
        return _state_payload(sessions.get(session_id).state)


@router.post("/{session_id}/click")
def click_cell(session_id: str, body: CellClickRequest, request: Request) -> dict:
    """Click a cell to extend or shorten the traced path."""
    sessions = _get_sessions(request)
    with sessions.lock:
        state = sessions.get(session_id).state
        word_grid.handle_cell_click(state, body.row, body.col)
        return {
            "current_path": state.current_path,
            "current_word": word_grid.current_word(state),
        }


@router.post("/{session_id}/clear")
def clear_path(session_id: str, request: Request) -> dict:
    """Drop the traced path."""
    sessions = _get_sessions(request)
    with sessions.lock:
        state = sessions.get(session_id).state
        if not state.is_game_over:
            word_grid.clear_path(state)
        return {"current_path": state.current_path, "current_word": ""}


@router.post("/{session_id}/submit", response_model=SubmitResponse)
def submit_word(session_id: str, request: Request) -> SubmitResponse:
    """Submit the traced word."""
    sessions = _get_sessions(request)
    with sessions.lock:
        state = sessions.get(session_id).state
        result = word_grid.submit_word(state)
        return SubmitResponse(result=result, score=state.score, is_game_over=state.is_game_over)


@router.post("/{session_id}/tick")
def tick(session_id: str, body: TickRequest, request: Request) -> dict:
    """Advance the session countdown."""
    sessions = _get_sessions(request)
    with sessions.lock:
        state = sessions.get(session_id).state
        word_grid.update_timer(state, body.delta_seconds)
        return {"time_remaining": state.time_remaining, "is_game_over": state.is_game_over}


@router.get("/{session_id}/result", response_model=GridGameResult)
def get_word_grid_result(session_id: str, request: Request) -> GridGameResult:
    """Get the session summary."""
    sessions = _get_sessions(request)
    with sessions.lock:
        return word_grid.get_result(sessions.get(session_id).state)


@router.delete("/{session_id}")
def delete_word_grid(session_id: str, request: Request) -> dict:
    """Discard a session."""
    if not _get_sessions(request).remove(session_id):
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return {"deleted": True}
