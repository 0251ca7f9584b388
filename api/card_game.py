"""Card game session endpoints: start, play cards, answer, tick, results."""

import logging
import random

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from api.sessions import SessionStore
from engine import card_game
from engine.errors import ConfigurationError, InvalidStateError
from models.actions import AnswerResult, CardGameResult
from models.game_state import CardGameConfig, CardGameState
from models.questions import CardQuestion

logger = logging.getLogger(__name__)

router = APIRouter()


class StartCardGameRequest(BaseModel):
    """Request body for starting a card game session."""
    questions: list[CardQuestion]
    config: CardGameConfig = CardGameConfig()
    seed: int | None = None         # Fixes the card draws when given


class AnswerRequest(BaseModel):
    answer: str


class TickRequest(BaseModel):
    delta_seconds: float = Field(ge=0)


class AnswerResponse(BaseModel):
    result: AnswerResult
    is_game_over: bool
    score: int


def _get_sessions(request: Request) -> SessionStore:
    """Get the card game session store from app state."""
    return request.app.state.card_games


def _state_payload(state: CardGameState) -> dict:
    """Public view of a session: the question bank stays server-side.

    The view shuffles and masks with its own Random so that polling never
    moves the session generator that deals the cards.
    """
    view = card_game.present_question(state, random.Random())
    payload = state.model_dump(mode="json", exclude={"questions", "event_log"})
    payload["total_questions"] = len(state.questions)
    payload["question"] = view.model_dump(mode="json") if view else None
    return payload


@router.post("")
def start_card_game(body: StartCardGameRequest, request: Request) -> dict:
    """Start a new card game with the supplied question bank."""
    sessions = _get_sessions(request)
    rng = random.Random(body.seed)
    state = card_game.create_game(body.config)
    try:
        card_game.start_game(state, body.questions, rng)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    session_id = sessions.add(state, rng)
    logger.info("Card game session %s created", session_id)
    return {"session_id": session_id, "state": _state_payload(state)}


@router.get("/{session_id}")
def get_card_game(session_id: str, request: Request) -> dict:
    """Get the current state of a card game session."""
    sessions = _get_sessions(request)
    with sessions.lock:
        session = sessions.get(session_id)
        return _state_payload(session.state)


@router.get("/{session_id}/question")
def get_question(session_id: str, request: Request) -> dict | None:
    """Get the current question as the player should see it."""
    sessions = _get_sessions(request)
    with sessions.lock:
        session = sessions.get(session_id)
        view = card_game.present_question(session.state, random.Random())
        return view.model_dump(mode="json") if view else None


@router.get("/{session_id}/log")
def get_event_log(session_id: str, request: Request) -> list[dict]:
    """Get the event log of a card game session."""
    sessions = _get_sessions(request)
    with sessions.lock:
        session = sessions.get(session_id)
        return [event.model_dump(mode="json") for event in session.state.event_log]


@router.post("/{session_id}/cards/{buff_id}")
def play_card(session_id: str, buff_id: str, request: Request) -> dict:
    """Play a buff card from the hand."""
    sessions = _get_sessions(request)
    with sessions.lock:
        session = sessions.get(session_id)
        state = session.state
        if state.is_game_over:
            raise HTTPException(status_code=409, detail="Game is over")
        if not card_game.use_card(state, buff_id, session.rng):
            raise HTTPException(status_code=400, detail=f"Card '{buff_id}' is not in your hand")
        return _state_payload(state)


@router.post("/{session_id}/answer", response_model=AnswerResponse)
def submit_answer(session_id: str, body: AnswerRequest, request: Request) -> AnswerResponse:
    """Answer the current question."""
    sessions = _get_sessions(request)
    with sessions.lock:
        session = sessions.get(session_id)
        try:
            result = card_game.answer(session.state, body.answer)
        except InvalidStateError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return AnswerResponse(
            result=result,
            is_game_over=session.state.is_game_over,
            score=session.state.score,
        )


@router.post("/{session_id}/tick")
def tick(session_id: str, body: TickRequest, request: Request) -> dict:
    """Advance the session clock."""
    sessions = _get_sessions(request)
    with sessions.lock:
        session = sessions.get(session_id)
        card_game.tick(session.state, body.delta_seconds)
        return {
            "time_remaining": session.state.time_remaining,
            "is_game_over": session.state.is_game_over,
        }


@router.post("/{session_id}/end", response_model=CardGameResult)
def end_card_game(session_id: str, request: Request) -> CardGameResult:
    """Quit the session early and return the summary."""
    sessions = _get_sessions(request)
    with sessions.lock:
        session = sessions.get(session_id)
        card_game.end_game(session.state)
        return card_game.get_result(session.state)


@router.get("/{session_id}/result", response_model=CardGameResult)
def get_card_game_result(session_id: str, request: Request) -> CardGameResult:
    """Get the session summary (partial while the game is running)."""
    sessions = _get_sessions(request)
    with sessions.lock:
        return card_game.get_result(sessions.get(session_id).state)


@router.delete("/{session_id}")
def delete_card_game(session_id: str, request: Request) -> dict:
    """Discard a session."""
    if not _get_sessions(request).remove(session_id):
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return {"deleted": True}
