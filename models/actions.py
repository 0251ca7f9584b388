"""Result models returned by engine operations."""

from pydantic import BaseModel

from models.game_state import GameWord


class AnswerResult(BaseModel):
    """Outcome of answering the current card game question."""
    correct: bool
    score_delta: int
    shielded: bool = False          # Miss absorbed by a shield charge
    correct_answer: str
    combo: int


class SubmitResult(BaseModel):
    """Outcome of submitting the traced word on the grid."""
    success: bool
    word: str
    is_new: bool
    score_delta: int = 0


class CardGameResult(BaseModel):
    """Summary of a card game session."""
    final_score: int
    correct_count: int
    wrong_count: int
    total_questions: int
    answered_count: int
    max_combo: int
    accuracy: int                   # Percent of answered questions
    cards_used: int
    rare_cards_used: int
    skipped_count: int
    achievements: list[str] = []


class GridGameResult(BaseModel):
    """Summary of a word grid session."""
    score: int
    found_words: list[str]
    total_words: int
    all_words: list[GameWord]
    time_remaining: float
