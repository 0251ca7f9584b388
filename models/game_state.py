"""Session state and event models for the card game and the word grid."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, computed_field

from config import (
    CARD_BASE_TIME,
    ENABLE_NEGATIVE_BUFFS,
    END_WHEN_ALL_FOUND,
    GRID_SIZE,
    GRID_TIME_LIMIT,
    INITIAL_HAND_SIZE,
    MAX_HAND_SIZE,
    MAX_QUESTIONS,
    MISS_TIME_PENALTY,
)
from models.buffs import ActiveBuff, Buff
from models.questions import CardQuestion


class CardGameStatus(str, Enum):
    """Lifecycle of a card game session."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    GAME_OVER = "game_over"


class GameEvent(BaseModel):
    """A logged event from a card game session."""
    turn: int
    action_type: str
    description: str
    details: dict = {}
    timestamp: datetime


class CardGameConfig(BaseModel):
    """Tunable settings for one card game session."""
    max_hand_size: int = MAX_HAND_SIZE
    initial_hand_size: int = INITIAL_HAND_SIZE
    base_time: float = CARD_BASE_TIME
    max_questions: int = MAX_QUESTIONS
    enable_negative_buffs: bool = ENABLE_NEGATIVE_BUFFS
    miss_time_penalty: float = MISS_TIME_PENALTY


class CardGameState(BaseModel):
    """The full mutable record of a card game session."""
    status: CardGameStatus = CardGameStatus.NOT_STARTED
    config: CardGameConfig = CardGameConfig()
    questions: list[CardQuestion] = []
    score: int = 0
    combo: int = 0
    max_combo: int = 0
    hand: list[Buff] = []
    discard_pile: list[Buff] = []   # Cards already played
    active_buffs: list[ActiveBuff] = []
    current_question_index: int = 0
    time_remaining: float = 0
    total_time: float = 0
    shield_charges: int = 0
    correct_count: int = 0
    wrong_count: int = 0
    shielded_count: int = 0
    skipped_count: int = 0
    hint_visible: bool = False              # Reset on every new question
    eliminated_options: list[str] = []      # Reset on every new question
    event_log: list[GameEvent] = []

    @computed_field
    @property
    def is_game_over(self) -> bool:
        return self.status == CardGameStatus.GAME_OVER


class GameCell(BaseModel):
    """A single letter cell on the word grid."""
    letter: str
    row: int
    col: int
    selected: bool = False          # Terminal cell of the current path
    in_path: bool = False


class GameWord(BaseModel):
    """A target word hidden in the grid."""
    word: str
    hint: str = ""
    found: bool = False


class GridGameState(BaseModel):
    """The full mutable record of a word grid session."""
    grid_size: int = GRID_SIZE
    grid: list[list[GameCell]] = []         # grid[row][col]
    current_path: list[tuple[int, int]] = []  # (row, col), in click order
    found_words: list[str] = []
    all_words: list[GameWord] = []
    score: int = 0
    time_limit: float = GRID_TIME_LIMIT
    time_remaining: float = GRID_TIME_LIMIT
    is_game_over: bool = False
    end_when_all_found: bool = END_WHEN_ALL_FOUND
