"""Question models consumed by the card game."""

from enum import Enum

from pydantic import BaseModel


class QuestionType(str, Enum):
    """Supported question shapes."""
    CHOICE = "choice"
    SPELLING = "spelling"
    TRANSLATION = "translation"
    LISTENING = "listening"
    FILL_BLANK = "fill_blank"


# Question types answered by picking one of the listed options
OPTION_TYPES = (QuestionType.CHOICE, QuestionType.FILL_BLANK)


class CardQuestion(BaseModel):
    """A question supplied by the content generator."""
    id: str
    type: QuestionType
    prompt: str
    correct_answer: str
    options: list[str] = []         # For choice / fill-in-the-blank
    difficulty: int = 2             # 1 (easy) .. 5 (hard)
    points: int | None = None       # Defaults to difficulty * 10
    hint: str | None = None


class QuestionView(BaseModel):
    """What the player sees for the current question after buffs apply."""
    id: str
    index: int
    type: QuestionType
    prompt: str
    options: list[str] = []
    hint: str | None = None
    time_attack: bool = False
