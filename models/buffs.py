"""Buff card models for the card game."""

from enum import Enum

from pydantic import BaseModel


class BuffType(str, Enum):
    """Every kind of effect a buff card can carry."""
    # Positive
    DOUBLE_SCORE = "double_score"
    EXTRA_TIME = "extra_time"
    HINT = "hint"
    SHIELD = "shield"               # Absorbs one wrong answer
    LUCKY_CARD = "lucky_card"       # Skip the current question
    COMBO_BOOST = "combo_boost"
    REVEAL_ANSWER = "reveal_answer" # Eliminate wrong options
    TIME_FREEZE = "time_freeze"     # Clock paused while active
    # Negative
    TIME_ATTACK = "time_attack"     # Misses cost extra seconds
    BLIND_MODE = "blind_mode"       # Half the option letters hidden
    SHUFFLE = "shuffle"             # Options reordered every view
    HARD_MODE = "hard_mode"         # No hints


class BuffRarity(str, Enum):
    """Rarity tiers, declared from most to least common."""
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"

    @property
    def rank(self) -> int:
        """Position in the tier order (common = 0)."""
        return list(BuffRarity).index(self)


class Buff(BaseModel):
    """A single buff card instance."""
    id: str
    type: BuffType
    rarity: BuffRarity
    is_positive: bool
    duration: int | None = None     # Turns; None = instantaneous
    value: float | None = None      # Multiplier, seconds, ...
    name: str = ""
    description: str = ""
    icon: str = ""


class ActiveBuff(BaseModel):
    """A duration buff currently in effect."""
    buff: Buff
    remaining_turns: int
