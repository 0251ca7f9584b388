"""Buff catalog and rarity-weighted card draws."""

from __future__ import annotations

import logging
import random
from uuid import uuid4

from engine.errors import ConfigurationError
from models.buffs import Buff, BuffRarity, BuffType

logger = logging.getLogger(__name__)

# Probability mass per rarity tier. Must be strictly decreasing by rank.
RARITY_WEIGHTS: dict[BuffRarity, int] = {
    BuffRarity.COMMON: 50,
    BuffRarity.RARE: 30,
    BuffRarity.EPIC: 15,
    BuffRarity.LEGENDARY: 5,
}

# One row per buff type. Rows without a duration are instantaneous.
BUFF_DEFINITIONS: dict[BuffType, dict] = {
    BuffType.DOUBLE_SCORE: {
        "rarity": BuffRarity.RARE,
        "is_positive": True,
        "duration": 3,
        "value": 2,
        "name": "Double Score",
        "description": "Points are doubled for the next 3 questions",
        "icon": "💰",
    },
    BuffType.EXTRA_TIME: {
        "rarity": BuffRarity.COMMON,
        "is_positive": True,
        "value": 30,
        "name": "Extra Time",
        "description": "Adds 30 seconds to the clock",
        "icon": "⏰",
    },
    BuffType.HINT: {
        "rarity": BuffRarity.COMMON,
        "is_positive": True,
        "name": "Flash of Insight",
        "description": "Shows the hint for the current question",
        "icon": "💡",
    },
    BuffType.SHIELD: {
        "rarity": BuffRarity.RARE,
        "is_positive": True,
        "value": 1,
        "name": "Holy Shield",
        "description": "Absorbs one wrong answer without breaking the combo",
        "icon": "🛡️",
    },
    BuffType.LUCKY_CARD: {
        "rarity": BuffRarity.EPIC,
        "is_positive": True,
        "name": "Lucky Card",
        "description": "Skips the current question with no penalty",
        "icon": "🍀",
    },
    BuffType.COMBO_BOOST: {
        "rarity": BuffRarity.RARE,
        "is_positive": True,
        "duration": 5,
        "value": 1.5,
        "name": "Combo Boost",
        "description": "Combo bonus +50% for the next 5 questions",
        "icon": "🔥",
    },
    BuffType.REVEAL_ANSWER: {
        "rarity": BuffRarity.EPIC,
        "is_positive": True,
        "value": 2,
        "name": "All-Seeing Eye",
        "description": "Removes wrong options, leaving two choices",
        "icon": "👁️",
    },
    BuffType.TIME_FREEZE: {
        "rarity": BuffRarity.LEGENDARY,
        "is_positive": True,
        "duration": 3,
        "name": "Time Freeze",
        "description": "The clock stops for the next 3 questions",
        "icon": "🧊",
    },
    BuffType.TIME_ATTACK: {
        "rarity": BuffRarity.COMMON,
        "is_positive": False,
        "duration": 1,
        "value": 15,
        "name": "Time Attack",
        "description": "A wrong answer on the next question costs 15 seconds",
        "icon": "⚡",
    },
    BuffType.BLIND_MODE: {
        "rarity": BuffRarity.RARE,
        "is_positive": False,
        "duration": 2,
        "name": "Blind Mode",
        "description": "Half the letters of every option are hidden",
        "icon": "🙈",
    },
    BuffType.SHUFFLE: {
        "rarity": BuffRarity.EPIC,
        "is_positive": False,
        "duration": 1,
        "name": "Chaos Curse",
        "description": "Options are shuffled every time they are shown",
        "icon": "🌀",
    },
    BuffType.HARD_MODE: {
        "rarity": BuffRarity.RARE,
        "is_positive": False,
        "duration": 3,
        "name": "Hard Mode",
        "description": "No hints for the next 3 questions",
        "icon": "💀",
    },
}


def validate_catalog(
    definitions: dict[BuffType, dict] = BUFF_DEFINITIONS,
    weights: dict[BuffRarity, int] = RARITY_WEIGHTS,
) -> None:
    """Check the catalog tables are usable for drawing.

    Raises:
        ConfigurationError: If the catalog is empty or the weights are
            missing, non-positive, or not strictly decreasing by rarity.
    """
    if not definitions:
        raise ConfigurationError("Buff catalog is empty")

    previous = None
    for rarity in BuffRarity:
        weight = weights.get(rarity)
        if weight is None or weight <= 0:
            raise ConfigurationError(
                f"Rarity '{rarity.value}' needs a positive weight",
                {"weight": weight},
            )
        if previous is not None and weight >= previous:
            raise ConfigurationError(
                "Rarity weights must strictly decrease from common to legendary",
                {"rarity": rarity.value, "weight": weight},
            )
        previous = weight

    for buff_type, row in definitions.items():
        if "rarity" not in row or "is_positive" not in row:
            raise ConfigurationError(
                f"Buff '{buff_type.value}' is missing rarity or polarity"
            )
        duration = row.get("duration")
        if duration is not None and duration <= 0:
            raise ConfigurationError(
                f"Buff '{buff_type.value}' has a non-positive duration",
                {"duration": duration},
            )


def create_buff(buff_type: BuffType) -> Buff:
    """Build a fresh buff instance with a unique id."""
    row = BUFF_DEFINITIONS[buff_type]
    return Buff(id=f"buff_{uuid4().hex[:12]}", type=buff_type, **row)


def buff_types_by_rarity(only_positive: bool = False) -> dict[BuffRarity, list[BuffType]]:
    """Group catalog types by tier, in declaration order."""
    tiers: dict[BuffRarity, list[BuffType]] = {rarity: [] for rarity in BuffRarity}
    for buff_type, row in BUFF_DEFINITIONS.items():
        if only_positive and not row["is_positive"]:
            continue
        tiers[row["rarity"]].append(buff_type)
    return tiers


def draw_card(rng: random.Random | None = None, only_positive: bool = False) -> Buff:
    """Draw one buff card.

    A tier is picked with a single draw over the cumulative rarity weights
    (empty tiers are left out), then a type is picked uniformly inside it.

    Args:
        rng: Optional Random instance for seeded/testing draws.
        only_positive: Leave negative buffs out of the pool.

    Returns:
        A freshly created Buff.
    """
    rng = rng or random.Random()
    tiers = [
        (rarity, types)
        for rarity, types in buff_types_by_rarity(only_positive).items()
        if types
    ]
    if not tiers:
        raise ConfigurationError("No buffs available to draw")

    total = sum(RARITY_WEIGHTS[rarity] for rarity, _ in tiers)
    pick = rng.random() * total
    chosen = tiers[-1][1]
    for rarity, types in tiers:
        pick -= RARITY_WEIGHTS[rarity]
        if pick < 0:
            chosen = types
            break

    return create_buff(rng.choice(chosen))


def draw_cards(
    count: int,
    rng: random.Random | None = None,
    only_positive: bool = False,
) -> list[Buff]:
    """Draw several cards with replacement.

    Args:
        count: Number of cards; zero or less returns an empty list.
        rng: Optional Random instance for seeded/testing draws.
        only_positive: Leave negative buffs out of the pool.

    Returns:
        Independent Buff instances (duplicated types are allowed).
    """
    if count <= 0:
        return []
    rng = rng or random.Random()
    cards = [draw_card(rng, only_positive) for _ in range(count)]
    logger.debug("Drew %d card(s): %s", count, [c.type.value for c in cards])
    return cards


def is_rare(buff: Buff) -> bool:
    """True for rare, epic and legendary cards."""
    return buff.rarity.rank >= BuffRarity.RARE.rank


validate_catalog()
