"""Card game orchestration: hand, buffs, answers, combo and the clock."""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime, timezone

from config import (
    COLLECTOR_THRESHOLD,
    COMBO_MASTER_THRESHOLD,
    COMBO_MULTIPLIER_CAP,
    COMBO_STEP,
    FLAWLESS_ACCURACY,
    HIGH_SCORE_THRESHOLD,
    POINTS_PER_DIFFICULTY,
)
from engine.buffs import draw_cards, is_rare
from engine.errors import ConfigurationError, InvalidStateError
from models.actions import AnswerResult, CardGameResult
from models.buffs import ActiveBuff, Buff, BuffType
from models.game_state import (
    CardGameConfig,
    CardGameState,
    CardGameStatus,
    GameEvent,
)
from models.questions import OPTION_TYPES, CardQuestion, QuestionView

logger = logging.getLogger(__name__)


def create_game(config: CardGameConfig | None = None) -> CardGameState:
    """Create a card game that has not been started yet.

    Args:
        config: Session settings; defaults come from config.py.

    Returns:
        A fresh CardGameState in NOT_STARTED.
    """
    return CardGameState(config=config or CardGameConfig())


def start_game(
    state: CardGameState,
    questions: list[CardQuestion],
    rng: random.Random | None = None,
) -> CardGameState:
    """Deal the opening hand and begin the session.

    Args:
        state: A game in NOT_STARTED (mutated in place).
        questions: The question bank; truncated to config.max_questions.
        rng: Optional Random instance for seeded/testing draws.

    Returns:
        The updated state, now IN_PROGRESS.

    Raises:
        InvalidStateError: If the game was already started.
        ConfigurationError: If the config or the question bank is invalid.
    """
    if state.status != CardGameStatus.NOT_STARTED:
        raise InvalidStateError("Game has already started", state.status.value)

    _validate_config(state.config)
    if not questions:
        raise ConfigurationError("Question bank is empty")
    for question in questions:
        _validate_question(question)

    rng = rng or random.Random()
    cfg = state.config

    state.questions = [q.model_copy(deep=True) for q in questions[: cfg.max_questions]]
    state.hand = draw_cards(
        cfg.initial_hand_size, rng, only_positive=not cfg.enable_negative_buffs
    )
    state.discard_pile = []
    state.active_buffs = []
    state.score = 0
    state.combo = 0
    state.max_combo = 0
    state.shield_charges = 0
    state.correct_count = 0
    state.wrong_count = 0
    state.shielded_count = 0
    state.skipped_count = 0
    state.current_question_index = 0
    state.hint_visible = False
    state.eliminated_options = []
    state.time_remaining = cfg.base_time
    state.total_time = cfg.base_time
    state.event_log = []
    state.status = CardGameStatus.IN_PROGRESS

    _log_event(
        state,
        "start",
        f"Game started with {len(state.questions)} questions.",
        {"hand": [card.type.value for card in state.hand]},
    )
    logger.info(
        "Card game started | questions=%d hand=%d time=%s",
        len(state.questions),
        len(state.hand),
        state.time_remaining,
    )
    return state


def _validate_config(cfg: CardGameConfig) -> None:
    if cfg.max_hand_size < 1:
        raise ConfigurationError("max_hand_size must be at least 1")
    if not 0 <= cfg.initial_hand_size <= cfg.max_hand_size:
        raise ConfigurationError(
            "initial_hand_size must be between 0 and max_hand_size",
            {"initial_hand_size": cfg.initial_hand_size, "max_hand_size": cfg.max_hand_size},
        )
    if cfg.base_time <= 0:
        raise ConfigurationError("base_time must be positive", {"base_time": cfg.base_time})
    if cfg.max_questions < 1:
        raise ConfigurationError("max_questions must be at least 1")
    if cfg.miss_time_penalty < 0:
        raise ConfigurationError("miss_time_penalty cannot be negative")


def _validate_question(question: CardQuestion) -> None:
    if not question.correct_answer.strip():
        raise ConfigurationError(
            f"Question '{question.id}' has no correct answer"
        )
    if not 1 <= question.difficulty <= 5:
        raise ConfigurationError(
            f"Question '{question.id}' difficulty must be 1-5",
            {"difficulty": question.difficulty},
        )
    if question.type in OPTION_TYPES:
        answer = normalize_answer(question.correct_answer)
        if not any(normalize_answer(o) == answer for o in question.options):
            raise ConfigurationError(
                f"Question '{question.id}' lists options without its correct answer",
                {"type": question.type.value},
            )


def normalize_answer(text: str) -> str:
    """Answers match ignoring case and surrounding/repeated whitespace."""
    return " ".join(text.split()).casefold()


def current_question(state: CardGameState) -> CardQuestion | None:
    """The question awaiting an answer, or None outside of play."""
    if state.status != CardGameStatus.IN_PROGRESS:
        return None
    if state.current_question_index >= len(state.questions):
        return None
    return state.questions[state.current_question_index]


def is_buff_active(state: CardGameState, buff_type: BuffType) -> bool:
    return any(ab.buff.type == buff_type for ab in state.active_buffs)


def _active_values(state: CardGameState, buff_type: BuffType) -> list[float]:
    return [
        ab.buff.value if ab.buff.value is not None else 1
        for ab in state.active_buffs
        if ab.buff.type == buff_type
    ]


def present_question(
    state: CardGameState,
    rng: random.Random | None = None,
) -> QuestionView | None:
    """Render the current question with the active buffs applied.

    Eliminated options are dropped, options are shuffled under SHUFFLE,
    half of every option's letters are masked under BLIND_MODE, and the
    hint is shown only after a HINT card and never under HARD_MODE.

    Args:
        state: Current game state (not mutated).
        rng: Optional Random instance for seeded/testing views.

    Returns:
        The QuestionView, or None when there is no current question.
    """
    question = current_question(state)
    if question is None:
        return None

    rng = rng or random.Random()
    options = [o for o in question.options if o not in state.eliminated_options]
    if is_buff_active(state, BuffType.SHUFFLE):
        rng.shuffle(options)
    if is_buff_active(state, BuffType.BLIND_MODE):
        options = [_mask_letters(o, rng) for o in options]

    hint = None
    if state.hint_visible and not is_buff_active(state, BuffType.HARD_MODE):
        hint = question.hint or question.correct_answer.strip()[:1]

    return QuestionView(
        id=question.id,
        index=state.current_question_index,
        type=question.type,
        prompt=question.prompt,
        options=options,
        hint=hint,
        time_attack=is_buff_active(state, BuffType.TIME_ATTACK),
    )


def _mask_letters(text: str, rng: random.Random) -> str:
    """Hide half of the letters of text behind underscores."""
    positions = [i for i, ch in enumerate(text) if ch.isalpha()]
    hidden = set(rng.sample(positions, len(positions) // 2))
    return "".join("_" if i in hidden else ch for i, ch in enumerate(text))


def use_card(
    state: CardGameState,
    buff_id: str,
    rng: random.Random | None = None,
) -> bool:
    """Play a card from the hand.

    Duration buffs join the active set (an already active buff of the same
    type has its turns refreshed instead of stacking). Instant buffs apply
    once. The hand is topped up with one draw while below max_hand_size.

    Args:
        state: Current game state (mutated in place).
        buff_id: Id of a card in the hand.
        rng: Optional Random instance for the replacement draw.

    Returns:
        True if the card was played, False if the game is not running or
        the card is not in the hand.
    """
    if state.status != CardGameStatus.IN_PROGRESS:
        logger.debug("use_card ignored: game is %s", state.status.value)
        return False

    index = next((i for i, card in enumerate(state.hand) if card.id == buff_id), None)
    if index is None:
        logger.debug("use_card ignored: %s not in hand", buff_id)
        return False

    card = state.hand.pop(index)
    state.discard_pile.append(card)
    _log_event(
        state,
        "use_card",
        f"Played {card.name or card.type.value}.",
        {"buff_id": card.id, "buff_type": card.type.value, "rarity": card.rarity.value},
    )
    _apply_buff(state, card)

    cfg = state.config
    if state.status == CardGameStatus.IN_PROGRESS and len(state.hand) < cfg.max_hand_size:
        state.hand.extend(
            draw_cards(1, rng, only_positive=not cfg.enable_negative_buffs)
        )
    return True


def _apply_buff(state: CardGameState, card: Buff) -> None:
    if card.duration is not None:
        _activate(state, card)
    elif card.type == BuffType.EXTRA_TIME:
        state.time_remaining += card.value if card.value is not None else 30
    elif card.type == BuffType.SHIELD:
        state.shield_charges += int(card.value) if card.value is not None else 1
    elif card.type == BuffType.HINT:
        state.hint_visible = True
    elif card.type == BuffType.LUCKY_CARD:
        state.skipped_count += 1
        _log_event(state, "skip", "Question skipped.")
        _advance(state)
    elif card.type == BuffType.REVEAL_ANSWER:
        _reveal_answer(state, int(card.value) if card.value is not None else 2)


def _activate(state: CardGameState, card: Buff) -> None:
    for active in state.active_buffs:
        if active.buff.type == card.type:
            active.buff = card
            active.remaining_turns = card.duration
            logger.debug("Refreshed %s to %d turns", card.type.value, card.duration)
            return
    state.active_buffs.append(ActiveBuff(buff=card, remaining_turns=card.duration))


def _reveal_answer(state: CardGameState, keep: int) -> None:
    """Eliminate wrong options until `keep` options remain."""
    question = current_question(state)
    if question is None or question.type not in OPTION_TYPES:
        return
    answer = normalize_answer(question.correct_answer)
    wrong = [
        o for o in question.options
        if normalize_answer(o) != answer and o not in state.eliminated_options
    ]
    state.eliminated_options.extend(wrong[max(keep - 1, 0):])


def combo_multiplier(combo: int, boost: float = 1.0) -> float:
    """Score multiplier for a streak; grows by COMBO_STEP, capped."""
    return 1 + min(combo * COMBO_STEP * boost, COMBO_MULTIPLIER_CAP - 1)


def calculate_points(state: CardGameState, question: CardQuestion) -> int:
    """Points for answering question correctly at the current combo."""
    base = question.points if question.points is not None else question.difficulty * POINTS_PER_DIFFICULTY
    boost = math.prod(_active_values(state, BuffType.COMBO_BOOST))
    multiplier = math.prod(_active_values(state, BuffType.DOUBLE_SCORE))
    return max(0, round(base * combo_multiplier(state.combo, boost) * multiplier))


def answer(state: CardGameState, user_answer: str) -> AnswerResult:
    """Answer the current question and move on.

    Args:
        state: Current game state (mutated in place).
        user_answer: The player's answer.

    Returns:
        AnswerResult with correctness and the points gained.

    Raises:
        InvalidStateError: If the game is not in progress.
    """
    if state.status != CardGameStatus.IN_PROGRESS:
        raise InvalidStateError(
            f"Cannot answer: game is {state.status.value}", state.status.value
        )

    question = state.questions[state.current_question_index]
    correct = normalize_answer(user_answer) == normalize_answer(question.correct_answer)
    score_delta = 0
    shielded = False

    if correct:
        state.combo += 1
        state.max_combo = max(state.max_combo, state.combo)
        state.correct_count += 1
        score_delta = calculate_points(state, question)
        state.score += score_delta
        description = f"Correct! +{score_delta} points (combo {state.combo})."
    elif state.shield_charges > 0:
        state.shield_charges -= 1
        state.shielded_count += 1
        shielded = True
        description = "Wrong, but the shield absorbed it."
    else:
        state.combo = 0
        state.wrong_count += 1
        penalty = state.config.miss_time_penalty + sum(
            _active_values(state, BuffType.TIME_ATTACK)
        )
        if penalty:
            state.time_remaining = max(0, state.time_remaining - penalty)
        description = f"Wrong. The answer was {question.correct_answer}."

    _log_event(
        state,
        "answer",
        description,
        {"question_id": question.id, "correct": correct, "score_delta": score_delta},
    )
    result = AnswerResult(
        correct=correct,
        score_delta=score_delta,
        shielded=shielded,
        correct_answer=question.correct_answer,
        combo=state.combo,
    )

    _expire_buffs(state)
    _advance(state)
    return result


def _expire_buffs(state: CardGameState) -> None:
    """Take one turn off every active buff and drop the finished ones."""
    remaining: list[ActiveBuff] = []
    for active in state.active_buffs:
        active.remaining_turns -= 1
        if active.remaining_turns > 0:
            remaining.append(active)
        else:
            _log_event(
                state,
                "buff_expired",
                f"{active.buff.name or active.buff.type.value} wore off.",
                {"buff_type": active.buff.type.value},
            )
    state.active_buffs = remaining


def _advance(state: CardGameState) -> None:
    state.current_question_index += 1
    state.hint_visible = False
    state.eliminated_options = []
    if state.current_question_index >= len(state.questions):
        _finish(state, "questions exhausted")
    elif state.time_remaining <= 0:
        _finish(state, "time up")


def tick(state: CardGameState, delta_seconds: float) -> None:
    """Run the clock down by delta_seconds.

    The clock is paused while TIME_FREEZE is active. Extra time is granted
    as a one-off bonus when the card is played, not here.

    Raises:
        ValueError: If delta_seconds is negative.
    """
    if delta_seconds < 0:
        raise ValueError(f"delta_seconds cannot be negative: {delta_seconds}")
    if state.status != CardGameStatus.IN_PROGRESS:
        return
    if is_buff_active(state, BuffType.TIME_FREEZE):
        return

    state.time_remaining = max(0, state.time_remaining - delta_seconds)
    if state.time_remaining <= 0:
        _finish(state, "time up")


def end_game(state: CardGameState) -> None:
    """Stop an in-progress game early (the player quit)."""
    if state.status == CardGameStatus.IN_PROGRESS:
        _finish(state, "ended by host")


def _finish(state: CardGameState, reason: str) -> None:
    state.status = CardGameStatus.GAME_OVER
    _log_event(state, "game_over", f"Game over: {reason}.", {"score": state.score})
    logger.info(
        "Card game over | reason=%s score=%d correct=%d wrong=%d",
        reason,
        state.score,
        state.correct_count,
        state.wrong_count,
    )


def get_result(state: CardGameState) -> CardGameResult:
    """Summarise the session. Safe to call before the game is over.

    Shielded misses count as answered but are left out of accuracy.
    """
    answered = state.correct_count + state.wrong_count + state.shielded_count
    judged = state.correct_count + state.wrong_count
    accuracy = round(state.correct_count / judged * 100) if judged else 0
    rare_cards = sum(1 for card in state.discard_pile if is_rare(card))

    achievements = []
    if state.max_combo >= COMBO_MASTER_THRESHOLD:
        achievements.append("combo_master")
    if judged and accuracy >= FLAWLESS_ACCURACY:
        achievements.append("flawless")
    if state.score >= HIGH_SCORE_THRESHOLD:
        achievements.append("high_scorer")
    if rare_cards >= COLLECTOR_THRESHOLD:
        achievements.append("collector")

    return CardGameResult(
        final_score=state.score,
        correct_count=state.correct_count,
        wrong_count=state.wrong_count,
        total_questions=len(state.questions),
        answered_count=answered,
        max_combo=state.max_combo,
        accuracy=accuracy,
        cards_used=len(state.discard_pile),
        rare_cards_used=rare_cards,
        skipped_count=state.skipped_count,
        achievements=achievements,
    )


def get_state(state: CardGameState) -> CardGameState:
    """Read-only snapshot for the presentation layer."""
    return state.model_copy(deep=True)


def _log_event(
    state: CardGameState,
    action_type: str,
    description: str,
    details: dict | None = None,
) -> None:
    state.event_log.append(
        GameEvent(
            turn=state.current_question_index,
            action_type=action_type,
            description=description,
            details=details or {},
            timestamp=datetime.now(timezone.utc),
        )
    )
