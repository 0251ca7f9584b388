"""Letter grid, path tracing, and word discovery for the word-search game."""

from __future__ import annotations

import logging

from config import (
    END_WHEN_ALL_FOUND,
    GRID_SIZE,
    GRID_TIME_LIMIT,
    LENGTH_BONUSES,
    POINTS_PER_LETTER,
)
from engine.errors import ConfigurationError
from models.actions import GridGameResult, SubmitResult
from models.game_state import GameCell, GameWord, GridGameState

logger = logging.getLogger(__name__)


def create_game(
    grid_size: int = GRID_SIZE,
    time_limit: float = GRID_TIME_LIMIT,
    end_when_all_found: bool = END_WHEN_ALL_FOUND,
) -> GridGameState:
    """Create an empty word grid session; call set_grid() before play.

    Raises:
        ConfigurationError: If grid_size or time_limit is not positive.
    """
    if grid_size < 1:
        raise ConfigurationError("grid_size must be at least 1", {"grid_size": grid_size})
    if time_limit <= 0:
        raise ConfigurationError("time_limit must be positive", {"time_limit": time_limit})
    return GridGameState(
        grid_size=grid_size,
        time_limit=time_limit,
        time_remaining=time_limit,
        end_when_all_found=end_when_all_found,
    )


def create_grid(letters: list[list[str]]) -> list[list[GameCell]]:
    """Build the cell matrix, indexed as grid[row][col]."""
    return [
        [GameCell(letter=letter.upper(), row=row, col=col) for col, letter in enumerate(line)]
        for row, line in enumerate(letters)
    ]


def set_grid(
    state: GridGameState,
    letters: list[list[str]],
    words: list[GameWord],
) -> GridGameState:
    """Load the letters and the target words into a session.

    Args:
        state: Session to load (mutated in place).
        letters: grid_size rows of grid_size single letters.
        words: Target words; matched in uppercase, duplicates collapsed.

    Returns:
        The updated state.

    Raises:
        ConfigurationError: If the dimensions are wrong or a cell/word is
            not alphabetic.
    """
    size = state.grid_size
    if len(letters) != size:
        raise ConfigurationError(
            f"Grid must have {size} rows, got {len(letters)}",
            {"grid_size": size},
        )
    for row, line in enumerate(letters):
        if len(line) != size:
            raise ConfigurationError(
                f"Row {row} must have {size} letters, got {len(line)}",
                {"grid_size": size},
            )
        for col, letter in enumerate(line):
            # Checked after upper-casing: some letters expand ("ß" -> "SS")
            upper = letter.upper() if isinstance(letter, str) else ""
            if len(upper) != 1 or not upper.isalpha():
                raise ConfigurationError(
                    f"Cell ({row}, {col}) must be a single letter, got {letter!r}"
                )

    targets: list[GameWord] = []
    seen: set[str] = set()
    for target in words:
        word = target.word.strip().upper()
        if not word.isalpha():
            raise ConfigurationError(f"Target word {target.word!r} must be alphabetic")
        if word in seen:
            continue
        seen.add(word)
        targets.append(GameWord(word=word, hint=target.hint))

    state.grid = create_grid(letters)
    state.all_words = targets
    state.current_path = []
    state.found_words = []
    state.score = 0
    state.time_remaining = state.time_limit
    state.is_game_over = False

    logger.info("Word grid loaded | size=%d words=%d", size, len(targets))
    return state


def is_adjacent(pos1: tuple[int, int], pos2: tuple[int, int]) -> bool:
    """Check if two cells touch, including diagonals (Chebyshev distance 1).

    Args:
        pos1: (row, col) of the first cell.
        pos2: (row, col) of the second cell.

    Returns:
        True if the cells are distinct neighbours.
    """
    distance = max(abs(pos1[0] - pos2[0]), abs(pos1[1] - pos2[1]))
    return distance == 1


def _in_bounds(row: int, col: int, grid: list[list[GameCell]]) -> bool:
    if not grid:
        return False
    return 0 <= row < len(grid) and 0 <= col < len(grid[0])


def _sync_path_flags(state: GridGameState) -> None:
    """Recompute selected/in_path on every cell from current_path."""
    on_path = set(state.current_path)
    last = state.current_path[-1] if state.current_path else None
    for line in state.grid:
        for cell in line:
            pos = (cell.row, cell.col)
            cell.in_path = pos in on_path
            cell.selected = pos == last


def handle_cell_click(state: GridGameState, row: int, col: int) -> None:
    """Extend, shorten, or ignore the traced path for a clicked cell.

    Clicking the last cell removes it. Cells already on the path, cells not
    adjacent to the last cell, and out-of-bounds clicks are ignored.

    Args:
        state: Current session (mutated in place).
        row: Clicked row.
        col: Clicked column.
    """
    if state.is_game_over or not _in_bounds(row, col, state.grid):
        return

    pos = (row, col)
    path = state.current_path
    if path and path[-1] == pos:
        path.pop()
    elif pos in path:
        return
    elif path and not is_adjacent(path[-1], pos):
        return
    else:
        path.append(pos)

    _sync_path_flags(state)


def current_word(state: GridGameState) -> str:
    """Letters along the current path, in order."""
    return "".join(state.grid[row][col].letter for row, col in state.current_path)


def clear_path(state: GridGameState) -> None:
    state.current_path = []
    _sync_path_flags(state)


def word_score(word: str) -> int:
    """Points for a word: 10 per letter plus cumulative length bonuses.

    CAT scores 30, MUSE 50, HOUSE 80 and PLANET 120.
    """
    score = len(word) * POINTS_PER_LETTER
    for min_length, bonus in LENGTH_BONUSES:
        if len(word) >= min_length:
            score += bonus
    return score


def submit_word(state: GridGameState) -> SubmitResult:
    """Check the traced word against the targets and clear the path.

    Args:
        state: Current session (mutated in place).

    Returns:
        SubmitResult; success means the word is a target, is_new means it
        scored for the first time.
    """
    if state.is_game_over or not state.current_path:
        return SubmitResult(success=False, word="", is_new=False)

    word = current_word(state)
    clear_path(state)

    target = next((w for w in state.all_words if w.word == word), None)
    if target is None:
        logger.debug("Rejected %s", word)
        return SubmitResult(success=False, word=word, is_new=False)

    if word in state.found_words:
        return SubmitResult(success=True, word=word, is_new=False)

    points = word_score(word)
    state.found_words.append(word)
    target.found = True
    state.score += points
    logger.debug("Found %s for %d points", word, points)

    if state.end_when_all_found and all(w.found for w in state.all_words):
        state.is_game_over = True
        logger.info("Word grid over: all %d words found | score=%d", len(state.all_words), state.score)

    return SubmitResult(success=True, word=word, is_new=True, score_delta=points)


def update_timer(state: GridGameState, delta_seconds: float) -> None:
    """Run the countdown; the game ends when it reaches zero.

    Raises:
        ValueError: If delta_seconds is negative.
    """
    if delta_seconds < 0:
        raise ValueError(f"delta_seconds cannot be negative: {delta_seconds}")
    if state.is_game_over:
        return
    state.time_remaining = max(0, state.time_remaining - delta_seconds)
    if state.time_remaining <= 0:
        state.is_game_over = True
        logger.info("Word grid over: time up | score=%d found=%d", state.score, len(state.found_words))


def get_result(state: GridGameState) -> GridGameResult:
    return GridGameResult(
        score=state.score,
        found_words=list(state.found_words),
        total_words=len(state.all_words),
        all_words=[w.model_copy() for w in state.all_words],
        time_remaining=state.time_remaining,
    )


def get_state(state: GridGameState) -> GridGameState:
    """Read-only snapshot for the presentation layer."""
    return state.model_copy(deep=True)


def reset(state: GridGameState) -> GridGameState:
    """A new empty session with the same size, time limit and end policy."""
    return create_game(state.grid_size, state.time_limit, state.end_when_all_found)
