"""
Scorer Module - Pure board -> Score computation.

Scoring runs in three passes over a per-cell bonus grid:
  1. Propagation: every eligible board cog with a boost pattern adds its
     radius boosts to the cells its pattern covers
  2. Own stats: base stats are summed, board cogs also take their own
     cell's percent bonuses (rounded up) and player cogs the flat exp boost
  3. Flags: flagged positions collect their cell's flag boost

Flaggy is finally multiplied by the shop upgrades and rounded down.
"""

import logging
import math
from functools import lru_cache
from typing import List, Optional, Tuple

import numpy as np

from .board import Board
from .cog import BoostRadius
from .position import BOARD_COLUMNS, BOARD_ROWS, Position, Zone
from .score import Score

logger = logging.getLogger(__name__)

# Bonus grid channels
BUILD_RATE = 0
FLAGGY = 1
EXP_BOOST = 2
FLAG_BOOST = 3

FLAGGY_UPGRADE_STEP = 0.5


def pattern_offsets(pattern: BoostRadius, row: int, col: int) -> List[Tuple[int, int]]:
    """
    Cells a pattern covers from (row, col), before bounds checking.

    Args:
        pattern: Boost pattern of the cog
        row: Board row of the cog
        col: Board column of the cog

    Returns:
        List of (row, col) cells, possibly off the board
    """
    i, j = row, col

    if pattern is BoostRadius.NONE:
        return []
    if pattern is BoostRadius.DIAGONAL:
        return [(i - 1, j - 1), (i - 1, j + 1), (i + 1, j - 1), (i + 1, j + 1)]
    if pattern is BoostRadius.ADJACENT:
        return [(i - 1, j), (i, j + 1), (i + 1, j), (i, j - 1)]
    if pattern is BoostRadius.UP:
        return [(i - 2, j - 1), (i - 2, j), (i - 2, j + 1),
                (i - 1, j - 1), (i - 1, j), (i - 1, j + 1)]
    if pattern is BoostRadius.RIGHT:
        return [(i - 1, j + 2), (i, j + 2), (i + 1, j + 2),
                (i - 1, j + 1), (i, j + 1), (i + 1, j + 1)]
    if pattern is BoostRadius.DOWN:
        return [(i + 2, j - 1), (i + 2, j), (i + 2, j + 1),
                (i + 1, j - 1), (i + 1, j), (i + 1, j + 1)]
    if pattern is BoostRadius.LEFT:
        return [(i - 1, j - 2), (i, j - 2), (i + 1, j - 2),
                (i - 1, j - 1), (i, j - 1), (i + 1, j - 1)]
    if pattern is BoostRadius.ROW:
        return [(i, k) for k in range(BOARD_COLUMNS) if k != j]
    if pattern is BoostRadius.COLUMN:
        return [(k, j) for k in range(BOARD_ROWS) if k != i]
    if pattern is BoostRadius.CORNER:
        return [(i - 2, j - 2), (i - 2, j + 2), (i + 2, j - 2), (i + 2, j + 2)]
    if pattern is BoostRadius.AROUND:
        return [(i - 2, j),
                (i - 1, j - 1), (i - 1, j), (i - 1, j + 1),
                (i, j - 2), (i, j - 1), (i, j + 1), (i, j + 2),
                (i + 1, j - 1), (i + 1, j), (i + 1, j + 1),
                (i + 2, j)]
    if pattern is BoostRadius.EVERYTHING:
        return [(k, l) for k in range(BOARD_ROWS) for l in range(BOARD_COLUMNS)
                if (k, l) != (i, j)]

    raise ValueError(f"Unhandled boost pattern: {pattern!r}")


@lru_cache(maxsize=None)
def boost_targets(pattern: BoostRadius, row: int, col: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    In-bounds cells covered by a pattern, as index arrays.

    Returns:
        (rows, cols) arrays usable for fancy indexing into the bonus grid
    """
    cells = [(r, c) for r, c in pattern_offsets(pattern, row, col)
             if 0 <= r < BOARD_ROWS and 0 <= c < BOARD_COLUMNS]
    rows = np.array([r for r, _ in cells], dtype=np.intp)
    cols = np.array([c for _, c in cells], dtype=np.intp)
    return rows, cols


def calculate_score(board: Board) -> Optional[Score]:
    """
    Compute the aggregate Score of a board.

    Args:
        board: Board to score (not modified)

    Returns:
        Score, or None if an eligible position resolves to nothing
        or a total leaves the float range
    """
    entries = []
    for key in board.available_slot_keys:
        entry = board.get(key)
        if entry is None:
            logger.debug(f"Eligible position {key} has no cog or slot, score not computable")
            return None
        entries.append((key, entry, Position.from_key(key)))

    bonus = np.zeros((4, BOARD_ROWS, BOARD_COLUMNS))

    # Propagation pass
    for key, entry, pos in entries:
        if entry.boost_radius is BoostRadius.NONE or pos.zone is not Zone.BOARD:
            continue

        rows, cols = boost_targets(entry.boost_radius, pos.row, pos.col)
        if rows.size == 0:
            continue

        magnitudes = np.array([
            entry.build_radius_boost,
            entry.flaggy_radius_boost,
            entry.exp_radius_boost,
            entry.flag_boost,
        ])
        bonus[:, rows, cols] += magnitudes[:, None]

    grid = bonus.tolist()
    build_rate = 0.0
    exp_bonus = 0.0
    flaggy = 0.0
    exp_boost = 0.0

    # Own-stat pass
    try:
        for key, entry, pos in entries:
            build_rate += entry.build_rate
            exp_bonus += entry.exp_bonus
            flaggy += entry.flaggy

            if pos.zone is not Zone.BOARD:
                continue

            build_rate += math.ceil(entry.build_rate * grid[BUILD_RATE][pos.row][pos.col] / 100)
            if entry.is_player:
                exp_boost += grid[EXP_BOOST][pos.row][pos.col]
            flaggy += math.ceil(entry.flaggy * grid[FLAGGY][pos.row][pos.col] / 100)
    except (OverflowError, ValueError) as e:
        logger.debug(f"Own-stat totals left float range, score not computable: {e}")
        return None

    # Flag pass
    flag_boost = 0.0
    for key in board.flag_positions:
        if board.get(key) is None:
            continue
        pos = Position.from_key(key)
        if pos.zone is not Zone.BOARD:
            continue
        flag_boost += grid[FLAG_BOOST][pos.row][pos.col]

    totals = (build_rate, exp_bonus, flaggy, exp_boost, flag_boost)
    if not all(math.isfinite(total) for total in totals):
        logger.debug("Score totals are not finite, score not computable")
        return None

    scaled = flaggy * (1 + board.flaggy_shop_upgrades * FLAGGY_UPGRADE_STEP)
    if not math.isfinite(scaled):
        logger.debug("Upgraded flaggy is not finite, score not computable")
        return None
    flaggy = math.floor(scaled)

    return Score(
        build_rate=build_rate,
        exp_bonus=exp_bonus,
        flaggy=flaggy,
        exp_boost=exp_boost,
        flag_boost=flag_boost,
    )
