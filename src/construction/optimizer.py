"""
Optimizer Module - Time-boxed randomized hill climbing over cog swaps.

Each iteration swaps a random cog with a random eligible slot and keeps
the swap only if the weighted score strictly improves. Every
`restart_interval` iterations the search restarts from a shuffled copy
of the original board. The best board across all runs is returned.
"""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional

from .board import Board
from .context import SearchContext
from .score import Score, Weights, weighted_sum

logger = logging.getLogger(__name__)


@dataclass
class OptimizerMetrics:
    """
    Statistics of one optimizer call.

    Attributes:
        computation_time_ms: Time taken in milliseconds
        iterations: Main loop iterations
        accepted_swaps: Swaps kept because they improved the score
        restarts: Shuffled restarts adopted as working board
        pool_size: Candidate boards considered for the answer
        was_cancelled: True if the host stopped the search early
    """
    computation_time_ms: float = 0.0
    iterations: int = 0
    accepted_swaps: int = 0
    restarts: int = 0
    pool_size: int = 0
    was_cancelled: bool = False


@dataclass
class OptimizerResult:
    """
    Best board found by the optimizer.

    Attributes:
        board: Best-scoring board
        score: Its Score
        weighted: Its weighted scalar
        metrics: Search statistics
    """
    board: Board
    score: Score
    weighted: float
    metrics: OptimizerMetrics


class BoardOptimizer:
    """
    Randomized local search for a better cog arrangement.

    Attributes:
        restart_interval: Iterations between shuffled restarts
        shuffle_swaps: Random swaps applied when shuffling
        rng: Random source, seed it for reproducible runs
    """
    restart_interval: int = 10_000
    shuffle_swaps: int = 500

    def __init__(self, rng: Optional[random.Random] = None,
                 restart_interval: Optional[int] = None,
                 shuffle_swaps: Optional[int] = None):
        self.rng = rng if rng is not None else random.Random()
        if restart_interval is not None:
            self.restart_interval = max(1, restart_interval)
        if shuffle_swaps is not None:
            self.shuffle_swaps = max(0, shuffle_swaps)

    def optimize(self, board: Board, weights: Weights,
                 context: Optional[SearchContext] = None) -> Optional[OptimizerResult]:
        """
        Search for the best arrangement within the context's time budget.

        The input board is never modified.

        Args:
            board: Starting board
            weights: Objective weights
            context: Time budget, cancellation and progress

        Returns:
            OptimizerResult, or None if no candidate had a computable score
        """
        context = context if context is not None else SearchContext()
        context.start()

        if not board.flag_positions:
            weights = weights.without_flaggy()

        state = board.copy()
        if state.score is None:
            logger.warning("Initial board score is not computable, aborting search")
            return None

        pool: List[Board] = [board.copy()]
        current = weighted_sum(state.score, weights)
        metrics = OptimizerMetrics()
        slot_keys = list(board.available_slot_keys)

        logger.info(f"Starting optimization: score={current:.2f}, budget={context.time_budget_ms:.0f}ms")

        if not slot_keys or not board.cogs:
            logger.info("Nothing to rearrange: no eligible slots or no cogs")
        else:
            while not context.is_expired():
                metrics.iterations += 1

                if context.maybe_yield(f"{metrics.iterations} iterations, best {current:.2f}"):
                    if context.is_cancelled():
                        metrics.was_cancelled = True
                        logger.info("Optimization cancelled by host")
                        break

                if metrics.iterations % self.restart_interval == 0:
                    pool.append(state.copy())
                    fresh = board.copy()
                    self.shuffle(fresh)
                    if fresh.score is not None:
                        state = fresh
                        current = weighted_sum(fresh.score, weights)
                        metrics.restarts += 1
                        logger.debug(f"Restart {metrics.restarts}: shuffled score={current:.2f}")

                slot_key = self.rng.choice(slot_keys)
                cog_key = self.rng.choice(state.cog_keys)
                if not (state.is_swappable(slot_key) and state.is_swappable(cog_key)):
                    continue

                state.swap(cog_key, slot_key)
                new_score = state.score
                if new_score is None:
                    state.swap(cog_key, slot_key)
                    continue

                new_value = weighted_sum(new_score, weights)
                if new_value > current:
                    current = new_value
                    metrics.accepted_swaps += 1
                else:
                    state.swap(cog_key, slot_key)

            pool.append(state.copy())

        best = self._select_best(pool, weights)
        metrics.computation_time_ms = context.elapsed_ms()
        metrics.pool_size = len(pool)

        if best is None:
            logger.warning("No candidate board had a computable score")
            return None

        best_board, best_value = best
        logger.info(
            f"Optimization finished: best={best_value:.2f}, iterations={metrics.iterations}, "
            f"accepted={metrics.accepted_swaps}, restarts={metrics.restarts}, "
            f"time={metrics.computation_time_ms:.0f}ms"
        )

        return OptimizerResult(
            board=best_board,
            score=best_board.score,
            weighted=best_value,
            metrics=metrics,
        )

    def shuffle(self, board: Board, n: Optional[int] = None) -> None:
        """
        Apply random eligible swaps to a board in place.

        Args:
            board: Board to shuffle
            n: Number of attempts (defaults to shuffle_swaps)
        """
        n = self.shuffle_swaps if n is None else n
        slot_keys = board.available_slot_keys
        if not slot_keys or not board.cogs:
            return

        for _ in range(n):
            slot_key = self.rng.choice(slot_keys)
            cog_key = self.rng.choice(board.cog_keys)
            if not (board.is_swappable(slot_key) and board.is_swappable(cog_key)):
                continue
            board.swap(cog_key, slot_key)

    def _select_best(self, pool: List[Board], weights: Weights) -> Optional[tuple]:
        """Highest weighted candidate as (board, value); first wins ties."""
        best = None
        for candidate in pool:
            score = candidate.score
            if score is None:
                continue
            value = weighted_sum(score, weights)
            if best is None or value > best[1]:
                best = (candidate, value)
        return best


def optimize(board: Board, weights: Weights, time_budget_ms: float = 1000.0,
             rng: Optional[random.Random] = None,
             context: Optional[SearchContext] = None) -> Optional[OptimizerResult]:
    """
    Convenience wrapper around BoardOptimizer.optimize().

    Args:
        board: Starting board
        weights: Objective weights
        time_budget_ms: Search budget, ignored when a context is given
        rng: Random source
        context: Search context

    Returns:
        OptimizerResult, or None if not found
    """
    if context is None:
        context = SearchContext(time_budget_ms=time_budget_ms)
    return BoardOptimizer(rng=rng).optimize(board, weights, context)
