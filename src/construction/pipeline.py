"""
Pipeline Module - Snapshot in, scored step list out.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .board import Board
from .context import SearchContext
from .formatting import describe_step
from .move import Step
from .optimizer import BoardOptimizer, OptimizerMetrics
from .parser import parse_construction
from .reducer import reduce_moves
from .score import Score, Weights

logger = logging.getLogger(__name__)


@dataclass
class SolverResult:
    """
    Result handed to the external actuator.

    Attributes:
        score: Score achieved by executing the steps
        steps: Ordered swaps to execute
        board: Board after the steps
        verified: True if replaying the steps reproduced the board
        metrics: Optimizer statistics
    """
    score: Score
    steps: List[Step] = field(default_factory=list)
    board: Optional[Board] = None
    verified: bool = True
    metrics: OptimizerMetrics = field(default_factory=OptimizerMetrics)

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def to_dict(self) -> dict:
        return {
            "score": self.score.to_dict(),
            "steps": [step.to_dict() for step in self.steps],
        }


def solve_board(board: Board, weights: Weights,
                time_budget_ms: float = 1000.0,
                optimizer: Optional[BoardOptimizer] = None,
                context: Optional[SearchContext] = None) -> Optional[SolverResult]:
    """
    Optimize a parsed board and reduce the result to steps.

    Args:
        board: Parsed board (not modified)
        weights: Objective weights
        time_budget_ms: Search budget, ignored when a context is given
        optimizer: Configured optimizer, a fresh one if None
        context: Search context for cancellation and progress

    Returns:
        SolverResult, or None if the optimizer found nothing computable
    """
    if not board.flag_positions:
        weights = weights.without_flaggy()

    optimizer = optimizer if optimizer is not None else BoardOptimizer()
    context = context if context is not None else SearchContext(time_budget_ms=time_budget_ms)

    best = optimizer.optimize(board, weights, context)
    if best is None:
        return None

    logger.info("Optimization completed, processing results...")
    reduction = reduce_moves(board, best.board, weights)
    if reduction.score is None:
        logger.warning("Reduced board score is not computable")
        return None

    for i, step in enumerate(reduction.steps):
        logger.info(describe_step(step, i, len(reduction.steps)))

    return SolverResult(
        score=reduction.score,
        steps=reduction.steps,
        board=reduction.board,
        verified=reduction.verified,
        metrics=best.metrics,
    )


def solve(raw: Union[str, Dict[str, Any], None], weights: Optional[Weights] = None,
          time_budget_ms: float = 1000.0, rng: Optional[random.Random] = None) -> Optional[SolverResult]:
    """
    Parse a raw snapshot, optimize it and compile the steps.

    Args:
        raw: Snapshot dict or JSON string
        weights: Objective weights, defaults if None
        time_budget_ms: Search budget in milliseconds
        rng: Random source for reproducible runs

    Returns:
        SolverResult, or None if not found
    """
    board = parse_construction(raw)
    return solve_board(
        board,
        weights if weights is not None else Weights(),
        time_budget_ms=time_budget_ms,
        optimizer=BoardOptimizer(rng=rng),
    )
