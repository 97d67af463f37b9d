"""
Session Manager Module - Loaded boards per source and before/after reports.

A source is any name the host uses for a snapshot (an account, a file).
Loading keeps a working board and a preserved initial copy; optimizing
replaces the working board with the reduced result.

For the core optimizing logic, see the src.construction package.
"""

import copy
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from src.construction import (
    Board, ScoreCard, SearchContext, Step, Weights, describe_step,
    parse_construction, solve_board
)
from src.settings import (
    context_from_settings, default_settings, get_setting, optimizer_from_settings,
    weights_from_settings
)

logger = logging.getLogger(__name__)


__all__ = [
    "OptimizationReport",
    "ConstructionSessions",
]


@dataclass
class OptimizationReport:
    """
    Before/after summary of one optimization.

    Attributes:
        before: Score card of the loaded board
        after: Score card after executing the steps
        diff: Signed formatted differences
        steps: Ordered swaps for the actuator
        verified: True if the steps reproduce the optimized board
    """
    before: ScoreCard
    after: ScoreCard
    diff: ScoreCard
    steps: List[Step] = field(default_factory=list)
    verified: bool = True

    def describe_steps(self) -> List[str]:
        return [describe_step(step, i, len(self.steps)) for i, step in enumerate(self.steps)]


class ConstructionSessions:
    """
    Keeps parsed boards per source between load and optimize calls.

    Example:
        sessions = ConstructionSessions()
        card = sessions.load("main", snapshot)
        report = sessions.optimize("main", time_budget_ms=2000)
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None,
                 rng: Optional[random.Random] = None):
        """
        Initialize the session store.

        Args:
            settings: Optimizer settings, defaults if None
            rng: Random source shared by all optimizations
        """
        self.settings = copy.deepcopy(settings) if settings is not None else default_settings()
        self.rng = rng
        self._boards: Dict[str, Board] = {}
        self._initial_boards: Dict[str, Board] = {}

    def load(self, source: str, raw: Union[str, Dict[str, Any]]) -> ScoreCard:
        """
        Parse a snapshot and store it under a source name.

        Args:
            source: Session name
            raw: Snapshot dict or JSON string

        Returns:
            Score card of the loaded board
        """
        board = parse_construction(
            raw,
            flaggy_upgrade_index=get_setting(self.settings, "flaggy_upgrade_index", int),
        )
        self._initial_boards[source] = board.copy()
        self._boards[source] = board.copy()

        score = board.score
        if score is None:
            logger.warning(f"[{source}] Loaded board has no computable score")
            return ScoreCard("0", "0", "0")

        card = ScoreCard.from_score(score)
        logger.info(f"[{source}] Loaded board: {card}")
        return card

    def has_source(self, source: str) -> bool:
        return source in self._boards

    def get_board(self, source: str) -> Optional[Board]:
        return self._boards.get(source)

    def get_initial_board(self, source: str) -> Optional[Board]:
        """Copy of the board as first loaded, or None."""
        board = self._initial_boards.get(source)
        return board.copy() if board is not None else None

    def reset(self, source: str) -> None:
        """Drop the optimized board and go back to the loaded one."""
        initial = self._initial_boards.get(source)
        if initial is not None:
            self._boards[source] = initial.copy()

    def optimize(self, source: str, time_budget_ms: Optional[float] = None,
                 weights: Optional[Weights] = None,
                 context: Optional[SearchContext] = None) -> Optional[OptimizationReport]:
        """
        Optimize the stored board of a source.

        Args:
            source: Session name
            time_budget_ms: Search budget, settings value if None
            weights: Objective weights, settings value if None
            context: Search context (cancellation, progress); built
                from settings if None

        Returns:
            OptimizationReport, or None if no computable board was found

        Raises:
            KeyError: If the source was never loaded
        """
        if source not in self._boards:
            raise KeyError(f"Board not found for source '{source}'. Load snapshot data first.")

        board = self._boards[source]
        weights = weights if weights is not None else weights_from_settings(self.settings)
        if context is None:
            context = context_from_settings(self.settings, time_budget_ms)
        elif time_budget_ms is not None:
            context.time_budget_ms = float(time_budget_ms)

        before = board.score
        if before is None:
            logger.warning(f"[{source}] Current board score is not computable")
            return None

        logger.info(f"[{source}] Optimize start: {ScoreCard.from_score(before)}")

        result = solve_board(
            board,
            weights,
            optimizer=optimizer_from_settings(self.settings, rng=self.rng),
            context=context,
        )
        if result is None:
            logger.warning(f"[{source}] Optimizer found no computable board")
            return None

        self._boards[source] = result.board
        report = OptimizationReport(
            before=ScoreCard.from_score(before),
            after=ScoreCard.from_score(result.score),
            diff=ScoreCard.diff(before, result.score),
            steps=result.steps,
            verified=result.verified,
        )
        logger.info(f"[{source}] Optimize best: {report.after} ({report.diff}), {len(report.steps)} steps")
        return report
