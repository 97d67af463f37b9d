"""
Construction Package - Cog board optimizer.

Finds a better arrangement of cogs on the construction board and reduces
the rearrangement to an ordered list of pairwise swaps.

Public API:
    - Board: Mutable board snapshot
    - Cog, BoostRadius: Pieces and their boost patterns
    - Position, Zone: Linear key geometry
    - Score, Weights, weighted_sum(): Scoring objective
    - calculate_score(): Pure scorer
    - parse_construction(): Raw snapshot -> Board
    - BoardOptimizer, optimize(): Time-boxed local search
    - SearchContext: Time budget, cancellation and progress
    - reduce_moves(): Target board -> ordered steps
    - solve(), solve_board(): Full pipeline

Usage:
    from src.construction import describe_step, solve, Weights

    result = solve(snapshot, Weights(build_rate=1, exp=100, flaggy=250), time_budget_ms=1000)

    if result is not None:
        for step in result.steps:
            print(describe_step(step))
"""

# Core data structures
from .position import Position, Zone
from .cog import BoostRadius, Cog
from .score import Score, Weights, weighted_sum
from .board import Board
from .move import Move, Step
from .context import SearchContext

# Scoring and parsing
from .scorer import calculate_score
from .parser import parse_construction

# Search and reduction
from .optimizer import BoardOptimizer, OptimizerMetrics, OptimizerResult, optimize
from .reducer import ReductionResult, reduce_moves
from .formatting import ScoreCard, describe_step, format_score, format_score_diff
from .pipeline import SolverResult, solve, solve_board

__all__ = [
    # Data structures
    "Position",
    "Zone",
    "BoostRadius",
    "Cog",
    "Score",
    "Weights",
    "weighted_sum",
    "Board",
    "Move",
    "Step",
    "SearchContext",
    # Scoring and parsing
    "calculate_score",
    "parse_construction",
    # Search and reduction
    "BoardOptimizer",
    "OptimizerMetrics",
    "OptimizerResult",
    "optimize",
    "ReductionResult",
    "reduce_moves",
    "ScoreCard",
    "describe_step",
    "format_score",
    "format_score_diff",
    "SolverResult",
    "solve",
    "solve_board",
]
