"""
Move Reducer Module - Turns a target arrangement into an ordered swap list.

Pass A drops inferred moves that do not improve the score on their own.
Pass B follows the remaining moves as chains of pairwise swaps, removes
reversible pairs, and replays the result to check it reproduces the
reduced board.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .board import Board
from .cog import Cog
from .move import Move, Step
from .score import Score, Weights, weighted_sum

logger = logging.getLogger(__name__)


@dataclass
class ReductionResult:
    """
    Outcome of move reduction.

    Attributes:
        board: Initial board with only the improving moves applied
        score: Score of that board (None if not computable)
        moves: Ordered swaps, as linear keys
        steps: Ordered swaps, as zone/row/col
        verified: True if replaying the steps reproduced the board
    """
    board: Board
    score: Optional[Score]
    moves: List[Move] = field(default_factory=list)
    steps: List[Step] = field(default_factory=list)
    verified: bool = True


def _same_occupant(a: Optional[Cog], b: Optional[Cog]) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return a.same_piece(b)


def infer_moves(initial: Board, target: Board) -> List[Move]:
    """
    Infer where each displaced piece of the initial board ended up.

    A piece has moved if the target holds nothing, or a different piece,
    at its position. Its destination is the first target position holding
    the same piece.

    Args:
        initial: Board before rearrangement
        target: Board after rearrangement

    Returns:
        Moves in initial-board order
    """
    moves: List[Move] = []
    for key, cog in initial.cogs.items():
        if _same_occupant(cog, target.cogs.get(key)):
            continue
        for target_key, target_cog in target.cogs.items():
            if target_key != key and cog.same_piece(target_cog):
                moves.append(Move(key, target_key))
                break
    return moves


def remove_useless_moves(initial: Board, target: Board, weights: Weights) -> Board:
    """
    Keep only moves that strictly improve the score in isolation.

    Args:
        initial: Board before rearrangement
        target: Board after rearrangement
        weights: Objective weights

    Returns:
        Fresh copy of the initial board with the useful moves applied
    """
    moves = infer_moves(initial, target)
    logger.info(f"Found {len(moves)} potential moves")

    useful: List[Move] = []
    initial_score = initial.score
    if initial_score is None:
        logger.warning("Initial score not computable, discarding all moves")
    else:
        before = weighted_sum(initial_score, weights)
        for move in moves:
            test = initial.copy()
            test.swap(move.from_key, move.to_key)
            if test.score is None:
                logger.debug(f"Removed move {move.from_key} -> {move.to_key}: score not computable")
                continue

            after = weighted_sum(test.score, weights)
            if after > before:
                useful.append(move)
            else:
                logger.debug(f"Removed move {move.from_key} -> {move.to_key}: {before} -> {after}")

    logger.info(f"Kept {len(useful)} useful moves, removed {len(moves) - len(useful)}")

    optimized = initial.copy()
    for move in useful:
        optimized.swap(move.from_key, move.to_key)
    optimized.invalidate_score()
    return optimized


def chain_moves(mapping: Dict[int, int]) -> List[Move]:
    """
    Turn a from -> to mapping into sequential pairwise swaps.

    Starting from the first unprocessed entry, the chain of destinations
    is followed until it ends or loops back. Every link swaps the chain
    start with the link's destination, so the start always holds the
    piece the next link has to place. The closing link of a cycle needs
    no swap.

    Args:
        mapping: Position -> destination of its piece

    Returns:
        Ordered moves
    """
    remaining = dict(mapping)
    moves: List[Move] = []

    while remaining:
        start = next(iter(remaining))
        visited = [start]
        current = remaining[start]

        while True:
            moves.append(Move(start, current))
            if current not in remaining or current in visited:
                break
            visited.append(current)
            current = remaining[current]
            if current in visited:
                break

        for key in visited:
            remaining.pop(key, None)

    return moves


def prune_reversible_pairs(moves: List[Move]) -> List[Move]:
    """
    Drop the later move of every X -> Y, Y -> X pair.

    Args:
        moves: Ordered moves

    Returns:
        Moves with the later half of each reversible pair removed
    """
    dropped = set()
    kept: List[Move] = []

    for i, move in enumerate(moves):
        if i in dropped:
            continue
        for j in range(i + 1, len(moves)):
            if j not in dropped and moves[j] == move.reversed():
                dropped.add(j)
                break
        kept.append(move)

    if dropped:
        logger.debug(f"Pruned {len(dropped)} reversible moves")
    return kept


def verify_moves(initial: Board, expected: Board, moves: List[Move]) -> bool:
    """
    Replay moves on a copy of the initial board and compare occupants.

    Mismatches are logged, never raised.

    Returns:
        True if every touched position holds the expected piece
    """
    replay = initial.copy()
    touched = set()
    for move in moves:
        replay.swap(move.from_key, move.to_key)
        touched.update((move.from_key, move.to_key))

    mismatches = [key for key in sorted(touched)
                  if not _same_occupant(replay.cogs.get(key), expected.cogs.get(key))]
    if mismatches:
        logger.warning(f"Replayed steps do not reproduce the optimized board at positions {mismatches}")
        return False
    return True


def reduce_moves(initial: Board, target: Board, weights: Weights) -> ReductionResult:
    """
    Compile the shortest useful swap list from initial to target.

    Args:
        initial: Board before rearrangement
        target: Board chosen by the optimizer
        weights: Objective weights

    Returns:
        ReductionResult with the reduced board, its score and the steps
    """
    optimized = remove_useless_moves(initial, target, weights)
    score = optimized.score

    mapping = {move.from_key: move.to_key for move in infer_moves(initial, optimized)}
    logger.info(f"Found {len(mapping)} cogs that moved")

    moves = prune_reversible_pairs(chain_moves(mapping))
    verified = verify_moves(initial, optimized, moves)

    logger.info(f"Calculated {len(moves)} optimal steps")

    return ReductionResult(
        board=optimized,
        score=score,
        moves=moves,
        steps=[move.to_step() for move in moves],
        verified=verified,
    )
