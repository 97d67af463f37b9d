"""
Tests for the optimizer and the full pipeline.

Usage:
    pytest tests/test_optimizer.py
"""

import json
import random
import sys
import threading
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.construction import (
    Board,
    BoardOptimizer,
    BoostRadius,
    Cog,
    SearchContext,
    Weights,
    Zone,
    optimize,
    solve,
    solve_board,
    weighted_sum,
)
from src.construction.position import zone_of


BUILD_ONLY = Weights(build_rate=1, exp=0, flaggy=0)


def make_board(cogs, open_keys=range(96), fixed_keys=(), flags=()):
    """Board with open slots, locked slots and the given cogs."""
    slots = {key: Cog.slot(key) for key in open_keys}
    for key in fixed_keys:
        slots[key] = Cog.slot(key, fixed=True)
    for key in flags:
        slots[key] = Cog.slot(key, fixed=True, is_flag=True)
    return Board(
        cogs={cog.key: cog for cog in cogs},
        slots=slots,
        flag_positions=list(flags),
        available_slot_keys=[key for key, slot in slots.items() if not slot.fixed],
    )


def boosted_board():
    """A booster far away from the cog it could boost."""
    return make_board([
        Cog(0, boost_radius=BoostRadius.ADJACENT, build_radius_boost=100, origin=0),
        Cog(50, build_rate=10, origin=50),
    ])


def test_optimizer_finds_boost():
    """Hill climbing moves the cog next to its booster."""
    print("\n" + "=" * 60)
    print("TEST: Optimizer finds boost")
    print("=" * 60)

    board = boosted_board()
    assert board.score.build_rate == 10

    result = optimize(board, BUILD_ONLY, time_budget_ms=300, rng=random.Random(7))

    print(f"  Best: {result.score}, metrics: {result.metrics}")
    assert result is not None
    assert result.score.build_rate == 20
    assert result.weighted == 20
    assert result.metrics.iterations > 0
    assert result.metrics.accepted_swaps >= 1


def test_optimizer_leaves_input_untouched():
    board = boosted_board()
    original = board.copy()

    optimize(board, BUILD_ONLY, time_budget_ms=100, rng=random.Random(3))

    assert board == original
    assert board.score.build_rate == 10


def test_optimizer_non_regression():
    """Returned weighted score is never below the input's."""
    rng = random.Random(11)
    for seed in range(4):
        cogs = []
        keys = rng.sample(range(96), 12)
        patterns = [p for p in BoostRadius if p is not BoostRadius.EVERYTHING]
        for key in keys:
            cogs.append(Cog(
                key,
                build_rate=rng.randint(0, 50),
                flaggy=rng.randint(0, 5),
                exp_bonus=rng.randint(0, 3),
                exp_gain=rng.choice([0, 1]),
                is_player=False,
                build_radius_boost=rng.randint(0, 40),
                boost_radius=rng.choice(patterns),
                origin=key,
            ))
        board = make_board(cogs)
        weights = Weights(build_rate=1, exp=100, flaggy=250)

        result = optimize(board, weights, time_budget_ms=80, rng=random.Random(seed))

        assert result is not None
        # No flags on this board: flaggy weight is dropped
        effective = weights.without_flaggy()
        assert result.weighted >= weighted_sum(board.score, effective)


def test_restarts_record_independent_candidates():
    """Restarts adopt shuffled boards without corrupting earlier candidates."""
    board = boosted_board()
    optimizer = BoardOptimizer(rng=random.Random(5), restart_interval=50, shuffle_swaps=20)

    result = optimizer.optimize(board, BUILD_ONLY, SearchContext(time_budget_ms=300))

    assert result is not None
    assert result.metrics.restarts > 0
    assert result.metrics.pool_size == result.metrics.restarts + 2
    assert result.score.build_rate == 20
    # The returned board still matches its own score
    assert result.board.copy().score == result.score


def test_fixed_and_build_positions_never_move():
    """Fixed cogs, locked slots and the build queue are never swap endpoints."""
    print("\n" + "=" * 60)
    print("TEST: Fixed-position invariant")
    print("=" * 60)

    cogs = [
        Cog(5, boost_radius=BoostRadius.EVERYTHING, build_radius_boost=10, fixed=True, origin=5),
        Cog(30, boost_radius=BoostRadius.ADJACENT, build_radius_boost=100, origin=30),
        Cog(60, build_rate=20, origin=60),
        Cog(100, build_rate=50, origin=100),
    ]
    open_keys = list(range(96)) + [100, 101]
    fixed_keys = [31, 29, 18, 42]

    for seed in range(5):
        board = make_board(cogs, open_keys=open_keys, fixed_keys=fixed_keys)
        result = solve_board(
            board, BUILD_ONLY,
            optimizer=BoardOptimizer(rng=random.Random(seed), restart_interval=200, shuffle_swaps=50),
            context=SearchContext(time_budget_ms=150),
        )
        assert result is not None
        assert result.board.cogs[5] == cogs[0]
        assert result.board.cogs[100] == cogs[3]

        for step in result.steps:
            for pos in (step.from_pos, step.to_pos):
                key = pos.to_key()
                assert pos.zone is not Zone.BUILD
                assert zone_of(key) is not Zone.BUILD
                assert key != 5
                assert key not in fixed_keys


def test_no_flags_zeroes_flaggy_weight():
    """Without flags, flaggy cannot drive the search."""
    board = make_board([Cog(0, flaggy=10, origin=0)])
    result = optimize(board, Weights(build_rate=0, exp=0, flaggy=250), time_budget_ms=30,
                      rng=random.Random(1))
    assert result.weighted == 0


def test_not_found():
    """An uncomputable board yields no result instead of raising."""
    board = Board(cogs={0: Cog(0, build_rate=1)}, available_slot_keys=[0, 7])
    assert optimize(board, BUILD_ONLY, time_budget_ms=20) is None


def test_yields_and_reports_progress():
    """The search hands back control on every yield interval."""
    calls = []
    context = SearchContext(
        time_budget_ms=350,
        yield_interval_ms=50,
        progress_callback=lambda percent, message: calls.append((percent, message)),
    )

    result = BoardOptimizer(rng=random.Random(2)).optimize(boosted_board(), BUILD_ONLY, context)

    assert result is not None
    assert len(calls) >= 2
    assert all(0.0 <= percent <= 0.99 for percent, _ in calls)


def test_cancel_flag_stops_search():
    """A set cancel flag ends the search at the next yield."""
    cancel = threading.Event()
    cancel.set()
    context = SearchContext(time_budget_ms=5000, yield_interval_ms=20, cancel_flag=cancel)

    result = BoardOptimizer(rng=random.Random(4)).optimize(boosted_board(), BUILD_ONLY, context)

    assert result is not None
    assert result.metrics.was_cancelled
    assert result.metrics.computation_time_ms < 5000
    assert result.weighted >= 10


def test_end_to_end_unboosted_sum():
    """Rearranging unboosted cogs cannot change their sum."""
    print("\n" + "=" * 60)
    print("TEST: End-to-end unboosted board")
    print("=" * 60)

    raw = {
        "CogM": json.dumps({"0": {"a": 10}, "1": {"a": 5}}),
        "GemItemsPurchased": [0] * 200,
        "FlagU": [-11, -11],
    }

    result = solve(raw, BUILD_ONLY, time_budget_ms=60, rng=random.Random(9))

    assert result is not None
    assert result.score.build_rate == 15
    assert result.steps == []
    assert result.verified
    assert result.to_dict()["score"]["buildRate"] == 15


def test_end_to_end_boosted():
    """Parsed booster and cog end up adjacent through executable steps."""
    raw = {
        "data": {
            "CogM": {"0": {"a": 0, "e": 100, "h": "adjacent"}, "50": {"a": 10}},
            "FlagU": [-11] * 96,
        }
    }

    result = solve(raw, BUILD_ONLY, time_budget_ms=300, rng=random.Random(21))

    assert result is not None
    assert result.score.build_rate == 20
    assert 1 <= result.step_count <= 2
    assert result.verified
