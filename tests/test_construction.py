"""
Tests for the board model, parser and scorer.

Usage:
    pytest tests/test_construction.py
"""

import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.construction import (
    Board,
    BoostRadius,
    Cog,
    Position,
    Score,
    Weights,
    Zone,
    calculate_score,
    parse_construction,
    weighted_sum,
)
from src.construction.scorer import boost_targets, pattern_offsets


def make_board(cogs, open_keys=range(96), flags=(), upgrades=0):
    """Board with open slots, flagged fixed slots and the given cogs."""
    slots = {key: Cog.slot(key) for key in open_keys}
    for key in flags:
        slots[key] = Cog.slot(key, fixed=True, is_flag=True)
    return Board(
        cogs={cog.key: cog for cog in cogs},
        slots=slots,
        flag_positions=list(flags),
        flaggy_shop_upgrades=upgrades,
        available_slot_keys=[key for key in open_keys if key not in flags],
    )


def test_position_round_trip():
    """Every key converts to zone/row/col and back."""
    print("\n" + "=" * 60)
    print("TEST: Position round trip")
    print("=" * 60)

    for key in range(0, 108 + 40):
        pos = Position.from_key(key)
        assert pos.to_key() == key, f"key {key} -> {pos}"

    assert Position.from_key(13) == Position(Zone.BOARD, 1, 1)
    assert Position.from_key(95) == Position(Zone.BOARD, 7, 11)
    assert Position.from_key(96) == Position(Zone.BUILD, 0, 0)
    assert Position.from_key(107) == Position(Zone.BUILD, 3, 2)
    assert Position.from_key(108) == Position(Zone.SPARE, 0, 0)
    assert Position.from_key(115) == Position(Zone.SPARE, 2, 1)


def test_pattern_offsets():
    """Each pattern covers the expected number of cells."""
    expected = {
        BoostRadius.NONE: 0,
        BoostRadius.DIAGONAL: 4,
        BoostRadius.ADJACENT: 4,
        BoostRadius.UP: 6,
        BoostRadius.RIGHT: 6,
        BoostRadius.DOWN: 6,
        BoostRadius.LEFT: 6,
        BoostRadius.ROW: 11,
        BoostRadius.COLUMN: 7,
        BoostRadius.CORNER: 4,
        BoostRadius.AROUND: 12,
        BoostRadius.EVERYTHING: 95,
    }
    for pattern in BoostRadius:
        offsets = pattern_offsets(pattern, 4, 5)
        assert len(offsets) == expected[pattern], pattern
        assert (4, 5) not in offsets

    # Corner cell clips off-board targets
    rows, cols = boost_targets(BoostRadius.ADJACENT, 0, 0)
    assert sorted(zip(rows.tolist(), cols.tolist())) == [(0, 1), (1, 0)]

    up = set(pattern_offsets(BoostRadius.UP, 4, 5))
    assert up == {(2, 4), (2, 5), (2, 6), (3, 4), (3, 5), (3, 6)}


def test_unboosted_sum():
    """Base stats add up regardless of position."""
    board = make_board([Cog(0, build_rate=10), Cog(50, build_rate=5)])
    score = board.score
    assert score.build_rate == 15
    assert score.flaggy == 0
    assert score.exp_boost == 0


def test_build_rate_boost_rounds_up():
    """A neighbour's percent boost is applied and rounded up."""
    booster = Cog(13, boost_radius=BoostRadius.ADJACENT, build_radius_boost=25)
    target = Cog(14, build_rate=10)
    board = make_board([booster, target])

    # ceil(10 * 25 / 100) = 3
    assert board.score.build_rate == 13


def test_exp_boost_only_for_players():
    """Flat exp boost is collected by player cogs only."""
    booster = Cog(13, boost_radius=BoostRadius.ADJACENT, exp_radius_boost=7)
    player = Cog(14, exp_gain=3, is_player=True)
    bystander = Cog(12, exp_bonus=2)
    board = make_board([booster, player, bystander])

    score = board.score
    assert score.exp_boost == 7
    assert score.exp_bonus == 2


def test_flag_boost_and_upgrades():
    """Flagged cells collect flag boost, flaggy scales with upgrades."""
    booster = Cog(13, boost_radius=BoostRadius.ADJACENT, flag_boost=2, flaggy=3)
    board = make_board([booster], flags=[1], upgrades=1)

    score = board.score
    assert score.flag_boost == 2
    # floor(3 * 1.5) = 4
    assert score.flaggy == 4


def test_flaggy_percent_boost_rounds_up():
    """A neighbour's flaggy percent boost is rounded up, then upgrades apply."""
    booster = Cog(13, boost_radius=BoostRadius.ADJACENT, flaggy_radius_boost=25)
    target = Cog(14, flaggy=10)

    # 10 + ceil(10 * 25 / 100) = 13
    score = make_board([booster, target]).score
    assert score.flaggy == 13
    assert score.build_rate == 0

    # floor(13 * 1.5) = 19
    assert make_board([booster, target], upgrades=1).score.flaggy == 19

    # Out of the pattern's reach: base only
    far = Cog(40, flaggy=10)
    assert make_board([booster, far]).score.flaggy == 10


def test_spare_cogs_skip_propagation():
    """Cogs off the board add base stats but project nothing."""
    spare_booster = Cog(110, boost_radius=BoostRadius.EVERYTHING, build_radius_boost=100)
    target = Cog(0, build_rate=10)
    board = make_board([spare_booster, target], open_keys=list(range(96)) + [110])

    assert board.score.build_rate == 10


def test_not_computable():
    """An eligible position with no entry makes the score not computable."""
    board = Board(available_slot_keys=[5])
    assert calculate_score(board) is None
    assert board.score is None


def test_score_purity():
    """Scoring is repeatable and copies never touch the original."""
    booster = Cog(13, boost_radius=BoostRadius.AROUND, build_radius_boost=40)
    board = make_board([booster, Cog(14, build_rate=9), Cog(40, build_rate=4)])

    first = calculate_score(board)
    assert calculate_score(board) == first
    assert board.score == first

    copy = board.copy()
    copy.swap(14, 80)
    assert copy.score != first
    assert board.score == first
    assert board.cogs[14].build_rate == 9


def test_swap_involution():
    """Swapping twice restores the board exactly."""
    board = make_board([Cog(3, build_rate=1, origin=3), Cog(7, flaggy=2, origin=7)])
    original = board.copy()

    board.swap(3, 7)
    assert board.cogs[3].flaggy == 2
    assert board.cogs[7].key == 7
    board.swap(7, 3)
    assert board == original

    # Swap with an empty position keeps it absent from cogs
    board.swap(3, 20)
    assert 3 not in board.cogs
    assert board.cogs[20].build_rate == 1
    board.swap(20, 3)
    assert board == original


def test_weighted_sum():
    score = Score(build_rate=100, exp_bonus=2, flaggy=3, exp_boost=10, flag_boost=4)
    weights = Weights(build_rate=1, exp=10, flaggy=5)
    # 100 + 2*10*20/10 + 3*5*8/4
    assert weighted_sum(score, weights) == 100 + 40 + 30


def test_parse_defaults():
    """Missing or malformed input degrades to an empty board."""
    print("\n" + "=" * 60)
    print("TEST: Parser defaults")
    print("=" * 60)

    for raw in (None, {}, "not json", "[1, 2]", {"CogM": 12, "FlagP": "oops", "FlagU": {"a": 1}}):
        board = parse_construction(raw)
        assert board.cogs == {}
        assert board.slots == {}
        assert board.flag_positions == []
        assert board.flaggy_shop_upgrades == 0
        assert board.score == Score(0, 0, 0, 0, 0)


def test_parse_snapshot():
    """All four fields decode, embedded or not."""
    cog_m = {
        "0": {"a": 10, "b": 0, "e": 20, "h": "adjacent"},
        "3": {"a": 5, "b": 2, "h": "everything", "k": 1},
        "x": {"a": 99},
        "4": {"a": "bad", "h": "sideways"},
    }
    gems = [0] * 130
    gems[118] = 2
    raw = {
        "data": {
            "CogM": json.dumps(cog_m),
            "GemItemsPurchased": json.dumps(gems),
            "FlagP": [2, -1, 6],
            "FlagU": [-11, 0, 5, -11, -11, -11, 0],
        }
    }

    board = parse_construction(raw)

    assert sorted(board.cogs) == [0, 3, 4]
    assert board.cogs[0].boost_radius is BoostRadius.ADJACENT
    assert board.cogs[0].build_radius_boost == 20
    assert not board.cogs[0].is_player
    assert board.cogs[3].is_player
    assert board.cogs[3].fixed
    assert board.cogs[3].origin == 3
    assert board.cogs[4].build_rate == 0
    assert board.cogs[4].boost_radius is BoostRadius.NONE

    assert board.flaggy_shop_upgrades == 2
    assert board.flag_positions == [2, 6]

    assert board.slots[2].fixed and board.slots[2].is_flag and board.slots[2].blocked
    assert board.slots[1].fixed and not board.slots[1].is_flag
    # Flagged but code 0: locked, not a flag
    assert board.slots[6].fixed and not board.slots[6].is_flag
    assert board.available_slot_keys == [0, 3, 4, 5]

    # Cog 0 boosts (0,1) and (1,0); neither holds an eligible cog
    assert board.score.build_rate == 15


def test_parse_short_upgrade_list():
    board = parse_construction({"GemItemsPurchased": [1, 2, 3]})
    assert board.flaggy_shop_upgrades == 0


def test_parse_non_finite_numbers():
    """NaN and infinities in save data count as 0 instead of raising."""
    board = parse_construction({"CogM": '{"0": {"a": NaN, "c": Infinity}}', "FlagU": [-11]})
    assert board.cogs[0].build_rate == 0
    assert board.cogs[0].flaggy == 0
    assert board.score == Score(0, 0, 0, 0, 0)

    board = parse_construction({
        "CogM": {"0": {"a": 7, "e": float("-inf")}},
        "GemItemsPurchased": json.dumps([0] * 118 + [float("nan")]),
        "FlagP": [float("inf"), 3],
        "FlagU": [-11],
    })
    assert board.flaggy_shop_upgrades == 0
    assert board.flag_positions == [3]
    assert board.score.build_rate == 7


def test_overflowing_boost_not_computable():
    """Totals beyond float range make the score not computable."""
    raw = {
        "CogM": {"0": {"e": 200, "h": "adjacent"}, "1": {"a": 1e308}},
        "FlagU": [-11, -11],
    }
    board = parse_construction(raw)
    assert board.cogs[1].build_rate == 1e308
    assert board.score is None

    # Base stats alone summing past float range
    board = make_board([Cog(0, build_rate=1e308), Cog(1, build_rate=1e308)])
    assert calculate_score(board) is None
