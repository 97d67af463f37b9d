"""
Score Module - Aggregate totals and objective weights.
"""

import logging
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Score:
    """
    Aggregate totals of a board.

    Attributes:
        build_rate: Total build rate
        exp_bonus: Total experience bonus
        flaggy: Total flaggy rate after shop upgrades
        exp_boost: Exp boost collected by player cogs
        flag_boost: Flag boost collected by flagged positions
    """
    build_rate: float = 0.0
    exp_bonus: float = 0.0
    flaggy: float = 0.0
    exp_boost: float = 0.0
    flag_boost: float = 0.0

    def to_dict(self) -> dict:
        return {
            "buildRate": self.build_rate,
            "expBonus": self.exp_bonus,
            "flaggy": self.flaggy,
            "expBoost": self.exp_boost,
            "flagBoost": self.flag_boost,
        }


@dataclass(frozen=True)
class Weights:
    """
    Multipliers combining a Score into one comparable scalar.

    Attributes:
        build_rate: Build rate weight
        exp: Experience bonus weight
        flaggy: Flaggy rate weight
    """
    build_rate: float = 1.0
    exp: float = 100.0
    flaggy: float = 250.0

    @classmethod
    def from_dict(cls, data: dict) -> 'Weights':
        """Build weights from a settings dict, missing or invalid keys use defaults."""
        defaults = cls()
        return cls(
            build_rate=_weight(data, "buildRate", defaults.build_rate),
            exp=_weight(data, "exp", defaults.exp),
            flaggy=_weight(data, "flaggy", defaults.flaggy),
        )

    def without_flaggy(self) -> 'Weights':
        return replace(self, flaggy=0.0)


def _weight(data: dict, key: str, default: float) -> float:
    value = data.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid weight {key}={value!r} ({e}), using {default}")
        return default


# Normalizing baselines, not board-derived
EXP_BOOST_BASELINE = 10
FLAG_BOOST_BASELINE = 4


def weighted_sum(score: Score, weights: Weights) -> float:
    """
    Combine a Score into the optimizer's fitness value.

    Args:
        score: Score to combine
        weights: Objective weights

    Returns:
        Weighted scalar, higher is better
    """
    total = score.build_rate * weights.build_rate
    total += score.exp_bonus * weights.exp * (score.exp_boost + EXP_BOOST_BASELINE) / EXP_BOOST_BASELINE
    total += score.flaggy * weights.flaggy * (score.flag_boost + FLAG_BOOST_BASELINE) / FLAG_BOOST_BASELINE
    return total
