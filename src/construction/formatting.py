"""
Formatting Module - Human-readable scores and steps.

Numbers use the game's compact notation (K, M, B, T, Q, QQ, then
E notation).
"""

import math
from dataclasses import dataclass
from typing import Optional

from .move import Step
from .position import Position, Zone
from .score import Score

# Spare inventory rows shown per page
SPARE_ROWS_PER_PAGE = 5

# (upper bound, divisor, scale, suffix): ceil(value / divisor) / scale
_NOTATION = [
    (1e4, 10, 100, "K"),
    (1e5, 100, 10, "K"),
    (1e6, 1e3, 1, "K"),
    (1e7, 1e4, 100, "M"),
    (1e8, 1e5, 10, "M"),
    (1e10, 1e6, 1, "M"),
    (1e13, 1e9, 1, "B"),
    (1e16, 1e12, 1, "T"),
    (1e22, 1e15, 1, "Q"),
    (1e24, 1e18, 1, "QQ"),
]


def _plain(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return f"{value:g}"


def format_score(value: float) -> str:
    """
    Format a score total in compact notation.

    Args:
        value: Score total (sign is ignored)

    Returns:
        e.g. "950", "1.24K", "12.3M", "1.5E25"
    """
    abs_value = abs(value)

    if abs_value < 1e3:
        return str(math.floor(abs_value))

    for bound, divisor, scale, suffix in _NOTATION:
        if abs_value < bound:
            return f"{_plain(math.ceil(abs_value / divisor) / scale)}{suffix}"

    exponent = math.floor(math.log10(abs_value))
    mantissa = math.floor(abs_value / 10 ** exponent * 100) / 100
    return f"{_plain(mantissa)}E{exponent}"


def format_score_diff(value: float) -> str:
    """Signed compact notation, e.g. "+1.2K" or "-30"."""
    sign = "+" if value >= 0 else "-"
    return f"{sign}{format_score(value)}"


def spare_page(row: int) -> int:
    """1-based spare inventory page showing a spare row."""
    return row // SPARE_ROWS_PER_PAGE + 1


def describe_position(pos: Position) -> str:
    """
    Actuator-facing position label.

    Returns:
        e.g. "BOARD 3, 1" or "SPARE 0, 7 PAGE 2" (x, y order)
    """
    label = f"{pos.zone.value.upper()} {pos.x}, {pos.y}"
    if pos.zone is Zone.SPARE:
        label += f" PAGE {spare_page(pos.y)}"
    return label


def describe_step(step: Step, index: Optional[int] = None, total: Optional[int] = None) -> str:
    """
    One-line description of a step.

    Args:
        step: Step to describe
        index: 0-based position in the step list
        total: Number of steps

    Returns:
        e.g. "STEP 1/4: BOARD 0, 0 TO SPARE 1, 0 PAGE 1"
    """
    text = f"{describe_position(step.from_pos)} TO {describe_position(step.to_pos)}"
    if index is not None and total is not None:
        text = f"STEP {index + 1}/{total}: {text}"
    return text


@dataclass(frozen=True)
class ScoreCard:
    """
    Formatted totals shown to the user.

    Attributes:
        build_rate: Formatted build rate
        exp_bonus: Formatted exp bonus
        flaggy: Formatted flaggy rate
    """
    build_rate: str
    exp_bonus: str
    flaggy: str

    @classmethod
    def from_score(cls, score: Score) -> 'ScoreCard':
        return cls(
            build_rate=format_score(score.build_rate),
            exp_bonus=format_score(score.exp_bonus),
            flaggy=format_score(score.flaggy),
        )

    @classmethod
    def diff(cls, before: Score, after: Score) -> 'ScoreCard':
        """Signed differences after - before."""
        return cls(
            build_rate=format_score_diff(after.build_rate - before.build_rate),
            exp_bonus=format_score_diff(after.exp_bonus - before.exp_bonus),
            flaggy=format_score_diff(after.flaggy - before.flaggy),
        )

    def __str__(self) -> str:
        return f"build={self.build_rate} exp={self.exp_bonus} flaggy={self.flaggy}"
