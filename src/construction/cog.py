"""
Cog Module - Placeable pieces and empty slot markers.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple


class BoostRadius(str, Enum):
    """
    Named relative-offset pattern a cog projects its radius boosts onto.

    Values match the pattern names used in save data.
    """
    NONE = ""
    DIAGONAL = "diagonal"
    ADJACENT = "adjacent"
    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"
    ROW = "row"
    COLUMN = "column"
    CORNER = "corner"
    AROUND = "around"
    EVERYTHING = "everything"

    @classmethod
    def parse(cls, value: object) -> 'BoostRadius':
        """Map a raw pattern name to a member, unknown names become NONE."""
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                return cls.NONE
        return cls.NONE


@dataclass(frozen=True)
class Cog:
    """
    Item at a board position, or an empty slot marker of the same shape.

    Cogs are immutable; moving one produces a copy with the new key.

    Attributes:
        key: Linear position the cog currently sits at
        build_rate: Base build rate contribution
        exp_bonus: Base experience bonus contribution
        flaggy: Base flaggy rate contribution
        exp_gain: Raw player experience field (is_player is derived from it)
        is_player: Player cogs collect exp_boost from their own cell
        build_radius_boost: Percent build rate projected onto neighbours
        exp_radius_boost: Flat exp boost projected onto neighbours
        flaggy_radius_boost: Percent flaggy projected onto neighbours
        flag_boost: Boost projected onto flagged neighbours
        boost_radius: Pattern of neighbours receiving the radius boosts
        fixed: Never a swap endpoint
        blocked: Position cannot hold a cog
        is_flag: Slot holds a placed flag
        origin: Key the piece was parsed at, None for synthetic cogs
    """
    key: int
    build_rate: float = 0.0
    exp_bonus: float = 0.0
    flaggy: float = 0.0
    exp_gain: float = 0.0
    is_player: bool = False
    build_radius_boost: float = 0.0
    exp_radius_boost: float = 0.0
    flaggy_radius_boost: float = 0.0
    flag_boost: float = 0.0
    boost_radius: BoostRadius = BoostRadius.NONE
    fixed: bool = False
    blocked: bool = False
    is_flag: bool = False
    origin: Optional[int] = None

    @classmethod
    def slot(cls, key: int, fixed: bool = False, is_flag: bool = False) -> 'Cog':
        """
        Create a slot marker for a position.

        Fixed slots are also blocked.

        Args:
            key: Position of the slot
            fixed: True if the slot is locked or flagged
            is_flag: True if a flag sits on the slot

        Returns:
            Cog with zero stats
        """
        return cls(key=key, fixed=fixed, blocked=fixed, is_flag=is_flag)

    def moved_to(self, key: int) -> 'Cog':
        """Copy of this cog at another key."""
        return replace(self, key=key)

    @property
    def signature(self) -> Tuple:
        """Attribute set identifying a piece regardless of its position."""
        return (
            self.build_rate,
            self.exp_bonus,
            self.flaggy,
            self.exp_gain,
            self.is_player,
            self.build_radius_boost,
            self.exp_radius_boost,
            self.flaggy_radius_boost,
            self.flag_boost,
            self.boost_radius,
            self.fixed,
            self.blocked,
        )

    def same_piece(self, other: Optional['Cog']) -> bool:
        """
        Check whether two cogs are the same physical piece.

        Pieces parsed from save data carry their origin key, which is
        compared as well. Synthetic cogs fall back to the attribute set,
        so duplicates of identical pieces are indistinguishable.
        """
        if other is None:
            return False
        if self.signature != other.signature:
            return False
        if self.origin is not None and other.origin is not None:
            return self.origin == other.origin
        return True
