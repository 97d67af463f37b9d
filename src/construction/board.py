"""
Board Module - Mutable board snapshot for the cog construction puzzle.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, TYPE_CHECKING

from .cog import Cog
from .position import Zone, zone_of

if TYPE_CHECKING:
    from .score import Score


@dataclass
class Board:
    """
    Snapshot of placed cogs and the slots they can move between.

    Empty positions are absent from `cogs`, never stored as None.
    The cached score is invalidated on every mutation and ignored
    by equality.

    Attributes:
        cogs: Occupied position -> Cog
        slots: Every known position -> slot marker
        flag_positions: Board positions whose flag boost is totalled
        flaggy_shop_upgrades: Purchased flaggy upgrades
        available_slot_keys: Swap-eligible positions
    """
    cogs: Dict[int, Cog] = field(default_factory=dict)
    slots: Dict[int, Cog] = field(default_factory=dict)
    flag_positions: List[int] = field(default_factory=list)
    flaggy_shop_upgrades: int = 0
    available_slot_keys: List[int] = field(default_factory=list)
    _score: Optional['Score'] = field(default=None, compare=False, repr=False)
    _score_ready: bool = field(default=False, compare=False, repr=False)

    @property
    def cog_keys(self) -> List[int]:
        """Currently occupied positions."""
        return list(self.cogs.keys())

    def get(self, key: int) -> Optional[Cog]:
        """
        Get the occupant at a position, or its slot marker if empty.

        Args:
            key: Linear position

        Returns:
            Cog, slot marker, or None for an unknown position
        """
        cog = self.cogs.get(key)
        if cog is not None:
            return cog
        return self.slots.get(key)

    def is_swappable(self, key: int) -> bool:
        """True if the position may be a swap endpoint."""
        entry = self.get(key)
        if entry is None or entry.fixed:
            return False
        return zone_of(key) is not Zone.BUILD

    def swap(self, key1: int, key2: int) -> None:
        """
        Exchange the occupants of two positions.

        Either side may be empty; an emptied position is removed
        from `cogs`.

        Args:
            key1: First position
            key2: Second position
        """
        cog1 = self.cogs.pop(key1, None)
        cog2 = self.cogs.pop(key2, None)

        if cog1 is not None:
            self.cogs[key2] = cog1.moved_to(key2)
        if cog2 is not None:
            self.cogs[key1] = cog2.moved_to(key1)

        self.invalidate_score()

    def copy(self) -> 'Board':
        """
        Independent copy of this board.

        Cogs are immutable so copying the containers is enough.
        The cached score carries over.
        """
        clone = Board(
            cogs=dict(self.cogs),
            slots=dict(self.slots),
            flag_positions=list(self.flag_positions),
            flaggy_shop_upgrades=self.flaggy_shop_upgrades,
            available_slot_keys=list(self.available_slot_keys),
        )
        clone._score = self._score
        clone._score_ready = self._score_ready
        return clone

    def invalidate_score(self) -> None:
        self._score = None
        self._score_ready = False

    @property
    def score(self) -> Optional['Score']:
        """
        Cached Score of this board.

        Returns:
            Score, or None if it could not be computed
        """
        if not self._score_ready:
            from .scorer import calculate_score
            self._score = calculate_score(self)
            self._score_ready = True
        return self._score

    def count_cogs(self) -> int:
        return len(self.cogs)
