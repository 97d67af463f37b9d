"""
Position Module - Linear key <-> (zone, row, col) geometry.

Keys cover three disjoint zones:
    board: 0-95, 12 columns x 8 rows
    build: 96-107, 3 columns x 4 rows (immutable queue)
    spare: 108+, 3 columns, unlimited rows
"""

from dataclasses import dataclass
from enum import Enum

BOARD_ROWS = 8
BOARD_COLUMNS = 12
BUILD_START = 96
BUILD_END = 107
SPARE_START = 108
QUEUE_COLUMNS = 3


class Zone(str, Enum):
    BOARD = "board"
    BUILD = "build"
    SPARE = "spare"


def zone_of(key: int) -> Zone:
    """Zone a linear key falls into."""
    if key >= SPARE_START:
        return Zone.SPARE
    if key >= BUILD_START:
        return Zone.BUILD
    return Zone.BOARD


@dataclass(frozen=True)
class Position:
    """
    A position expressed in zone terms.

    Attributes:
        zone: Zone the key belongs to
        row: Row inside the zone (y)
        col: Column inside the zone (x)
    """
    zone: Zone
    row: int
    col: int

    @classmethod
    def from_key(cls, key: int) -> 'Position':
        """
        Convert a linear key into zone/row/col.

        Args:
            key: Non-negative linear key

        Returns:
            Position instance
        """
        if key < 0:
            raise ValueError(f"Position key must be non-negative, got {key}")

        zone = zone_of(key)
        if zone is Zone.BOARD:
            return cls(zone, key // BOARD_COLUMNS, key % BOARD_COLUMNS)

        offset = BUILD_START if zone is Zone.BUILD else SPARE_START
        return cls(zone, (key - offset) // QUEUE_COLUMNS, (key - offset) % QUEUE_COLUMNS)

    def to_key(self) -> int:
        """Inverse of from_key()."""
        if self.zone is Zone.BOARD:
            return self.row * BOARD_COLUMNS + self.col
        offset = BUILD_START if self.zone is Zone.BUILD else SPARE_START
        return offset + self.row * QUEUE_COLUMNS + self.col

    @property
    def x(self) -> int:
        return self.col

    @property
    def y(self) -> int:
        return self.row

    def to_dict(self) -> dict:
        return {"location": self.zone.value, "x": self.col, "y": self.row}
