"""
Move Module - Swaps between two positions and their external form.
"""

from dataclasses import dataclass

from .position import Position


@dataclass(frozen=True)
class Move:
    """
    Ordered pair of positions whose occupants are exchanged.

    Attributes:
        from_key: Position the piece leaves
        to_key: Position the piece goes to
    """
    from_key: int
    to_key: int

    def reversed(self) -> 'Move':
        return Move(self.to_key, self.from_key)

    def to_step(self) -> 'Step':
        """Express the move in zone/row/col terms."""
        return Step(
            from_pos=Position.from_key(self.from_key),
            to_pos=Position.from_key(self.to_key),
        )


@dataclass(frozen=True)
class Step:
    """
    A Move as handed to the external actuator.

    Steps must be executed in list order; chained steps depend on
    earlier swaps having completed.

    Attributes:
        from_pos: Source position
        to_pos: Destination position
    """
    from_pos: Position
    to_pos: Position

    @property
    def move(self) -> Move:
        return Move(self.from_pos.to_key(), self.to_pos.to_key())

    def to_dict(self) -> dict:
        return {"from": self.from_pos.to_dict(), "to": self.to_pos.to_dict()}
