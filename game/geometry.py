"""
Geometry - Grid positions and the four cardinal directions.

Positions are (i, j) = (row, column). Rows grow downward, so BOTTOM adds
one to i and TOP subtracts one. Directions carry a stable index 0..3 used
to address the per-direction accumulators of the decision engine.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple


class InvalidDirectionError(IndexError):
    """A value outside the four cardinal directions was used as a direction."""


class Direction(IntEnum):
    BOTTOM = 0
    RIGHT = 1
    TOP = 2
    LEFT = 3

    @property
    def offset(self) -> Tuple[int, int]:
        return DIR_OFFSETS[self]


# Direction offsets: (di, dj)
DIR_OFFSETS = {
    Direction.BOTTOM: (1, 0),
    Direction.RIGHT: (0, 1),
    Direction.TOP: (-1, 0),
    Direction.LEFT: (0, -1),
}

NUM_DIRECTIONS = 4

# Order in which every search hands out tickets to neighbours
POSSIBLE_DIRECTIONS = (Direction.BOTTOM, Direction.RIGHT, Direction.TOP, Direction.LEFT)


def direction_index(direction) -> int:
    """Return the 0..3 slot of a direction, failing loudly on anything else."""
    if isinstance(direction, bool):
        raise InvalidDirectionError(f"Not a direction: {direction!r}")
    try:
        index = int(direction)
    except (TypeError, ValueError):
        raise InvalidDirectionError(f"Not a direction: {direction!r}") from None
    if not 0 <= index < NUM_DIRECTIONS:
        raise InvalidDirectionError(f"Direction index out of range: {index}")
    return index


@dataclass(frozen=True)
class Position:
    """A cell coordinate on the board."""
    i: int
    j: int

    def __add__(self, direction: Direction) -> 'Position':
        di, dj = DIR_OFFSETS[Direction(direction_index(direction))]
        return Position(self.i + di, self.j + dj)

    def __repr__(self) -> str:
        return f"Position({self.i}, {self.j})"


# Sentinel for "no position", e.g. when no target qualifies
NULL_POSITION = Position(-1, -1)


def is_null(position: Position) -> bool:
    return position.i == -1


def manhattan_distance(a: Position, b: Position) -> int:
    return abs(a.i - b.i) + abs(a.j - b.j)
