"""
Direction Vectors - The per-direction currency of every evaluator.

DirectionEvaluation holds one score per direction. DirectionBooleans holds
one flag per direction, meaning "this direction is the first step of at
least one shortest path to the cell this set belongs to". Both always have
exactly four slots, indexed by Direction.
"""

from typing import Callable, List

import numpy as np

from game.geometry import Direction, NUM_DIRECTIONS, direction_index


class DirectionEvaluation:
    """Four scores, one per direction."""

    __slots__ = ('_values',)

    def __init__(self, baseline: float = 0.0):
        self._values = np.full(NUM_DIRECTIONS, baseline, dtype=np.float64)

    @classmethod
    def from_function(cls, evaluation_function: Callable[[Direction], float]) -> 'DirectionEvaluation':
        """Build from a total function over the four directions."""
        evaluation = cls()
        evaluation._values = np.array([evaluation_function(d) for d in Direction],
                                      dtype=np.float64)
        return evaluation

    def __add__(self, other: 'DirectionEvaluation') -> 'DirectionEvaluation':
        result = DirectionEvaluation()
        # inf + -inf is a legitimate NaN here (e.g. wall next to an attack bonus)
        with np.errstate(invalid='ignore'):
            result._values = self._values + other._values
        return result

    def __iadd__(self, other: 'DirectionEvaluation') -> 'DirectionEvaluation':
        with np.errstate(invalid='ignore'):
            self._values += other._values
        return self

    def __getitem__(self, direction: Direction) -> float:
        return float(self._values[direction_index(direction)])

    def __setitem__(self, direction: Direction, value: float):
        self._values[direction_index(direction)] = value

    def __eq__(self, other) -> bool:
        if not isinstance(other, DirectionEvaluation):
            return NotImplemented
        return bool(np.array_equal(self._values, other._values, equal_nan=True))

    __hash__ = None

    def __len__(self) -> int:
        return NUM_DIRECTIONS

    def as_array(self) -> np.ndarray:
        return self._values.copy()

    def __repr__(self) -> str:
        scores = ", ".join(f"{d.name}={self[d]:g}" for d in Direction)
        return f"DirectionEvaluation({scores})"


class DirectionBooleans:
    """Four flags, one per direction, OR-accumulated along searches."""

    __slots__ = ('_flags',)

    def __init__(self):
        self._flags = np.zeros(NUM_DIRECTIONS, dtype=bool)

    @classmethod
    def only(cls, direction: Direction) -> 'DirectionBooleans':
        """All false except ``direction``."""
        booleans = cls()
        booleans._flags[direction_index(direction)] = True
        return booleans

    @classmethod
    def all(cls, value: bool) -> 'DirectionBooleans':
        booleans = cls()
        booleans._flags[:] = value
        return booleans

    def __ior__(self, other: 'DirectionBooleans') -> 'DirectionBooleans':
        self._flags |= other._flags
        return self

    __iadd__ = __ior__

    def __getitem__(self, direction: Direction) -> bool:
        return bool(self._flags[direction_index(direction)])

    def __eq__(self, other) -> bool:
        if not isinstance(other, DirectionBooleans):
            return NotImplemented
        return bool(np.array_equal(self._flags, other._flags))

    __hash__ = None

    def __len__(self) -> int:
        return NUM_DIRECTIONS

    def copy(self) -> 'DirectionBooleans':
        booleans = DirectionBooleans()
        booleans._flags = self._flags.copy()
        return booleans

    def any(self) -> bool:
        return bool(self._flags.any())

    def directions(self) -> List[Direction]:
        return [d for d in Direction if self._flags[d]]

    def __repr__(self) -> str:
        names = "|".join(d.name for d in self.directions()) or "-"
        return f"DirectionBooleans({names})"
