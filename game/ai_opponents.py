"""
Scripted AI Opponents - Simple bots to play demo matches against.

- RandomAI: a random direction for every unit (weakest)
- NearestCityAI: greedy walk toward the nearest city cell it does not own
"""

import random
from typing import List, Optional

from game.board import CellType
from game.game_state import PlayerView
from game.geometry import Direction, Position, manhattan_distance
from game.units import Unit


class BaseAI:
    """Base class for scripted opponents."""

    name = "base"

    def play(self, view: PlayerView):
        pass

    def _direction_toward(self, source: Position, target: Position) -> Direction:
        di = target.i - source.i
        dj = target.j - source.j
        if abs(dj) >= abs(di):
            return Direction.RIGHT if dj > 0 else Direction.LEFT
        return Direction.BOTTOM if di > 0 else Direction.TOP

    def _move_toward(self, view: PlayerView, unit: Unit,
                     target: Position) -> Optional[Direction]:
        """Try to step toward target, trying the other directions if blocked."""
        primary = self._direction_toward(unit.pos, target)
        candidates = [primary] + sorted(
            (d for d in Direction if d != primary),
            key=lambda d: manhattan_distance(unit.pos + d, target),
        )
        for d in candidates:
            c = view.cell(unit.pos + d)
            if c.type != CellType.WALL and c.unit_id == -1:
                return d
        return None


class RandomAI(BaseAI):
    """Moves every unit in a uniformly random direction."""

    name = "random"

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def play(self, view: PlayerView):
        for unit_id in view.my_units(view.me()):
            view.move(unit_id, self.rng.choice(list(Direction)))


class NearestCityAI(BaseAI):
    """Sends every unit toward the closest city cell not owned by its player."""

    name = "nearest-city"

    def play(self, view: PlayerView):
        me = view.me()
        targets: List[Position] = []
        for city_id in range(view.nb_cities()):
            if view.city_owner(city_id) != me:
                targets.extend(view.city(city_id))

        for unit_id in view.my_units(me):
            unit = view.unit(unit_id)
            if not targets:
                return
            target = min(targets, key=lambda p: manhattan_distance(unit.pos, p))
            if target == unit.pos:
                continue
            d = self._move_toward(view, unit, target)
            if d is not None:
                view.move(unit_id, d)
