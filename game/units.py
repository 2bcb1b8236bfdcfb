"""
Units - The moving pieces of the game.

A unit belongs to one player, has health, and may carry an infection
("damage"). A unit with positive damage is infected and loses health every
round until it dies or recovers. Masks reduce the chance of catching the
virus from neighbours and from contaminated cells.
"""

from dataclasses import dataclass

from game.geometry import Position, manhattan_distance


@dataclass
class Unit:
    """A unit instance in the game."""
    unit_id: int
    player: int
    pos: Position
    health: int
    damage: int = 0        # > 0 means infected
    immune: bool = False
    mask: bool = False

    @property
    def is_infected(self) -> bool:
        return self.damage > 0

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    def take_damage(self, amount: int):
        self.health = max(0, self.health - amount)

    def distance_to(self, pos: Position) -> int:
        """Manhattan distance to a position."""
        return manhattan_distance(self.pos, pos)
