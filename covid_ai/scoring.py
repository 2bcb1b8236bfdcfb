"""
Cell Scoring - Turns (distance, cell contents) into a scalar score.

Each signal decays with distance so that closer signals dominate:
- cell type: weight / d^2 for cities and paths, weight / d^3 for walls
- mask lying on the cell: weight / d^3
- virus: weight * intensity / d^3 (a flat weight when already infected)
- units: allies are damped by how many allies were already seen; enemies
  scale with the health difference and the local force balance, / d^6

The force balance is accumulated over a whole flood, so the score of a
unit depends on the units found before it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from game.board import Cell, CellType
from game.units import Unit
from covid_ai.errors import EvaluationError
from covid_ai.weights import EvaluationWeights, InfectionPair


class Allegiance(Enum):
    ALLY = "ally"
    ENEMY = "enemy"


@dataclass
class ForceCounters:
    """Allied and enemy units met so far during one flood."""
    allies: int = 0
    enemies: int = 0

    def record(self, allegiance: Allegiance):
        if allegiance is Allegiance.ALLY:
            self.allies += 1
        else:
            self.enemies += 1


def _require_nonzero(distance: int, what: str):
    if distance == 0:
        raise EvaluationError(f"{what} score requested at distance 0")


class CellScorer:
    """Stateless scoring functions bound to one weight table and one player."""

    def __init__(self, weights: EvaluationWeights, me: int):
        self.weights = weights
        self.me = me

    def allegiance(self, other_unit: Unit) -> Allegiance:
        return Allegiance.ALLY if other_unit.player == self.me else Allegiance.ENEMY

    def cell_type_score(self, distance: int, my_unit: Unit, cell_type: CellType) -> float:
        _require_nonzero(distance, "Cell type")
        w = self.weights
        infected = my_unit.is_infected
        if cell_type == CellType.CITY:
            weight = w.local_city_if_infected if infected else w.local_city
            return weight / distance ** 2
        if cell_type == CellType.PATH:
            weight = w.local_path_if_infected if infected else w.local_path
            return weight / distance ** 2
        if cell_type == CellType.WALL:
            weight = w.local_wall_if_infected if infected else w.local_wall
            return weight / distance ** 3
        return w.null_evaluation

    def item_score(self, distance: int, my_unit: Unit) -> float:
        _require_nonzero(distance, "Mask")
        w = self.weights
        weight = w.mask_if_infected if my_unit.is_infected else w.mask
        return weight / distance ** 3

    def virus_score(self, distance: int, virus: int, my_unit: Unit) -> float:
        _require_nonzero(distance, "Virus")
        w = self.weights
        weight = w.virus_if_infected if my_unit.is_infected else w.virus * virus
        return weight / distance ** 3

    def unit_score(self, distance: int, my_unit: Unit, other_unit: Unit,
                   allies_seen: int, enemies_seen: int) -> float:
        pair = InfectionPair.of(my_unit, other_unit)

        if self.allegiance(other_unit) is Allegiance.ALLY:
            _require_nonzero(distance, "Allied unit")
            if allies_seen == 0:
                raise EvaluationError("Allied unit scored before being counted")
            return self.weights.allied_weight(pair) / allies_seen ** 2

        if distance <= 1:
            raise EvaluationError(f"Enemy unit scored at distance {distance}")
        health_difference = my_unit.health - other_unit.health
        return ((100 + health_difference) * self.weights.enemy_weight(pair)
                * (allies_seen - enemies_seen) ** 5 / distance ** 6)

    def adjacent_combat_score(self, my_unit: Unit, enemy_unit: Unit) -> float:
        # Health is not taken into account next to an enemy: always attack
        return self.weights.adjacent_enemy

    def local_unit_score(self, distance: int, my_unit: Unit, other_unit: Unit,
                         counters: ForceCounters) -> float:
        """Count the unit in the running force balance, then score it."""
        counters.record(self.allegiance(other_unit))
        return self.unit_score(distance, my_unit, other_unit,
                               counters.allies, counters.enemies)

    def cell_score(self, distance: int, cell: Cell, my_unit: Unit,
                   counters: ForceCounters, lookup_unit: Callable[[int], Unit]) -> float:
        """Sum of the type, occupant, mask and virus scores of one cell."""
        w = self.weights
        type_score = self.cell_type_score(distance, my_unit, cell.type)
        unit_score = (self.local_unit_score(distance, my_unit, lookup_unit(cell.unit_id), counters)
                      if cell.unit_id != -1 else w.null_evaluation)
        mask_score = self.item_score(distance, my_unit) if cell.mask else w.null_evaluation
        virus_score = self.virus_score(distance, cell.virus, my_unit)
        return type_score + unit_score + mask_score + virus_score
