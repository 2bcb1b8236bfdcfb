"""
Local Flood Evaluation - Bounded breadth-first scoring around one unit.

The flood starts from the four neighbours of the unit at distance 1, each
tagged with the direction that reaches it. Every cell is ticketed once, when
first discovered; if another shortest path reaches it later, that path's
first-step directions are OR-ed into its ticket. When a cell is visited its
score is credited to every direction in its ticket, so a direction collects
everything that lies on some shortest path starting with that step.

Neighbours are special: a wall or an ally next to the unit forbids that
direction, an adjacent enemy is an attack opportunity. These do not go
through the cell scorer.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Set, Tuple

from game.board import CellType
from game.geometry import Position, POSSIBLE_DIRECTIONS
from game.units import Unit
from covid_ai.errors import EvaluationError
from covid_ai.scoring import Allegiance, CellScorer, ForceCounters
from covid_ai.vectors import DirectionBooleans, DirectionEvaluation
from covid_ai.weights import EvaluationWeights

logger = logging.getLogger(__name__)


@dataclass
class SearchTicket:
    distance: int
    reachable_from: DirectionBooleans


class LocalFloodEvaluator:
    """Scores the four directions of a unit from its surroundings."""

    def __init__(self, view, scorer: CellScorer, weights: EvaluationWeights):
        self.view = view
        self.scorer = scorer
        self.weights = weights

    def evaluate(self, my_unit: Unit, max_range: int) -> DirectionEvaluation:
        evaluation, _ = self.evaluate_with_trace(my_unit, max_range)
        return evaluation

    def evaluate_with_trace(self, my_unit: Unit, max_range: int
                            ) -> Tuple[DirectionEvaluation, Dict[Position, SearchTicket]]:
        """Run the flood; also return the tickets handed out (scored or not)."""
        w = self.weights
        evaluation = DirectionEvaluation(w.null_evaluation)
        counters = ForceCounters()

        tickets: Dict[Position, SearchTicket] = {
            my_unit.pos: SearchTicket(0, DirectionBooleans()),
        }
        walls: Set[Position] = set()
        frontier: Deque[Position] = deque()

        for direction in POSSIBLE_DIRECTIONS:
            position = my_unit.pos + direction
            if position in tickets or position in walls:
                raise EvaluationError(f"Neighbour {position} of {my_unit.pos} seeded twice")
            c = self.view.cell(position)
            if c.type == CellType.WALL:
                walls.add(position)
                evaluation[direction] += w.adjacent_wall
                continue

            tickets[position] = SearchTicket(1, DirectionBooleans.only(direction))
            if c.unit_id != -1:
                other = self.view.unit(c.unit_id)
                allegiance = self.scorer.allegiance(other)
                counters.record(allegiance)
                evaluation[direction] += (w.adjacent_allied if allegiance is Allegiance.ALLY
                                          else self.scorer.adjacent_combat_score(my_unit, other))
            else:
                frontier.append(position)

        scored = 0
        while frontier:
            position = frontier.popleft()
            ticket = tickets[position]

            # First cell beyond the range: stop before scoring it
            if ticket.distance > max_range:
                break

            score = self.scorer.cell_score(ticket.distance, self.view.cell(position),
                                           my_unit, counters, self.view.unit)
            reachable_from = ticket.reachable_from
            evaluation += DirectionEvaluation.from_function(
                lambda d: score if reachable_from[d] else w.null_evaluation)
            scored += 1

            for direction in POSSIBLE_DIRECTIONS:
                neighbour = position + direction
                known = tickets.get(neighbour)
                if known is not None:
                    if known.distance == ticket.distance + 1:
                        known.reachable_from |= ticket.reachable_from
                    continue
                if neighbour in walls:
                    continue
                if self.view.cell(neighbour).type == CellType.WALL:
                    walls.add(neighbour)
                    continue
                tickets[neighbour] = SearchTicket(ticket.distance + 1,
                                                  ticket.reachable_from.copy())
                frontier.append(neighbour)

        logger.debug(f"Flood from {my_unit.pos} range {max_range}: "
                     f"{scored} cells scored, {len(tickets)} ticketed, "
                     f"allies={counters.allies} enemies={counters.enemies}")
        return evaluation, tickets
