"""
Global Path Evaluation - Steer a unit toward the nearest useful tile.

First the Manhattan-nearest city or path cell not yet owned by us is picked
(cities are scanned before paths, then by id and cell order; the first one
found wins ties). Then an A* search with Manhattan distance as heuristic
finds every first step lying on some shortest path to it. Each such
direction gets the global bonus.

Tie handling: the queue is ordered by (cost + heuristic, cost), so on equal
priority the shallower cell is expanded first. With a consistent heuristic
this expands every optimal predecessor of a cell before the cell itself, so
its set of first-step directions is complete by the time it is expanded or
reached as the destination.
"""

import heapq
import itertools
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Set, Tuple

from game.board import CellType
from game.geometry import (
    NULL_POSITION, POSSIBLE_DIRECTIONS, Position, is_null, manhattan_distance,
)
from game.units import Unit
from covid_ai.errors import EvaluationError
from covid_ai.vectors import DirectionBooleans, DirectionEvaluation
from covid_ai.weights import EvaluationWeights

logger = logging.getLogger(__name__)


@dataclass
class PathTicket:
    cost: int           # Best known path cost from the source
    priority: int       # cost + heuristic
    reachable_from: DirectionBooleans
    visited: bool = False


class GlobalPathEvaluator:
    """Bonus toward the first steps of the shortest paths to the nearest target."""

    def __init__(self, view, weights: EvaluationWeights):
        self.view = view
        self.weights = weights

    def closest_city_or_path(self, source: Position) -> Position:
        """Nearest candidate tile, or NULL_POSITION when none qualifies."""
        me = self.view.me()
        closest = NULL_POSITION
        shortest = math.inf

        registries = (
            (self.view.nb_cities(), self.view.city_owner, self.view.city),
            (self.view.nb_paths(), self.view.path_owner, lambda pid: self.view.path(pid)[1]),
        )
        for count, owner_of, positions_of in registries:
            for tile_id in range(count):
                if owner_of(tile_id) == me and not self.weights.global_owned_cities:
                    continue
                for candidate in positions_of(tile_id):
                    distance = manhattan_distance(source, candidate)
                    if distance < shortest:
                        shortest = distance
                        closest = candidate
        return closest

    def shortest_path_directions(self, source: Position,
                                 destination: Position) -> DirectionBooleans:
        """First steps of the shortest paths from source to destination."""
        if source == destination:
            return DirectionBooleans()

        def heuristic(position: Position) -> int:
            return manhattan_distance(position, destination)

        tickets: Dict[Position, PathTicket] = {
            source: PathTicket(0, heuristic(source), DirectionBooleans(), visited=True),
        }
        walls: Set[Position] = set()
        frontier: List[Tuple[int, int, int, Position]] = []
        sequence = itertools.count()

        for direction in POSSIBLE_DIRECTIONS:
            position = source + direction
            if position in tickets or position in walls:
                raise EvaluationError(f"Neighbour {position} of {source} seeded twice")
            c = self.view.cell(position)
            if c.type == CellType.WALL:
                walls.add(position)
                continue
            # Adjacent target: one step, whether or not someone stands on it
            if position == destination:
                return DirectionBooleans.only(direction)
            ticket = PathTicket(1, 1 + heuristic(position), DirectionBooleans.only(direction))
            tickets[position] = ticket
            # An occupied cell cannot be the first step
            if c.unit_id == -1:
                heapq.heappush(frontier, (ticket.priority, ticket.cost, next(sequence), position))

        expanded = 0
        while frontier:
            _, cost, _, position = heapq.heappop(frontier)
            ticket = tickets[position]
            if position == destination:
                logger.debug(f"A* {source} -> {destination}: cost {ticket.cost}, "
                             f"{expanded} expanded, first steps {ticket.reachable_from}")
                return ticket.reachable_from
            if ticket.visited or cost != ticket.cost:
                continue
            ticket.visited = True
            expanded += 1

            candidate = ticket.cost + 1
            for direction in POSSIBLE_DIRECTIONS:
                neighbour = position + direction
                if neighbour in walls:
                    continue
                known = tickets.get(neighbour)
                if known is None:
                    if self.view.cell(neighbour).type == CellType.WALL:
                        walls.add(neighbour)
                        continue
                    known = PathTicket(candidate, candidate + heuristic(neighbour),
                                       ticket.reachable_from.copy())
                    tickets[neighbour] = known
                    heapq.heappush(frontier, (known.priority, known.cost, next(sequence), neighbour))
                elif known.visited:
                    continue
                elif candidate < known.cost:
                    known.cost = candidate
                    known.priority = candidate + heuristic(neighbour)
                    known.reachable_from = ticket.reachable_from.copy()
                    heapq.heappush(frontier, (known.priority, known.cost, next(sequence), neighbour))
                elif candidate == known.cost:
                    known.reachable_from |= ticket.reachable_from

        logger.debug(f"A* {source} -> {destination}: target unreachable after {expanded} expansions")
        known = tickets.get(destination)
        return known.reachable_from if known is not None else DirectionBooleans()

    def evaluate(self, my_unit: Unit) -> DirectionEvaluation:
        w = self.weights
        target = self.closest_city_or_path(my_unit.pos)
        directions = (DirectionBooleans() if is_null(target)
                      else self.shortest_path_directions(my_unit.pos, target))
        return DirectionEvaluation.from_function(
            lambda d: w.global_city_or_path if directions[d] else w.null_evaluation)
