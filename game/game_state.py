"""
Game State - Complete match state and the per-player read interface.

GameState holds the board, the round counter and the CPU accounting of
every player. PlayerView is what a player sees during its turn: read-only
snapshots of cells and units, the registries of cities and paths, the
round number, the CPU status of any player, and a ``move`` command.
"""

import dataclasses
from typing import Dict, List, Optional, Tuple

import numpy as np

from game.board import Board, Cell
from game.geometry import Direction, Position, direction_index
from game.settings import Settings
from game.units import Unit


class GameState:
    """Match state shared by the engine and the player views."""

    def __init__(self, board: Board, settings: Settings, cpu_budget: float = 30.0):
        self.board = board
        self.settings = settings
        self.round = 0
        self.cpu_budget = cpu_budget   # Seconds each player may spend over the match
        self.cpu_used = np.zeros(settings.nb_players, dtype=np.float64)
        self.done = False

    def status(self, player: int) -> float:
        """Fraction of the CPU budget a player has consumed, in [0, 1]."""
        if self.cpu_budget <= 0:
            return 1.0
        return float(min(1.0, self.cpu_used[player] / self.cpu_budget))

    def charge(self, player: int, seconds: float):
        self.cpu_used[player] += seconds

    def scores(self) -> List[int]:
        """Points per player: owned city and path cells times their bonuses."""
        s = self.settings
        points = [0] * s.nb_players
        for city in self.board.cities:
            if s.player_ok(city.owner):
                points[city.owner] += len(city.positions) * s.bonus_per_city_cell
        for path in self.board.paths:
            if s.player_ok(path.owner):
                points[path.owner] += len(path.positions) * s.bonus_per_path_cell
        return points


class PlayerView:
    """
    One player's window on the match for a single round.

    Cells and units are handed out as copies so a player cannot alter the
    board. Commands are buffered until the engine applies them.
    """

    def __init__(self, state: GameState, player: int):
        self._state = state
        self._player = player
        self.commands: Dict[int, Direction] = {}

    def me(self) -> int:
        return self._player

    def round(self) -> int:
        return self._state.round

    def status(self, player: int) -> float:
        return self._state.status(player)

    def cell(self, pos: Position) -> Cell:
        return dataclasses.replace(self._state.board.cell(pos))

    def unit(self, unit_id: int) -> Unit:
        return dataclasses.replace(self._state.board.unit(unit_id))

    def my_units(self, player: int) -> List[int]:
        return self._state.board.my_units(player)

    def nb_cities(self) -> int:
        return self._state.board.nb_cities()

    def city(self, city_id: int) -> List[Position]:
        return list(self._state.board.city(city_id))

    def city_owner(self, city_id: int) -> int:
        return self._state.board.city_owner(city_id)

    def nb_paths(self) -> int:
        return self._state.board.nb_paths()

    def path(self, path_id: int) -> Tuple[Tuple[int, int], List[Position]]:
        cities, positions = self._state.board.path(path_id)
        return cities, list(positions)

    def path_owner(self, path_id: int) -> int:
        return self._state.board.path_owner(path_id)

    def move(self, unit_id: int, direction: Direction):
        """Queue a move; a later command for the same unit replaces it."""
        unit: Optional[Unit] = self._state.board.units.get(unit_id)
        if unit is None or unit.player != self._player:
            raise ValueError(f"Player {self._player} does not own unit {unit_id}")
        self.commands[unit_id] = Direction(direction_index(direction))
