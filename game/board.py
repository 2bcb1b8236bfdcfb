"""
Board - Grid of cells with cities, paths, units and contamination.

Each cell has:
- A type: empty, path, city or wall (walls are impassable)
- At most one unit (by id, -1 when free)
- An optional mask lying on the ground
- A virus intensity (0 = clean)

Cities are groups of city cells, paths are groups of path cells joining two
cities. Both have an owner (-1 while nobody holds them). Reading a position
outside the board yields a wall, so every search is bounded by the board.
"""

import random
from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple

from game.geometry import Position, POSSIBLE_DIRECTIONS
from game.units import Unit


class CellType(IntEnum):
    EMPTY = 0
    PATH = 1
    CITY = 2
    WALL = 3


@dataclass
class Cell:
    type: CellType = CellType.EMPTY
    unit_id: int = -1      # -1 means no unit
    mask: bool = False
    virus: int = 0


@dataclass
class City:
    positions: List[Position]
    owner: int = -1


@dataclass
class Path:
    cities: Tuple[int, int]
    positions: List[Position]
    owner: int = -1


class Board:
    """Grid-based board for the Covid game."""

    def __init__(self, rows: int, cols: int):
        self.rows = rows
        self.cols = cols
        self.grid: List[List[Cell]] = [
            [Cell() for _ in range(cols)] for _ in range(rows)
        ]
        self.units: Dict[int, Unit] = {}  # unit_id -> Unit
        self.cities: List[City] = []
        self.paths: List[Path] = []
        self._next_unit_id = 0

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.i < self.rows and 0 <= pos.j < self.cols

    # ---- Queries -------------------------------------------------------

    def cell(self, pos: Position) -> Cell:
        """Cell at a position; anything off the board reads as a wall."""
        if not self.in_bounds(pos):
            return Cell(type=CellType.WALL)
        return self.grid[pos.i][pos.j]

    def unit(self, unit_id: int) -> Unit:
        try:
            return self.units[unit_id]
        except KeyError:
            raise KeyError(f"No unit with id {unit_id}") from None

    def my_units(self, player: int) -> List[int]:
        """Ids of the living units of a player, in creation order."""
        return [uid for uid, u in self.units.items()
                if u.player == player and u.is_alive]

    def nb_cities(self) -> int:
        return len(self.cities)

    def city(self, city_id: int) -> List[Position]:
        return self.cities[city_id].positions

    def city_owner(self, city_id: int) -> int:
        return self.cities[city_id].owner

    def nb_paths(self) -> int:
        return len(self.paths)

    def path(self, path_id: int) -> Tuple[Tuple[int, int], List[Position]]:
        path = self.paths[path_id]
        return path.cities, path.positions

    def path_owner(self, path_id: int) -> int:
        return self.paths[path_id].owner

    def is_free(self, pos: Position) -> bool:
        """Inside the board, not a wall and without a unit."""
        c = self.cell(pos)
        return c.type != CellType.WALL and c.unit_id == -1

    # ---- Mutators ------------------------------------------------------

    def set_wall(self, pos: Position):
        if self.in_bounds(pos):
            self.grid[pos.i][pos.j].type = CellType.WALL

    def set_virus(self, pos: Position, virus: int):
        if self.in_bounds(pos):
            self.grid[pos.i][pos.j].virus = virus

    def place_mask(self, pos: Position):
        if self.in_bounds(pos):
            self.grid[pos.i][pos.j].mask = True

    def add_city(self, positions: Sequence[Position], owner: int = -1) -> int:
        for pos in positions:
            self.grid[pos.i][pos.j].type = CellType.CITY
        self.cities.append(City(positions=list(positions), owner=owner))
        return len(self.cities) - 1

    def add_path(self, cities: Tuple[int, int], positions: Sequence[Position],
                 owner: int = -1) -> int:
        for pos in positions:
            self.grid[pos.i][pos.j].type = CellType.PATH
        self.paths.append(Path(cities=cities, positions=list(positions), owner=owner))
        return len(self.paths) - 1

    def add_unit(self, player: int, pos: Position, health: int = 100,
                 damage: int = 0) -> Optional[Unit]:
        """Add a new unit. Returns the unit or None if the cell is not free."""
        if not self.in_bounds(pos) or not self.is_free(pos):
            return None

        uid = self._next_unit_id
        self._next_unit_id += 1
        unit = Unit(unit_id=uid, player=player, pos=pos, health=health, damage=damage)
        self.units[uid] = unit
        self.grid[pos.i][pos.j].unit_id = uid
        return unit

    def remove_unit(self, unit_id: int):
        unit = self.units.pop(unit_id, None)
        if unit:
            self.grid[unit.pos.i][unit.pos.j].unit_id = -1

    def move_unit(self, unit_id: int, new_pos: Position) -> bool:
        """Move a unit to a free cell. Returns success."""
        unit = self.units.get(unit_id)
        if not unit or not self.is_free(new_pos):
            return False

        self.grid[unit.pos.i][unit.pos.j].unit_id = -1
        unit.pos = new_pos
        self.grid[new_pos.i][new_pos.j].unit_id = unit_id
        return True

    # ---- Builders ------------------------------------------------------

    @classmethod
    def from_ascii(cls, lines: Sequence[str], health: int = 100) -> 'Board':
        """
        Build a board from text rows.

        '#' wall, '.' empty, 'C' city cell, '=' path cell, 'm' mask,
        'v' virus of intensity 1, '0'-'9' a unit of that player.
        4-connected groups of 'C' form one city each, groups of '=' one
        path each. Cities and paths are numbered in row-major order of
        their first cell.
        """
        rows = [line.rstrip('\n') for line in lines if line.strip()]
        if not rows:
            raise ValueError("Empty board description")
        width = max(len(r) for r in rows)
        board = cls(len(rows), width)

        for i, row in enumerate(rows):
            for j, ch in enumerate(row.ljust(width, '.')):
                pos = Position(i, j)
                if ch == '#':
                    board.set_wall(pos)
                elif ch == 'm':
                    board.place_mask(pos)
                elif ch == 'v':
                    board.set_virus(pos, 1)
                elif ch.isdigit():
                    board.add_unit(int(ch), pos, health=health)
                elif ch not in '.C=':
                    raise ValueError(f"Unknown board symbol {ch!r} at {pos}")

        city_of: Dict[Position, int] = {}
        for group in _groups(rows, 'C'):
            city_id = board.add_city(group)
            for pos in group:
                city_of[pos] = city_id

        for group in _groups(rows, '='):
            touching = sorted({city_of[pos + d] for pos in group
                               for d in POSSIBLE_DIRECTIONS if pos + d in city_of})
            ends = (touching + [-1, -1])[:2]
            board.add_path((ends[0], ends[1]), group)

        return board

    @classmethod
    def create_standard_board(cls, size: int = 20, nb_players: int = 2,
                              units_per_player: int = 4, health: int = 100,
                              seed: int = 0) -> 'Board':
        """
        Symmetric-ish demo board: walled border, four 2x2 cities joined by
        straight paths, a few inner walls, masks and contaminated cells.
        Players start spread along the border.
        """
        rng = random.Random(seed)
        board = cls(size, size)

        for k in range(size):
            for pos in (Position(0, k), Position(size - 1, k),
                        Position(k, 0), Position(k, size - 1)):
                board.set_wall(pos)

        lo, hi = size // 4, size - size // 4 - 2
        corners = [(lo, lo), (lo, hi), (hi, lo), (hi, hi)]
        for ci, cj in corners:
            board.add_city([Position(ci + di, cj + dj)
                            for di in range(2) for dj in range(2)])

        # Horizontal paths between top and bottom city pairs
        for city_a, city_b, row in ((0, 1, lo), (2, 3, hi + 1)):
            board.add_path((city_a, city_b),
                           [Position(row, j) for j in range(lo + 2, hi)])
        # Vertical paths between left and right city pairs
        for city_a, city_b, col in ((0, 2, lo), (1, 3, hi + 1)):
            board.add_path((city_a, city_b),
                           [Position(i, col) for i in range(lo + 2, hi)])

        free = [Position(i, j) for i in range(1, size - 1) for j in range(1, size - 1)
                if board.cell(Position(i, j)).type == CellType.EMPTY]
        rng.shuffle(free)
        for pos in free[:size // 2]:
            board.set_wall(pos)
        for pos in free[size // 2:size]:
            board.place_mask(pos)
        for pos in free[size:size + size // 2]:
            board.set_virus(pos, rng.randint(1, 3))

        starts = [Position(i, j) for i in range(1, size - 1) for j in range(1, size - 1)
                  if i in (1, size - 2) or j in (1, size - 2)]
        for player in range(nb_players):
            placed = 0
            for pos in starts[player::nb_players]:
                if placed == units_per_player:
                    break
                c = board.cell(pos)
                if c.type == CellType.EMPTY and c.virus == 0 and board.is_free(pos):
                    board.add_unit(player, pos, health=health)
                    placed += 1

        return board


def _groups(rows: Sequence[str], symbol: str) -> List[List[Position]]:
    """4-connected groups of ``symbol`` in row-major order of discovery."""
    seen = set()
    groups = []
    for i, row in enumerate(rows):
        for j, ch in enumerate(row):
            if ch != symbol or (i, j) in seen:
                continue
            group = []
            queue = deque([Position(i, j)])
            seen.add((i, j))
            while queue:
                pos = queue.popleft()
                group.append(pos)
                for d in POSSIBLE_DIRECTIONS:
                    n = pos + d
                    if (0 <= n.i < len(rows) and 0 <= n.j < len(rows[n.i])
                            and rows[n.i][n.j] == symbol and (n.i, n.j) not in seen):
                        seen.add((n.i, n.j))
                        queue.append(n)
            groups.append(sorted(group, key=lambda p: (p.i, p.j)))
    return groups
