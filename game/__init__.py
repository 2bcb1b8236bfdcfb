"""
Covid Game Environment

A pure-Python turn-based grid game in which each player moves a handful of
units to conquer cities and the paths between them. Features:

- Grid boards with walls, cities, paths, masks and contaminated cells
- Units with health and an infection level that spreads between neighbours
- A per-player CPU budget, reported to players as a consumed fraction
- Read-only player views with one move command per unit per round
- Deterministic (seeded) game mechanics
"""

from game.geometry import Direction, Position, NULL_POSITION, manhattan_distance
from game.settings import Settings
from game.units import Unit
from game.board import Board, Cell, CellType
from game.game_state import GameState, PlayerView
from game.engine import GameEngine
from game.ai_opponents import RandomAI, NearestCityAI
from game.renderer import GameRenderer

__all__ = [
    "Direction", "Position", "NULL_POSITION", "manhattan_distance",
    "Settings", "Unit",
    "Board", "Cell", "CellType",
    "GameState", "PlayerView",
    "GameEngine",
    "RandomAI", "NearestCityAI",
    "GameRenderer",
]
