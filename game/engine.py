"""
Game Engine - Core game loop that asks players for moves and advances rounds.

Each round:
- Every player gets a PlayerView and plays; its wall time is charged
  against its CPU budget
- Commands are applied one unit at a time in a seeded random order
- Masks are picked up, contaminated cells and infected neighbours spread
  the virus, infected units lose health
- Cities and paths change owner to the player holding most units on them
"""

import logging
import random
import time
from typing import Dict, List, Optional, Sequence, Tuple

from game.board import Board, CellType
from game.game_state import GameState, PlayerView
from game.geometry import Direction, POSSIBLE_DIRECTIONS
from game.settings import Settings

logger = logging.getLogger(__name__)

# Health an attacked unit loses when an enemy steps into it
ATTACK_DAMAGE = 25


class GameEngine:
    """
    The engine that drives players and advances the game state.
    Players are objects with a ``play(view)`` method.
    """

    def __init__(self, settings: Optional[Settings] = None,
                 cpu_budget: float = 30.0, seed: int = 0):
        self.settings = settings or Settings()
        self.cpu_budget = cpu_budget
        self.rng = random.Random(seed)
        self.state: Optional[GameState] = None

    def reset(self, board: Optional[Board] = None) -> GameState:
        """Start a new match on the given board (or a standard one)."""
        if board is None:
            board = Board.create_standard_board(
                size=min(self.settings.rows, self.settings.cols),
                nb_players=self.settings.nb_players,
                units_per_player=self.settings.nb_units,
                health=self.settings.initial_health,
                seed=self.rng.randrange(1 << 30),
            )
        self.state = GameState(board, self.settings, cpu_budget=self.cpu_budget)
        return self.state

    def step(self, players: Sequence) -> Dict:
        """Play one round. ``players[p]`` plays for player p."""
        if self.state is None:
            raise RuntimeError("Call reset() before step()")

        commands: List[Tuple[int, Direction]] = []
        for player_id, player in enumerate(players):
            view = PlayerView(self.state, player_id)
            started = time.perf_counter()
            player.play(view)
            self.state.charge(player_id, time.perf_counter() - started)
            commands.extend(view.commands.items())

        self.rng.shuffle(commands)
        for unit_id, direction in commands:
            self._apply_move(unit_id, direction)

        self._spread_virus()
        self._update_owners()
        self.state.round += 1
        if self.state.round >= self.settings.nb_rounds:
            self.state.done = True

        return {
            'round': self.state.round,
            'done': self.state.done,
            'scores': self.state.scores(),
            'status': [self.state.status(p) for p in range(self.settings.nb_players)],
        }

    def play_match(self, players: Sequence, rounds: Optional[int] = None) -> List[int]:
        """Run rounds until the match ends (or ``rounds`` elapse); return scores."""
        if self.state is None:
            self.reset()
        limit = rounds if rounds is not None else self.settings.nb_rounds
        logger.info(f"Match started: {len(players)} players, {limit} rounds")
        for _ in range(limit):
            info = self.step(players)
            if info['done']:
                break
        scores = self.state.scores()
        logger.info(f"Match finished at round {self.state.round}: scores {scores}")
        return scores

    def _apply_move(self, unit_id: int, direction: Direction):
        board = self.state.board
        unit = board.units.get(unit_id)
        if unit is None or not unit.is_alive:
            return

        target = unit.pos + direction
        c = board.cell(target)
        if c.type == CellType.WALL:
            return
        if c.unit_id != -1:
            other = board.unit(c.unit_id)
            if other.player != unit.player:
                other.take_damage(ATTACK_DAMAGE)
                if not other.is_alive:
                    board.remove_unit(other.unit_id)
            return

        board.move_unit(unit_id, target)
        if c.mask:
            c.mask = False
            unit.mask = True

    def _catches(self, masked: bool) -> bool:
        """Roll an infection attempt."""
        chance = 1.0 / self.settings.infection_factor
        if masked:
            chance /= self.settings.mask_protection
        return self.rng.random() < chance

    def _spread_virus(self):
        board = self.state.board
        infected_now = [u for u in board.units.values() if u.is_infected]

        for unit in list(board.units.values()):
            if unit.immune:
                continue
            virus = board.cell(unit.pos).virus
            if virus > 0 and (not unit.mask or self._catches(True)):
                unit.damage += virus

        for source in infected_now:
            for d in POSSIBLE_DIRECTIONS:
                c = board.cell(source.pos + d)
                if c.unit_id == -1:
                    continue
                neighbour = board.unit(c.unit_id)
                if neighbour.immune or neighbour.is_infected:
                    continue
                if self._catches(neighbour.mask):
                    neighbour.damage = source.damage

        for unit in list(board.units.values()):
            if unit.is_infected:
                unit.take_damage(1)
                if not unit.is_alive:
                    board.remove_unit(unit.unit_id)

    def _update_owners(self):
        board = self.state.board
        groups = [(city, city.positions) for city in board.cities]
        groups += [(path, path.positions) for path in board.paths]
        for group, positions in groups:
            counts: Dict[int, int] = {}
            for pos in positions:
                uid = board.cell(pos).unit_id
                if uid != -1:
                    player = board.unit(uid).player
                    counts[player] = counts.get(player, 0) + 1
            if not counts:
                continue
            best = max(counts.values())
            leaders = [p for p, n in counts.items() if n == best]
            if len(leaders) == 1:
                group.owner = leaders[0]
