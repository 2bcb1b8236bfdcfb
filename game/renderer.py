"""
Game Renderer - ASCII visualization of the board.

Renders the board as text for the CLI and for debug logging.
"""

from typing import Dict, List

from game.board import Board, CellType
from game.game_state import GameState
from game.geometry import Position


CELL_SYMBOLS = {
    CellType.EMPTY: '.',
    CellType.PATH: '=',
    CellType.CITY: 'C',
    CellType.WALL: '#',
}


class GameRenderer:
    """ASCII renderer for the board and match summary."""

    @staticmethod
    def render_board(board: Board) -> List[str]:
        """One string per row. Units show as their player digit."""
        lines = []
        for i in range(board.rows):
            row = ""
            for j in range(board.cols):
                c = board.cell(Position(i, j))
                if c.unit_id != -1:
                    row += str(board.unit(c.unit_id).player % 10)
                elif c.type == CellType.EMPTY and c.mask:
                    row += 'm'
                elif c.type == CellType.EMPTY and c.virus > 0:
                    row += 'v'
                else:
                    row += CELL_SYMBOLS[c.type]
            lines.append(row)
        return lines

    @staticmethod
    def render(state: GameState, show_info: bool = True) -> str:
        """Render the match as an ASCII string."""
        lines = []
        if show_info:
            lines.append(f"Round: {state.round}/{state.settings.nb_rounds}  "
                         f"Scores: {state.scores()}")
            lines.append("")

        lines.extend(GameRenderer.render_board(state.board))

        if show_info:
            lines.append("")
            lines.append("Legend: #=Wall C=City ==Path m=Mask v=Virus 0-9=Unit of player")
            if state.done:
                scores = state.scores()
                best = max(scores)
                winners = [p for p, s in enumerate(scores) if s == best]
                if len(winners) == 1:
                    lines.append(f"\n*** PLAYER {winners[0]} WINS! ***")
                else:
                    lines.append("\n*** DRAW ***")

        return "\n".join(lines)

    @staticmethod
    def render_compact(state: GameState) -> str:
        """Compact single-line rendering for logging."""
        board = state.board
        per_player: Dict[int, int] = {}
        for unit in board.units.values():
            per_player[unit.player] = per_player.get(unit.player, 0) + 1
        parts = [f"P{p}[u={per_player.get(p, 0)} s={s} cpu={state.status(p):.2f}]"
                 for p, s in enumerate(state.scores())]
        return f"R{state.round:04d} " + " ".join(parts)
