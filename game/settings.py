"""
Match Settings - Read-only configuration shared by every player.

Settings never change during a match. They are read once from a stream of
whitespace separated ``KEY value`` pairs, for example::

    NB_PLAYERS 4
    ROWS 60
    COLS 60
    NB_ROUNDS 200
"""

from dataclasses import dataclass, fields, asdict
from typing import Any, Dict, IO, Iterable, Union

from game.geometry import Position

GAME_NAME = "Covid"
VERSION = "1.0"


class SettingsError(ValueError):
    """Malformed or unknown settings entry."""


@dataclass(frozen=True)
class Settings:
    """Game settings that do not change during a match."""
    nb_players: int = 4
    rows: int = 60
    cols: int = 60
    nb_rounds: int = 200
    initial_health: int = 100
    nb_units: int = 8
    bonus_per_city_cell: int = 20
    bonus_per_path_cell: int = 5
    factor_connected_component: int = 2
    infection_factor: float = 4.0   # Divides the probability of infection
    mask_protection: float = 3.0    # Further divides it for masked units

    @staticmethod
    def version() -> str:
        return f"{GAME_NAME} {VERSION}"

    def player_ok(self, pl: int) -> bool:
        return 0 <= pl < self.nb_players

    def pos_ok(self, i: Union[int, Position], j: int = None) -> bool:
        """Whether (i, j), or a Position passed as ``i``, lies inside the board."""
        if isinstance(i, Position):
            i, j = i.i, i.j
        return 0 <= i < self.rows and 0 <= j < self.cols

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def read_settings(cls, stream: Union[IO[str], Iterable[str]]) -> 'Settings':
        """Parse ``KEY value`` pairs; keys missing from the stream keep defaults."""
        types = {f.name: f.type for f in fields(cls)}
        tokens = []
        for line in stream:
            line = line.split('#', 1)[0]
            tokens.extend(line.split())

        if len(tokens) % 2 != 0:
            raise SettingsError(f"Dangling settings key: {tokens[-1]!r}")

        values: Dict[str, Any] = {}
        for key, raw in zip(tokens[0::2], tokens[1::2]):
            name = key.lower()
            if name not in types:
                raise SettingsError(f"Unknown settings key: {key!r}")
            caster = float if types[name] in (float, 'float') else int
            try:
                values[name] = caster(raw)
            except ValueError:
                raise SettingsError(f"Bad value for {key}: {raw!r}") from None

        settings = cls(**values)
        if settings.nb_players < 1 or settings.rows < 1 or settings.cols < 1:
            raise SettingsError("Board dimensions and player count must be positive")
        return settings
