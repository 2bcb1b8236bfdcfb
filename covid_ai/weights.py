"""
Bot Configuration - Evaluation weights and budget strategy.

Every weight has an uninfected and an infected variant: which one applies
depends on whether the evaluating unit carries the virus. Unit weights are
indexed by the pair (my unit infected?, other unit infected?).

Configurations are immutable. Build variants with ``with_overrides`` or
load them from JSON; several can coexist, e.g. to compare strategies.
"""

import dataclasses
import json
import math
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from covid_ai.errors import ConfigError

CONFIG_ENV_VAR = 'COVID_AI_CONFIG'


class InfectionPair(Enum):
    """(my unit infected?, other unit infected?)"""
    BOTH_HEALTHY = (False, False)
    OTHER_INFECTED = (False, True)
    SELF_INFECTED = (True, False)
    BOTH_INFECTED = (True, True)

    @classmethod
    def of(cls, my_unit, other_unit) -> 'InfectionPair':
        return cls((my_unit.is_infected, other_unit.is_infected))


@dataclass(frozen=True)
class EvaluationWeights:
    """Named weights of the cell and unit scoring functions."""
    null_evaluation: float = 0.0            # Score of not moving; neutral baseline

    mask: float = 50.0
    mask_if_infected: float = 0.0
    virus: float = -20.0                    # Multiplied by the cell's virus intensity
    virus_if_infected: float = 5.0

    enemy_unit: float = 25.0                # me healthy, enemy healthy
    infected_enemy_unit: float = -25.0      # me healthy, enemy infected
    enemy_unit_if_infected: float = 30.0    # me infected, enemy healthy
    infected_enemy_unit_if_infected: float = 25.0

    allied_unit: float = 70.0
    infected_allied_unit: float = -5.0
    allied_unit_if_infected: float = -20.0
    infected_allied_unit_if_infected: float = 70.0

    local_city: float = 50.0
    local_city_if_infected: float = 25.0
    local_path: float = 50.0
    local_path_if_infected: float = 25.0
    local_wall: float = 0.0
    local_wall_if_infected: float = 0.0

    global_city_or_path: float = 70.0       # Bonus for first steps toward the target

    adjacent_wall: float = -math.inf
    adjacent_enemy: float = math.inf
    adjacent_allied: float = -math.inf

    global_owned_cities: bool = False       # Also target tiles we already own

    def enemy_weight(self, pair: InfectionPair) -> float:
        return {
            InfectionPair.BOTH_HEALTHY: self.enemy_unit,
            InfectionPair.OTHER_INFECTED: self.infected_enemy_unit,
            InfectionPair.SELF_INFECTED: self.enemy_unit_if_infected,
            InfectionPair.BOTH_INFECTED: self.infected_enemy_unit_if_infected,
        }[pair]

    def allied_weight(self, pair: InfectionPair) -> float:
        return {
            InfectionPair.BOTH_HEALTHY: self.allied_unit,
            InfectionPair.OTHER_INFECTED: self.infected_allied_unit,
            InfectionPair.SELF_INFECTED: self.allied_unit_if_infected,
            InfectionPair.BOTH_INFECTED: self.infected_allied_unit_if_infected,
        }[pair]

    def with_overrides(self, **overrides) -> 'EvaluationWeights':
        return _replace(self, overrides)


@dataclass(frozen=True)
class StrategyConfig:
    """Thresholds of the budget-adaptive evaluation mode selection."""
    local_range: int = 25           # Flood range in full mode
    cheap_range: int = 2            # Flood range in cheap mode
    full_mode_status: float = 0.5   # Below this CPU status: full mode
    late_game_status: float = 0.8   # ... or below this once the late game starts
    late_game_round: int = 175
    cheap_mode_status: float = 0.9  # Below this: cheap mode, otherwise idle

    def with_overrides(self, **overrides) -> 'StrategyConfig':
        return _replace(self, overrides)


@dataclass(frozen=True)
class BotConfig:
    """Master configuration of the bot."""
    weights: EvaluationWeights = field(default_factory=EvaluationWeights)
    strategy: StrategyConfig = field(default_factory=StrategyConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration"""
        return {
            'weights': dataclasses.asdict(self.weights),
            'strategy': dataclasses.asdict(self.strategy),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BotConfig':
        unknown = set(data) - {'weights', 'strategy'}
        if unknown:
            raise ConfigError(f"Unknown config sections: {sorted(unknown)}")
        return cls(
            weights=_replace(EvaluationWeights(), data.get('weights', {})),
            strategy=_replace(StrategyConfig(), data.get('strategy', {})),
        )

    def save(self, filepath: str):
        """Save configuration to file"""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: str) -> 'BotConfig':
        """Load configuration from file"""
        with open(filepath, 'r') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Malformed config {filepath}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be an object: {filepath}")
        return cls.from_dict(data)

    @classmethod
    def from_env(cls) -> 'BotConfig':
        """Load from the file named by COVID_AI_CONFIG, or use defaults"""
        path = os.getenv(CONFIG_ENV_VAR)
        if not path:
            return cls()
        return cls.load(path)


def _replace(config, overrides: Dict[str, Any]):
    names = {f.name: f for f in dataclasses.fields(config)}
    unknown = set(overrides) - set(names)
    if unknown:
        raise ConfigError(f"Unknown {type(config).__name__} keys: {sorted(unknown)}")
    cleaned = {}
    for key, value in overrides.items():
        default = getattr(config, key)
        if isinstance(default, bool):
            if not isinstance(value, bool):
                raise ConfigError(f"{key} must be a boolean, got {value!r}")
        elif isinstance(default, int) and not isinstance(default, bool):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{key} must be an integer, got {value!r}")
        elif isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{key} must be a number, got {value!r}")
        cleaned[key] = float(value) if isinstance(default, float) else value
    return dataclasses.replace(config, **cleaned)
