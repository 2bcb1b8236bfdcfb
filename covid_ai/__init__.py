"""
Covid AI - Per-round decision engine for the Covid grid game.

For each unit it owns the bot scores the four directions by combining:
1. A bounded local flood that aggregates weighted signals (cell type,
   units, masks, virus) reachable by shortest paths from the unit
2. An A* search toward the nearest city or path tile not yet owned

and moves along the best direction. How much searching is done depends on
how much of the CPU budget is left.
"""

from .errors import EvaluationError, ConfigError
from .vectors import DirectionEvaluation, DirectionBooleans
from .weights import EvaluationWeights, StrategyConfig, BotConfig, InfectionPair
from .scoring import CellScorer, ForceCounters, Allegiance
from .local_flood import LocalFloodEvaluator, SearchTicket
from .global_path import GlobalPathEvaluator, PathTicket
from .orchestrator import (
    DecisionOrchestrator, RufusPlayer, EvaluationMode, select_mode, chosen_direction,
)

__all__ = [
    'EvaluationError',
    'ConfigError',
    'DirectionEvaluation',
    'DirectionBooleans',
    'EvaluationWeights',
    'StrategyConfig',
    'BotConfig',
    'InfectionPair',
    'CellScorer',
    'ForceCounters',
    'Allegiance',
    'LocalFloodEvaluator',
    'SearchTicket',
    'GlobalPathEvaluator',
    'PathTicket',
    'DecisionOrchestrator',
    'RufusPlayer',
    'EvaluationMode',
    'select_mode',
    'chosen_direction',
]
