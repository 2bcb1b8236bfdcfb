"""
Decision Orchestrator - One move per unit per round, within the CPU budget.

The evaluation mode degrades as the CPU budget is consumed:

    status < 0.5, or status < 0.8 past round 175   FULL   local flood (range 25) + global path
    status < 0.9                                   CHEAP  local flood (range 2)
    otherwise                                      IDLE   no search, neutral scores

The combined scores are resolved by a fixed comparison tree: RIGHT beats
LEFT on ties, TOP beats BOTTOM on ties, and the vertical winner beats the
horizontal winner on ties. A direction is always returned, even when every
score is non-positive; nothing here ever chooses to stay still.
"""

import logging
from enum import Enum
from typing import Dict, Optional

from game.geometry import Direction
from game.units import Unit
from covid_ai.global_path import GlobalPathEvaluator
from covid_ai.local_flood import LocalFloodEvaluator
from covid_ai.scoring import CellScorer
from covid_ai.vectors import DirectionEvaluation
from covid_ai.weights import BotConfig, StrategyConfig

logger = logging.getLogger(__name__)


class EvaluationMode(Enum):
    FULL = "full"
    CHEAP = "cheap"
    IDLE = "idle"


def select_mode(status: float, round_number: int, strategy: StrategyConfig) -> EvaluationMode:
    """Pick how much searching the remaining CPU budget allows."""
    if status < strategy.full_mode_status or (
            status < strategy.late_game_status and round_number > strategy.late_game_round):
        return EvaluationMode.FULL
    if status < strategy.cheap_mode_status:
        return EvaluationMode.CHEAP
    return EvaluationMode.IDLE


def chosen_direction(evaluation: DirectionEvaluation) -> Direction:
    """Arg-max over the four scores with the fixed tie-break order."""
    # Comparisons with NaN are false, so a NaN side falls to the default branch
    max_horizontal = (Direction.LEFT if evaluation[Direction.LEFT] > evaluation[Direction.RIGHT]
                      else Direction.RIGHT)
    max_vertical = (Direction.BOTTOM if evaluation[Direction.BOTTOM] > evaluation[Direction.TOP]
                    else Direction.TOP)
    return (max_horizontal if evaluation[max_horizontal] > evaluation[max_vertical]
            else max_vertical)


class DecisionOrchestrator:
    """Plays a turn: evaluates every owned unit and issues its move."""

    name = "orchestrator"

    def __init__(self, config: Optional[BotConfig] = None):
        self.config = config or BotConfig()
        self.mode_counts: Dict[EvaluationMode, int] = {mode: 0 for mode in EvaluationMode}

    def evaluate_unit(self, view, unit: Unit, mode: EvaluationMode) -> DirectionEvaluation:
        weights = self.config.weights
        strategy = self.config.strategy

        if mode is EvaluationMode.IDLE:
            return DirectionEvaluation(weights.null_evaluation)

        # Search state is created per call and dropped with it
        scorer = CellScorer(weights, view.me())
        local = LocalFloodEvaluator(view, scorer, weights)
        if mode is EvaluationMode.CHEAP:
            return local.evaluate(unit, strategy.cheap_range)
        return (local.evaluate(unit, strategy.local_range)
                + GlobalPathEvaluator(view, weights).evaluate(unit))

    def play(self, view):
        me = view.me()
        status = view.status(me)
        round_number = view.round()

        for unit_id in view.my_units(me):
            unit = view.unit(unit_id)
            mode = select_mode(status, round_number, self.config.strategy)
            self.mode_counts[mode] += 1
            evaluation = self.evaluate_unit(view, unit, mode)
            direction = chosen_direction(evaluation)
            logger.debug(f"R{round_number} P{me} unit {unit_id} at {unit.pos}: "
                         f"{mode.value} {evaluation} -> {direction.name}")
            view.move(unit_id, direction)


class RufusPlayer(DecisionOrchestrator):
    """The bot as the engine sees it, configured from the environment by default."""

    name = "rufus"

    @classmethod
    def from_env(cls) -> 'RufusPlayer':
        return cls(BotConfig.from_env())
