"""
Tests for the Covid AI decision engine: direction vectors, configuration,
cell scoring, local flood, global path search and the orchestrator.
"""

import sys
import os
import json
import math
import random
from collections import deque

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from game.board import Board, CellType
from game.game_state import GameState, PlayerView
from game.geometry import (
    Direction, Position, NULL_POSITION, POSSIBLE_DIRECTIONS, InvalidDirectionError,
)
from game.settings import Settings
from game.units import Unit
from game.engine import GameEngine
from game.ai_opponents import NearestCityAI

import cli
import covid_ai.global_path
import covid_ai.local_flood
from covid_ai.errors import ConfigError, EvaluationError
from covid_ai.vectors import DirectionBooleans, DirectionEvaluation
from covid_ai.weights import (
    BotConfig, EvaluationWeights, InfectionPair, StrategyConfig, CONFIG_ENV_VAR,
)
from covid_ai.scoring import Allegiance, CellScorer, ForceCounters
from covid_ai.local_flood import LocalFloodEvaluator
from covid_ai.global_path import GlobalPathEvaluator
from covid_ai.orchestrator import (
    DecisionOrchestrator, EvaluationMode, RufusPlayer, chosen_direction, select_mode,
)


WEIGHTS = EvaluationWeights()


def make_view(lines, player=0):
    board = Board.from_ascii(lines)
    settings = Settings(nb_players=2, rows=board.rows, cols=board.cols)
    state = GameState(board, settings)
    return state, PlayerView(state, player)


def unit_at(view, i, j):
    return view.unit(view.cell(Position(i, j)).unit_id)


def flood(view, weights=WEIGHTS):
    return LocalFloodEvaluator(view, CellScorer(weights, view.me()), weights)


def open_board(size, marks):
    """Empty square board with {(i, j): symbol} placed on it."""
    rows = [["."] * size for _ in range(size)]
    for (i, j), symbol in marks.items():
        rows[i][j] = symbol
    return ["".join(r) for r in rows]


def bfs_distances(view, start):
    """Plain BFS over non-wall cells; the reference for shortest paths."""
    distances = {start: 0}
    queue = deque([start])
    while queue:
        pos = queue.popleft()
        for d in POSSIBLE_DIRECTIONS:
            n = pos + d
            if n not in distances and view.cell(n).type != CellType.WALL:
                distances[n] = distances[pos] + 1
                queue.append(n)
    return distances


def random_board(rng, size=9, wall_density=0.25):
    rows = [["#" if rng.random() < wall_density else "." for _ in range(size)]
            for _ in range(size)]
    free = [(i, j) for i in range(size) for j in range(size) if rows[i][j] == "."]
    i, j = rng.choice(free)
    rows[i][j] = "0"
    return ["".join(r) for r in rows], Position(i, j)


def make_unit(player=0, health=100, damage=0, pos=Position(0, 0)):
    return Unit(unit_id=0, player=player, pos=pos, health=health, damage=damage)


class TestDirectionEvaluation:
    def test_baseline(self):
        e = DirectionEvaluation(3.0)
        assert [e[d] for d in Direction] == [3.0, 3.0, 3.0, 3.0]
        assert len(e) == 4

    def test_from_function_uses_direction_slots(self):
        e = DirectionEvaluation.from_function(lambda d: float(int(d) * 10))
        assert e[Direction.BOTTOM] == 0.0
        assert e[Direction.RIGHT] == 10.0
        assert e[Direction.TOP] == 20.0
        assert e[Direction.LEFT] == 30.0

    def test_add_and_iadd(self):
        a = DirectionEvaluation(1.0)
        b = DirectionEvaluation.from_function(lambda d: float(d))
        c = a + b
        assert c[Direction.LEFT] == 4.0
        assert a[Direction.LEFT] == 1.0
        a += b
        assert a == c

    def test_set_item(self):
        e = DirectionEvaluation()
        e[Direction.TOP] += 5.0
        assert e[Direction.TOP] == 5.0
        assert e[Direction.BOTTOM] == 0.0

    def test_out_of_range_index_fails(self):
        e = DirectionEvaluation()
        with pytest.raises(InvalidDirectionError):
            e[4]
        with pytest.raises(InvalidDirectionError):
            e[-1] = 2.0

    def test_opposite_infinities_give_nan(self):
        a = DirectionEvaluation(-math.inf)
        b = DirectionEvaluation(math.inf)
        assert math.isnan((a + b)[Direction.RIGHT])

    def test_as_array_is_a_copy(self):
        e = DirectionEvaluation(2.0)
        arr = e.as_array()
        arr[0] = 99.0
        assert e[Direction.BOTTOM] == 2.0


class TestDirectionBooleans:
    def test_default_all_false(self):
        b = DirectionBooleans()
        assert not b.any()
        assert b.directions() == []

    def test_only(self):
        b = DirectionBooleans.only(Direction.LEFT)
        assert b[Direction.LEFT]
        assert not b[Direction.RIGHT]
        assert b.directions() == [Direction.LEFT]

    def test_or_accumulate(self):
        b = DirectionBooleans.only(Direction.TOP)
        b |= DirectionBooleans.only(Direction.RIGHT)
        b += DirectionBooleans.only(Direction.RIGHT)
        assert b.directions() == [Direction.RIGHT, Direction.TOP]

    def test_copy_is_independent(self):
        a = DirectionBooleans.only(Direction.TOP)
        b = a.copy()
        b |= DirectionBooleans.all(True)
        assert a.directions() == [Direction.TOP]
        assert b == DirectionBooleans.all(True)

    def test_out_of_range_index_fails(self):
        with pytest.raises(InvalidDirectionError):
            DirectionBooleans.only(5)


class TestConfig:
    def test_defaults(self):
        w = EvaluationWeights()
        assert w.null_evaluation == 0.0
        assert w.adjacent_wall == -math.inf
        assert w.adjacent_enemy == math.inf
        assert not w.global_owned_cities
        s = StrategyConfig()
        assert (s.local_range, s.cheap_range, s.late_game_round) == (25, 2, 175)

    def test_infection_pair_weights(self):
        w = EvaluationWeights()
        assert w.enemy_weight(InfectionPair.BOTH_HEALTHY) == 25.0
        assert w.enemy_weight(InfectionPair.OTHER_INFECTED) == -25.0
        assert w.enemy_weight(InfectionPair.SELF_INFECTED) == 30.0
        assert w.allied_weight(InfectionPair.SELF_INFECTED) == -20.0
        assert w.allied_weight(InfectionPair.BOTH_INFECTED) == 70.0

    def test_infection_pair_of(self):
        healthy = make_unit()
        sick = make_unit(damage=2)
        assert InfectionPair.of(sick, healthy) is InfectionPair.SELF_INFECTED
        assert InfectionPair.of(healthy, sick) is InfectionPair.OTHER_INFECTED

    def test_with_overrides(self):
        w = EvaluationWeights().with_overrides(mask=10, global_owned_cities=True)
        assert w.mask == 10.0
        assert isinstance(w.mask, float)
        assert w.global_owned_cities
        assert EvaluationWeights().mask == 50.0

    def test_overrides_are_validated(self):
        with pytest.raises(ConfigError):
            EvaluationWeights().with_overrides(not_a_weight=1.0)
        with pytest.raises(ConfigError):
            EvaluationWeights().with_overrides(mask="lots")
        with pytest.raises(ConfigError):
            StrategyConfig().with_overrides(local_range=2.5)

    def test_save_and_load_keep_infinities(self, tmp_path):
        config = BotConfig(strategy=StrategyConfig(local_range=10))
        path = str(tmp_path / "bot.json")
        config.save(path)
        loaded = BotConfig.load(path)
        assert loaded == config
        assert loaded.weights.adjacent_allied == -math.inf

    def test_load_rejects_unknown_section(self, tmp_path):
        path = tmp_path / "bot.json"
        path.write_text(json.dumps({"weights": {}, "extra": {}}))
        with pytest.raises(ConfigError):
            BotConfig.load(str(path))

    def test_load_rejects_malformed_json(self, tmp_path):
        path = tmp_path / "bot.json"
        path.write_text("{weights: }")
        with pytest.raises(ConfigError):
            BotConfig.load(str(path))

    def test_cli_reports_malformed_config(self, tmp_path):
        path = tmp_path / "bot.json"
        path.write_text("{'strategy': {}}")
        assert cli.main(["--config", str(path), "config"]) == 1

    def test_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "bot.json"
        path.write_text(json.dumps({"strategy": {"cheap_range": 4}}))
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert BotConfig.from_env().strategy.cheap_range == 4
        monkeypatch.delenv(CONFIG_ENV_VAR)
        assert BotConfig.from_env() == BotConfig()


class TestCellScorer:
    def setup_method(self):
        self.scorer = CellScorer(WEIGHTS, me=0)
        self.healthy = make_unit()
        self.sick = make_unit(damage=1)

    def test_cell_type_scores(self):
        s = self.scorer
        assert s.cell_type_score(2, self.healthy, CellType.CITY) == 12.5
        assert s.cell_type_score(2, self.sick, CellType.CITY) == 6.25
        assert s.cell_type_score(5, self.healthy, CellType.PATH) == 2.0
        assert s.cell_type_score(2, self.healthy, CellType.WALL) == 0.0
        assert s.cell_type_score(3, self.healthy, CellType.EMPTY) == 0.0

    def test_wall_decays_cubically(self):
        w = WEIGHTS.with_overrides(local_wall=-16.0)
        s = CellScorer(w, me=0)
        assert s.cell_type_score(2, self.healthy, CellType.WALL) == -2.0

    def test_item_score(self):
        assert self.scorer.item_score(2, self.healthy) == 6.25
        assert self.scorer.item_score(2, self.sick) == 0.0

    def test_virus_score(self):
        assert self.scorer.virus_score(2, 3, self.healthy) == -7.5
        assert self.scorer.virus_score(2, 3, self.sick) == 0.625
        # Infected units ignore the intensity
        assert self.scorer.virus_score(2, 0, self.sick) == 0.625

    def test_distance_zero_is_a_contract_violation(self):
        with pytest.raises(EvaluationError):
            self.scorer.cell_type_score(0, self.healthy, CellType.CITY)
        with pytest.raises(EvaluationError):
            self.scorer.item_score(0, self.healthy)
        with pytest.raises(EvaluationError):
            self.scorer.virus_score(0, 1, self.healthy)

    def test_ally_score_damped_by_allies_seen(self):
        ally = make_unit(player=0)
        assert self.scorer.unit_score(3, self.healthy, ally, 2, 0) == 17.5
        assert self.scorer.unit_score(3, self.sick, ally, 1, 0) == -20.0

    def test_enemy_score(self):
        me = make_unit(health=100)
        enemy = make_unit(player=1, health=80)
        # (100 + 20) * 25 * (2 - 1)^5 / 2^6
        assert self.scorer.unit_score(2, me, enemy, 2, 1) == 46.875

    def test_enemy_score_sign_follows_force_balance(self):
        me = make_unit()
        enemy = make_unit(player=1)
        assert self.scorer.unit_score(2, me, enemy, 0, 1) < 0
        assert self.scorer.unit_score(2, me, enemy, 1, 1) == 0
        assert self.scorer.unit_score(2, me, enemy, 3, 1) > 0

    def test_ally_needs_to_be_counted_first(self):
        ally = make_unit(player=0)
        with pytest.raises(EvaluationError):
            self.scorer.unit_score(3, self.healthy, ally, 0, 0)

    def test_enemy_never_scored_when_adjacent(self):
        enemy = make_unit(player=1)
        with pytest.raises(EvaluationError):
            self.scorer.unit_score(1, self.healthy, enemy, 0, 1)

    def test_equidistant_enemies_score_the_same(self):
        me = make_unit(pos=Position(5, 5))
        north = make_unit(player=1, pos=Position(3, 5))
        east = make_unit(player=1, pos=Position(5, 7))
        a = self.scorer.unit_score(2, me, north, 0, 1)
        b = self.scorer.unit_score(2, me, east, 0, 1)
        assert a == b
        assert a != 0

    def test_local_unit_score_counts_first(self):
        counters = ForceCounters()
        ally = make_unit(player=0)
        enemy = make_unit(player=1)
        assert self.scorer.local_unit_score(4, self.healthy, ally, counters) == 70.0
        self.scorer.local_unit_score(4, self.healthy, enemy, counters)
        assert (counters.allies, counters.enemies) == (1, 1)
        assert self.scorer.allegiance(enemy) is Allegiance.ENEMY


class TestLocalFlood:
    def test_range_bounds_tickets_and_scores(self):
        _, view = make_view(open_board(15, {(7, 7): "0"}))
        unit = unit_at(view, 7, 7)
        _, tickets = flood(view).evaluate_with_trace(unit, 3)
        assert max(t.distance for t in tickets.values()) <= 4

        _, view = make_view(open_board(15, {(7, 7): "0", (7, 11): "C"}))
        assert flood(view).evaluate(unit_at(view, 7, 7), 3) == DirectionEvaluation(0.0)

        _, view = make_view(open_board(15, {(7, 7): "0", (7, 10): "C"}))
        e = flood(view).evaluate(unit_at(view, 7, 7), 3)
        assert e[Direction.RIGHT] == pytest.approx(50.0 / 9)
        assert e[Direction.LEFT] == 0.0

    def test_diagonal_cell_credits_both_first_steps(self):
        _, view = make_view(open_board(5, {(2, 2): "0", (1, 3): "C"}))
        e = flood(view).evaluate(unit_at(view, 2, 2), 2)
        assert e[Direction.RIGHT] == 12.5
        assert e[Direction.TOP] == 12.5
        assert e[Direction.BOTTOM] == 0.0
        assert e[Direction.LEFT] == 0.0

    def test_tickets_record_tied_first_steps(self):
        _, view = make_view(open_board(5, {(2, 2): "0"}))
        _, tickets = flood(view).evaluate_with_trace(unit_at(view, 2, 2), 3)
        assert tickets[Position(1, 3)].reachable_from.directions() == [Direction.RIGHT, Direction.TOP]
        assert tickets[Position(3, 3)].reachable_from.directions() == [Direction.BOTTOM, Direction.RIGHT]
        assert tickets[Position(0, 2)].reachable_from.directions() == [Direction.TOP]
        assert tickets[Position(1, 3)].distance == 2

    def test_reachability_matches_brute_force(self):
        rng = random.Random(7)
        for _ in range(25):
            lines, source = random_board(rng)
            _, view = make_view(lines)
            _, tickets = flood(view).evaluate_with_trace(unit_at(view, source.i, source.j), 4)
            from_source = bfs_distances(view, source)
            for pos, ticket in tickets.items():
                if pos == source:
                    continue
                assert ticket.distance == from_source[pos]
                to_cell = bfs_distances(view, pos)
                expected = [d for d in POSSIBLE_DIRECTIONS
                            if to_cell.get(source + d) == ticket.distance - 1]
                assert ticket.reachable_from.directions() == sorted(expected)

    def test_wall_neighbour_is_penalised_and_never_ticketed(self):
        _, view = make_view(open_board(5, {(2, 2): "0", (2, 3): "#"}))
        e, tickets = flood(view).evaluate_with_trace(unit_at(view, 2, 2), 3)
        assert e[Direction.RIGHT] == -math.inf
        assert Position(2, 3) not in tickets
        for ticket in tickets.values():
            assert ticket.distance >= 0
        assert math.isfinite(e[Direction.TOP])

    def test_adjacent_units(self):
        _, view = make_view(open_board(5, {(2, 2): "0", (3, 2): "0", (2, 1): "1"}))
        e = flood(view).evaluate(unit_at(view, 2, 2), 2)
        assert e[Direction.BOTTOM] == -math.inf
        assert e[Direction.LEFT] == math.inf
        assert chosen_direction(e) == Direction.LEFT

    def test_enemy_scores_depend_on_discovery_order(self):
        # Both enemies at distance 2; the RIGHT one is dequeued first, while
        # only one enemy has been counted.
        _, view = make_view(open_board(5, {(2, 2): "0", (0, 2): "1", (2, 4): "1"}))
        e = flood(view).evaluate(unit_at(view, 2, 2), 2)
        assert e[Direction.RIGHT] == -39.0625
        assert e[Direction.TOP] == -1250.0
        assert e[Direction.BOTTOM] == 0.0
        assert e[Direction.LEFT] == 0.0

    def test_zero_range_scores_nothing(self):
        _, view = make_view(open_board(5, {(2, 2): "0", (2, 3): "C"}))
        assert flood(view).evaluate(unit_at(view, 2, 2), 0) == DirectionEvaluation(0.0)

    def test_duplicate_seed_fails_loudly(self, monkeypatch):
        monkeypatch.setattr(covid_ai.local_flood, "POSSIBLE_DIRECTIONS",
                            (Direction.BOTTOM, Direction.BOTTOM, Direction.TOP, Direction.LEFT))
        _, view = make_view(open_board(5, {(2, 2): "0"}))
        with pytest.raises(EvaluationError):
            flood(view).evaluate(unit_at(view, 2, 2), 2)


class TestGlobalPath:
    def test_cities_win_ties_over_paths(self):
        _, view = make_view(["C.0.="])
        evaluator = GlobalPathEvaluator(view, WEIGHTS)
        assert evaluator.closest_city_or_path(Position(0, 2)) == Position(0, 0)

    def test_owned_tiles_are_skipped_unless_configured(self):
        state, view = make_view(["C.0.="])
        state.board.cities[0].owner = 0
        assert GlobalPathEvaluator(view, WEIGHTS).closest_city_or_path(
            Position(0, 2)) == Position(0, 4)
        including = WEIGHTS.with_overrides(global_owned_cities=True)
        assert GlobalPathEvaluator(view, including).closest_city_or_path(
            Position(0, 2)) == Position(0, 0)

    def test_no_target(self):
        _, view = make_view(["0...."])
        evaluator = GlobalPathEvaluator(view, WEIGHTS)
        assert evaluator.closest_city_or_path(Position(0, 0)) == NULL_POSITION
        assert evaluator.evaluate(unit_at(view, 0, 0)) == DirectionEvaluation(0.0)

    def test_straight_line(self):
        _, view = make_view(open_board(11, {(5, 5): "0", (5, 8): "C"}))
        evaluator = GlobalPathEvaluator(view, WEIGHTS)
        result = evaluator.shortest_path_directions(Position(5, 5), Position(5, 8))
        assert result.directions() == [Direction.RIGHT]
        e = evaluator.evaluate(unit_at(view, 5, 5))
        assert e[Direction.RIGHT] == 70.0
        assert e[Direction.TOP] == e[Direction.BOTTOM] == e[Direction.LEFT] == 0.0

    def test_diagonal_target_flags_both_steps(self):
        _, view = make_view(open_board(5, {(2, 2): "0"}))
        result = GlobalPathEvaluator(view, WEIGHTS).shortest_path_directions(
            Position(2, 2), Position(0, 4))
        assert result.directions() == [Direction.RIGHT, Direction.TOP]

    def test_detour_around_wall(self):
        _, view = make_view([
            "..#..",
            "..#..",
            "0.#.C",
            "..#..",
            ".....",
        ])
        result = GlobalPathEvaluator(view, WEIGHTS).shortest_path_directions(
            Position(2, 0), Position(2, 4))
        assert result.directions() == [Direction.BOTTOM, Direction.RIGHT]

    def test_occupied_first_step_is_excluded(self):
        _, view = make_view(open_board(5, {(2, 2): "0", (2, 3): "0", (2, 4): "C"}))
        result = GlobalPathEvaluator(view, WEIGHTS).shortest_path_directions(
            Position(2, 2), Position(2, 4))
        assert result.directions() == [Direction.BOTTOM, Direction.TOP]

    def test_unreachable_target(self):
        _, view = make_view([
            "0#..",
            "##.C",
        ])
        result = GlobalPathEvaluator(view, WEIGHTS).shortest_path_directions(
            Position(0, 0), Position(1, 3))
        assert not result.any()

    def test_occupied_adjacent_target_is_one_step(self, monkeypatch):
        state, view = make_view(open_board(40, {(20, 20): "0", (20, 21): "C"}))
        state.board.add_unit(1, Position(20, 21))
        reads = []
        read_cell = view.cell
        monkeypatch.setattr(view, "cell", lambda pos: reads.append(pos) or read_cell(pos))

        evaluator = GlobalPathEvaluator(view, WEIGHTS)
        result = evaluator.shortest_path_directions(Position(20, 20), Position(20, 21))
        assert result.directions() == [Direction.RIGHT]
        assert len(reads) <= 4
        e = evaluator.evaluate(unit_at(view, 20, 20))
        assert e[Direction.RIGHT] == 70.0
        assert e[Direction.TOP] == e[Direction.BOTTOM] == e[Direction.LEFT] == 0.0

    def test_duplicate_seed_fails_loudly(self, monkeypatch):
        monkeypatch.setattr(covid_ai.global_path, "POSSIBLE_DIRECTIONS",
                            (Direction.BOTTOM, Direction.BOTTOM, Direction.TOP, Direction.LEFT))
        _, view = make_view(open_board(5, {(2, 2): "0"}))
        with pytest.raises(EvaluationError):
            GlobalPathEvaluator(view, WEIGHTS).shortest_path_directions(
                Position(2, 2), Position(0, 0))

    def test_source_is_target(self):
        _, view = make_view(["0."])
        result = GlobalPathEvaluator(view, WEIGHTS).shortest_path_directions(
            Position(0, 0), Position(0, 0))
        assert not result.any()

    def test_first_steps_match_brute_force(self):
        rng = random.Random(11)
        for _ in range(40):
            lines, source = random_board(rng)
            _, view = make_view(lines)
            free = [Position(i, j) for i in range(len(lines)) for j in range(len(lines[0]))
                    if lines[i][j] == "." and Position(i, j) != source]
            target = rng.choice(free)
            result = GlobalPathEvaluator(view, WEIGHTS).shortest_path_directions(source, target)

            to_target = bfs_distances(view, target)
            steps = {d: to_target[source + d] for d in POSSIBLE_DIRECTIONS
                     if source + d in to_target}
            if not steps:
                assert not result.any()
                continue
            best = min(steps.values())
            expected = sorted(d for d, dist in steps.items() if dist == best)
            assert result.directions() == expected


class TestOrchestrator:
    @pytest.mark.parametrize("status,round_number,mode", [
        (0.0, 0, EvaluationMode.FULL),
        (0.49, 100, EvaluationMode.FULL),
        (0.7, 176, EvaluationMode.FULL),
        (0.7, 175, EvaluationMode.CHEAP),
        (0.8, 200, EvaluationMode.CHEAP),
        (0.85, 10, EvaluationMode.CHEAP),
        (0.9, 10, EvaluationMode.IDLE),
        (1.0, 199, EvaluationMode.IDLE),
    ])
    def test_select_mode(self, status, round_number, mode):
        assert select_mode(status, round_number, StrategyConfig()) is mode

    def test_tie_break_order(self):
        def vector(**scores):
            e = DirectionEvaluation(0.0)
            for name, value in scores.items():
                e[Direction[name]] = value
            return e

        assert chosen_direction(DirectionEvaluation(0.0)) == Direction.TOP
        assert chosen_direction(vector(LEFT=5.0, RIGHT=5.0)) == Direction.RIGHT
        assert chosen_direction(vector(TOP=5.0, BOTTOM=5.0)) == Direction.TOP
        assert chosen_direction(vector(RIGHT=5.0, TOP=5.0)) == Direction.TOP
        assert chosen_direction(vector(LEFT=1.0)) == Direction.LEFT
        assert chosen_direction(vector(BOTTOM=1.0)) == Direction.BOTTOM

    def test_always_moves_even_when_every_score_is_negative(self):
        e = DirectionEvaluation.from_function(lambda d: -10.0 - int(d))
        assert chosen_direction(e) == Direction.BOTTOM

    def test_single_city_scenario(self):
        _, view = make_view(open_board(11, {(5, 5): "0", (5, 8): "C"}))
        bot = DecisionOrchestrator()
        unit = unit_at(view, 5, 5)

        full = bot.evaluate_unit(view, unit, EvaluationMode.FULL)
        assert full[Direction.RIGHT] == pytest.approx(50.0 / 9 + 70.0)
        for d in (Direction.BOTTOM, Direction.TOP, Direction.LEFT):
            assert full[d] == 0.0
        assert chosen_direction(full) == Direction.RIGHT

        cheap = bot.evaluate_unit(view, unit, EvaluationMode.CHEAP)
        assert all(cheap[Direction.RIGHT] >= cheap[d] for d in Direction)

        bot.play(view)
        assert view.commands == {unit.unit_id: Direction.RIGHT}

    def test_enclosed_unit(self):
        _, view = make_view([
            "C....",
            "..#..",
            ".#0#.",
            "..#..",
            ".....",
        ])
        unit = unit_at(view, 2, 2)
        e = DecisionOrchestrator().evaluate_unit(view, unit, EvaluationMode.FULL)
        assert all(e[d] == -math.inf for d in Direction)
        assert chosen_direction(e) == Direction.TOP

    def test_idle_mode_is_neutral_and_still_moves(self):
        state, view = make_view(open_board(5, {(2, 2): "0", (2, 4): "C"}))
        state.cpu_used[0] = state.cpu_budget
        bot = DecisionOrchestrator()
        assert bot.evaluate_unit(view, unit_at(view, 2, 2), EvaluationMode.IDLE) == DirectionEvaluation(0.0)
        bot.play(view)
        assert view.commands == {0: Direction.TOP}
        assert bot.mode_counts[EvaluationMode.IDLE] == 1

    def test_full_mode_is_idempotent(self):
        board = Board.create_standard_board(size=16, seed=5)
        state = GameState(board, Settings(nb_players=2, rows=16, cols=16))
        view = PlayerView(state, 0)
        bot = DecisionOrchestrator()
        for unit_id in view.my_units(0):
            unit = view.unit(unit_id)
            first = bot.evaluate_unit(view, unit, EvaluationMode.FULL)
            second = bot.evaluate_unit(view, unit, EvaluationMode.FULL)
            assert first == second

    def test_one_command_per_unit(self):
        board = Board.create_standard_board(size=16, units_per_player=3, seed=2)
        state = GameState(board, Settings(nb_players=2, rows=16, cols=16))
        view = PlayerView(state, 1)
        RufusPlayer().play(view)
        assert sorted(view.commands) == sorted(board.my_units(1))

    def test_custom_config_changes_decisions(self):
        _, view = make_view(open_board(11, {(5, 5): "0", (5, 8): "C", (5, 2): "m"}))
        unit = unit_at(view, 5, 5)
        greedy = BotConfig(weights=EvaluationWeights(global_city_or_path=0.0, mask=5000.0))
        e = DecisionOrchestrator(greedy).evaluate_unit(view, unit, EvaluationMode.FULL)
        assert chosen_direction(e) == Direction.LEFT
        e = DecisionOrchestrator().evaluate_unit(view, unit, EvaluationMode.FULL)
        assert chosen_direction(e) == Direction.RIGHT

    def test_match_against_scripted_opponent(self):
        settings = Settings(nb_players=2, rows=14, cols=14, nb_rounds=10, nb_units=2)
        engine = GameEngine(settings, cpu_budget=60.0, seed=3)
        engine.reset()
        bot = RufusPlayer()
        scores = engine.play_match([bot, NearestCityAI()])
        assert len(scores) == 2
        assert sum(bot.mode_counts.values()) > 0
