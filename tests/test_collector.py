"""Tests for the collector (snake) strategy."""

import random

import numpy as np
import pytest

from game.intents import Direction, DirectionIntent, RestartIntent, SelectIntent
from game.settings import EngineSettings
from game.state import SpawnedFood, Status
from games.collector import CollectorStrategy
from tests.conftest import ScriptedRandom, make_config, make_item


def make_collector(items=None, grid_size: int = 20, settings=None, seed: int = 0) -> CollectorStrategy:
    """Collector with its initial food cleared so tests place food themselves."""
    strategy = CollectorStrategy(
        make_config(items, grid_size=grid_size),
        settings=settings,
        rng=random.Random(seed),
    )
    strategy.state.food = []
    return strategy


def place(strategy: CollectorStrategy, position, item_id: str = "a") -> SpawnedFood:
    spawned = SpawnedFood(position=position, item=strategy.config.item(item_id))
    strategy.state.food.append(spawned)
    return spawned


class TestInitialState:
    """Tests for the state built by reset()."""

    def test_snake_starts_in_center_facing_right(self):
        strategy = CollectorStrategy(make_config(), rng=random.Random(1))
        assert strategy.state.segments == [(10, 10), (9, 10), (8, 10)]
        assert strategy.state.direction is Direction.RIGHT
        assert strategy.state.status is Status.RUNNING
        assert strategy.state.score == 0
        assert strategy.state.correct_collected == 0

    def test_initial_food_is_off_the_snake(self):
        items = [make_item(f"i{n}") for n in range(6)]
        for seed in range(20):
            strategy = CollectorStrategy(make_config(items), rng=random.Random(seed))
            positions = [spawned.position for spawned in strategy.state.food]
            assert len(positions) <= 3
            assert len(set(positions)) == len(positions)
            assert not set(positions) & set(strategy.state.segments)
            ids = [spawned.item.id for spawned in strategy.state.food]
            assert len(set(ids)) == len(ids)

    def test_odd_grid_size(self):
        strategy = CollectorStrategy(make_config(grid_size=15), rng=random.Random(0))
        assert strategy.state.segments == [(7, 7), (6, 7), (5, 7)]

    def test_tiny_grid_keeps_segments_distinct(self):
        strategy = CollectorStrategy(make_config(grid_size=2), rng=random.Random(0))
        segments = strategy.state.segments
        assert len(segments) >= 1
        assert len(set(segments)) == len(segments)


class TestMovement:
    """Tests for head movement and direction handling."""

    def test_one_tick_without_food(self):
        strategy = make_collector()
        strategy.update()
        assert strategy.state.segments == [(11, 10), (10, 10), (9, 10)]
        assert strategy.state.score == 0

    def test_turn_applies_on_next_tick(self):
        strategy = make_collector()
        strategy.handle_intent(DirectionIntent(Direction.UP))
        assert strategy.state.direction is Direction.RIGHT
        strategy.update()
        assert strategy.state.direction is Direction.UP
        assert strategy.state.head == (10, 9)
        assert strategy.state.pending_direction is None

    def test_reversal_is_ignored(self):
        strategy = make_collector()
        strategy.handle_intent(DirectionIntent(Direction.LEFT))
        strategy.update()
        assert strategy.state.direction is Direction.RIGHT
        assert strategy.state.head == (11, 10)
        assert strategy.state.status is Status.RUNNING

    def test_reversal_does_not_displace_pending_turn(self):
        strategy = make_collector()
        strategy.handle_intent(DirectionIntent(Direction.UP))
        strategy.handle_intent(DirectionIntent(Direction.LEFT))
        assert strategy.state.pending_direction is Direction.UP
        strategy.update()
        assert strategy.state.direction is Direction.UP
        assert strategy.state.head == (10, 9)

    def test_newer_intent_replaces_pending_one(self):
        strategy = make_collector()
        strategy.handle_intent(DirectionIntent(Direction.UP))
        strategy.handle_intent(DirectionIntent(Direction.DOWN))
        strategy.update()
        assert strategy.state.direction is Direction.DOWN
        assert strategy.state.head == (10, 11)

    def test_wraps_right_edge(self):
        strategy = make_collector()
        strategy.state.segments = [(19, 10), (18, 10), (17, 10)]
        strategy.update()
        assert strategy.state.head == (0, 10)

    def test_wraps_top_edge(self):
        strategy = make_collector()
        strategy.state.segments = [(5, 0), (5, 1), (5, 2)]
        strategy.state.direction = Direction.UP
        strategy.update()
        assert strategy.state.head == (5, 19)

    def test_wraps_left_edge(self):
        strategy = make_collector()
        strategy.state.segments = [(0, 3), (1, 3)]
        strategy.state.direction = Direction.LEFT
        strategy.update()
        assert strategy.state.segments == [(19, 3), (0, 3)]

    def test_tick_counter(self):
        strategy = make_collector()
        for _ in range(4):
            strategy.update()
        assert strategy.state.ticks == 4


class TestCollisions:
    """Tests for self-collision and the terminal states."""

    def make_coiled(self) -> CollectorStrategy:
        strategy = make_collector()
        strategy.state.segments = [(5, 5), (6, 5), (6, 6), (5, 6), (4, 6)]
        strategy.state.direction = Direction.DOWN
        return strategy

    def test_self_collision_loses(self):
        strategy = self.make_coiled()
        before = list(strategy.state.segments)
        strategy.update()
        assert strategy.state.status is Status.LOST
        assert strategy.is_terminal()
        assert strategy.state.segments == before

    def test_terminal_state_does_not_change(self):
        strategy = self.make_coiled()
        strategy.update()
        snapshot = strategy.snapshot()
        strategy.handle_intent(DirectionIntent(Direction.LEFT))
        strategy.update()
        strategy.update()
        assert strategy.snapshot() == snapshot

    def test_collision_with_tail_cell_loses(self):
        # The tail has not moved yet when the new head is checked
        strategy = make_collector()
        strategy.state.segments = [(5, 5), (6, 5), (6, 6), (5, 6)]
        strategy.state.direction = Direction.DOWN
        strategy.update()
        assert strategy.state.status is Status.LOST


class TestFood:
    """Tests for eating food."""

    def test_correct_item_scores_and_grows(self):
        strategy = make_collector()
        place(strategy, (11, 10))
        strategy.update()
        assert strategy.state.score == 10
        assert strategy.state.correct_collected == 1
        assert strategy.state.segments[:4] == [(11, 10), (10, 10), (9, 10), (8, 10)]
        assert len(strategy.state.segments) == 4

    def test_wrong_item_shrinks_to_one(self):
        items = [make_item("bad", correct=False, points=10)]
        strategy = make_collector(items)
        place(strategy, (11, 10), "bad")
        strategy.update()
        assert strategy.state.head == (11, 10)
        assert strategy.state.score == 10
        assert strategy.state.correct_collected == 0
        assert strategy.state.segments == [(11, 10)]
        assert strategy.state.food_at((11, 10)) is None

    def test_two_wrong_items_never_drop_below_one(self):
        items = [make_item("bad1", correct=False, points=-5), make_item("bad2", correct=False, points=-5)]
        strategy = make_collector(items)
        strategy.settings = EngineSettings(food_count=1)
        place(strategy, (11, 10), "bad1")
        strategy.update()
        strategy.state.food = []
        place(strategy, (12, 10), "bad2")
        strategy.update()
        assert strategy.state.segments == [(12, 10)]
        assert strategy.state.score == -10
        assert strategy.state.status is Status.RUNNING

    def test_negative_points_are_applied(self):
        strategy = make_collector([make_item("neg", correct=True, points=-4)])
        place(strategy, (11, 10), "neg")
        strategy.update()
        assert strategy.state.score == -4
        assert strategy.state.correct_collected == 1

    def test_eaten_food_is_refilled(self):
        items = [make_item(f"i{n}") for n in range(5)]
        strategy = make_collector(items)
        place(strategy, (11, 10), "i0")
        strategy.rng = ScriptedRandom([0, 0, 1, 1, 2, 2])
        strategy.update()
        positions = sorted(spawned.position for spawned in strategy.state.food)
        assert positions == [(0, 0), (1, 1), (2, 2)]

    def test_win_at_threshold(self):
        strategy = make_collector()
        strategy.state.correct_collected = 9
        place(strategy, (11, 10))
        strategy.update()
        assert strategy.state.status is Status.WON
        assert strategy.state.correct_collected == 10
        assert len(strategy.state.segments) == 4
        # No respawn on the winning tick
        assert strategy.state.food == []

    def test_custom_win_threshold(self):
        strategy = make_collector(settings=EngineSettings(win_threshold=1))
        place(strategy, (11, 10))
        strategy.update()
        assert strategy.state.status is Status.WON


class TestSpawning:
    """Tests for food spawning."""

    def test_skips_cell_on_snake(self):
        strategy = make_collector([make_item("a"), make_item("b")])
        strategy.rng = ScriptedRandom([10, 10])
        assert strategy._spawn_food() is None
        assert strategy.state.food == []

    def test_skips_cell_with_food(self):
        strategy = make_collector([make_item("a"), make_item("b")])
        place(strategy, (3, 3), "a")
        strategy.rng = ScriptedRandom([3, 3])
        assert strategy._spawn_food() is None
        assert len(strategy.state.food) == 1

    def test_spawns_on_free_cell(self):
        strategy = make_collector([make_item("a")])
        strategy.rng = ScriptedRandom([0, 4])
        spawned = strategy._spawn_food()
        assert spawned is not None
        assert spawned.position == (0, 4)
        assert spawned.item.id == "a"

    def test_nothing_left_to_spawn(self):
        strategy = make_collector([make_item("a")])
        place(strategy, (3, 3), "a")
        strategy.rng = ScriptedRandom([])
        assert strategy._spawn_food() is None

    def test_only_unspawned_items_are_drawn(self):
        strategy = make_collector([make_item("a"), make_item("b")])
        place(strategy, (3, 3), "a")
        strategy.rng = ScriptedRandom([0, 0])
        spawned = strategy._spawn_food()
        assert spawned.item.id == "b"


class TestIntents:
    """Tests for intent handling."""

    def test_restart_ignored_while_running(self):
        strategy = make_collector()
        strategy.update()
        strategy.handle_intent(RestartIntent())
        assert strategy.state.head == (11, 10)

    def test_restart_after_loss(self):
        strategy = make_collector()
        strategy.state.segments = [(5, 5), (6, 5), (6, 6), (5, 6), (4, 6)]
        strategy.state.direction = Direction.DOWN
        strategy.state.score = 30
        strategy.update()
        strategy.handle_intent(RestartIntent())
        assert strategy.state.status is Status.RUNNING
        assert strategy.state.segments == [(10, 10), (9, 10), (8, 10)]
        assert strategy.state.score == 0

    def test_direction_ignored_once_terminal(self):
        strategy = make_collector()
        strategy.state.status = Status.WON
        strategy.handle_intent(DirectionIntent(Direction.UP))
        assert strategy.state.pending_direction is None

    def test_pointer_intents_rejected(self):
        strategy = make_collector()
        with pytest.raises(TypeError):
            strategy.handle_intent(SelectIntent(1, 2))


class TestSnapshot:
    """Tests for snapshot() and occupancy()."""

    def test_snapshot_fields(self):
        strategy = make_collector()
        place(strategy, (2, 3))
        snapshot = strategy.snapshot()
        assert snapshot["type"] == "snake"
        assert snapshot["status"] == "running"
        assert snapshot["segments"][0] == {"x": 10, "y": 10}
        assert snapshot["direction"] == "right"
        assert snapshot["food"][0]["x"] == 2
        assert snapshot["food"][0]["item"]["id"] == "a"
        assert snapshot["grid_size"] == 20
        assert snapshot["win_threshold"] == 10

    def test_occupancy(self):
        strategy = make_collector([make_item("a"), make_item("b", correct=False)])
        place(strategy, (2, 3), "a")
        place(strategy, (4, 5), "b")
        grid = strategy.occupancy()
        assert grid.shape == (3, 20, 20)
        assert grid[1, 10, 10] == 1.0
        assert grid[0, 10, 9] == 1.0
        assert grid[0, 10, 10] == 0.0
        assert grid[2, 3, 2] == 1.0
        assert grid[2, 5, 4] == -1.0
        assert np.sum(grid[0]) == 2


class TestInvariants:
    """Long random runs keep the snake well-formed."""

    @pytest.mark.parametrize("seed", range(5))
    def test_random_play(self, seed):
        items = [make_item(f"c{n}") for n in range(4)] + [
            make_item(f"w{n}", correct=False, points=-1) for n in range(4)
        ]
        strategy = CollectorStrategy(make_config(items, grid_size=8), rng=random.Random(seed))
        driver = random.Random(seed + 100)

        for _ in range(400):
            if strategy.is_terminal():
                strategy.handle_intent(RestartIntent())
            strategy.handle_intent(DirectionIntent(driver.choice(list(Direction))))
            strategy.update()

            segments = strategy.state.segments
            assert len(segments) >= 1
            assert all(0 <= x < 8 and 0 <= y < 8 for x, y in segments)
            assert len(set(segments)) == len(segments)

            food_cells = [spawned.position for spawned in strategy.state.food]
            assert not set(food_cells) & set(segments)
            assert len(food_cells) <= 3
