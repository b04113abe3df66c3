"""Collector game: a snake on a wrapping grid eats content items.

Correct items grow the snake and count towards the win threshold; wrong
items cost tail segments. The playfield wraps at the edges, so the only way
to lose is running into yourself.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Optional

import numpy as np

from game.config import GameConfig
from game.intents import Direction, DirectionIntent, Intent, RestartIntent
from game.settings import EngineSettings
from game.state import CollectorState, SpawnedFood, Status
from games.base import BaseStrategy, StrategyMetadata
from games.registry import StrategyRegistry

logger = logging.getLogger(__name__)

INITIAL_LENGTH = 3


class CollectorStrategy(BaseStrategy):
    """Continuous-movement collection game.

    Each tick:
    - applies the buffered direction unless it reverses the current one
    - moves the head one cell (wrapping at the edges)
    - loses on self-collision
    - resolves food under the new head, then respawns food
    """

    metadata = StrategyMetadata(
        name="snake",
        intent_types=(DirectionIntent, RestartIntent),
        ticks=True,
    )

    def __init__(
        self,
        config: GameConfig,
        settings: EngineSettings | None = None,
        rng: random.Random | None = None,
    ):
        super().__init__(config, settings=settings, rng=rng)
        self.grid_size = config.grid_size
        self.state: CollectorState = CollectorState(segments=[])
        self.reset()

    @property
    def status(self) -> Status:
        return self.state.status

    def reset(self) -> None:
        """Snake starts in the center, length 3, facing right, with fresh food."""
        mid = self.grid_size // 2
        segments: list[tuple[int, int]] = []
        for offset in range(INITIAL_LENGTH):
            cell = ((mid - offset) % self.grid_size, mid)
            # Tiny grids cannot fit three distinct cells
            if cell not in segments:
                segments.append(cell)

        self.state = CollectorState(segments=segments, direction=Direction.RIGHT)
        for _ in range(self.settings.food_count):
            self._spawn_food()

    def handle_intent(self, intent: Intent) -> None:
        self._check_intent(intent)

        if isinstance(intent, RestartIntent):
            if self.is_terminal():
                logger.info("Restarting collector game after %s", self.state.status.value)
                self.reset()
            return

        if self.is_terminal():
            return
        # A reversal never reaches the slot, so it cannot displace a valid turn
        if intent.direction.is_reversal_of(self.state.direction):
            return
        # Single in-flight slot: a newer intent replaces an unapplied one
        self.state.pending_direction = intent.direction

    def update(self) -> None:
        state = self.state
        if state.status.is_terminal:
            return

        state.ticks += 1

        if state.pending_direction is not None:
            if not state.pending_direction.is_reversal_of(state.direction):
                state.direction = state.pending_direction
            state.pending_direction = None

        new_head = self._next_head()

        if new_head in state.segments:
            state.status = Status.LOST
            logger.info("Collector lost after %d ticks (score %d)", state.ticks, state.score)
            return

        state.segments.insert(0, new_head)

        eaten = state.food_at(new_head)
        if eaten is None:
            state.segments.pop()
            return

        self._consume(eaten)

    def is_terminal(self) -> bool:
        return self.state.status.is_terminal

    def snapshot(self) -> dict[str, Any]:
        return {
            "type": self.name,
            **self.state.to_dict(),
            "grid_size": self.grid_size,
            "win_threshold": self.settings.win_threshold,
            "instructions": self.config.instructions,
        }

    def occupancy(self) -> np.ndarray:
        """Return the board as a 3-channel grid.

        - Channel 0: Snake body (1 where body exists)
        - Channel 1: Snake head (1 at head position)
        - Channel 2: Food (1 for correct items, -1 for wrong ones)
        """
        size = self.grid_size
        grid = np.zeros((3, size, size), dtype=np.float32)

        for x, y in self.state.segments[1:]:
            grid[0, y, x] = 1.0

        hx, hy = self.state.head
        grid[1, hy, hx] = 1.0

        for spawned in self.state.food:
            fx, fy = spawned.position
            grid[2, fy, fx] = 1.0 if spawned.item.is_correct else -1.0

        return grid

    def _next_head(self) -> tuple[int, int]:
        head_x, head_y = self.state.head
        direction = self.state.direction
        return (
            (head_x + direction.dx) % self.grid_size,
            (head_y + direction.dy) % self.grid_size,
        )

    def _consume(self, eaten: SpawnedFood) -> None:
        state = self.state
        state.food.remove(eaten)
        state.score += eaten.item.points

        if eaten.item.is_correct:
            # Growing: the tail stays where it is
            state.correct_collected += 1
            if state.correct_collected >= self.settings.win_threshold:
                state.status = Status.WON
                logger.info(
                    "Collector won after %d ticks (score %d)", state.ticks, state.score
                )
                return
        else:
            # Normal locomotion plus the penalty
            self._shrink(1 + self.settings.tail_penalty)

        self._refill_food()

    def _shrink(self, count: int) -> None:
        """Drop up to ``count`` tail segments, never the head."""
        removable = min(count, len(self.state.segments) - 1)
        if removable > 0:
            del self.state.segments[-removable:]

    def _refill_food(self) -> None:
        for _ in range(self.settings.food_count - len(self.state.food)):
            self._spawn_food()

    def _spawn_food(self) -> Optional[SpawnedFood]:
        """Try once to place an unspawned item on a random free cell.

        Returns None when nothing is left to spawn or the chosen cell is
        taken; the slot stays empty until the next refill.
        """
        state = self.state
        spawned_ids = state.spawned_ids()
        available = [item for item in self.config.items if item.id not in spawned_ids]

        if not available:
            logger.debug("No unspawned items left; skipping spawn")
            return None

        item = self.rng.choice(available)
        position = (self.rng.randrange(self.grid_size), self.rng.randrange(self.grid_size))

        if position in state.segments or state.food_at(position) is not None:
            logger.debug("Spawn cell %s is occupied; skipping spawn", position)
            return None

        spawned = SpawnedFood(position=position, item=item)
        state.food.append(spawned)
        return spawned


# Register the game
StrategyRegistry.register("snake", CollectorStrategy)
