from __future__ import annotations

import copy
import logging
import random
from collections import deque
from collections.abc import Callable
from typing import Any, Optional, Protocol

from game.config import GameConfig, canonical_game_type, resolve
from game.intents import Intent
from game.settings import EngineSettings
from game.state import Status
from games import StrategyRegistry
from games.base import BaseStrategy

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """Host-side drawing surface. The engine only hands it snapshots."""

    def draw(self, snapshot: dict[str, Any]) -> None:
        ...

    def close(self) -> None:
        ...


class GameEngine:
    """Fixed-cadence simulation engine for one game.

    The host calls :meth:`frame` from its render loop. Each frame drains the
    intent buffer, advances the strategy by at most one tick once ``speed``
    milliseconds have passed since the previous tick, then draws a snapshot.
    """

    def __init__(
        self,
        strategy: BaseStrategy,
        on_complete: Optional[Callable[[], None]] = None,
        renderer: Optional[Renderer] = None,
    ):
        """Initialize the engine around a strategy.

        Args:
            strategy: Game mode implementation (see games.base.BaseStrategy)
            on_complete: Called once, the first time the game is won
            renderer: Optional surface to draw snapshots on; closed by destroy()
        """
        self.strategy = strategy
        self.speed: int = strategy.config.speed
        self._on_complete = on_complete
        self._renderer = renderer
        self._intents: deque[Intent] = deque()
        self._last_tick: Optional[float] = None
        self._snapshot: dict[str, Any] = strategy.snapshot()
        self._running = False
        self._destroyed = False
        self._completed = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def is_terminal(self) -> bool:
        return self.strategy.is_terminal()

    @property
    def completed(self) -> bool:
        """Whether the completion callback has fired."""
        return self._completed

    @property
    def status(self) -> Status:
        return self.strategy.status

    def start(self, now_ms: float = 0.0) -> None:
        """Start the loop; the first tick is due ``speed`` ms after ``now_ms``."""
        if self._destroyed:
            raise RuntimeError("Cannot start a destroyed engine")
        if self._running:
            return

        self._running = True
        self._last_tick = now_ms
        logger.info("Started %s game (speed %dms)", self.strategy.name, self.speed)

    def restart(self) -> None:
        """Throw the current state away and start from the initial one."""
        if self._destroyed:
            return

        self._intents.clear()
        self.strategy.reset()
        self._snapshot = self.strategy.snapshot()
        logger.info("Restarted %s game", self.strategy.name)

    def destroy(self) -> None:
        """Stop the loop and release the renderer. Safe to call repeatedly."""
        if self._destroyed:
            return

        self._destroyed = True
        self._running = False
        renderer, self._renderer = self._renderer, None
        try:
            self._intents.clear()
        finally:
            if renderer is not None:
                renderer.close()
        logger.info("Destroyed %s game", self.strategy.name)

    def submit_intent(self, intent: Intent) -> None:
        """Queue an intent; it is applied at the start of the next frame."""
        if self._destroyed:
            return
        self._intents.append(intent)

    def current_state(self) -> dict[str, Any]:
        """Snapshot taken at the end of the last completed frame."""
        return copy.deepcopy(self._snapshot)

    def frame(self, now_ms: float) -> bool:
        """Run one render-loop frame.

        Args:
            now_ms: Host clock in milliseconds

        Returns:
            True if the simulation ticked during this frame
        """
        if not self._running:
            return False

        self._drain_intents()

        ticked = False
        if self.strategy.ticks and not self.strategy.is_terminal():
            if self._last_tick is None or now_ms - self._last_tick >= self.speed:
                self.strategy.update()
                self._last_tick = now_ms
                ticked = True

        self._snapshot = self.strategy.snapshot()
        self._notify_completion()

        if self._renderer is not None:
            self._renderer.draw(self._snapshot)

        return ticked

    def _drain_intents(self) -> None:
        while self._intents:
            self.strategy.handle_intent(self._intents.popleft())

    def _notify_completion(self) -> None:
        if self._completed or self.strategy.status is not Status.WON:
            return

        self._completed = True
        logger.info("%s game completed", self.strategy.name)
        if self._on_complete is not None:
            self._on_complete()


def create_engine(
    config: GameConfig | dict[str, Any],
    on_complete: Optional[Callable[[], None]] = None,
    game_type: str = "snake",
    settings: Optional[EngineSettings] = None,
    seed: Optional[int] = None,
    renderer: Optional[Renderer] = None,
) -> GameEngine:
    """Build an engine for a game.

    Args:
        config: GameConfig or raw mapping (validated with game.config.resolve)
        on_complete: Completion callback, invoked once on the first win
        game_type: "snake", "matching" or "sorting" (aliases accepted)
        settings: Engine tunables
        seed: Seed for spawn placement and layout shuffles
        renderer: Optional drawing surface owned by the engine from now on

    Raises:
        ConfigError: If the configuration is invalid; no engine is created
    """
    config = resolve(config)
    strategy = StrategyRegistry.create(
        canonical_game_type(game_type),
        config,
        settings=settings,
        rng=random.Random(seed),
    )
    return GameEngine(strategy, on_complete=on_complete, renderer=renderer)
