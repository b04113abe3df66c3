"""Base game strategy interface."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from game.config import GameConfig
from game.intents import Intent
from game.settings import EngineSettings
from game.state import Status


@dataclass
class StrategyMetadata:
    """Metadata about a game strategy."""

    name: str
    intent_types: tuple[type, ...]
    ticks: bool = False  # Whether update() runs on the config's speed cadence


class BaseStrategy(ABC):
    """Base class for all game modes.

    The engine owns one strategy per game and calls into it from its frame
    loop only; strategies never touch clocks, renderers or callbacks.
    """

    metadata: StrategyMetadata

    def __init__(
        self,
        config: GameConfig,
        settings: EngineSettings | None = None,
        rng: random.Random | None = None,
    ):
        """Initialize the strategy.

        Args:
            config: Validated game content
            settings: Engine tunables (defaults if None)
            rng: Random source for spawns and layout shuffles
        """
        self.config = config
        self.settings = settings or EngineSettings()
        self.rng = rng or random.Random()

    @abstractmethod
    def reset(self) -> None:
        """Discard the current state and build the initial one."""
        pass

    @abstractmethod
    def update(self) -> None:
        """Advance the simulation by one tick."""
        pass

    @abstractmethod
    def handle_intent(self, intent: Intent) -> None:
        """Apply one intent drained from the engine's buffer.

        Raises:
            TypeError: If the intent kind is not understood by this mode
        """
        pass

    @abstractmethod
    def is_terminal(self) -> bool:
        """Whether the game has ended (won or lost)."""
        pass

    @abstractmethod
    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-serializable copy of the state for rendering."""
        pass

    @property
    @abstractmethod
    def status(self) -> Status:
        pass

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def ticks(self) -> bool:
        return self.metadata.ticks

    def _check_intent(self, intent: Intent) -> None:
        if not isinstance(intent, self.metadata.intent_types):
            raise TypeError(
                f"{type(intent).__name__} is not supported by the {self.name} game"
            )
