"""Game registry for selecting a strategy by game type."""

from __future__ import annotations

import random

from game.config import GameConfig
from game.settings import EngineSettings
from games.base import BaseStrategy


class StrategyRegistry:
    """Registry for game strategies."""

    _strategies: dict[str, type[BaseStrategy]] = {}

    @classmethod
    def register(cls, name: str, strategy: type[BaseStrategy]) -> None:
        """Register a strategy class.

        Args:
            name: Unique game type identifier
            strategy: Strategy class to instantiate for that type
        """
        cls._strategies[name] = strategy

    @classmethod
    def create(
        cls,
        name: str,
        config: GameConfig,
        settings: EngineSettings | None = None,
        rng: random.Random | None = None,
    ) -> BaseStrategy:
        """Create a strategy instance.

        Args:
            name: Game type
            config: Validated game content
            settings: Engine tunables
            rng: Random source

        Returns:
            Strategy instance in its initial state
        """
        if name not in cls._strategies:
            raise ValueError(f"Unknown game: {name}. Available: {list(cls._strategies.keys())}")

        return cls._strategies[name](config, settings=settings, rng=rng)

    @classmethod
    def list_games(cls) -> list[str]:
        """Return list of registered game types."""
        return list(cls._strategies.keys())
