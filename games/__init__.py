"""Games module - one strategy per game mode."""

from games.base import BaseStrategy, StrategyMetadata
from games.collector import CollectorStrategy
from games.matcher import MatcherStrategy
from games.sorter import SorterStrategy
from games.registry import StrategyRegistry

__all__ = [
    "BaseStrategy",
    "StrategyMetadata",
    "StrategyRegistry",
    "CollectorStrategy",
    "MatcherStrategy",
    "SorterStrategy",
]
