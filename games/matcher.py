"""Matching game: drag each source label onto its paired target."""

from __future__ import annotations

import logging
import random
from typing import Any

from game.config import GameConfig
from game.intents import Intent, ReleaseIntent, RestartIntent, SelectIntent
from game.layout import MatchLayout
from game.settings import EngineSettings
from game.state import BoardItem, BoardState, Status
from games.base import BaseStrategy, StrategyMetadata
from games.registry import StrategyRegistry

logger = logging.getLogger(__name__)


class MatcherStrategy(BaseStrategy):
    """Static two-column board with no terminal state.

    A pair scores once: the item id goes into ``scored_ids`` the first
    time its source is released over its own target.
    """

    metadata = StrategyMetadata(
        name="matching",
        intent_types=(SelectIntent, ReleaseIntent, RestartIntent),
    )

    def __init__(
        self,
        config: GameConfig,
        settings: EngineSettings | None = None,
        rng: random.Random | None = None,
    ):
        super().__init__(config, settings=settings, rng=rng)
        self.state: BoardState = BoardState(items=[])
        self.layout: MatchLayout
        self.reset()

    @property
    def status(self) -> Status:
        return self.state.status

    def reset(self) -> None:
        count = len(self.config.items)
        target_order = list(range(count))
        if self.settings.shuffle_targets:
            self.rng.shuffle(target_order)

        self.layout = MatchLayout(
            count=count,
            width=self.settings.board_width,
            row_height=self.settings.row_height,
            target_order=target_order,
        )
        self.state = BoardState(
            items=[
                BoardItem(item=item, index=index, slot=index)
                for index, item in enumerate(self.config.items)
            ]
        )

    def handle_intent(self, intent: Intent) -> None:
        self._check_intent(intent)

        if isinstance(intent, SelectIntent):
            self.state.dragged_index = self.layout.source_at(intent.x, intent.y)
        elif isinstance(intent, ReleaseIntent):
            self._release(intent.x, intent.y)
        # RestartIntent: there is no terminal state to restart from

    def _release(self, x: float, y: float) -> None:
        state = self.state
        dragged = state.dragged
        state.dragged_index = None

        if dragged is None:
            return
        if not self.layout.target_box(dragged.index).contains(x, y):
            return
        if dragged.item.id in state.scored_ids:
            return

        state.scored_ids.add(dragged.item.id)
        state.score += self.settings.match_points
        logger.debug("Matched %s -> %s", dragged.item.value, dragged.item.matches)

    def update(self) -> None:
        # Nothing moves on its own
        pass

    def is_terminal(self) -> bool:
        return False

    def snapshot(self) -> dict[str, Any]:
        return {
            "type": self.name,
            **self.state.to_dict(),
            "layout": self.layout.to_dict(),
            "instructions": self.config.instructions,
        }


StrategyRegistry.register("matching", MatcherStrategy)
