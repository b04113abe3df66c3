"""Sorting game: drag items into the slot matching their correct position."""

from __future__ import annotations

import logging
import random
from typing import Any, Optional

from game.config import GameConfig
from game.intents import Intent, ReleaseIntent, RestartIntent, SelectIntent
from game.layout import SlotLayout
from game.settings import EngineSettings
from game.state import BoardItem, BoardState, Status
from games.base import BaseStrategy, StrategyMetadata
from games.registry import StrategyRegistry

logger = logging.getLogger(__name__)


class SorterStrategy(BaseStrategy):
    """A row of equal-width slots, one item per slot.

    Dropping an item on another slot swaps the two items. An item scores
    once, the first time it is released where it belongs. A click that
    does not move anything is judged by the item's original index.
    """

    metadata = StrategyMetadata(
        name="sorting",
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
        self.layout = SlotLayout(
            count=len(config.items),
            width=self.settings.board_width,
            slot_height=self.settings.slot_height,
        )
        self.reset()

    @property
    def status(self) -> Status:
        return self.state.status

    def reset(self) -> None:
        self.state = BoardState(
            items=[
                BoardItem(item=item, index=index, slot=index)
                for index, item in enumerate(self.config.items)
            ]
        )

    def handle_intent(self, intent: Intent) -> None:
        self._check_intent(intent)

        if isinstance(intent, SelectIntent):
            slot = self.layout.slot_at(intent.x, intent.y)
            self.state.dragged_index = None if slot is None else self.state.item_in_slot(slot)
        elif isinstance(intent, ReleaseIntent):
            self.release_into(self.layout.slot_at(intent.x, intent.y))

    def release_into(self, slot: Optional[int]) -> int:
        """Drop the dragged item into ``slot``.

        Returns:
            Points awarded by this release
        """
        state = self.state
        dragged = state.dragged
        state.dragged_index = None

        if dragged is None or slot is None:
            return 0

        if slot == dragged.slot:
            judged_position = dragged.index
        else:
            self._move(dragged, slot)
            judged_position = dragged.slot

        if judged_position != dragged.item.correct_position:
            return 0
        if dragged.item.id in state.scored_ids:
            return 0

        state.scored_ids.add(dragged.item.id)
        state.score += self.settings.sort_points
        logger.debug("Sorted %s into slot %d", dragged.item.value, judged_position)
        return self.settings.sort_points

    def _move(self, board_item: BoardItem, slot: int) -> None:
        occupant = self.state.item_in_slot(slot)
        if occupant is not None:
            self.state.items[occupant].slot = board_item.slot
        board_item.slot = slot

    def update(self) -> None:
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


StrategyRegistry.register("sorting", SorterStrategy)
