from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from game.config import GameItem
from game.intents import Direction


class Status(str, Enum):
    """Lifecycle of a game. WON and LOST are terminal."""

    RUNNING = "running"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self is not Status.RUNNING


@dataclass
class SpawnedFood:
    """A content item placed on the collector grid."""

    position: tuple[int, int]
    item: GameItem

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.position[0], "y": self.position[1], "item": self.item.to_dict()}


@dataclass
class CollectorState:
    """Represents the current state of a collector (snake) game."""

    segments: list[tuple[int, int]]  # List of (x, y) tuples, head first
    direction: Direction = Direction.RIGHT
    pending_direction: Optional[Direction] = None  # Buffered intent, applied on next tick
    food: list[SpawnedFood] = field(default_factory=list)
    score: int = 0
    correct_collected: int = 0
    status: Status = Status.RUNNING
    ticks: int = 0

    @property
    def head(self) -> tuple[int, int]:
        return self.segments[0]

    def food_at(self, position: tuple[int, int]) -> Optional[SpawnedFood]:
        for spawned in self.food:
            if spawned.position == position:
                return spawned
        return None

    def spawned_ids(self) -> set[str]:
        return {spawned.item.id for spawned in self.food}

    def to_dict(self) -> dict[str, Any]:
        """Convert CollectorState to a dictionary for JSON serialization."""
        return {
            "segments": [{"x": x, "y": y} for x, y in self.segments],
            "direction": self.direction.name.lower(),
            "pending_direction": (
                self.pending_direction.name.lower() if self.pending_direction else None
            ),
            "food": [spawned.to_dict() for spawned in self.food],
            "score": self.score,
            "correct_collected": self.correct_collected,
            "status": self.status.value,
            "ticks": self.ticks,
        }


@dataclass
class BoardItem:
    """An item on a matcher or sorter board.

    ``index`` is the item's original position and never changes; ``slot`` is
    where the sorter currently shows it (always equal to ``index`` for the
    matcher).
    """

    item: GameItem
    index: int
    slot: int

    def to_dict(self) -> dict[str, Any]:
        return {"item": self.item.to_dict(), "index": self.index, "slot": self.slot}


@dataclass
class BoardState:
    """State shared by the drag-and-drop games (matcher and sorter)."""

    items: list[BoardItem]
    dragged_index: Optional[int] = None
    scored_ids: set[str] = field(default_factory=set)
    score: int = 0

    @property
    def status(self) -> Status:
        # These games accumulate score indefinitely
        return Status.RUNNING

    @property
    def dragged(self) -> Optional[BoardItem]:
        if self.dragged_index is None:
            return None
        return self.items[self.dragged_index]

    def item_in_slot(self, slot: int) -> Optional[int]:
        """Return the index of the item currently shown in ``slot``."""
        for board_item in self.items:
            if board_item.slot == slot:
                return board_item.index
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [
                {**board_item.to_dict(), "scored": board_item.item.id in self.scored_ids}
                for board_item in self.items
            ],
            "dragged_index": self.dragged_index,
            "scored_ids": sorted(self.scored_ids),
            "score": self.score,
            "status": self.status.value,
        }
