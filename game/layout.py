"""Board geometry for the drag-and-drop games.

Hit-testing lives here so the matcher and sorter only reason about which box
a pointer event landed in. Coordinates are board pixels, origin top-left.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

MARGIN = 20
TOP = 40
ROW_GAP = 8


@dataclass(frozen=True)
class Rect:
    """Axis-aligned box; contains the left/top edges, excludes the right/bottom."""

    x: float
    y: float
    width: float
    height: float

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px < self.x + self.width and self.y <= py < self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


class MatchLayout:
    """Two columns: sources on the left, targets on the right.

    Source ``i`` sits in row ``i``. Targets are shown in ``target_order``,
    so the target belonging to item ``i`` sits in row
    ``target_order.index(i)``.
    """

    def __init__(self, count: int, width: int, row_height: int, target_order: list[int]):
        if sorted(target_order) != list(range(count)):
            raise ValueError(f"target_order must be a permutation of range({count})")
        self.count = count
        self.width = width
        self.row_height = row_height
        self.target_order = list(target_order)
        self.box_width = (width - 4 * MARGIN) // 3
        self._target_rows = {item: row for row, item in enumerate(self.target_order)}

    @property
    def height(self) -> int:
        return TOP + self.count * self.row_height + MARGIN

    def _row(self, x: float, row: int) -> Rect:
        return Rect(x, TOP + row * self.row_height, self.box_width, self.row_height - ROW_GAP)

    def source_box(self, index: int) -> Rect:
        return self._row(MARGIN, index)

    def target_box(self, index: int) -> Rect:
        return self._row(self.width - MARGIN - self.box_width, self._target_rows[index])

    def source_at(self, x: float, y: float) -> Optional[int]:
        for index in range(self.count):
            if self.source_box(index).contains(x, y):
                return index
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "sources": [self.source_box(i).to_dict() for i in range(self.count)],
            "targets": [self.target_box(i).to_dict() for i in range(self.count)],
            "target_order": list(self.target_order),
        }


class SlotLayout:
    """A single row of equal-width slots spanning the board."""

    def __init__(self, count: int, width: int, slot_height: int):
        if count <= 0:
            raise ValueError("SlotLayout needs at least one slot")
        self.count = count
        self.width = width
        self.slot_height = slot_height
        self.slot_width = (width - 2 * MARGIN) / count

    @property
    def height(self) -> int:
        return TOP + self.slot_height + MARGIN

    def slot_box(self, slot: int) -> Rect:
        return Rect(MARGIN + slot * self.slot_width, TOP, self.slot_width, self.slot_height)

    def slot_at(self, x: float, y: float) -> Optional[int]:
        """Return the slot under (x, y), or None if the point misses the row."""
        if not TOP <= y < TOP + self.slot_height:
            return None
        if not MARGIN <= x < MARGIN + self.count * self.slot_width:
            return None
        return min(int((x - MARGIN) // self.slot_width), self.count - 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "slots": [self.slot_box(i).to_dict() for i in range(self.count)],
        }
