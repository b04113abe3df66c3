"""Abstract intents submitted to the engine.

Intents are independent of the input device that produced them; see
:mod:`game.input_mapper` for the translation from raw events.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Direction(Enum):
    """Movement directions as (dx, dy) unit vectors. y grows downwards."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> Direction:
        return Direction((-self.dx, -self.dy))

    def is_reversal_of(self, other: Direction) -> bool:
        return self.opposite is other

    @classmethod
    def from_name(cls, name: str) -> Direction:
        return cls[name.upper()]


@dataclass(frozen=True)
class DirectionIntent:
    """Request to steer the collector."""

    direction: Direction


@dataclass(frozen=True)
class SelectIntent:
    """Pointer pressed at (x, y) in board pixels."""

    x: float
    y: float


@dataclass(frozen=True)
class ReleaseIntent:
    """Pointer released at (x, y) in board pixels."""

    x: float
    y: float


@dataclass(frozen=True)
class RestartIntent:
    """Request to start over; honoured only once a game has ended."""


Intent = Union[DirectionIntent, SelectIntent, ReleaseIntent, RestartIntent]
