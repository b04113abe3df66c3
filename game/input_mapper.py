"""Translate raw device events into engine intents."""

from __future__ import annotations

from typing import Optional, Union

from game.config import canonical_game_type
from game.intents import (
    Direction,
    DirectionIntent,
    Intent,
    ReleaseIntent,
    RestartIntent,
    SelectIntent,
)

# Browser keyCode values
KEY_SPACE = 32
KEY_LEFT = 37
KEY_UP = 38
KEY_RIGHT = 39
KEY_DOWN = 40

KEY_CODES: dict[int, Union[Direction, str]] = {
    KEY_LEFT: Direction.LEFT,
    KEY_UP: Direction.UP,
    KEY_RIGHT: Direction.RIGHT,
    KEY_DOWN: Direction.DOWN,
    KEY_SPACE: "restart",
}

# KeyboardEvent.key / .code names
KEY_NAMES: dict[str, Union[Direction, str]] = {
    "arrowleft": Direction.LEFT,
    "arrowup": Direction.UP,
    "arrowright": Direction.RIGHT,
    "arrowdown": Direction.DOWN,
    "left": Direction.LEFT,
    "up": Direction.UP,
    "right": Direction.RIGHT,
    "down": Direction.DOWN,
    " ": "restart",
    "space": "restart",
    "spacebar": "restart",
}

POINTER_DOWN = ("down", "pointerdown", "mousedown", "touchstart")
POINTER_UP = ("up", "pointerup", "mouseup", "touchend")


class InputMapper:
    """Maps key and pointer events to intents for one game type.

    Direction keys only mean something to the collector and pointer events
    only to the drag-and-drop games; events that do not apply map to None.
    Whether a restart is allowed is decided by the game, not here.
    """

    def __init__(self, game_type: str = "snake"):
        self.game_type = canonical_game_type(game_type)

    @property
    def uses_keyboard(self) -> bool:
        return self.game_type == "snake"

    @property
    def uses_pointer(self) -> bool:
        return self.game_type in ("matching", "sorting")

    def map_key(self, key: Union[int, str]) -> Optional[Intent]:
        """Map a key code (int) or key name (str) to an intent."""
        if isinstance(key, bool):
            return None
        if isinstance(key, int):
            action = KEY_CODES.get(key)
        else:
            action = KEY_NAMES.get(key if key == " " else key.strip().lower())

        if action is None:
            return None
        if action == "restart":
            return RestartIntent()
        if not self.uses_keyboard:
            return None
        return DirectionIntent(action)

    def map_pointer(self, phase: str, x: float, y: float) -> Optional[Intent]:
        """Map a pointer press or release at (x, y) to an intent."""
        if not self.uses_pointer:
            return None

        phase = phase.lower()
        if phase in POINTER_DOWN:
            return SelectIntent(float(x), float(y))
        if phase in POINTER_UP:
            return ReleaseIntent(float(x), float(y))
        return None
