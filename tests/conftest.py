"""Shared fixtures and factories for the engine tests."""

import random

import pytest

from game.config import GameConfig, resolve
from game.settings import EngineSettings


def make_item(item_id: str, correct: bool = True, points: int = 10, **extra) -> dict:
    """Helper to build a raw item as the content generator sends it."""
    return {"id": item_id, "value": item_id.upper(), "isCorrect": correct, "points": points, **extra}


def make_config(items=None, grid_size: int = 20, speed: int = 150) -> GameConfig:
    """Build a resolved config; defaults to a single correct item."""
    return resolve({
        "items": items if items is not None else [make_item("a")],
        "gridSize": grid_size,
        "speed": speed,
        "instructions": "test",
    })


class ScriptedRandom(random.Random):
    """Random source whose grid positions come from a fixed list."""

    def __init__(self, values):
        super().__init__(0)
        self._values = list(values)

    def randrange(self, *args, **kwargs):
        return self._values.pop(0)


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(shuffle_targets=False)
