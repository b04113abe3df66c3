"""Game content configuration: validation and defaults.

Content is produced elsewhere (a language model behind the host) and arrives
as plain JSON-like mappings. Everything the engine consumes goes through
:func:`resolve` or :func:`resolve_game` first so the strategies can assume a
well-formed :class:`GameConfig`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 20
DEFAULT_SPEED = 150
DEFAULT_INSTRUCTIONS = (
    "Use arrow keys to move. Collect 10 correct items to win! "
    "Wrong items will make you shorter."
)
DEFAULT_TITLE = "Learning Game"
DEFAULT_DESCRIPTION = "Collect the correct items to score points!"

# Accepted spellings of each game type -> canonical name
GAME_TYPE_ALIASES: dict[str, str] = {
    "snake": "snake",
    "collector": "snake",
    "matching": "matching",
    "matcher": "matching",
    "sorting": "sorting",
    "sorter": "sorting",
}


class ConfigErrorKind(str, Enum):
    """Reasons a configuration is rejected."""

    MISSING_ITEMS = "missing_items"
    INVALID_GRID_SIZE = "invalid_grid_size"
    INVALID_SPEED = "invalid_speed"
    DUPLICATE_ITEM_ID = "duplicate_item_id"
    UNKNOWN_GAME_TYPE = "unknown_game_type"
    INVALID_SHAPE = "invalid_shape"


class ConfigError(ValueError):
    """Raised when a game configuration cannot be used to start an engine."""

    def __init__(self, kind: ConfigErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind.value, "message": self.message}


class GameItem(BaseModel):
    """One piece of content shown in a game."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    value: str
    is_correct: bool = Field(default=False, alias="isCorrect")
    points: int = 0
    matches: Optional[str] = None
    correct_position: Optional[int] = Field(default=None, alias="correctPosition")

    @field_validator("id", "value", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Any:
        # Generated content sometimes uses numbers for ids and labels
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("points", mode="before")
    @classmethod
    def _default_points(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("is_correct", mode="before")
    @classmethod
    def _default_is_correct(cls, value: Any) -> Any:
        return False if value is None else value

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class GameConfig(BaseModel):
    """Immutable, validated content for one game."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    items: tuple[GameItem, ...]
    instructions: str = DEFAULT_INSTRUCTIONS
    grid_size: int = Field(default=DEFAULT_GRID_SIZE, alias="gridSize")
    speed: int = DEFAULT_SPEED

    def item(self, item_id: str) -> GameItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise KeyError(item_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "instructions": self.instructions,
            "gridSize": self.grid_size,
            "speed": self.speed,
        }


class GameData(BaseModel):
    """The envelope the content generator hands to the host."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str
    title: str = DEFAULT_TITLE
    description: str = DEFAULT_DESCRIPTION
    config: GameConfig


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _positive(value: Any, default: int, kind: ConfigErrorKind, name: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(kind, f"{name} must be a positive integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ConfigError(kind, f"{name} must be a positive integer, got {value!r}") from None
    if number != value and not isinstance(value, str):
        raise ConfigError(kind, f"{name} must be an integer, got {value!r}")
    if number <= 0:
        raise ConfigError(kind, f"{name} must be > 0, got {number}")
    return number


def resolve(raw: Mapping[str, Any] | GameConfig | None) -> GameConfig:
    """Validate a raw configuration and fill in defaults.

    Args:
        raw: Mapping as produced by the content generator (camelCase or
            snake_case keys), or an already-built GameConfig

    Returns:
        A well-formed GameConfig

    Raises:
        ConfigError: If the configuration cannot start a game
    """
    if isinstance(raw, GameConfig):
        raw = raw.to_dict()
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ConfigError(
            ConfigErrorKind.INVALID_SHAPE,
            f"Game config must be a mapping, got {type(raw).__name__}",
        )

    items = raw.get("items") or []
    if not items:
        logger.warning("Rejected game config: no items")
        raise ConfigError(ConfigErrorKind.MISSING_ITEMS, "Game config has no items")

    grid_size = _positive(
        _first(raw, "gridSize", "grid_size"),
        DEFAULT_GRID_SIZE,
        ConfigErrorKind.INVALID_GRID_SIZE,
        "gridSize",
    )
    speed = _positive(raw.get("speed"), DEFAULT_SPEED, ConfigErrorKind.INVALID_SPEED, "speed")
    instructions = raw.get("instructions") or DEFAULT_INSTRUCTIONS

    try:
        config = GameConfig(
            items=tuple(items),
            instructions=instructions,
            grid_size=grid_size,
            speed=speed,
        )
    except ValidationError as e:
        logger.warning("Rejected game config: %s", e)
        raise ConfigError(ConfigErrorKind.INVALID_SHAPE, str(e)) from e

    seen: set[str] = set()
    for item in config.items:
        if item.id in seen:
            raise ConfigError(
                ConfigErrorKind.DUPLICATE_ITEM_ID, f"Duplicate item id: {item.id!r}"
            )
        seen.add(item.id)

    return config


def canonical_game_type(game_type: str) -> str:
    """Map a game type (or one of its aliases) to its canonical name."""
    try:
        return GAME_TYPE_ALIASES[str(game_type).lower()]
    except KeyError:
        raise ConfigError(
            ConfigErrorKind.UNKNOWN_GAME_TYPE,
            f"Unknown game type: {game_type!r}. Available: {sorted(set(GAME_TYPE_ALIASES.values()))}",
        ) from None


def _check_variant_items(game_type: str, config: GameConfig) -> None:
    if game_type == "matching":
        missing = [item.id for item in config.items if not item.matches]
        if missing:
            raise ConfigError(
                ConfigErrorKind.INVALID_SHAPE,
                f"Matching items need a 'matches' label: {missing}",
            )
    elif game_type == "sorting":
        size = len(config.items)
        bad = [
            item.id
            for item in config.items
            if item.correct_position is None or not 0 <= item.correct_position < size
        ]
        if bad:
            raise ConfigError(
                ConfigErrorKind.INVALID_SHAPE,
                f"Sorting items need a correctPosition in [0, {size}): {bad}",
            )


def resolve_game(raw: Mapping[str, Any] | GameData) -> GameData:
    """Validate a full game envelope (type, title, description, config)."""
    if isinstance(raw, GameData):
        raw = {
            "type": raw.type,
            "title": raw.title,
            "description": raw.description,
            "config": raw.config,
        }
    if not isinstance(raw, Mapping):
        raise ConfigError(ConfigErrorKind.INVALID_SHAPE, "Game data must be a mapping")

    game_type = canonical_game_type(raw.get("type", "snake"))
    config = resolve(raw.get("config"))
    _check_variant_items(game_type, config)

    return GameData(
        type=game_type,
        title=raw.get("title") or DEFAULT_TITLE,
        description=raw.get("description") or DEFAULT_DESCRIPTION,
        config=config,
    )
