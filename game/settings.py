"""Engine tunables loaded from YAML."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

DEFAULT_SETTINGS_PATH = Path(__file__).parent.parent / "config" / "default.yaml"


@dataclass(frozen=True)
class EngineSettings:
    """Values the content configuration does not carry."""

    food_count: int = 3  # Food items on the grid at once
    win_threshold: int = 10  # Correct items needed to win
    tail_penalty: int = 2  # Segments lost for a wrong item
    match_points: int = 10
    sort_points: int = 10
    frame_interval_ms: int = 16  # Render cadence of the host loop
    board_width: int = 600
    row_height: int = 48
    slot_height: int = 60
    shuffle_targets: bool = True

    def __post_init__(self) -> None:
        for name in ("food_count", "win_threshold", "frame_interval_ms",
                     "board_width", "row_height", "slot_height"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")
        if self.tail_penalty < 0:
            raise ValueError(f"tail_penalty must be >= 0, got {self.tail_penalty}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineSettings:
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown engine settings: {sorted(unknown)}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_settings(config_path: str | Path | None = None) -> EngineSettings:
    """Load engine settings from a YAML file.

    Args:
        config_path: Path to a YAML file. Defaults to config/default.yaml when
            it exists, otherwise built-in defaults.

    Returns:
        EngineSettings
    """
    path = Path(config_path) if config_path else DEFAULT_SETTINGS_PATH
    if config_path is None and not path.exists():
        return EngineSettings()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")

    # Allow the settings to be nested under an "engine" key
    data = data.get("engine", data)
    return EngineSettings.from_dict(data)
