#!/usr/bin/env python3
"""Run a collector game headless with a simple greedy driver.

Useful for checking generated content: does a game with these items play
out, and how long does it take to win?
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import yaml  # type: ignore[import-untyped]  # noqa: E402

from game.config import ConfigError, resolve_game  # noqa: E402
from game.engine import GameEngine, create_engine  # noqa: E402
from game.intents import Direction, DirectionIntent  # noqa: E402
from game.metrics import MetricsCollector  # noqa: E402
from game.settings import load_settings  # noqa: E402


def load_game(path: str) -> dict[str, Any]:
    """Load a GameData document from a JSON or YAML file."""
    with open(path) as f:
        if path.endswith((".yaml", ".yml")):
            result: dict[str, Any] = yaml.safe_load(f)
        else:
            result = json.load(f)
    return result


def _wrapped_distance(a: int, b: int, size: int) -> int:
    d = abs(a - b)
    return min(d, size - d)


def choose_direction(state: dict[str, Any]) -> Optional[Direction]:
    """Head for the nearest correct item without reversing or biting yourself."""
    size = state["grid_size"]
    head = state["segments"][0]
    hx, hy = head["x"], head["y"]
    body = {(s["x"], s["y"]) for s in state["segments"]}
    current = Direction.from_name(state["direction"])

    targets = [(f["x"], f["y"]) for f in state["food"] if f["item"].get("isCorrect")]

    best: Optional[Direction] = None
    best_score: Optional[tuple[int, int]] = None
    for direction in Direction:
        if direction.is_reversal_of(current):
            continue
        nx, ny = (hx + direction.dx) % size, (hy + direction.dy) % size
        if (nx, ny) in body:
            continue
        distance = min(
            (_wrapped_distance(nx, tx, size) + _wrapped_distance(ny, ty, size) for tx, ty in targets),
            default=0,
        )
        # Prefer shorter distance, then keeping the current heading
        score = (distance, 0 if direction is current else 1)
        if best_score is None or score < best_score:
            best, best_score = direction, score

    return best


def run(engine: GameEngine, max_ticks: int, metrics: MetricsCollector) -> int:
    """Drive the engine with a simulated clock; return the number of ticks run."""
    now = 0.0
    engine.start(now)
    ticks = 0

    while ticks < max_ticks and not engine.is_terminal:
        direction = choose_direction(engine.current_state())
        if direction is not None:
            engine.submit_intent(DirectionIntent(direction))

        now += engine.speed
        if engine.frame(now):
            ticks += 1
            metrics.record(engine.current_state(), step=ticks)

    return ticks


def render_board(engine: GameEngine) -> str:
    """ASCII view of the collector grid: @ head, o body, + correct, x wrong."""
    grid = engine.strategy.occupancy()
    size = grid.shape[1]
    rows = []
    for y in range(size):
        row = []
        for x in range(size):
            if grid[1, y, x]:
                row.append("@")
            elif grid[0, y, x]:
                row.append("o")
            elif grid[2, y, x] > 0:
                row.append("+")
            elif grid[2, y, x] < 0:
                row.append("x")
            else:
                row.append(".")
        rows.append("".join(row))
    return "\n".join(rows)


def main():
    parser = argparse.ArgumentParser(description="Simulate a collector learning game")
    parser.add_argument("--game", type=str, required=True, help="GameData JSON/YAML file")
    parser.add_argument("--ticks", type=int, default=2000, help="Maximum ticks to run")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for spawns")
    parser.add_argument("--settings", type=str, default=None, help="Engine settings YAML")
    parser.add_argument("--quiet", action="store_true", help="Do not print the final board")
    parser.add_argument("--verbose", action="store_true", help="Log every spawn skip")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        game = resolve_game(load_game(args.game))
    except ConfigError as e:
        print(f"Invalid game config ({e.kind.value}): {e.message}", file=sys.stderr)
        sys.exit(2)

    if game.type != "snake":
        print(f"Only collector games can be simulated, got {game.type!r}", file=sys.stderr)
        sys.exit(2)

    completions = []
    engine = create_engine(
        game.config,
        on_complete=lambda: completions.append(True),
        game_type=game.type,
        settings=load_settings(args.settings),
        seed=args.seed,
    )
    metrics = MetricsCollector()

    try:
        ticks = run(engine, args.ticks, metrics)
        state = engine.current_state()
        if not args.quiet:
            print(render_board(engine))
            print()
    finally:
        engine.destroy()

    print(f"Game:      {game.title}")
    print(f"Status:    {state['status']}")
    print(f"Score:     {state['score']}")
    print(f"Correct:   {state['correct_collected']}/{state['win_threshold']}")
    print(f"Length:    {len(state['segments'])}")
    print(f"Ticks:     {ticks}")
    print(f"Completed: {bool(completions)}")

    summary = metrics.get_summary()
    if "length" in summary:
        print(f"Max length: {int(summary['length']['max'])}")


if __name__ == "__main__":
    main()
