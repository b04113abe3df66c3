"""Per-game statistics collection."""

from __future__ import annotations

from collections import defaultdict
from typing import Any


class MetricsCollector:
    """Collect and aggregate numeric game statistics by tick."""

    def __init__(self):
        self.metrics: dict[str, list[tuple]] = defaultdict(list)
        self._step = 0

    def add(self, metrics: dict[str, float], step: int | None = None) -> None:
        """Add metrics at a given step.

        Args:
            metrics: Dict of metric name -> value
            step: Optional step number (uses internal counter if None)
        """
        if step is None:
            step = self._step

        for name, value in metrics.items():
            self.metrics[name].append((step, value))

        self._step = step + 1

    def record(self, snapshot: dict[str, Any], step: int | None = None) -> None:
        """Record the numeric fields of an engine snapshot."""
        values: dict[str, float] = {"score": snapshot.get("score", 0)}
        if "segments" in snapshot:
            values["length"] = len(snapshot["segments"])
            values["correct_collected"] = snapshot.get("correct_collected", 0)
            values["food"] = len(snapshot.get("food", []))
        if "scored_ids" in snapshot:
            values["scored"] = len(snapshot["scored_ids"])
        self.add(values, step)

    def get_summary(self) -> dict[str, Any]:
        """Get summary statistics for all metrics."""
        summary = {}
        for name, values in self.metrics.items():
            if values:
                vals = [v for _, v in values]
                summary[name] = {
                    "last": vals[-1],
                    "mean": sum(vals) / len(vals),
                    "min": min(vals),
                    "max": max(vals),
                    "count": len(vals),
                }
        return summary
