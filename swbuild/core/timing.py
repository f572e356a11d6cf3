"""Per-task wall-clock timings for the task graph."""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Iterator


def format_duration(seconds: float) -> str:
    """Short duration for build logs.

    Examples:
        0.042 -> "42ms"
        2.5 -> "2.50s"
        75.0 -> "1m15s"
    """
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, remaining = divmod(int(round(seconds)), 60)
    return f"{minutes}m{remaining:02d}s"


class TaskTimings:
    """Durations of finished tasks, recorded from the batch worker threads."""

    def __init__(self) -> None:
        self._durations: dict[str, float] = {}
        self._lock = threading.Lock()

    @contextmanager
    def measure(self, task: str) -> Iterator[None]:
        """Record how long the body took, whether or not it raised."""
        start = time.monotonic()
        try:
            yield
        finally:
            self.record(task, time.monotonic() - start)

    def record(self, task: str, seconds: float) -> None:
        with self._lock:
            self._durations[task] = seconds

    def get(self, task: str) -> float | None:
        return self._durations.get(task)

    def names(self) -> set[str]:
        return set(self._durations)

    def batch_summary(self, batches: list[list[str]]) -> list[str]:
        """One line per batch, in run order.

        Tasks of a batch overlap, so a batch costs as much as its slowest
        task. Batches that never ran (after a failure) are left out.
        """
        lines = []
        for i, batch in enumerate(batches, 1):
            timed = [(name, self._durations[name]) for name in batch if name in self._durations]
            if not timed:
                continue
            wall = max(seconds for _, seconds in timed)
            tasks = ", ".join(f"{name} {format_duration(seconds)}" for name, seconds in timed)
            lines.append(f"batch {i} ({format_duration(wall)}): {tasks}")
        return lines
