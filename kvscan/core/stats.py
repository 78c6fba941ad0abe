"""
Per-scan counters and progress snapshots
"""

import time
from dataclasses import dataclass, field
from typing import Callable


@dataclass(frozen=True)
class ProgressSnapshot:
    """What a count-mode progress line reports"""

    window_count: int
    window_elapsed: float
    total_emitted: int
    total_seen: int
    total_elapsed: float


@dataclass
class ScanStats:
    """
    Counters for one scan

    Owned by the executor for the lifetime of the scan and passed explicitly
    to whoever reports on it. At the end of a scan
    total_seen == total_emitted + total_filtered.
    """

    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    total_seen: int = 0
    total_emitted: int = 0
    total_filtered: int = 0
    started_at: float = 0.0
    window_started_at: float = 0.0
    window_emitted: int = 0
    finished_at: float | None = None

    def start(self) -> None:
        """Reset every counter and both time markers"""
        now = self.clock()
        self.total_seen = 0
        self.total_emitted = 0
        self.total_filtered = 0
        self.started_at = now
        self.window_started_at = now
        self.window_emitted = 0
        self.finished_at = None

    def finish(self) -> None:
        self.finished_at = self.clock()

    def record_seen(self) -> None:
        self.total_seen += 1

    def record_emitted(self) -> None:
        self.total_emitted += 1
        self.window_emitted += 1

    def record_filtered(self) -> None:
        self.total_filtered += 1

    @property
    def elapsed(self) -> float:
        end = self.finished_at if self.finished_at is not None else self.clock()
        return end - self.started_at

    @property
    def window_elapsed(self) -> float:
        return self.clock() - self.window_started_at

    def take_snapshot(self) -> ProgressSnapshot:
        """Capture the current window and start a new one"""
        now = self.clock()
        snapshot = ProgressSnapshot(
            window_count=self.window_emitted,
            window_elapsed=now - self.window_started_at,
            total_emitted=self.total_emitted,
            total_seen=self.total_seen,
            total_elapsed=now - self.started_at,
        )
        self.window_started_at = now
        self.window_emitted = 0
        return snapshot
