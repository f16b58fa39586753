"""Progress tracking for scraping runs.

The BatchScheduler reports every outcome here; observers (the CLI
progress bar, tests) subscribe with ``on_progress`` and receive an
immutable ProgressUpdate after each change.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class ProgressState(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ProgressUpdate:
    """Point-in-time view of a run."""

    total: int
    successful: int
    failed: int
    skipped: int
    state: ProgressState
    batch: int = 0
    total_batches: int = 0
    current_item: str | None = None
    elapsed_seconds: float = 0.0

    @property
    def processed(self) -> int:
        return self.successful + self.failed + self.skipped

    @property
    def remaining(self) -> int:
        return max(0, self.total - self.processed)

    @property
    def progress_percent(self) -> float:
        if self.total == 0:
            return 100.0
        return (self.processed / self.total) * 100

    @property
    def eta_seconds(self) -> float | None:
        """Seconds left at the average pace so far; None until a repository finishes.

        Skipped names cost nothing and are left out of the average. Batch
        waits are included, so the estimate grows after a quota reset.
        """
        done = self.successful + self.failed
        if done == 0:
            return None
        return (self.elapsed_seconds / done) * self.remaining

    def describe(self) -> str:
        """One-line summary, e.g. ``batch 2/3 | 140/250 | octocat/hello-world``."""
        parts = [f"{self.processed}/{self.total}"]
        if self.total_batches > 1:
            parts.insert(0, f"batch {self.batch}/{self.total_batches}")
        if self.current_item:
            parts.append(self.current_item)
        return " | ".join(parts)


ProgressCallback = Callable[[ProgressUpdate], None]


class ProgressTracker:
    """Counts repository outcomes for one run and notifies observers.

    Usage:
        tracker = ProgressTracker(total=len(jobs))
        tracker.on_progress(lambda u: print(u.describe()))
        tracker.start()
        tracker.set_current("octocat/hello-world")
        tracker.record_success()
        tracker.complete()
    """

    def __init__(self, total: int = 0, name: str = "scrape") -> None:
        self._name = name
        self._total = total
        self._successful = self._failed = self._skipped = 0
        self._batch = self._total_batches = 0
        self._current_item: str | None = None
        self._state = ProgressState.PENDING
        self._started: float | None = None
        self._callbacks: list[ProgressCallback] = []

    @property
    def total(self) -> int:
        return self._total

    @total.setter
    def total(self, value: int) -> None:
        self._total = value
        self._notify()

    @property
    def successful(self) -> int:
        return self._successful

    @property
    def state(self) -> ProgressState:
        return self._state

    @property
    def elapsed_seconds(self) -> float:
        if self._started is None:
            return 0.0
        return time.monotonic() - self._started

    def on_progress(self, callback: ProgressCallback) -> None:
        self._callbacks.append(callback)

    def _notify(self) -> None:
        update = self.get_update()
        for callback in self._callbacks:
            try:
                callback(update)
            except Exception as e:
                # A broken display must not fail the run
                logger.warning("Progress callback error: %s", e)

    def _finish(self, state: ProgressState) -> None:
        self._state = state
        self._current_item = None
        update = self.get_update()
        logger.info(
            "%s %s: %d successful, %d failed, %d skipped of %d in %.1fs",
            self._name,
            state.value,
            update.successful,
            update.failed,
            update.skipped,
            update.total,
            update.elapsed_seconds,
        )
        self._notify()

    def start(self) -> None:
        self._state = ProgressState.IN_PROGRESS
        self._started = time.monotonic()
        logger.info("Started %s (%d repositories)", self._name, self._total)
        self._notify()

    def complete(self) -> None:
        self._finish(ProgressState.COMPLETED)

    def cancel(self) -> None:
        self._finish(ProgressState.CANCELLED)

    def set_batch(self, batch: int, total_batches: int) -> None:
        """Record the 1-based batch now being processed."""
        self._batch, self._total_batches = batch, total_batches
        self._notify()

    def set_current(self, item: str) -> None:
        self._current_item = item
        self._notify()

    def record_success(self) -> None:
        self._successful += 1
        self._current_item = None
        self._notify()

    def record_failure(self, error: str | None = None) -> None:
        self._failed += 1
        self._current_item = None
        if error:
            logger.debug("%s: repository failed: %s", self._name, error)
        self._notify()

    def record_skip(self, count: int = 1) -> None:
        self._skipped += count
        self._notify()

    def get_update(self) -> ProgressUpdate:
        return ProgressUpdate(
            total=self._total,
            successful=self._successful,
            failed=self._failed,
            skipped=self._skipped,
            state=self._state,
            batch=self._batch,
            total_batches=self._total_batches,
            current_item=self._current_item,
            elapsed_seconds=self.elapsed_seconds,
        )
