"""Hour-sized batch planning for long scraping runs.

Sizing is advisory: it drives operator-facing ETAs and the points at
which the scheduler re-checks quota. Actual pacing is enforced by the
rate limit governor, never by the plan.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class BatchPlan:
    """Batch sizes derived from a call budget."""

    items_per_hour: int
    items_per_batch: list[int] = field(default_factory=list)

    @property
    def total_batches(self) -> int:
        return len(self.items_per_batch)

    @property
    def total_items(self) -> int:
        return sum(self.items_per_batch)

    def estimated_calls(self, calls_per_item: int) -> int:
        """Worst-case API calls for the whole plan."""
        return self.total_items * calls_per_item

    @property
    def estimated_duration(self) -> timedelta:
        """Worst-case wall time, one hour per batch."""
        return timedelta(hours=self.total_batches)


def estimate_batch(
    total_items: int,
    max_calls_per_hour: int,
    estimated_calls_per_item: int,
) -> BatchPlan:
    """Partition ``total_items`` into hour-sized batches.

    Example:
        >>> estimate_batch(250, 4000, 40).items_per_batch
        [100, 100, 50]

    Args:
        total_items: Number of items to process
        max_calls_per_hour: Call budget per hour
        estimated_calls_per_item: Expected calls consumed by one item

    Raises:
        ValueError: If a budget value is not positive
    """
    if max_calls_per_hour <= 0 or estimated_calls_per_item <= 0:
        raise ValueError("Call budget values must be positive")

    # At least one item per hour, even with a tiny budget
    items_per_hour = max(1, max_calls_per_hour // estimated_calls_per_item)

    sizes: list[int] = []
    left = max(0, total_items)
    while left > 0:
        size = min(items_per_hour, left)
        sizes.append(size)
        left -= size

    return BatchPlan(items_per_hour=items_per_hour, items_per_batch=sizes)


def create_batches(items: Sequence[T], plan: BatchPlan) -> list[list[T]]:
    """Split ``items`` following the sizes in ``plan``.

    Items beyond the plan's total are appended as a final batch.
    """
    batches: list[list[T]] = []
    start = 0
    for size in plan.items_per_batch:
        chunk = list(items[start : start + size])
        if chunk:
            batches.append(chunk)
        start += size
    if start < len(items):
        batches.append(list(items[start:]))
    return batches
