"""Request pacing for long scraping runs.

This module provides:
- RetryExecutor: bounded retries with governor-driven waits on 403
- BatchPlan / estimate_batch: advisory hour-sized batch sizing
- ProgressTracker: observable run progress
"""

from .batch import BatchPlan, create_batches, estimate_batch
from .progress import ProgressCallback, ProgressState, ProgressTracker, ProgressUpdate
from .retry import RetryExecutor

__all__ = [
    "BatchPlan",
    "ProgressCallback",
    "ProgressState",
    "ProgressTracker",
    "ProgressUpdate",
    "RetryExecutor",
    "create_batches",
    "estimate_batch",
]
