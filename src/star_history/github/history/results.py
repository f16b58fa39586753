"""Result objects for scraping runs.

Structured results provide consistent interfaces for the end-of-run
summary, JSON output and tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RepoScrapeJob:
    """One unit of work: a repository name and its storage id.

    The id is resolved once per run and never inferred locally.
    """

    full_name: str
    internal_id: int


@dataclass
class RunResult:
    """Outcome of one BatchScheduler run."""

    successful: list[str] = field(default_factory=list)
    """Repositories whose history was fetched (and saved, unless dry run)."""

    failed: dict[str, str] = field(default_factory=dict)
    """Failed repositories mapped to their error message."""

    skipped: list[str] = field(default_factory=list)
    """Names that did not resolve to a stored repository."""

    points: dict[str, int] = field(default_factory=dict)
    """Number of history points per successful repository."""

    total_batches: int = 0
    interrupted: bool = False
    dry_run: bool = False
    duration_seconds: float = 0.0

    @property
    def success_count(self) -> int:
        return len(self.successful)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def processed_count(self) -> int:
        return self.success_count + self.failure_count

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "summary": {
                "successful": self.success_count,
                "failed": self.failure_count,
                "skipped": self.skipped_count,
                "total_batches": self.total_batches,
                "interrupted": self.interrupted,
                "dry_run": self.dry_run,
                "duration_seconds": round(self.duration_seconds, 2),
            },
            "successful": list(self.successful),
            "failed": dict(self.failed),
            "skipped": list(self.skipped),
        }
