"""Page selection and point extraction for star history sampling.

A repository with N stargazer pages is reconstructed from at most
``max_request_amount`` pages (plus the dense early pages):

FULL     N < max_request_amount: every page is fetched and one point is
         emitted every floor(total / max_request_amount) stars.
SAMPLED  otherwise: the first ``early_pages`` pages are fetched for dense
         early coverage and the rest of the range is spread evenly. Each
         spread page contributes one approximate point.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum

from star_history.config import SamplingConfig, get_settings
from star_history.schemas.github_api import GitHubStargazer
from star_history.schemas.star_history import to_day


class SamplingStrategy(StrEnum):
    """How a plan's pages are turned into points."""

    FULL = "full"
    SAMPLED = "sampled"


@dataclass(frozen=True)
class SamplingPlan:
    """Pages to fetch for one repository. Consumed once, then discarded."""

    page_count: int
    request_pages: tuple[int, ...]
    strategy: SamplingStrategy

    def __len__(self) -> int:
        return len(self.request_pages)


def round_half_up(value: float) -> int:
    """Round .5 upwards, unlike Python's banker's rounding."""
    return math.floor(value + 0.5)


class SamplingPlanner:
    """Plans page requests and assembles fetched pages into date/count points."""

    def __init__(self, config: SamplingConfig | None = None) -> None:
        self._config = config or get_settings().sampling

    @property
    def config(self) -> SamplingConfig:
        return self._config

    def plan(self, page_count: int) -> SamplingPlan:
        """Choose the pages to fetch for a repository with ``page_count`` pages."""
        page_count = max(1, page_count)
        budget = self._config.max_request_amount

        if page_count < budget:
            return SamplingPlan(
                page_count=page_count,
                request_pages=tuple(range(1, page_count + 1)),
                strategy=SamplingStrategy.FULL,
            )

        early = [p for p in range(1, self._config.early_pages + 1) if p <= page_count]
        pages = set(early)

        start = self._config.early_pages + 1
        span = page_count - start + 1
        for i in range(1, budget + 1):
            page = max(start, round_half_up(start + i * span / budget))
            if page <= page_count:
                pages.add(page)

        return SamplingPlan(
            page_count=page_count,
            request_pages=tuple(sorted(pages)),
            strategy=SamplingStrategy.SAMPLED,
        )

    def is_dense_position(self, position: int) -> bool:
        """Whether the star at 1-based ``position`` gets its own point on early pages."""
        limit = self._config.dense_early_limit
        if position <= limit:
            return (
                position == 1
                or position == limit
                or position % self._config.dense_early_step == 0
            )
        return position % self._config.dense_late_step == 0

    def assemble(
        self,
        plan: SamplingPlan,
        pages: Mapping[int, Sequence[GitHubStargazer]],
    ) -> dict[str, int]:
        """Convert fetched pages into a date-keyed point map.

        Later points overwrite earlier ones on the same day. Insertion order
        follows the plan's page order, so the result is date-ordered up to
        the approximation error at page boundaries.

        Args:
            plan: The plan the pages were fetched for
            pages: Stargazers per fetched page number (missing pages are skipped)
        """
        if plan.strategy is SamplingStrategy.FULL:
            return self._assemble_full(plan, pages)
        return self._assemble_sampled(plan, pages)

    def _assemble_full(
        self,
        plan: SamplingPlan,
        pages: Mapping[int, Sequence[GitHubStargazer]],
    ) -> dict[str, int]:
        stars = [s for page in plan.request_pages for s in pages.get(page, ())]
        step = len(stars) // self._config.max_request_amount or 1

        points: dict[str, int] = {}
        for index in range(0, len(stars), step):
            points[to_day(stars[index].starred_at)] = index + 1
        return points

    def _assemble_sampled(
        self,
        plan: SamplingPlan,
        pages: Mapping[int, Sequence[GitHubStargazer]],
    ) -> dict[str, int]:
        per_page = self._config.per_page
        points: dict[str, int] = {}

        for page in plan.request_pages:
            stars = pages.get(page)
            if not stars:
                continue

            base = per_page * (page - 1)
            if page <= self._config.early_pages:
                for offset, star in enumerate(stars):
                    position = base + offset + 1
                    if self.is_dense_position(position):
                        points[to_day(star.starred_at)] = position
            else:
                # Approximate: the first star on page p is star number 100*(p-1)
                points[to_day(stars[0].starred_at)] = base

        return points
