"""Per-repository star history reconstruction.

fetch page 1 -> parse last page -> plan -> fetch planned pages
-> assemble points -> fetch exact total -> append today's anchor point
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from star_history.github.exceptions import GitHubNotFoundError
from star_history.logging import bind_repo
from star_history.schemas.github_api import GitHubStargazer, StargazerPage
from star_history.schemas.star_history import StarSample

from .links import parse_last_page
from .sampling import SamplingPlanner

if TYPE_CHECKING:
    from star_history.github.client import GitHubClient
    from star_history.github.pacing.retry import RetryExecutor


def utc_today() -> str:
    return datetime.now(UTC).date().isoformat()


class HistoryAssembler:
    """Builds the approximate star curve for one repository.

    Every GitHub call goes through the RetryExecutor. Planned pages for a
    single repository are fetched concurrently; repositories never are.

    Usage:
        assembler = HistoryAssembler(client, executor)
        samples = await assembler.fetch_history("octocat/hello-world")
    """

    def __init__(
        self,
        client: GitHubClient,
        executor: RetryExecutor,
        planner: SamplingPlanner | None = None,
        *,
        today: Callable[[], str] = utc_today,
    ) -> None:
        self._client = client
        self._executor = executor
        self._planner = planner or SamplingPlanner()
        self._today = today

    @property
    def planner(self) -> SamplingPlanner:
        return self._planner

    async def _fetch_page(self, full_name: str, page: int) -> StargazerPage:
        per_page = self._planner.config.per_page
        return await self._executor.run(
            lambda: self._client.get_stargazers_page(full_name, page, per_page=per_page),
            description=f"{full_name} page {page}",
        )

    async def _fetch_pages(self, full_name: str, pages: list[int]) -> list[StargazerPage]:
        """Fetch ``pages`` concurrently.

        The first failure cancels the sibling fetches and is re-raised once
        they have all finished, so nothing outlives this repository's turn.
        """
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(self._fetch_page(full_name, p)) for p in pages]
        except ExceptionGroup as eg:
            raise eg.exceptions[0] from None
        return [task.result() for task in tasks]

    async def fetch_history(self, full_name: str) -> list[StarSample]:
        """Reconstruct the star history of ``full_name``.

        Returns:
            Points in insertion order, ending with today's exact total

        Raises:
            GitHubNotFoundError: If the repository has no stargazers or doesn't exist
            GitHubClientError: If a fetch still fails after retries
        """
        log = bind_repo(full_name)

        first = await self._fetch_page(full_name, 1)
        page_count = parse_last_page(first.link_header)

        if page_count == 1 and not first.stargazers:
            raise GitHubNotFoundError(f"No stars found for {full_name} or repo doesn't exist")

        plan = self._planner.plan(page_count)
        log.debug(
            "Planned {} of {} pages ({})",
            len(plan),
            page_count,
            plan.strategy.value,
        )

        # Page 1 is already in hand
        pages: dict[int, list[GitHubStargazer]] = {1: first.stargazers}
        pending = [p for p in plan.request_pages if p != 1]
        for page in await self._fetch_pages(full_name, pending):
            pages[page.page] = page.stargazers

        points = self._planner.assemble(plan, pages)

        total = await self._executor.run(
            lambda: self._client.get_stargazers_count(full_name),
            description=f"{full_name} star count",
        )
        today = self._today()
        # The anchor replaces any sampled point for today and always comes last
        points.pop(today, None)
        points[today] = total

        log.debug("Assembled {} points, {} stars today", len(points), total)
        return [StarSample(date=day, count=count) for day, count in points.items()]
