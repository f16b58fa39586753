"""Rate limit governor for the star history scraper.

The governor is consulted in two places:
- by the RetryExecutor after a 403, to decide how long to sleep
- by the BatchScheduler before each hour-sized batch, to wait out an
  exhausted quota instead of discovering it through a 403

Snapshots are fetched fresh for every decision and never cached.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from star_history.config import GovernorConfig, get_settings
from star_history.github.exceptions import GitHubClientError, RateLimitWaitError
from star_history.github.pacing.batch import BatchPlan, estimate_batch

from .schemas import RateLimitSnapshot

if TYPE_CHECKING:
    from star_history.github.client import GitHubClient

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class ConnectionHolder(Protocol):
    """A resource that can be released during a long wait."""

    async def release(self) -> None: ...

    async def reacquire(self) -> None: ...


class WaitKind(StrEnum):
    """Wait policy chosen by the governor."""

    LONG = "long"  # quota exhausted, wait for the window to reset
    SHORT = "short"  # quota remains or is unknown, brief fixed pause


@dataclass(frozen=True)
class WaitDecision:
    """Outcome of RateLimitGovernor.decide()."""

    kind: WaitKind
    seconds: float
    reason: str


class RateLimitGovernor:
    """Decides whether to proceed, sleep, or escalate on quota pressure.

    Usage:
        governor = RateLimitGovernor(client, store=history_store)

        snapshot = await governor.snapshot()
        decision = governor.decide(snapshot)
        await governor.wait(decision)
    """

    def __init__(
        self,
        client: GitHubClient,
        config: GovernorConfig | None = None,
        *,
        store: ConnectionHolder | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the governor.

        Args:
            client: GitHub client used for /rate_limit snapshots
            config: Governor configuration (uses settings if not provided)
            store: Optional connection holder released during long waits
            sleep: Awaitable sleep function, injectable for tests
        """
        self._client = client
        self._config = config or get_settings().governor
        self._store = store
        self._sleep = sleep

    @property
    def config(self) -> GovernorConfig:
        return self._config

    async def snapshot(self) -> RateLimitSnapshot | None:
        """Fetch the current quota, or None when it cannot be read."""
        try:
            return await self._client.get_rate_limit()
        except GitHubClientError as e:
            logger.warning("Could not read rate limit, treating quota as scarce: %s", e)
            return None

    @staticmethod
    def time_until_reset(snapshot: RateLimitSnapshot) -> float:
        """Seconds from now until the quota window resets (never negative)."""
        delta = snapshot.reset_at - datetime.now(UTC)
        return max(0.0, delta.total_seconds())

    def decide(self, snapshot: RateLimitSnapshot | None) -> WaitDecision:
        """Choose a wait policy for the given snapshot.

        Exhausted quota waits for the reset plus a safety margin. Anything
        else (quota remaining, or unknown) is a short fixed pause covering
        transient 403s such as abuse detection.
        """
        if snapshot is None:
            return WaitDecision(
                WaitKind.SHORT,
                self._config.short_wait_seconds,
                "rate limit unknown",
            )

        if snapshot.is_exhausted:
            seconds = self.time_until_reset(snapshot) + self._config.reset_safety_margin_seconds
            return WaitDecision(
                WaitKind.LONG,
                seconds,
                f"quota exhausted ({snapshot.used}/{snapshot.limit} used)",
            )

        return WaitDecision(
            WaitKind.SHORT,
            self._config.short_wait_seconds,
            f"forbidden with {snapshot.remaining} calls remaining",
        )

    async def wait(self, decision: WaitDecision) -> None:
        """Sleep for a decision, releasing the store connection on long waits.

        Raises:
            RateLimitWaitError: If the connection cannot be re-established
        """
        store = self._store
        if decision.seconds <= self._config.release_connection_after_seconds:
            store = None

        logger.info(
            "Waiting %.0fs (%s wait: %s)",
            decision.seconds,
            decision.kind.value,
            decision.reason,
        )

        if store is None:
            await self._sleep(decision.seconds)
            return

        logger.info("Releasing database connection during long wait")
        await store.release()
        await self._sleep(decision.seconds)
        try:
            await store.reacquire()
        except Exception as e:
            raise RateLimitWaitError(
                f"Could not re-establish database connection after wait: {e}"
            ) from e
        logger.info("Database connection re-established")

    async def wait_for_quota(self) -> WaitDecision:
        """Snapshot, decide and wait; used after a 403."""
        snapshot = await self.snapshot()
        if snapshot is not None:
            logger.info(
                "Rate limit: %d/%d used, %d remaining, resets at %s",
                snapshot.used,
                snapshot.limit,
                snapshot.remaining,
                snapshot.reset_at.isoformat(),
            )
        decision = self.decide(snapshot)
        await self.wait(decision)
        return decision

    async def ensure_budget(self, needed_calls: int) -> WaitDecision | None:
        """Pre-emptively wait if the next batch cannot fit in the quota.

        Args:
            needed_calls: Calls the upcoming batch is expected to consume

        Returns:
            The wait performed, or None when the batch may start right away
        """
        snapshot = await self.snapshot()
        if snapshot is None:
            decision = self.decide(None)
            await self.wait(decision)
            return decision

        required = min(needed_calls + self._config.min_remaining_calls, snapshot.limit)
        if not snapshot.is_exhausted and snapshot.remaining >= required:
            logger.info(
                "Quota ok for next batch: %d remaining, %d needed",
                snapshot.remaining,
                needed_calls,
            )
            return None

        seconds = self.time_until_reset(snapshot) + self._config.reset_safety_margin_seconds
        decision = WaitDecision(
            WaitKind.LONG,
            seconds,
            f"{snapshot.remaining} calls remaining, {needed_calls} needed",
        )
        await self.wait(decision)
        return decision

    def estimate_batch(self, total_items: int) -> BatchPlan:
        """Advisory batch sizing from the configured call budget."""
        return estimate_batch(
            total_items,
            self._config.max_api_calls_per_hour,
            self._config.estimated_calls_per_repo,
        )
