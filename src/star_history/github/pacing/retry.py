"""Bounded retries for single GitHub calls.

Every call site that talks to GitHub goes through one RetryExecutor.
Two independent policies apply:

- HTTP 403 (quota exhausted or abuse detection): the governor decides
  the wait, up to ``max_retries`` attempts in total.
- Transport failures (network, timeout, 5xx): a small exponential
  backoff, never routed through the governor.

Anything else (404, 401, validation errors) propagates immediately.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from star_history.github.exceptions import GitHubForbiddenError, GitHubTransportError
from star_history.logging import get_logger

if TYPE_CHECKING:
    from star_history.config import GovernorConfig
    from star_history.github.rate_limit.governor import RateLimitGovernor, Sleep

logger = get_logger(__name__)

T = TypeVar("T")

MAX_TRANSPORT_BACKOFF = 60.0


class RetryExecutor:
    """Executes a call with governor-driven retries on 403.

    Usage:
        executor = RetryExecutor(governor)
        page = await executor.run(
            lambda: client.get_stargazers_page("octocat/hello-world", 1),
            description="octocat/hello-world page 1",
        )
    """

    def __init__(
        self,
        governor: RateLimitGovernor,
        config: GovernorConfig | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the executor.

        Args:
            governor: Governor consulted after every 403
            config: Retry configuration (defaults to the governor's)
            sleep: Awaitable sleep used for transport backoff
        """
        self._governor = governor
        self._config = config or governor.config
        self._sleep = sleep

    @property
    def max_retries(self) -> int:
        return self._config.max_retries

    def transport_backoff(self, attempt: int) -> float:
        """Backoff before transport retry ``attempt`` (1-based)."""
        delay = self._config.transport_backoff_seconds * (2 ** (attempt - 1))
        return min(delay, MAX_TRANSPORT_BACKOFF)

    async def run(
        self,
        call: Callable[[], Awaitable[T]],
        *,
        description: str = "request",
    ) -> T:
        """Execute ``call`` until it succeeds or a retry budget runs out.

        Args:
            call: Zero-argument factory returning a fresh awaitable per attempt
            description: Label used in retry log lines

        Returns:
            The call's result

        Raises:
            GitHubForbiddenError: After ``max_retries`` failed attempts
            GitHubTransportError: After ``transport_retries`` extra attempts
            Exception: Any other error, on the first occurrence
        """
        forbidden_attempts = 0
        transport_attempts = 0

        while True:
            try:
                return await call()
            except GitHubForbiddenError as e:
                forbidden_attempts += 1
                if forbidden_attempts >= self._config.max_retries:
                    logger.error(
                        "Giving up on {} after {} attempts: {}",
                        description,
                        forbidden_attempts,
                        e,
                    )
                    raise
                decision = await self._governor.wait_for_quota()
                logger.warning(
                    "Retry attempt {}/{} for {} after {:.0f}s {} wait",
                    forbidden_attempts + 1,
                    self._config.max_retries,
                    description,
                    decision.seconds,
                    decision.kind.value,
                )
            except GitHubTransportError as e:
                transport_attempts += 1
                if transport_attempts > self._config.transport_retries:
                    raise
                delay = self.transport_backoff(transport_attempts)
                logger.warning(
                    "Transport error on {} ({}), retry {}/{} in {:.1f}s",
                    description,
                    e,
                    transport_attempts,
                    self._config.transport_retries,
                    delay,
                )
                await self._sleep(delay)
