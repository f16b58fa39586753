"""Unit tests for RateLimitGovernor."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from star_history.config import GovernorConfig
from star_history.github.exceptions import (
    GitHubTransportError,
    RateLimitWaitError,
)
from star_history.github.rate_limit.governor import (
    RateLimitGovernor,
    WaitDecision,
    WaitKind,
)
from tests.factories import make_snapshot


def make_client(snapshot=None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    if error is not None:
        client.get_rate_limit = AsyncMock(side_effect=error)
    else:
        client.get_rate_limit = AsyncMock(return_value=snapshot or make_snapshot())
    return client


def make_governor(client=None, *, store=None, **config) -> tuple[RateLimitGovernor, AsyncMock]:
    sleep = AsyncMock()
    governor = RateLimitGovernor(
        client or make_client(),
        GovernorConfig(**config),
        store=store,
        sleep=sleep,
    )
    return governor, sleep


class TestSnapshot:
    """Tests for snapshot()."""

    async def test_returns_fresh_snapshot(self) -> None:
        client = make_client(make_snapshot(remaining=1234))
        governor, _ = make_governor(client)

        first = await governor.snapshot()
        await governor.snapshot()

        assert first is not None
        assert first.remaining == 1234
        # Never cached
        assert client.get_rate_limit.await_count == 2

    async def test_unknown_on_client_error(self) -> None:
        governor, _ = make_governor(make_client(error=GitHubTransportError("dns")))

        assert await governor.snapshot() is None


class TestDecide:
    """Tests for decide()."""

    def test_exhausted_waits_for_reset_plus_margin(self) -> None:
        governor, _ = make_governor()
        snapshot = make_snapshot(remaining=0, reset_in=600)

        decision = governor.decide(snapshot)

        assert decision.kind is WaitKind.LONG
        assert 605 <= decision.seconds <= 610

    def test_used_at_limit_counts_as_exhausted(self) -> None:
        governor, _ = make_governor()
        snapshot = make_snapshot(limit=5000, remaining=5, used=5000, reset_in=60)

        assert governor.decide(snapshot).kind is WaitKind.LONG

    def test_reset_in_past_waits_margin_only(self) -> None:
        governor, _ = make_governor(reset_safety_margin_seconds=10)
        snapshot = make_snapshot(remaining=0, reset_in=-30)

        assert governor.decide(snapshot).seconds == 10

    def test_quota_remaining_is_short_wait(self) -> None:
        governor, _ = make_governor()

        decision = governor.decide(make_snapshot(remaining=3000))

        assert decision == WaitDecision(WaitKind.SHORT, 5.0, decision.reason)

    def test_unknown_is_short_wait(self) -> None:
        governor, _ = make_governor(short_wait_seconds=7)

        decision = governor.decide(None)

        assert decision.kind is WaitKind.SHORT
        assert decision.seconds == 7


class TestWait:
    """Tests for wait() and connection release."""

    async def test_short_wait_keeps_connection(self) -> None:
        store = MagicMock(release=AsyncMock(), reacquire=AsyncMock())
        governor, sleep = make_governor(store=store)

        await governor.wait(WaitDecision(WaitKind.SHORT, 5.0, "test"))

        sleep.assert_awaited_once_with(5.0)
        store.release.assert_not_awaited()

    async def test_long_wait_releases_and_reacquires(self) -> None:
        store = MagicMock(release=AsyncMock(), reacquire=AsyncMock())
        governor, sleep = make_governor(store=store)

        await governor.wait(WaitDecision(WaitKind.LONG, 1800.0, "test"))

        store.release.assert_awaited_once()
        sleep.assert_awaited_once_with(1800.0)
        store.reacquire.assert_awaited_once()

    async def test_failed_reacquire_is_fatal(self) -> None:
        store = MagicMock(
            release=AsyncMock(),
            reacquire=AsyncMock(side_effect=OSError("connection refused")),
        )
        governor, _ = make_governor(store=store)

        with pytest.raises(RateLimitWaitError):
            await governor.wait(WaitDecision(WaitKind.LONG, 1800.0, "test"))

    async def test_wait_for_quota_snapshots_decides_and_sleeps(self) -> None:
        governor, sleep = make_governor(make_client(make_snapshot(remaining=0, reset_in=100)))

        decision = await governor.wait_for_quota()

        assert decision.kind is WaitKind.LONG
        sleep.assert_awaited_once()


class TestEnsureBudget:
    """Tests for ensure_budget()."""

    async def test_enough_quota_proceeds(self) -> None:
        governor, sleep = make_governor(make_client(make_snapshot(remaining=4500)))

        assert await governor.ensure_budget(4000) is None
        sleep.assert_not_awaited()

    async def test_insufficient_quota_waits_for_reset(self) -> None:
        governor, sleep = make_governor(make_client(make_snapshot(remaining=500, reset_in=900)))

        decision = await governor.ensure_budget(4000)

        assert decision is not None
        assert decision.kind is WaitKind.LONG
        sleep.assert_awaited_once()

    async def test_requirement_capped_at_limit(self) -> None:
        """A batch larger than the hourly limit still starts on a full window."""
        governor, _ = make_governor(
            make_client(make_snapshot(limit=5000, remaining=5000, used=0))
        )

        assert await governor.ensure_budget(8000) is None

    async def test_unknown_quota_short_waits(self) -> None:
        governor, sleep = make_governor(make_client(error=GitHubTransportError("dns")))

        decision = await governor.ensure_budget(100)

        assert decision is not None
        assert decision.kind is WaitKind.SHORT


class TestEstimateBatch:
    def test_uses_configured_budget(self) -> None:
        governor, _ = make_governor(max_api_calls_per_hour=4000, estimated_calls_per_repo=40)

        plan = governor.estimate_batch(250)

        assert plan.items_per_hour == 100
        assert plan.items_per_batch == [100, 100, 50]
