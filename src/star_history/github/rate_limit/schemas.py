"""Pydantic schemas for GitHub API rate limit data.

A snapshot is read either from:
- GET /rate_limit (the ``resources.core`` pool)
- x-ratelimit-* response headers
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, Field, computed_field


class RateLimitStatus(StrEnum):
    """Rate limit health status.

    Defaults:
    - HEALTHY: > 50% remaining
    - WARNING: 20-50% remaining
    - CRITICAL: below 20% remaining
    - EXHAUSTED: 0 remaining
    """

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    EXHAUSTED = "exhausted"


class RateLimitSnapshot(BaseModel):
    """Point-in-time read of the core quota.

    Never cached beyond a single governor decision.
    """

    limit: int = Field(ge=0, description="Maximum requests allowed per hour")
    used: int = Field(ge=0, description="Requests used in current window")
    remaining: int = Field(ge=0, description="Requests remaining in current window")
    reset_at: datetime = Field(description="UTC datetime when the window resets")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When this snapshot was taken",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def reset_epoch_seconds(self) -> int:
        """Reset time as a Unix timestamp, as GitHub reports it."""
        return int(self.reset_at.timestamp())

    @property
    def is_exhausted(self) -> bool:
        """True when no calls remain in the current window."""
        return self.remaining == 0 or self.used >= self.limit

    @property
    def remaining_percent(self) -> float:
        """Percentage of the quota remaining (0.0 to 100.0)."""
        if self.limit == 0:
            return 0.0
        return (self.remaining / self.limit) * 100

    @property
    def seconds_until_reset(self) -> int:
        """Seconds until the window resets (0 if already past)."""
        delta = self.reset_at - datetime.now(UTC)
        return max(0, int(delta.total_seconds()))

    def get_status(
        self,
        healthy_threshold: float = 50.0,
        warning_threshold: float = 20.0,
    ) -> RateLimitStatus:
        """Classify the quota into a health bucket."""
        if self.remaining == 0:
            return RateLimitStatus.EXHAUSTED
        if self.remaining_percent >= healthy_threshold:
            return RateLimitStatus.HEALTHY
        if self.remaining_percent >= warning_threshold:
            return RateLimitStatus.WARNING
        return RateLimitStatus.CRITICAL

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Self:
        """Parse from the GitHub /rate_limit API response.

        Args:
            data: Raw response dict; ``resources.core`` is preferred and the
                deprecated top-level ``rate`` object is used as a fallback.

        Raises:
            KeyError: If neither section is present
        """
        core = data.get("resources", {}).get("core") or data["rate"]
        return cls(
            limit=core["limit"],
            used=core["used"],
            remaining=core["remaining"],
            reset_at=datetime.fromtimestamp(core["reset"], tz=UTC),
        )

    @classmethod
    def from_response_headers(cls, headers: dict[str, str]) -> Self | None:
        """Parse from x-ratelimit-* response headers.

        Returns:
            Snapshot, or None when the response carried no quota headers
        """
        lowered = {k.lower(): v for k, v in headers.items()}
        if "x-ratelimit-remaining" not in lowered:
            return None

        limit = int(lowered.get("x-ratelimit-limit", "5000"))
        remaining = int(lowered["x-ratelimit-remaining"])
        used = int(lowered.get("x-ratelimit-used", str(max(0, limit - remaining))))
        reset_ts = int(lowered.get("x-ratelimit-reset", "0"))
        reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts > 0 else datetime.now(UTC)

        return cls(limit=limit, used=used, remaining=remaining, reset_at=reset_at)


class TokenInfo(BaseModel):
    """Information about the GitHub token in use.

    Authenticated Personal Access Tokens get 5000 requests/hour,
    unauthenticated access gets 60.
    """

    is_authenticated: bool = Field(description="Whether the token is authenticated")
    rate_limit: int = Field(description="Rate limit (5000=PAT, 60=unauthenticated)")
    token_type: str = Field(description="Token type description")

    @property
    def is_pat(self) -> bool:
        return self.rate_limit >= 5000

    @classmethod
    def from_rate_limit(cls, limit: int) -> Self:
        is_authenticated = limit >= 5000
        return cls(
            is_authenticated=is_authenticated,
            rate_limit=limit,
            token_type="PAT" if is_authenticated else "unauthenticated",
        )
