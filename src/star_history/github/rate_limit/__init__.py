"""Rate limit governance for GitHub API.

This module provides:
- RateLimitSnapshot: point-in-time quota state
- RateLimitGovernor: proceed / wait / escalate decisions
- TokenInfo: PAT detection from the quota ceiling
"""

from .governor import ConnectionHolder, RateLimitGovernor, WaitDecision, WaitKind
from .schemas import RateLimitSnapshot, RateLimitStatus, TokenInfo

__all__ = [
    "ConnectionHolder",
    "RateLimitGovernor",
    "RateLimitSnapshot",
    "RateLimitStatus",
    "TokenInfo",
    "WaitDecision",
    "WaitKind",
]
