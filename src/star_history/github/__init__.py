"""GitHub API access and star history engine.

This module provides:
- GitHubClient: async client for stargazer, repository and quota endpoints
- RateLimitGovernor: proceed / wait / escalate decisions on quota pressure
- RetryExecutor: bounded retries driven by the governor
- HistoryAssembler / BatchScheduler: single-repository and batch runs
"""

from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubForbiddenError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubRetryableError,
    GitHubTransportError,
    RateLimitWaitError,
)
from .client import GitHubClient
from .history import (
    BatchScheduler,
    HistoryAssembler,
    RepoScrapeJob,
    RunResult,
    SamplingPlan,
    SamplingPlanner,
    parse_last_page,
)
from .pacing import BatchPlan, ProgressTracker, RetryExecutor, estimate_batch
from .rate_limit import (
    RateLimitGovernor,
    RateLimitSnapshot,
    RateLimitStatus,
    TokenInfo,
    WaitDecision,
    WaitKind,
)

__all__ = [
    # Client
    "GitHubClient",
    # Exceptions
    "GitHubAuthenticationError",
    "GitHubClientError",
    "GitHubForbiddenError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubRetryableError",
    "GitHubTransportError",
    "RateLimitWaitError",
    # Rate limits
    "RateLimitGovernor",
    "RateLimitSnapshot",
    "RateLimitStatus",
    "TokenInfo",
    "WaitDecision",
    "WaitKind",
    # Pacing
    "BatchPlan",
    "ProgressTracker",
    "RetryExecutor",
    "estimate_batch",
    # History
    "BatchScheduler",
    "HistoryAssembler",
    "RepoScrapeJob",
    "RunResult",
    "SamplingPlan",
    "SamplingPlanner",
    "parse_last_page",
]
