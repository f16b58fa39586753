"""Test fixtures for Star History DB."""

from .github_responses import (
    GITHUB_REPO_RESPONSE,
    GITHUB_STARGAZER_RESPONSE,
    make_link_header,
    make_stargazer_json,
)
from .rate_limit_responses import (
    HEADERS_EXHAUSTED,
    HEADERS_HEALTHY,
    RATE_LIMIT_RESPONSE_EXHAUSTED,
    RATE_LIMIT_RESPONSE_HEALTHY,
    RATE_LIMIT_RESPONSE_UNAUTHENTICATED,
    make_rate_limit_headers,
)

__all__ = [
    # Mock GitHub API responses
    "GITHUB_REPO_RESPONSE",
    "GITHUB_STARGAZER_RESPONSE",
    "make_link_header",
    "make_stargazer_json",
    # Rate limit responses
    "HEADERS_EXHAUSTED",
    "HEADERS_HEALTHY",
    "RATE_LIMIT_RESPONSE_EXHAUSTED",
    "RATE_LIMIT_RESPONSE_HEALTHY",
    "RATE_LIMIT_RESPONSE_UNAUTHENTICATED",
    "make_rate_limit_headers",
]
