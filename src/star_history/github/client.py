"""Async GitHub API client wrapper using githubkit.

This module provides a typed async interface to the three GitHub REST
endpoints the star history engine consumes:

- GET /repos/{owner}/{repo}/stargazers (star media type, per-star timestamps)
- GET /repos/{owner}/{repo} (authoritative star total)
- GET /rate_limit (quota snapshot, free of charge)
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from githubkit import GitHub
from githubkit.exception import GitHubException, RequestFailed
from pydantic import ValidationError

from star_history.config import get_settings
from star_history.logging import get_logger
from star_history.schemas.github_api import (
    GitHubRepositorySummary,
    GitHubStargazer,
    StargazerPage,
)
from star_history.schemas.repository import parse_repo_string

from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubForbiddenError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubTransportError,
)
from .rate_limit.schemas import RateLimitSnapshot

logger = get_logger(__name__)

STAR_MEDIA_TYPE = "application/vnd.github.v3.star+json"
API_VERSION = "2022-11-28"


class GitHubClient:
    """Async GitHub API client for stargazer data retrieval.

    Usage:
        async with GitHubClient() as client:
            page = await client.get_stargazers_page("octocat/hello-world", 1)
            total = await client.get_stargazers_count("octocat/hello-world")

    githubkit's own retry on rate limits is disabled; retries are owned by
    the RetryExecutor so that every wait goes through the governor.
    """

    def __init__(self, token: str | None = None) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub PAT. If not provided, uses GITHUB_TOKEN from settings.

        Raises:
            GitHubAuthenticationError: If no token is available.
        """
        self._token = token or get_settings().github_token
        if not self._token:
            raise GitHubAuthenticationError(
                "GitHub token required. Set GITHUB_TOKEN environment variable."
            )
        self._client: GitHub[Any] | None = None
        self._last_rate_limit: RateLimitSnapshot | None = None
        self.request_count = 0

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance."""
        if self._client is None:
            self._client = GitHub(self._token, auto_retry=False)
        return self._client

    @property
    def last_rate_limit(self) -> RateLimitSnapshot | None:
        """Quota as reported by the most recent response headers."""
        return self._last_rate_limit

    def _track_headers(self, response: Any) -> None:
        headers = getattr(response, "headers", None)
        if headers is None:
            return
        snapshot = RateLimitSnapshot.from_response_headers(dict(headers.items()))
        if snapshot is not None:
            self._last_rate_limit = snapshot

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client = None

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    async def _get(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        accept: str = STAR_MEDIA_TYPE,
    ) -> Any:
        """Issue one GET request and translate failures."""
        self.request_count += 1
        try:
            resp = await self._github.arequest(
                "GET",
                url,
                params=params,
                headers={"Accept": accept, "X-GitHub-Api-Version": API_VERSION},
            )
        except RequestFailed as e:
            raise self._handle_error(e) from e
        except GitHubException as e:
            raise GitHubTransportError(f"Request to {url} failed: {e}") from e
        self._track_headers(resp)
        return resp

    # -------------------------------------------------------------------------
    # Rate Limit Info
    # -------------------------------------------------------------------------
    async def get_rate_limit(self) -> RateLimitSnapshot:
        """Get the current core quota (does not count against the limit)."""
        try:
            resp = await self._github.rest.rate_limit.async_get()
        except RequestFailed as e:
            raise self._handle_error(e) from e
        except GitHubException as e:
            raise GitHubTransportError(f"Rate limit request failed: {e}") from e
        return RateLimitSnapshot.from_api_response(resp.parsed_data.model_dump())

    # -------------------------------------------------------------------------
    # Stargazer Methods
    # -------------------------------------------------------------------------
    async def get_stargazers_page(
        self,
        full_name: str,
        page: int,
        *,
        per_page: int = 100,
    ) -> StargazerPage:
        """Fetch one page of stargazers with their starred_at timestamps.

        Args:
            full_name: Repository in owner/name format
            page: 1-based page number
            per_page: Results per page (max 100)

        Returns:
            StargazerPage with the parsed entries and the raw Link header

        Raises:
            GitHubNotFoundError: If the repository doesn't exist
        """
        owner, name = parse_repo_string(full_name)
        resp = await self._get(
            f"/repos/{owner}/{name}/stargazers",
            params={"per_page": per_page, "page": page},
        )

        stargazers: list[GitHubStargazer] = []
        for item in resp.json() or []:
            try:
                stargazers.append(GitHubStargazer.model_validate(item))
            except ValidationError:
                # Entries without starred_at carry no history
                continue

        return StargazerPage(
            page=page,
            stargazers=stargazers,
            link_header=resp.headers.get("link", ""),
        )

    async def get_stargazers_count(self, full_name: str) -> int:
        """Fetch the exact current star total for a repository.

        Raises:
            GitHubNotFoundError: If the repository doesn't exist
        """
        owner, name = parse_repo_string(full_name)
        resp = await self._get(f"/repos/{owner}/{name}")
        return GitHubRepositorySummary.model_validate(resp.json()).stargazers_count

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(self, error: RequestFailed) -> GitHubClientError:
        """Convert githubkit exceptions to our custom exceptions."""
        # Error responses still carry quota headers
        self._track_headers(error.response)

        status = error.response.status_code

        if status == 401:
            return GitHubAuthenticationError("Invalid GitHub token")
        elif status in (403, 429):
            headers = error.response.headers
            if headers.get("x-ratelimit-remaining") == "0":
                reset_ts = int(headers.get("x-ratelimit-reset", "0"))
                reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else None
                return GitHubRateLimitError(
                    "GitHub rate limit exceeded",
                    reset_at=reset_at,
                )
            return GitHubForbiddenError(f"Access forbidden: {error}")
        elif status == 404:
            return GitHubNotFoundError(str(error))
        elif status >= 500:
            return GitHubTransportError(f"GitHub server error ({status}): {error}", status)
        else:
            return GitHubClientError(f"GitHub API error ({status}): {error}")
