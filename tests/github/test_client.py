"""Tests for GitHubClient.

Tests cover:
- Token handling
- Stargazer page fetch (media type, Link header, invalid entries)
- Star total and rate limit reads
- Error translation to the client exception hierarchy
- Passive quota tracking from response headers
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from githubkit.exception import GitHubException, RequestFailed

from star_history.github.client import STAR_MEDIA_TYPE, GitHubClient
from star_history.github.exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubForbiddenError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubRetryableError,
    GitHubTransportError,
)
from tests.fixtures.github_responses import (
    GITHUB_REPO_RESPONSE,
    GITHUB_STARGAZER_RESPONSE,
    make_link_header,
)
from tests.fixtures.rate_limit_responses import (
    HEADERS_EXHAUSTED,
    HEADERS_HEALTHY,
    RATE_LIMIT_RESPONSE_HEALTHY,
)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def make_request_failed(status_code: int, headers: dict[str, str] | None = None) -> RequestFailed:
    """Create a githubkit RequestFailed with the given status."""
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.headers = httpx.Headers(headers or {})
    return RequestFailed(mock_response)


# -----------------------------------------------------------------------------
# Test Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_github():
    """Create a mock githubkit GitHub client."""
    with patch("star_history.github.client.GitHub") as mock_class:
        mock_instance = MagicMock()
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def client(mock_github) -> GitHubClient:
    return GitHubClient(token="test-token")


# -----------------------------------------------------------------------------
# Test: Initialization
# -----------------------------------------------------------------------------
class TestGitHubClientInit:
    """Tests for GitHubClient initialization."""

    def test_init_with_token(self) -> None:
        with patch("star_history.github.client.get_settings") as mock_settings:
            mock_settings.return_value.github_token = ""
            client = GitHubClient(token="test-token")
            assert client._token == "test-token"

    def test_init_from_settings(self) -> None:
        with patch("star_history.github.client.get_settings") as mock_settings:
            mock_settings.return_value.github_token = "env-token"
            assert GitHubClient()._token == "env-token"

    def test_init_without_token_raises(self) -> None:
        with patch("star_history.github.client.get_settings") as mock_settings:
            mock_settings.return_value.github_token = ""
            with pytest.raises(GitHubAuthenticationError):
                GitHubClient(token=None)

    def test_githubkit_retry_disabled(self) -> None:
        with patch("star_history.github.client.GitHub") as mock_class:
            client = GitHubClient(token="test-token")
            _ = client._github
            mock_class.assert_called_once_with("test-token", auto_retry=False)

    async def test_context_manager(self, client: GitHubClient) -> None:
        async with client as entered:
            assert entered is client


# -----------------------------------------------------------------------------
# Test: Stargazers
# -----------------------------------------------------------------------------
class TestGetStargazersPage:
    """Tests for get_stargazers_page()."""

    async def test_parses_page(self, client: GitHubClient, mock_github) -> None:
        link = make_link_header("octocat/hello-world", 1, 42)
        mock_github.arequest = AsyncMock(
            return_value=httpx.Response(
                200,
                json=GITHUB_STARGAZER_RESPONSE,
                headers={"link": link, **HEADERS_HEALTHY},
            )
        )

        page = await client.get_stargazers_page("octocat/hello-world", 1)

        assert page.page == 1
        assert len(page.stargazers) == 3
        assert page.stargazers[0].user is not None
        assert page.stargazers[0].user.login == "user0"
        assert page.link_header == link

    async def test_request_shape(self, client: GitHubClient, mock_github) -> None:
        mock_github.arequest = AsyncMock(return_value=httpx.Response(200, json=[]))

        await client.get_stargazers_page("octocat/hello-world", 7, per_page=50)

        args, kwargs = mock_github.arequest.call_args
        assert args == ("GET", "/repos/octocat/hello-world/stargazers")
        assert kwargs["params"] == {"per_page": 50, "page": 7}
        assert kwargs["headers"]["Accept"] == STAR_MEDIA_TYPE
        assert client.request_count == 1

    async def test_entries_without_timestamp_are_dropped(
        self, client: GitHubClient, mock_github
    ) -> None:
        payload = [*GITHUB_STARGAZER_RESPONSE, {"login": "plain-user", "id": 9}]
        mock_github.arequest = AsyncMock(return_value=httpx.Response(200, json=payload))

        page = await client.get_stargazers_page("octocat/hello-world", 1)

        assert len(page.stargazers) == 3

    async def test_missing_link_header(self, client: GitHubClient, mock_github) -> None:
        mock_github.arequest = AsyncMock(return_value=httpx.Response(200, json=[]))

        page = await client.get_stargazers_page("octocat/hello-world", 1)

        assert page.link_header == ""
        assert page.stargazers == []

    async def test_invalid_repo_name(self, client: GitHubClient) -> None:
        with pytest.raises(ValueError):
            await client.get_stargazers_page("not-a-repo", 1)

    async def test_tracks_rate_limit_headers(self, client: GitHubClient, mock_github) -> None:
        mock_github.arequest = AsyncMock(
            return_value=httpx.Response(200, json=[], headers=HEADERS_HEALTHY)
        )

        await client.get_stargazers_page("octocat/hello-world", 1)

        assert client.last_rate_limit is not None
        assert client.last_rate_limit.remaining == 4500


class TestGetStargazersCount:
    """Tests for get_stargazers_count()."""

    async def test_returns_total(self, client: GitHubClient, mock_github) -> None:
        mock_github.arequest = AsyncMock(
            return_value=httpx.Response(200, json=GITHUB_REPO_RESPONSE)
        )

        assert await client.get_stargazers_count("octocat/hello-world") == 1523
        args, _kwargs = mock_github.arequest.call_args
        assert args == ("GET", "/repos/octocat/hello-world")

    async def test_not_found(self, client: GitHubClient, mock_github) -> None:
        mock_github.arequest = AsyncMock(side_effect=make_request_failed(404))

        with pytest.raises(GitHubNotFoundError):
            await client.get_stargazers_count("octocat/missing")


class TestGetRateLimit:
    """Tests for get_rate_limit()."""

    async def test_parses_core_pool(self, client: GitHubClient, mock_github) -> None:
        mock_response = MagicMock()
        mock_response.parsed_data.model_dump.return_value = RATE_LIMIT_RESPONSE_HEALTHY
        mock_github.rest.rate_limit.async_get = AsyncMock(return_value=mock_response)

        snapshot = await client.get_rate_limit()

        assert snapshot.limit == 5000
        assert snapshot.remaining == 4500

    async def test_transport_failure(self, client: GitHubClient, mock_github) -> None:
        mock_github.rest.rate_limit.async_get = AsyncMock(
            side_effect=GitHubException("connection reset")
        )

        with pytest.raises(GitHubTransportError):
            await client.get_rate_limit()


# -----------------------------------------------------------------------------
# Test: Error translation
# -----------------------------------------------------------------------------
class TestHandleError:
    """Tests for _handle_error()."""

    def test_401(self, client: GitHubClient) -> None:
        result = client._handle_error(make_request_failed(401))
        assert isinstance(result, GitHubAuthenticationError)

    def test_403_quota_exhausted(self, client: GitHubClient) -> None:
        result = client._handle_error(make_request_failed(403, HEADERS_EXHAUSTED))

        assert isinstance(result, GitHubRateLimitError)
        assert result.reset_at is not None
        assert client.last_rate_limit is not None
        assert client.last_rate_limit.is_exhausted

    def test_403_with_quota_remaining(self, client: GitHubClient) -> None:
        result = client._handle_error(make_request_failed(403, HEADERS_HEALTHY))

        assert isinstance(result, GitHubForbiddenError)
        assert not isinstance(result, GitHubRateLimitError)
        assert isinstance(result, GitHubRetryableError)

    def test_429_is_forbidden(self, client: GitHubClient) -> None:
        result = client._handle_error(make_request_failed(429))
        assert isinstance(result, GitHubForbiddenError)

    def test_404(self, client: GitHubClient) -> None:
        result = client._handle_error(make_request_failed(404))
        assert isinstance(result, GitHubNotFoundError)

    def test_5xx_is_transport(self, client: GitHubClient) -> None:
        result = client._handle_error(make_request_failed(502))

        assert isinstance(result, GitHubTransportError)
        assert result.status_code == 502

    def test_other_status(self, client: GitHubClient) -> None:
        result = client._handle_error(make_request_failed(422))

        assert type(result) is GitHubClientError

    async def test_network_failure_is_transport(self, client: GitHubClient, mock_github) -> None:
        mock_github.arequest = AsyncMock(side_effect=GitHubException("timed out"))

        with pytest.raises(GitHubTransportError):
            await client.get_stargazers_page("octocat/hello-world", 1)
