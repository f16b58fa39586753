"""GitHub client exceptions."""

from datetime import datetime


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class GitHubAuthenticationError(GitHubClientError):
    """Raised when authentication fails (401) or no token is configured."""

    pass


class GitHubRetryableError(GitHubClientError):
    """Base class for errors the retry executor may retry.

    Only subclasses of this exception are handed to the rate limit
    governor; everything else propagates on the first failure.
    """

    pass


class GitHubForbiddenError(GitHubRetryableError):
    """Raised on HTTP 403 while quota remains (abuse detection, secondary limits)."""

    status_code = 403


class GitHubRateLimitError(GitHubForbiddenError):
    """Raised when the primary rate limit is exhausted (403 with remaining=0)."""

    def __init__(self, message: str, reset_at: datetime | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class GitHubNotFoundError(GitHubClientError):
    """Raised when a repository does not exist or has no stargazers."""

    pass


class GitHubTransportError(GitHubClientError):
    """Raised on network failures, timeouts and 5xx responses.

    These are never routed through the rate limit governor.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitWaitError(Exception):
    """Raised when a governor-mandated wait cannot complete safely.

    Fatal for the whole run: resuming silently could double-charge quota.
    """

    pass
