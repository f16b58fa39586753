"""Mock GitHub API responses for stargazer endpoints.

Stargazer entries follow the application/vnd.github.v3.star+json media
type, which wraps each user with its starred_at timestamp.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

BASE_STAR_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


def make_stargazer_json(index: int, starred_at: datetime | None = None) -> dict[str, Any]:
    """One stargazer entry; defaults to one star per day from BASE_STAR_TIME."""
    starred_at = starred_at or BASE_STAR_TIME + timedelta(days=index)
    return {
        "starred_at": starred_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "user": {
            "login": f"user{index}",
            "id": 1000 + index,
            "type": "User",
            "site_admin": False,
        },
    }


def make_link_header(full_name: str, page: int, last: int, per_page: int = 100) -> str:
    """Link header for ``page`` of ``last``; empty for a single page."""
    if last <= 1:
        return ""
    base = f"https://api.github.com/repositories/{full_name}/stargazers?per_page={per_page}"
    links = []
    if page > 1:
        links.append(f'<{base}&page={page - 1}>; rel="prev"')
    if page < last:
        links.append(f'<{base}&page={page + 1}>; rel="next"')
        links.append(f'<{base}&page={last}>; rel="last"')
    if page > 1:
        links.append(f'<{base}&page=1>; rel="first"')
    return ", ".join(links)


GITHUB_STARGAZER_RESPONSE = [make_stargazer_json(i) for i in range(3)]

GITHUB_REPO_RESPONSE = {
    "id": 1296269,
    "name": "hello-world",
    "full_name": "octocat/hello-world",
    "private": False,
    "stargazers_count": 1523,
    "watchers_count": 1523,
    "forks_count": 210,
}
