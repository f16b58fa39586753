"""Pydantic schemas for parsing GitHub API responses.

Stargazer objects only carry ``starred_at`` when the request is made with
the ``application/vnd.github.v3.star+json`` media type.
See: https://docs.github.com/en/rest/activity/starring
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class GitHubUser(BaseModel):
    """GitHub user object from API responses."""

    login: str = Field(description="GitHub username")
    id: int = Field(description="GitHub user ID")


class GitHubStargazer(BaseModel):
    """One entry of GET /repos/{owner}/{repo}/stargazers (star media type)."""

    model_config = ConfigDict(extra="ignore")

    starred_at: datetime = Field(description="When the star was given (UTC)")
    user: GitHubUser | None = Field(default=None, description="User who starred")


class GitHubRepositorySummary(BaseModel):
    """Subset of GET /repos/{owner}/{repo} used for the star total."""

    model_config = ConfigDict(extra="ignore")

    full_name: str = Field(description="owner/name")
    stargazers_count: int = Field(ge=0, description="Current number of stars")


class StargazerPage(BaseModel):
    """One fetched page of stargazers plus its navigation header."""

    page: int = Field(ge=1, description="1-based page number")
    stargazers: list[GitHubStargazer] = Field(default_factory=list)
    link_header: str = Field(default="", description="Raw Link response header")
