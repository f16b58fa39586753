"""Pydantic schemas for Star History DB.

This module provides input validation and output serialization models.
"""

from .base import SchemaBase
from .github_api import (
    GitHubRepositorySummary,
    GitHubStargazer,
    GitHubUser,
    StargazerPage,
)
from .repository import RepositoryCreate, RepositoryRead, parse_repo_string
from .star_history import (
    StarHistoryRead,
    StarSample,
    days_to_star_count,
    merge_series,
    to_day,
)

__all__ = [
    # Base
    "SchemaBase",
    # GitHub API
    "GitHubRepositorySummary",
    "GitHubStargazer",
    "GitHubUser",
    "StargazerPage",
    # Repository
    "RepositoryCreate",
    "RepositoryRead",
    "parse_repo_string",
    # Star history
    "StarHistoryRead",
    "StarSample",
    "days_to_star_count",
    "merge_series",
    "to_day",
]
