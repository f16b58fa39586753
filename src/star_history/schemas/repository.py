"""Pydantic schemas for Repository model."""

import re
from datetime import datetime

from pydantic import Field

from .base import SchemaBase

_REPO_PART = re.compile(r"^[A-Za-z0-9_.-]+$")


def parse_repo_string(repo: str) -> tuple[str, str]:
    """Split an ``owner/name`` string into its parts.

    Args:
        repo: Repository in owner/name format

    Returns:
        Tuple of (owner, name)

    Raises:
        ValueError: If the string is not exactly two valid path segments
    """
    parts = repo.strip().split("/")
    if len(parts) != 2 or not all(_REPO_PART.match(p) for p in parts):
        raise ValueError(f"Invalid repository '{repo}', expected owner/name")
    return parts[0], parts[1]


class RepositoryCreate(SchemaBase):
    """Schema for creating a new repository."""

    owner: str = Field(max_length=100, description="GitHub org or user (e.g., 'octocat')")
    name: str = Field(max_length=100, description="Repository name (e.g., 'hello-world')")
    full_name: str = Field(
        max_length=200,
        description="Full repository path (e.g., 'octocat/hello-world')",
    )

    @classmethod
    def from_full_name(cls, full_name: str) -> "RepositoryCreate":
        """Create from a full repository name like 'octocat/hello-world'."""
        owner, name = parse_repo_string(full_name)
        return cls(owner=owner, name=name, full_name=f"{owner}/{name}")


class RepositoryRead(SchemaBase):
    """Schema for reading repository data."""

    id: int
    owner: str
    name: str
    full_name: str
    is_active: bool
    created_at: datetime
