"""Repository pattern implementation for database access."""

from .base import BaseRepository
from .repository import RepositoryRepository
from .star_history import StarHistoryRepository

__all__ = [
    "BaseRepository",
    "RepositoryRepository",
    "StarHistoryRepository",
]
