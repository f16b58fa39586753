"""Database module for Star History DB."""

from star_history.db.engine import (
    check_connection,
    create_tables,
    dispose_engine,
    get_engine,
    get_session,
    get_session_factory,
    session_scope,
)
from star_history.db.models import Base, Repository, StarHistory
from star_history.db.repositories import (
    BaseRepository,
    RepositoryRepository,
    StarHistoryRepository,
)
from star_history.db.store import HistoryStore

__all__ = [
    # Models
    "Base",
    "Repository",
    "StarHistory",
    # Engine
    "check_connection",
    "create_tables",
    "dispose_engine",
    "get_engine",
    "get_session",
    "get_session_factory",
    "session_scope",
    # Repositories
    "BaseRepository",
    "RepositoryRepository",
    "StarHistoryRepository",
    # Facade
    "HistoryStore",
]
