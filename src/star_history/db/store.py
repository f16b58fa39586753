"""Storage facade used by the scraping engine.

The engine needs only two things from storage: resolving repository
names to ids, and persisting a series for an id. Each call runs in its
own short-lived session so a result is committed as soon as it exists.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from contextlib import AbstractAsyncContextManager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from star_history.logging import get_logger
from star_history.schemas.star_history import StarSample

from .engine import check_connection, get_engine, get_session_factory, session_scope
from .repositories import RepositoryRepository, StarHistoryRepository

logger = get_logger(__name__)


class HistoryStore:
    """Resolves repository ids and persists star histories.

    Usage:
        store = HistoryStore()
        ids = await store.resolve_ids(["octocat/hello-world"])
        await store.persist(ids["octocat/hello-world"], samples)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        engine: AsyncEngine | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            session_factory: Session factory (defaults to the application's)
            engine: Engine behind the factory, disposed on release()
        """
        self._session_factory = session_factory
        self._engine = engine

    @property
    def engine(self) -> AsyncEngine:
        return self._engine or get_engine()

    def _session(self) -> AbstractAsyncContextManager[AsyncSession]:
        return session_scope(self._session_factory or get_session_factory())

    async def list_full_names(self) -> list[str]:
        """Authoritative set of repository names for the checkpoint."""
        async with self._session() as session:
            return await RepositoryRepository(session).list_full_names()

    async def resolve_ids(self, full_names: Iterable[str]) -> dict[str, int]:
        """Look up repository ids by name; unknown and disabled names are omitted."""
        async with self._session() as session:
            return await RepositoryRepository(session).map_ids_by_full_name(
                full_names, active_only=True
            )

    async def persist(self, repository_id: int, samples: Sequence[StarSample]) -> None:
        """Replace and commit the stored series for ``repository_id``."""
        async with self._session() as session:
            await StarHistoryRepository(session).save_history(repository_id, samples)

    async def load(self, repository_id: int) -> list[StarSample]:
        async with self._session() as session:
            return await StarHistoryRepository(session).get_samples(repository_id)

    async def release(self) -> None:
        """Close pooled connections ahead of a long wait."""
        await self.engine.dispose()
        logger.debug("Database connections released")

    async def reacquire(self) -> None:
        """Verify the database is reachable again.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If no connection can be opened
        """
        await check_connection(self.engine)
        logger.debug("Database connection verified")
