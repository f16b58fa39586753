"""Repository for GitHub Repository model CRUD operations."""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from star_history.db.models import Repository

from .base import BaseRepository


class RepositoryRepository(BaseRepository[Repository]):
    """Repository for tracked GitHub repositories."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Repository)

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    async def get_by_full_name(self, full_name: str) -> Repository | None:
        """Get a repository by its full name (owner/name)."""
        return await self._one_where(Repository.full_name == full_name)

    async def list_full_names(self, *, active_only: bool = True) -> list[str]:
        """All repository names, in insertion order.

        This is the authoritative job list for scraping runs.
        """
        stmt = select(Repository.full_name).order_by(Repository.id)
        if active_only:
            stmt = stmt.where(Repository.is_active.is_(True))
        return await self._scalars(stmt)

    async def map_ids_by_full_name(
        self, full_names: Iterable[str], *, active_only: bool = False
    ) -> dict[str, int]:
        """Resolve names to ids in one query; unknown names are absent.

        Args:
            full_names: Repository names in owner/name format
            active_only: Treat disabled repositories as unknown

        Returns:
            Mapping of full_name to repository id
        """
        names = list(dict.fromkeys(full_names))
        if not names:
            return {}
        stmt = select(Repository.full_name, Repository.id).where(
            Repository.full_name.in_(names)
        )
        if active_only:
            stmt = stmt.where(Repository.is_active.is_(True))
        result = await self._session.execute(stmt)
        return {full_name: repo_id for full_name, repo_id in result.all()}

    # -------------------------------------------------------------------------
    # Create/Update Methods
    # -------------------------------------------------------------------------

    async def create(self, owner: str, name: str, *, is_active: bool = True) -> Repository:
        """Create a new repository (flushed, not committed)."""
        repo = Repository(
            owner=owner,
            name=name,
            full_name=f"{owner}/{name}",
            is_active=is_active,
        )
        self.add(repo)
        await self.flush()
        return repo

    async def get_or_create(self, owner: str, name: str) -> tuple[Repository, bool]:
        """Get existing repository or create a new one.

        Returns:
            Tuple of (repository, created) where created is True if new
        """
        existing = await self.get_by_full_name(f"{owner}/{name}")
        if existing is not None:
            return existing, False
        return await self.create(owner, name), True

    async def deactivate(self, repository_id: int) -> Repository | None:
        """Exclude a repository from future runs."""
        repo = await self.get_by_id(repository_id)
        if repo is None:
            return None
        repo.is_active = False
        await self.flush()
        return repo
