"""Repository for StarHistory model operations."""

from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from star_history.db.models import StarHistory
from star_history.schemas.star_history import StarSample

from .base import BaseRepository


class StarHistoryRepository(BaseRepository[StarHistory]):
    """Stores one star series per repository."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, StarHistory)

    async def get_for_repository(self, repository_id: int) -> StarHistory | None:
        return await self._one_where(StarHistory.repository_id == repository_id)

    async def get_samples(self, repository_id: int) -> list[StarSample]:
        """Stored series as StarSample objects (empty if none saved)."""
        record = await self.get_for_repository(repository_id)
        if record is None:
            return []
        return [StarSample.model_validate(point) for point in record.history]

    async def save_history(
        self,
        repository_id: int,
        samples: Sequence[StarSample],
        *,
        saved_at: datetime | None = None,
    ) -> StarHistory:
        """Replace the repository's series (upsert).

        Args:
            repository_id: Repository ID
            samples: Full series to store
            saved_at: Save timestamp (defaults to now, UTC)

        Returns:
            The stored record (flushed, not committed)
        """
        saved_at = saved_at or datetime.now(UTC).replace(tzinfo=None)
        history = [sample.model_dump() for sample in samples]

        record = await self.get_for_repository(repository_id)
        if record is None:
            record = StarHistory(
                repository_id=repository_id,
                saved_at=saved_at,
                history=history,
            )
            self.add(record)
        else:
            record.history = history
            record.saved_at = saved_at

        await self.flush()
        return record
