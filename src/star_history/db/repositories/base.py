"""Base repository for async SQLAlchemy data access."""

from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from star_history.db.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Session holder with the query helpers shared by concrete repositories.

    Repositories flush but never commit; the caller's session scope owns
    the transaction.
    """

    def __init__(self, session: AsyncSession, model_class: type[ModelT]) -> None:
        self._session = session
        self._model_class = model_class

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def get_by_id(self, id: int) -> ModelT | None:
        return await self._session.get(self._model_class, id)

    async def _one_where(self, *criteria: ColumnElement[bool]) -> ModelT | None:
        """Single row matching all criteria, or None."""
        stmt = select(self._model_class).where(*criteria)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _scalars(self, stmt: Select[Any]) -> list[Any]:
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    def add(self, entity: ModelT) -> ModelT:
        """Add an entity to the session (does not flush)."""
        self._session.add(entity)
        return entity

    async def flush(self) -> None:
        await self._session.flush()

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self._model_class)
        return await self._session.scalar(stmt) or 0
