"""SQLAlchemy ORM models for Star History DB."""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


# ------------------------------------------------------------------------------
# Repository model
# ------------------------------------------------------------------------------
class Repository(Base):
    """Repository whose star history is tracked.

    The set of active repositories is the authoritative job list for
    scraping runs.
    """

    __tablename__ = "repositories"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner: Mapped[str] = mapped_column(String(100))  # e.g., "octocat"
    name: Mapped[str] = mapped_column(String(100))  # e.g., "hello-world"
    full_name: Mapped[str] = mapped_column(String(200), unique=True)  # "octocat/hello-world"
    is_active: Mapped[bool] = mapped_column(default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    star_history: Mapped["StarHistory | None"] = relationship(
        back_populates="repository",
        cascade="all, delete-orphan",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<Repository {self.full_name}>"


# ------------------------------------------------------------------------------
# StarHistory model
# ------------------------------------------------------------------------------
class StarHistory(Base):
    """Latest reconstructed star curve for one repository.

    ``history`` holds a list of {"date": "YYYY-MM-DD", "count": int}
    points. Each save replaces the whole series.
    """

    __tablename__ = "star_histories"

    id: Mapped[int] = mapped_column(primary_key=True)
    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"),
        unique=True,
    )
    saved_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    history: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    repository: Mapped["Repository"] = relationship(back_populates="star_history")

    def __repr__(self) -> str:
        return f"<StarHistory repo={self.repository_id} points={len(self.history or [])}>"
