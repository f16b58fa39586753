"""Tests for SQLAlchemy models."""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from star_history.db.models import Repository, StarHistory
from tests.factories import make_repository, make_star_history


class TestRepositoryModel:
    async def test_defaults(self, db_session):
        repo = make_repository(db_session)
        await db_session.flush()

        assert repo.is_active is True
        assert repr(repo) == "<Repository octocat/hello-world>"

    async def test_full_name_unique(self, db_session):
        make_repository(db_session)
        make_repository(db_session)

        with pytest.raises(IntegrityError):
            await db_session.flush()

    def test_is_active_index_matches_migration(self):
        names = {index.name for index in Repository.__table__.indexes}

        assert "ix_repositories_is_active" in names


class TestStarHistoryModel:
    async def test_one_history_per_repository(self, db_session):
        repo = make_repository(db_session)
        make_star_history(db_session, repo)
        await db_session.flush()

        db_session.add(StarHistory(repository_id=repo.id, history=[]))
        with pytest.raises(IntegrityError):
            await db_session.flush()

    async def test_json_round_trip(self, db_session):
        repo = make_repository(db_session)
        history = [{"date": "2024-01-01", "count": 1}, {"date": "2024-01-05", "count": 10}]
        make_star_history(db_session, repo, history=history)
        await db_session.flush()
        repo_id = repo.id
        db_session.expire_all()

        stored = await db_session.scalar(
            select(StarHistory).where(StarHistory.repository_id == repo_id)
        )

        assert stored is not None
        assert stored.history == history

    async def test_deleting_repository_removes_history(self, db_session):
        repo = make_repository(db_session)
        make_star_history(db_session, repo)
        await db_session.flush()

        await db_session.delete(repo)
        await db_session.flush()

        assert await db_session.scalar(select(StarHistory)) is None
        assert await db_session.scalar(select(Repository)) is None
