"""Tests for repository schemas."""

import pytest

from star_history.schemas import RepositoryCreate, RepositoryRead, parse_repo_string
from tests.factories import make_repository


class TestParseRepoString:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("octocat/hello-world", ("octocat", "hello-world")),
            ("  psf/requests  ", ("psf", "requests")),
            ("prebid/Prebid.js", ("prebid", "Prebid.js")),
            ("under_score/dot.name", ("under_score", "dot.name")),
        ],
    )
    def test_valid(self, value: str, expected: tuple[str, str]) -> None:
        assert parse_repo_string(value) == expected

    @pytest.mark.parametrize(
        "value",
        ["", "octocat", "octocat/", "/repo", "a/b/c", "has space/repo", "owner/na!me"],
    )
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError):
            parse_repo_string(value)


class TestRepositorySchemas:
    def test_create_from_full_name(self) -> None:
        schema = RepositoryCreate.from_full_name("octocat/hello-world")

        assert (schema.owner, schema.name, schema.full_name) == (
            "octocat",
            "hello-world",
            "octocat/hello-world",
        )

    async def test_read_from_orm(self, db_session) -> None:
        repo = make_repository(db_session)
        await db_session.flush()
        await db_session.refresh(repo)

        schema = RepositoryRead.from_model(repo)

        assert schema.full_name == "octocat/hello-world"
        assert schema.is_active is True
