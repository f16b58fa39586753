"""Fixtures for CLI tests: a file database and a fake GitHub client."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from star_history.cli.app import app
from star_history.logging import reset_logging
from tests.factories import FakeCliClient


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point the app at a temporary database and disable pacing delays."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("SCHEDULER__INTER_CALL_DELAY_SECONDS", "0")
    monkeypatch.setenv("SCHEDULER__START_DELAY_SECONDS", "0")
    monkeypatch.setenv("SCHEDULER__CHECKPOINT_DIR", str(tmp_path / "checkpoint"))
    monkeypatch.setenv("ALLOWLIST__ENABLED", "false")
    yield tmp_path
    reset_logging()


@pytest.fixture
def fake_client():
    client = FakeCliClient()
    with (
        patch("star_history.cli.scrape.GitHubClient", return_value=client),
        patch("star_history.cli.github.GitHubClient", return_value=client),
    ):
        yield client


@pytest.fixture
def initialized_db(cli_env, runner: CliRunner):
    result = runner.invoke(app, ["init-db"])
    assert result.exit_code == 0, result.output
    return cli_env
