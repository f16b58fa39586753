"""ghstars command line entry point.

    ghstars repos add octocat/hello-world     register repositories
    ghstars scrape run                        scrape everything pending
    ghstars github rate-limit                 check the token's quota
"""

from pathlib import Path
from typing import Annotated

import typer
from sqlalchemy.engine import make_url

from star_history import __version__
from star_history.cli import github as github_cmd
from star_history.cli import repos as repos_cmd
from star_history.cli import scrape as scrape_cmd
from star_history.cli.common import console, run_async_command
from star_history.config import get_settings
from star_history.db import create_tables, dispose_engine
from star_history.logging import setup_logging

app = typer.Typer(
    name="ghstars",
    help="Reconstruct and store GitHub star histories under API rate limits.",
    add_completion=False,
    no_args_is_help=True,
)

app.add_typer(repos_cmd.app, name="repos")
app.add_typer(scrape_cmd.app, name="scrape")
app.add_typer(github_cmd.app, name="github")


def _show_version(value: bool) -> None:
    if value:
        console.print(f"ghstars {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version", callback=_show_version, is_eager=True, help="Show version and exit."
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log at DEBUG level.")
    ] = False,
    quiet: Annotated[
        bool, typer.Option("--quiet", "-q", help="Log warnings and errors only.")
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Also write a rotating DEBUG log here (overrides LOGGING__LOG_FILE).",
        ),
    ] = None,
) -> None:
    """Approximate star curves for many GitHub repositories."""
    settings = get_settings()
    log_config = settings.logging
    if log_file is not None:
        log_config = log_config.model_copy(update={"log_file": str(log_file)})
    setup_logging(settings.log_level, verbose=verbose, quiet=quiet, config=log_config)


@app.command("init-db")
def init_db() -> None:
    """Create the database tables if they do not exist.

    Managed deployments should run the alembic migration instead.
    """

    async def _init() -> None:
        await create_tables()
        await dispose_engine()

    run_async_command(_init(), error_prefix="Database setup failed")
    url = make_url(get_settings().database_url)
    console.print(f"[green]Database ready:[/green] {url.render_as_string(hide_password=True)}")


if __name__ == "__main__":
    app()
