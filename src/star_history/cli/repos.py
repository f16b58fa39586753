"""Repository registration commands.

The stored repository list is the authoritative job set for scrape runs.
"""

from pathlib import Path

import typer
from rich.table import Table
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from star_history.cli.common import (
    RepoArgument,
    console,
    run_async_command,
    validate_repo,
    validate_repo_list,
)
from star_history.db import (
    Repository,
    RepositoryRepository,
    StarHistoryRepository,
    dispose_engine,
    get_session,
)
from star_history.schemas import (
    RepositoryCreate,
    RepositoryRead,
    StarHistoryRead,
    days_to_star_count,
)

app = typer.Typer(help="Manage tracked repositories")


async def _register(names: list[str]) -> tuple[int, int]:
    created = 0
    async with get_session() as session:
        repo_repository = RepositoryRepository(session)
        for full_name in names:
            new = RepositoryCreate.from_full_name(full_name)
            _repo, was_created = await repo_repository.get_or_create(new.owner, new.name)
            created += int(was_created)
    await dispose_engine()
    return created, len(names) - created


@app.command("add")
def add_repos(
    repos: list[str] = typer.Argument(..., help="Repositories in owner/name format"),
) -> None:
    """Register repositories for scraping.

    Examples:
        ghstars repos add octocat/hello-world torvalds/linux
    """
    names = validate_repo_list(repos)
    created, existing = run_async_command(_register(names), error_prefix="Add failed")
    console.print(f"[green]Added {created}[/green], {existing} already tracked")


@app.command("import")
def import_repos(
    path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="File with one owner/name per line"
    ),
) -> None:
    """Register every repository listed in a text file.

    Blank lines and lines starting with # are ignored.

    Examples:
        ghstars repos import trending.txt
    """
    lines = path.read_text(encoding="utf-8").splitlines()
    entries = [line.strip() for line in lines if line.strip() and not line.lstrip().startswith("#")]
    names = validate_repo_list(entries)
    created, existing = run_async_command(_register(names), error_prefix="Import failed")
    console.print(f"[green]Imported {created}[/green], {existing} already tracked")


@app.command("list")
def list_repos(
    limit: int = typer.Option(50, "--limit", "-n", min=1, help="Maximum rows to show"),
) -> None:
    """List tracked repositories with their stored history size.

    Examples:
        ghstars repos list --limit 20
    """

    async def _list() -> tuple[list[tuple[RepositoryRead, int, str]], int]:
        async with get_session() as session:
            total = await RepositoryRepository(session).count()
            stmt = (
                select(Repository)
                .options(selectinload(Repository.star_history))
                .order_by(Repository.id)
                .limit(limit)
            )
            repos = (await session.execute(stmt)).scalars().all()
            rows = []
            for repo, read in zip(repos, RepositoryRead.from_models(repos), strict=True):
                history = repo.star_history
                points = len(history.history) if history else 0
                saved = f"{history.saved_at:%Y-%m-%d %H:%M}" if history else "-"
                rows.append((read, points, saved))
        await dispose_engine()
        return rows, total

    rows, total = run_async_command(_list(), error_prefix="List failed")

    if not rows:
        console.print("No repositories tracked. Add some with 'ghstars repos add'.")
        return

    table = Table(title=f"Tracked repositories ({total})")
    table.add_column("Repository", style="cyan")
    table.add_column("Active")
    table.add_column("Points", justify="right")
    table.add_column("Saved")
    for repo, points, saved in rows:
        table.add_row(repo.full_name, "yes" if repo.is_active else "no", str(points), saved)
    console.print(table)
    if total > len(rows):
        console.print(f"  ... and {total - len(rows)} more")


@app.command("disable")
def disable_repos(
    repos: list[str] = typer.Argument(..., help="Repositories in owner/name format"),
) -> None:
    """Exclude repositories from future scrape runs (stored history is kept).

    Examples:
        ghstars repos disable octocat/hello-world
    """
    names = validate_repo_list(repos)

    async def _disable() -> list[str]:
        missing: list[str] = []
        async with get_session() as session:
            repo_repository = RepositoryRepository(session)
            for full_name in names:
                repo = await repo_repository.get_by_full_name(full_name)
                if repo is None:
                    missing.append(full_name)
                else:
                    await repo_repository.deactivate(repo.id)
        await dispose_engine()
        return missing

    missing = run_async_command(_disable(), error_prefix="Disable failed")
    console.print(f"[green]Disabled {len(names) - len(missing)}[/green]")
    for full_name in missing:
        console.print(f"  [yellow]Not tracked:[/yellow] {full_name}")


@app.command("show")
def show_repo(
    repo: RepoArgument,
    stars: list[int] = typer.Option(
        [100, 1000],
        "--stars",
        "-s",
        help="Report days taken to reach these star counts",
    ),
) -> None:
    """Show the stored star history of one repository.

    Examples:
        ghstars repos show octocat/hello-world
        ghstars repos show octocat/hello-world -s 500 -s 5000
    """
    owner, name = validate_repo(repo)
    full_name = f"{owner}/{name}"

    async def _load() -> StarHistoryRead | None:
        async with get_session() as session:
            record = await RepositoryRepository(session).get_by_full_name(full_name)
            history = None
            if record is not None:
                history = await StarHistoryRepository(session).get_for_repository(record.id)
            result = StarHistoryRead.from_model(history) if history is not None else None
        await dispose_engine()
        return result

    history = run_async_command(_load(), error_prefix="Show failed")
    if history is None:
        console.print(f"[yellow]No stored history for {full_name}[/yellow]")
        raise typer.Exit(1)

    table = Table(title=f"{full_name} (saved {history.saved_at:%Y-%m-%d %H:%M})")
    table.add_column("Date", style="cyan")
    table.add_column("Stars", justify="right")
    for sample in sorted(history.history, key=lambda s: s.date):
        table.add_row(sample.date, f"{sample.count:,}")
    console.print(table)

    for target in stars:
        days = days_to_star_count(history.history, target)
        reached = f"{days} days" if days is not None else "not reached"
        console.print(f"  {target:,} stars: {reached}")
