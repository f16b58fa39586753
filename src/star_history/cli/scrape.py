"""Star history scraping commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from star_history.checkpoint import CheckpointCorruptionError, CheckpointStore
from star_history.cli.common import (
    DryRunOption,
    LimitOption,
    MaxRequestsOption,
    OutputFormat,
    OutputFormatOption,
    RepoArgument,
    console,
    format_duration,
    run_async_command,
    validate_repo,
)
from star_history.config import Settings, get_settings
from star_history.db import HistoryStore, RepositoryRepository, dispose_engine, get_session
from star_history.db.allowlist import AllowlistManager
from star_history.github import (
    BatchScheduler,
    GitHubClient,
    HistoryAssembler,
    ProgressTracker,
    RateLimitGovernor,
    RetryExecutor,
    RunResult,
    SamplingPlanner,
    estimate_batch,
)
from star_history.github.pacing import ProgressUpdate
from star_history.schemas import StarSample, merge_series

app = typer.Typer(help="Reconstruct star histories from GitHub")

CheckpointDirOption = Annotated[
    Path | None,
    typer.Option(
        "--checkpoint-dir",
        help="Directory for remaining/completed/failed logs (default from settings)",
    ),
]


def _build_assembler(
    client: GitHubClient,
    settings: Settings,
    *,
    store: HistoryStore | None = None,
    max_requests: int | None = None,
) -> tuple[RateLimitGovernor, HistoryAssembler]:
    """Wire governor, retry executor and planner around one client."""
    sampling = settings.sampling
    if max_requests is not None:
        sampling = sampling.model_copy(update={"max_request_amount": max_requests})

    governor = RateLimitGovernor(client, settings.governor, store=store)
    executor = RetryExecutor(governor)
    assembler = HistoryAssembler(client, executor, SamplingPlanner(sampling))
    return governor, assembler


def _progress_bar(tracker: ProgressTracker, *, enabled: bool) -> Progress:
    """Transient bar fed by the tracker; disabled for JSON output and non-terminals."""
    progress = Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(bar_width=40),
        TaskProgressColumn(),
        TimeRemainingColumn(),
        console=console,
        transient=True,
        disable=not enabled or not console.is_terminal,
    )
    task = progress.add_task("Scraping", total=None)

    def _update(update: ProgressUpdate) -> None:
        progress.update(
            task,
            total=update.total or None,
            completed=update.processed,
            description=update.describe(),
        )

    tracker.on_progress(_update)
    return progress


def _print_summary(result: RunResult) -> None:
    label = "Dry run" if result.dry_run else "Run"
    state = "interrupted" if result.interrupted else "complete"
    console.print(f"\n[bold]{label} {state}[/bold] in {format_duration(result.duration_seconds)}")
    console.print(f"  [green]Successful:[/green] {result.success_count}")
    console.print(f"  [red]Failed:[/red]     {result.failure_count}")
    console.print(f"  [yellow]Skipped:[/yellow]    {result.skipped_count}")
    if result.failed:
        console.print("\n[bold]Failed repositories[/bold] (retried on the next run):")
        for name, error in list(result.failed.items())[:20]:
            console.print(f"  - {name}: {error}")
        if len(result.failed) > 20:
            console.print(f"  ... and {len(result.failed) - 20} more")


@app.command("run")
def run_scrape(
    limit: LimitOption = None,
    dry_run: DryRunOption = False,
    reset_checkpoint: bool = typer.Option(
        False,
        "--reset-checkpoint",
        help="Discard existing checkpoint logs and start from every stored repository",
    ),
    checkpoint_dir: CheckpointDirOption = None,
    max_requests: MaxRequestsOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Scrape star histories for every stored repository, resuming from the checkpoint.

    Examples:
        ghstars scrape run
        ghstars scrape run --limit 50 --dry-run
        ghstars scrape run --reset-checkpoint
    """

    async def _run() -> RunResult:
        settings = get_settings()
        checkpoint = CheckpointStore(checkpoint_dir or settings.scheduler.checkpoint_dir)
        if reset_checkpoint:
            checkpoint.reset()

        store = HistoryStore()
        tracker = ProgressTracker(name="star history run")
        progress_bar = _progress_bar(tracker, enabled=output_format == OutputFormat.TEXT)
        async with GitHubClient() as client:
            governor, assembler = _build_assembler(
                client, settings, store=store, max_requests=max_requests
            )
            scheduler = BatchScheduler(
                assembler,
                governor,
                store,
                checkpoint,
                settings.scheduler,
                dry_run=dry_run,
                progress=tracker,
            )
            # The IP is added only once every cleanup hook is registered
            allowlist: AllowlistManager | None = None
            if settings.allowlist.enabled:
                allowlist = AllowlistManager(settings.allowlist)
                scheduler.add_shutdown_hook(allowlist.remove_all_added)
                scheduler.add_shutdown_hook(allowlist.aclose)
            scheduler.add_shutdown_hook(dispose_engine)
            scheduler.install_signal_handlers()

            try:
                if allowlist is not None:
                    await allowlist.add_current_ip()
                with progress_bar:
                    return await scheduler.run(limit=limit)
            except CheckpointCorruptionError as e:
                console.print(f"[red]Error:[/red] {e}")
                console.print("Re-run with --reset-checkpoint to start over.")
                raise typer.Exit(1) from None
            except asyncio.CancelledError:
                _print_summary(scheduler.result)
                raise
            finally:
                await scheduler.shutdown()

    result = run_async_command(_run(), error_prefix="Scrape failed")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result.to_dict()))
    else:
        _print_summary(result)


@app.command("estimate")
def estimate(
    checkpoint_dir: CheckpointDirOption = None,
) -> None:
    """Show batch sizing and worst-case duration without calling GitHub.

    Examples:
        ghstars scrape estimate
    """

    async def _estimate() -> tuple[int, int]:
        settings = get_settings()
        checkpoint = CheckpointStore(checkpoint_dir or settings.scheduler.checkpoint_dir)
        authoritative = await HistoryStore().list_full_names()
        checkpoint.load()
        pending, _new = checkpoint.pending(authoritative)
        await dispose_engine()
        return len(authoritative), len(pending)

    total, pending = run_async_command(_estimate(), error_prefix="Estimate failed")

    governor_config = get_settings().governor
    plan = estimate_batch(
        pending,
        governor_config.max_api_calls_per_hour,
        governor_config.estimated_calls_per_repo,
    )

    table = Table(title="Scrape Estimate")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Stored repositories", str(total))
    table.add_row("Pending repositories", str(pending))
    table.add_row("Repositories per batch (hour)", str(plan.items_per_hour))
    table.add_row("Batches", str(plan.total_batches))
    table.add_row(
        "Estimated API calls",
        str(plan.estimated_calls(governor_config.estimated_calls_per_repo)),
    )
    table.add_row("Worst-case duration", format_duration(plan.estimated_duration.total_seconds()))
    console.print(table)

    if plan.total_batches:
        sizes = ", ".join(str(size) for size in plan.items_per_batch[:10])
        more = " ..." if plan.total_batches > 10 else ""
        console.print(f"Batch sizes: [{sizes}{more}]")


@app.command("repo")
def scrape_repo(
    repo: RepoArgument,
    save: bool = typer.Option(
        False,
        "--save",
        help="Store the series (registers the repository if needed)",
    ),
    merge: bool = typer.Option(
        False,
        "--merge",
        help="With --save, merge into the stored series instead of replacing it",
    ),
    max_requests: MaxRequestsOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Reconstruct and print the star history of one repository.

    Examples:
        ghstars scrape repo octocat/hello-world
        ghstars scrape repo octocat/hello-world --save --format json
        ghstars scrape repo octocat/hello-world --save --merge
    """
    owner, name = validate_repo(repo)
    full_name = f"{owner}/{name}"

    async def _fetch() -> list[StarSample]:
        settings = get_settings()
        async with GitHubClient() as client:
            _governor, assembler = _build_assembler(client, settings, max_requests=max_requests)
            samples = await assembler.fetch_history(full_name)

        if save:
            async with get_session() as session:
                repository, _created = await RepositoryRepository(session).get_or_create(
                    owner, name
                )
                repository_id = repository.id
            store = HistoryStore()
            if merge:
                samples = merge_series(await store.load(repository_id), samples)
            await store.persist(repository_id, samples)
            await dispose_engine()
        return samples

    samples = run_async_command(_fetch(), error_prefix=f"Failed to fetch {full_name}")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([s.model_dump() for s in samples]))
        return

    table = Table(title=f"Star history of {full_name}")
    table.add_column("Date", style="cyan")
    table.add_column("Stars", justify="right")
    for sample in samples:
        table.add_row(sample.date, f"{sample.count:,}")
    console.print(table)
    if save:
        console.print(f"[green]Saved {len(samples)} points for {full_name}[/green]")
