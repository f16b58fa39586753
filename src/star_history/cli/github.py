"""GitHub API verification commands."""

import typer
from rich.table import Table

from star_history.cli.common import console, format_duration, run_async_command
from star_history.config import get_settings
from star_history.github import GitHubClient, RateLimitStatus, TokenInfo

app = typer.Typer(help="GitHub API commands")


def _get_status_style(status: RateLimitStatus) -> str:
    """Get rich style for status."""
    match status:
        case RateLimitStatus.HEALTHY:
            return "[green]HEALTHY[/green]"
        case RateLimitStatus.WARNING:
            return "[yellow]WARNING[/yellow]"
        case RateLimitStatus.CRITICAL:
            return "[red]CRITICAL[/red]"
        case RateLimitStatus.EXHAUSTED:
            return "[bold red]EXHAUSTED[/bold red]"
        case _:
            return str(status)


@app.command("rate-limit")
def show_rate_limit() -> None:
    """Show current GitHub API quota and token type.

    Examples:
        ghstars github rate-limit
    """

    async def _check() -> None:
        if not get_settings().github_token:
            console.print("[red]Error:[/red] GITHUB_TOKEN not set in environment")
            raise typer.Exit(1)

        async with GitHubClient() as client:
            snapshot = await client.get_rate_limit()

        token = TokenInfo.from_rate_limit(snapshot.limit)
        if token.is_pat:
            console.print("[green]✓[/green] Authenticated with PAT (5,000 requests/hour)")
        else:
            console.print(
                "[yellow]⚠[/yellow] Unauthenticated or limited token "
                f"({snapshot.limit} requests/hour)"
            )

        status = snapshot.get_status()
        table = Table(title="GitHub API Rate Limit (core)")
        table.add_column("Status")
        table.add_column("Remaining", justify="right")
        table.add_column("Used", justify="right")
        table.add_column("Limit", justify="right")
        table.add_column("Resets In", justify="right")
        table.add_row(
            _get_status_style(status),
            str(snapshot.remaining),
            str(snapshot.used),
            str(snapshot.limit),
            format_duration(snapshot.seconds_until_reset),
        )
        console.print()
        console.print(table)
        console.print(f"  Resets at: {snapshot.reset_at:%Y-%m-%d %H:%M:%S UTC}")

        if status == RateLimitStatus.EXHAUSTED:
            console.print(
                f"\n[red]Rate limit exhausted![/red] "
                f"Wait {format_duration(snapshot.seconds_until_reset)} before scraping."
            )
        elif status == RateLimitStatus.CRITICAL:
            console.print(
                "\n[yellow]Recommendation:[/yellow] Rate limit is low. "
                "A scrape run would wait for the reset first."
            )

    run_async_command(_check(), error_prefix="Rate limit check failed")
