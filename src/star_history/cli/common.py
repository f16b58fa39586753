"""Common CLI option factories and helpers.

This module centralizes reusable CLI options and provides:
- `run_async_command`: Unified async execution with error handling for CLI commands
- Repository argument type aliases and validation helpers
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from enum import StrEnum
from typing import Annotated, TypeVar

import typer
from rich.console import Console

from star_history.schemas import parse_repo_string

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")

# Conventional exit status for a run stopped by SIGINT
EXIT_INTERRUPTED = 130


class OutputFormat(StrEnum):
    """Output format for CLI results."""

    TEXT = "text"
    JSON = "json"


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
) -> T:
    """Execute async code from a synchronous CLI command.

    Uses asyncio.run() for clean event loop management. Errors print a
    red message and exit with code 1; interrupts exit with code 130.

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised on error/interrupt
    """
    try:
        return asyncio.run(coro)
    except typer.Exit:
        raise
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("[yellow]Interrupted.[/yellow] Progress saved; run again to resume.")
        raise typer.Exit(EXIT_INTERRUPTED) from None
    except Exception as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(1) from None


# Typer requires function calls as default arguments, which triggers B008.
# Using Annotated with a centralized type alias keeps the noqa in one place.

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
    ),
]

DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        help="Fetch histories without saving them or touching the checkpoint",
    ),
]

LimitOption = Annotated[
    int | None,
    typer.Option(
        "--limit",
        "-n",
        min=1,
        help="Process at most N pending repositories",
    ),
]

MaxRequestsOption = Annotated[
    int | None,
    typer.Option(
        "--max-requests",
        min=1,
        help="Stargazer pages to request per repository (default from settings)",
    ),
]

RepoArgument = Annotated[
    str,
    typer.Argument(
        help="Repository in owner/name format (e.g., octocat/hello-world)",
    ),
]


def validate_repo(repo: str) -> tuple[str, str]:
    """Parse and validate a single repository string.

    Raises:
        typer.Exit(1): If format is invalid
    """
    try:
        return parse_repo_string(repo)
    except ValueError:
        console.print(f"[red]Error:[/red] Repository '{repo}' must be in owner/name format")
        raise typer.Exit(1) from None


def validate_repo_list(repos: list[str]) -> list[str]:
    """Validate several repository strings, normalizing whitespace.

    Raises:
        typer.Exit(1): If any repo format is invalid
    """
    validated: list[str] = []
    for repo in repos:
        owner, name = validate_repo(repo)
        validated.append(f"{owner}/{name}")
    return validated


def format_duration(seconds: float) -> str:
    """Format seconds as human-readable time."""
    seconds = int(seconds)
    if seconds <= 0:
        return "now"
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m"
