"""On-disk checkpoint for resumable scraping runs.

Three newline-delimited UTF-8 logs of repository full names live in the
run's checkpoint directory:

    remaining-repos.txt   still to process (rewritten after every outcome)
    completed-repos.txt   appended on success
    failed-repos.txt      appended on failure, re-queued on the next run

The remaining log is deleted once it is empty, which marks a run as
fully complete.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from star_history.logging import get_logger
from star_history.schemas.repository import parse_repo_string

logger = get_logger(__name__)

REMAINING_FILE = "remaining-repos.txt"
COMPLETED_FILE = "completed-repos.txt"
FAILED_FILE = "failed-repos.txt"


class CheckpointCorruptionError(Exception):
    """Raised when a checkpoint log cannot be read back.

    Progress is never dropped silently; the run must be restarted with an
    explicit reset.
    """

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Checkpoint file {path} is unreadable: {reason}")
        self.path = path
        self.reason = reason


@dataclass
class Checkpoint:
    """In-memory view of the three logs."""

    remaining: list[str] = field(default_factory=list)
    completed: set[str] = field(default_factory=set)
    failed: set[str] = field(default_factory=set)

    @property
    def known(self) -> set[str]:
        return set(self.remaining) | self.completed | self.failed


class CheckpointStore:
    """Persists and restores run progress across restarts.

    Usage:
        store = CheckpointStore("./checkpoints")
        to_process = store.prepare(all_repository_names)
        for name in to_process:
            ...
            store.record_success(name)
        store.flush()
    """

    def __init__(self, directory: str | Path = ".") -> None:
        self._directory = Path(directory)
        self._state = Checkpoint()
        self._completed_order: list[str] = []
        self._failed_order: list[str] = []
        self._loaded = False

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def remaining_path(self) -> Path:
        return self._directory / REMAINING_FILE

    @property
    def completed_path(self) -> Path:
        return self._directory / COMPLETED_FILE

    @property
    def failed_path(self) -> Path:
        return self._directory / FAILED_FILE

    @property
    def state(self) -> Checkpoint:
        return self._state

    @property
    def remaining(self) -> list[str]:
        return list(self._state.remaining)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------
    @staticmethod
    def _read_names(path: Path) -> list[str]:
        """Read one log; a missing file is an empty log."""
        if not path.exists():
            return []
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CheckpointCorruptionError(path, f"not valid UTF-8 ({e.reason})") from e
        except OSError as e:
            raise CheckpointCorruptionError(path, str(e)) from e

        names: list[str] = []
        seen: set[str] = set()
        for lineno, raw in enumerate(text.splitlines(), start=1):
            line = raw.strip()
            if not line:
                continue
            try:
                parse_repo_string(line)
            except ValueError as e:
                raise CheckpointCorruptionError(path, f"line {lineno}: {e}") from e
            if line not in seen:
                seen.add(line)
                names.append(line)
        return names

    def load(self) -> Checkpoint:
        """Load all three logs.

        A name found in completed wins over the other logs; overlap can only
        come from an interrupt between an append and the remaining rewrite.

        Raises:
            CheckpointCorruptionError: If any log is unreadable
        """
        completed = self._read_names(self.completed_path)
        failed = [n for n in self._read_names(self.failed_path) if n not in completed]
        done = set(completed) | set(failed)
        remaining = [n for n in self._read_names(self.remaining_path) if n not in done]

        self._completed_order = completed
        self._failed_order = failed
        self._state = Checkpoint(
            remaining=remaining,
            completed=set(completed),
            failed=set(failed),
        )
        self._loaded = True
        return self._state

    def pending(self, authoritative: Iterable[str]) -> tuple[list[str], list[str]]:
        """Names to process given the loaded logs, without writing anything.

        Returns:
            Tuple of (to_process, new_jobs)
        """
        known = self._state.known
        new_jobs: list[str] = []
        for name in authoritative:
            if name not in known:
                known.add(name)
                new_jobs.append(name)

        to_process = list(self._state.remaining)
        to_process += [n for n in self._failed_order if n not in to_process]
        to_process += new_jobs
        return to_process, new_jobs

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------
    def _write_names(self, path: Path, names: Iterable[str]) -> None:
        """Atomically replace a log with ``names``."""
        self._directory.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        content = "".join(f"{name}\n" for name in names)
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)

    def _append_name(self, path: Path, name: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(f"{name}\n")

    def _write_remaining(self) -> None:
        if not self._loaded:
            return
        if self._state.remaining:
            self._write_names(self.remaining_path, self._state.remaining)
        elif self.remaining_path.exists():
            self.remaining_path.unlink()

    def prepare(self, authoritative: Iterable[str]) -> list[str]:
        """Load the logs and derive the names to process this run.

        ``to_process = remaining + failed + (authoritative - known)``; the
        failed log is cleared because its names are re-queued.

        Args:
            authoritative: Every repository name currently in storage

        Returns:
            Names to process, in order

        Raises:
            CheckpointCorruptionError: If any log is unreadable
        """
        state = self.load()
        to_process, new_jobs = self.pending(authoritative)

        if new_jobs:
            logger.info("Found {} new repositories since the last run", len(new_jobs))
        if state.failed:
            logger.info("Re-queued {} previously failed repositories", len(state.failed))

        self._failed_order = []
        self._state = Checkpoint(remaining=to_process, completed=state.completed, failed=set())
        if self.failed_path.exists():
            self._write_names(self.failed_path, [])
        self._write_remaining()
        return list(to_process)

    def _mark(self, name: str) -> None:
        if name in self._state.remaining:
            self._state.remaining.remove(name)
        self._write_remaining()

    def record_success(self, name: str) -> None:
        """Append ``name`` to completed and drop it from remaining."""
        if name not in self._state.completed:
            self._state.completed.add(name)
            self._completed_order.append(name)
            self._append_name(self.completed_path, name)
        self._mark(name)

    def record_failure(self, name: str) -> None:
        """Append ``name`` to failed and drop it from remaining."""
        if name not in self._state.failed:
            self._state.failed.add(name)
            self._failed_order.append(name)
            self._append_name(self.failed_path, name)
        self._mark(name)

    def discard(self, name: str) -> None:
        """Drop a name that no longer exists in storage, without an outcome."""
        self._mark(name)

    def flush(self) -> None:
        """Rewrite all three logs from memory.

        The remaining log is deleted when nothing is left to process.
        Nothing is written unless the logs were loaded first, so an
        unreadable checkpoint is never overwritten.
        """
        if not self._loaded:
            return
        if self._completed_order or self.completed_path.exists():
            self._write_names(self.completed_path, self._completed_order)
        if self._failed_order or self.failed_path.exists():
            self._write_names(self.failed_path, self._failed_order)
        self._write_remaining()
        logger.info(
            "Checkpoint saved: {} completed, {} failed, {} remaining",
            len(self._state.completed),
            len(self._state.failed),
            len(self._state.remaining),
        )

    def reset(self) -> None:
        """Discard all three logs."""
        for path in (self.remaining_path, self.completed_path, self.failed_path):
            if path.exists():
                path.unlink()
        self._state = Checkpoint()
        self._completed_order = []
        self._failed_order = []
        self._loaded = False
        logger.warning("Checkpoint reset in {}", self._directory)
