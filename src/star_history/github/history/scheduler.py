"""Batch scheduler for multi-hour star history runs.

Repositories are processed strictly one at a time with a fixed pause
between them. Before each hour-sized batch the governor checks that the
batch fits in the remaining quota. Every outcome is persisted and
checkpointed before the next repository starts.
"""

from __future__ import annotations

import asyncio
import inspect
import signal
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

from star_history.config import SchedulerConfig, get_settings
from star_history.github.exceptions import GitHubAuthenticationError, RateLimitWaitError
from star_history.github.pacing.batch import create_batches
from star_history.github.pacing.progress import ProgressTracker
from star_history.logging import bind_repo, get_logger, run_context

from .results import RepoScrapeJob, RunResult

if TYPE_CHECKING:
    from star_history.checkpoint import CheckpointStore
    from star_history.db.store import HistoryStore
    from star_history.github.rate_limit.governor import RateLimitGovernor, Sleep

    from .assembler import HistoryAssembler

logger = get_logger(__name__)

ShutdownHook = Callable[[], Awaitable[None] | None]


class BatchScheduler:
    """Drives HistoryAssembler over many repositories.

    Usage:
        scheduler = BatchScheduler(assembler, governor, store, checkpoint)
        scheduler.add_shutdown_hook(allowlist.remove_all_added)
        result = await scheduler.run()
        print(result.success_count, result.failure_count, result.skipped_count)

    shutdown() is the single exit path for both normal completion and
    interrupts; it flushes the checkpoint and runs hooks exactly once.
    """

    def __init__(
        self,
        assembler: HistoryAssembler,
        governor: RateLimitGovernor,
        store: HistoryStore,
        checkpoint: CheckpointStore | None = None,
        config: SchedulerConfig | None = None,
        *,
        dry_run: bool = False,
        progress: ProgressTracker | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize the scheduler.

        Args:
            assembler: Per-repository history builder
            governor: Rate limit governor consulted at batch boundaries
            store: Storage facade for id lookup and persistence
            checkpoint: Optional progress logs (not touched in dry runs)
            config: Scheduler configuration (uses settings if not provided)
            dry_run: Fetch histories without saving or checkpointing
            progress: Optional progress tracker
            sleep: Awaitable sleep used for pacing, injectable for tests
        """
        self._assembler = assembler
        self._governor = governor
        self._store = store
        self._checkpoint = None if dry_run else checkpoint
        self._config = config or get_settings().scheduler
        self._dry_run = dry_run
        self._progress = progress or ProgressTracker(name="star history run")
        self._sleep = sleep

        self._hooks: list[ShutdownHook] = []
        self._shutdown_done = False
        self._result = RunResult(dry_run=dry_run)
        self._signals: list[signal.Signals] = []

    @property
    def result(self) -> RunResult:
        return self._result

    @property
    def progress(self) -> ProgressTracker:
        return self._progress

    @property
    def is_shut_down(self) -> bool:
        return self._shutdown_done

    def add_shutdown_hook(self, hook: ShutdownHook) -> None:
        """Register cleanup to run once when the scheduler shuts down."""
        self._hooks.append(hook)

    # -------------------------------------------------------------------------
    # Job discovery
    # -------------------------------------------------------------------------
    async def pending_names(self) -> list[str]:
        """Names to process: checkpoint-derived, or every stored repository."""
        authoritative = await self._store.list_full_names()
        if self._checkpoint is None:
            return authoritative
        return self._checkpoint.prepare(authoritative)

    async def validate(self, names: Sequence[str]) -> tuple[list[RepoScrapeJob], list[str]]:
        """Split names into resolvable jobs and skipped names."""
        ids = await self._store.resolve_ids(names)
        jobs = [RepoScrapeJob(full_name=n, internal_id=ids[n]) for n in names if n in ids]
        skipped = [n for n in names if n not in ids]
        for name in skipped:
            logger.warning("Skipping {}: not tracked or disabled", name)
        return jobs, skipped

    # -------------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------------
    async def run(
        self,
        names: Sequence[str] | None = None,
        *,
        limit: int | None = None,
    ) -> RunResult:
        """Resolve, then process pending repositories.

        Args:
            names: Explicit names (defaults to the checkpoint-derived list)
            limit: Process at most this many names

        Raises:
            RateLimitWaitError: If a long wait could not complete safely
        """
        if names is None:
            names = await self.pending_names()
        names = list(dict.fromkeys(names))
        if limit is not None:
            names = names[:limit]

        jobs, skipped = await self.validate(names)
        return await self.run_batch(jobs, skipped=skipped)

    async def run_batch(
        self,
        jobs: Sequence[RepoScrapeJob],
        *,
        skipped: Sequence[str] = (),
    ) -> RunResult:
        """Process ``jobs`` sequentially in hour-sized batches."""
        started = time.monotonic()
        result = self._result
        result.skipped.extend(skipped)
        for name in skipped:
            if self._checkpoint is not None:
                self._checkpoint.discard(name)

        plan = self._governor.estimate_batch(len(jobs))
        batches = create_batches(list(jobs), plan)
        result.total_batches = len(batches)
        calls_per_repo = self._governor.config.estimated_calls_per_repo

        progress = self._progress
        progress.total = len(jobs) + len(skipped)
        progress.record_skip(len(skipped))
        progress.start()

        logger.info(
            "Processing {} repositories in {} batches of up to {}",
            len(jobs),
            len(batches),
            plan.items_per_hour,
        )

        try:
            if jobs and self._config.start_delay_seconds > 0:
                await self._sleep(self._config.start_delay_seconds)

            index = 0
            for batch_number, batch in enumerate(batches, start=1):
                progress.set_batch(batch_number, len(batches))
                logger.info(
                    "Batch {}/{}: {} repositories",
                    batch_number,
                    len(batches),
                    len(batch),
                )
                with run_context(batch=batch_number):
                    await self._governor.ensure_budget(len(batch) * calls_per_repo)

                    for job in batch:
                        index += 1
                        await self._process(job, index, len(jobs))
                        if index < len(jobs) and self._config.inter_call_delay_seconds > 0:
                            await self._sleep(self._config.inter_call_delay_seconds)

            progress.complete()
        except asyncio.CancelledError:
            result.interrupted = True
            progress.cancel()
            raise
        finally:
            result.duration_seconds = time.monotonic() - started
            await self.shutdown()

        logger.info(
            "Run finished: {} successful, {} failed, {} skipped",
            result.success_count,
            result.failure_count,
            result.skipped_count,
        )
        return result

    async def _process(self, job: RepoScrapeJob, index: int, total: int) -> None:
        log = bind_repo(job.full_name)
        self._progress.set_current(job.full_name)

        try:
            samples = await self._assembler.fetch_history(job.full_name)
            if not self._dry_run:
                await self._store.persist(job.internal_id, samples)
        except (RateLimitWaitError, GitHubAuthenticationError):
            raise
        except Exception as e:
            # A single repository never aborts the run
            log.error("[{}/{}] {} failed: {}", index, total, job.full_name, e)
            self._result.failed[job.full_name] = str(e)
            if self._checkpoint is not None:
                self._checkpoint.record_failure(job.full_name)
            self._progress.record_failure(str(e))
            return

        self._result.successful.append(job.full_name)
        self._result.points[job.full_name] = len(samples)
        if self._checkpoint is not None:
            self._checkpoint.record_success(job.full_name)
        self._progress.record_success()
        log.info("[{}/{}] {} {} data points", index, total, job.full_name, len(samples))

    # -------------------------------------------------------------------------
    # Shutdown
    # -------------------------------------------------------------------------
    async def shutdown(self) -> None:
        """Flush the checkpoint and run shutdown hooks, once."""
        if self._shutdown_done:
            return
        self._shutdown_done = True

        if self._checkpoint is not None:
            self._checkpoint.flush()

        for hook in self._hooks:
            try:
                outcome = hook()
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("Shutdown hook {} failed", getattr(hook, "__name__", hook))

        self.remove_signal_handlers()

    def install_signal_handlers(self, task: asyncio.Task[object] | None = None) -> None:
        """Cancel ``task`` (default: the current task) on SIGINT/SIGTERM.

        Cancellation unwinds through run_batch, whose cleanup calls
        shutdown(), so the interrupt path flushes exactly once.
        """
        loop = asyncio.get_running_loop()
        target = task or asyncio.current_task()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._on_signal, sig, target)
            except (NotImplementedError, RuntimeError):
                logger.debug("Signal handlers unavailable for {}", sig.name)
                continue
            self._signals.append(sig)

    def remove_signal_handlers(self) -> None:
        if not self._signals:
            return
        loop = asyncio.get_running_loop()
        for sig in self._signals:
            loop.remove_signal_handler(sig)
        self._signals = []

    def _on_signal(self, sig: signal.Signals, task: asyncio.Task[object] | None) -> None:
        logger.warning("Received {}, saving progress", sig.name)
        self._result.interrupted = True
        if task is not None and not task.done():
            task.cancel()
