"""Periodic claim-and-dispatch scheduler."""
from __future__ import annotations

import asyncio
import contextlib
from enum import Enum
from typing import Optional

from auto_messenger.messaging.application.services.batch_claimer import BatchClaimer
from auto_messenger.messaging.application.services.dispatcher import BatchReport, Dispatcher
from auto_messenger.messaging.domain.exceptions import BatchClaimError
from auto_messenger.shared.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)


class SchedulerState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class Scheduler:
    """
    Drives one claim → dispatch cycle immediately on start and then once per
    interval. Cycles never overlap; ticks missed while a cycle overran are
    skipped.

    start()/stop() are the only state transitions and are serialized by a
    single lock; both are no-ops when already in the target state.
    """

    def __init__(
        self,
        claimer: BatchClaimer,
        dispatcher: Dispatcher,
        *,
        batch_size: int,
        interval: float,
        max_concurrency: Optional[int] = None,
        shutdown_timeout: float = 10.0,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._claimer = claimer
        self._dispatcher = dispatcher
        self._batch_size = batch_size
        self._interval = interval
        self._max_concurrency = max_concurrency
        self._shutdown_timeout = shutdown_timeout

        self._lock = asyncio.Lock()
        self._cycle_lock = asyncio.Lock()
        self._state = SchedulerState.STOPPED
        self._task: Optional[asyncio.Task] = None
        self._cancel_scope: Optional[asyncio.Event] = None
        self.cycles_completed = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SchedulerState.RUNNING

    async def start(self) -> bool:
        """Returns False when already running."""
        async with self._lock:
            if self._state is SchedulerState.RUNNING:
                return False
            self._cancel_scope = asyncio.Event()
            self._task = asyncio.create_task(
                self._run(self._cancel_scope), name="message-scheduler"
            )
            self._state = SchedulerState.RUNNING
            logger.info(
                "Scheduler started",
                interval=self._interval,
                batch_size=self._batch_size,
            )
            return True

    async def stop(self) -> bool:
        """
        Signal the loop to exit and wait for it. Calls already sent finish;
        deliveries not yet attempted are abandoned. Returns False when
        already stopped.
        """
        async with self._lock:
            if self._state is SchedulerState.STOPPED:
                return False
            task, cancel_scope = self._task, self._cancel_scope
            if task is None or cancel_scope is None:
                raise RuntimeError("scheduler is running without a loop task")

            cancel_scope.set()
            try:
                await asyncio.wait_for(asyncio.shield(task), timeout=self._shutdown_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Scheduler did not stop in time; cancelling in-flight cycle",
                    timeout=self._shutdown_timeout,
                )
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

            self._task = None
            self._cancel_scope = None
            self._state = SchedulerState.STOPPED
            logger.info("Scheduler stopped", cycles_completed=self.cycles_completed)
            return True

    async def run_cycle(self, cancel_scope: Optional[asyncio.Event] = None) -> BatchReport:
        """Claim one batch and dispatch it. Claim errors make the cycle a no-op."""
        async with self._cycle_lock:
            try:
                batch = await self._claimer.claim(self._batch_size)
            except BatchClaimError as e:
                logger.error("Claim failed; skipping cycle", error=str(e))
                return BatchReport()

            if not batch:
                logger.debug("No pending messages")
                return BatchReport()

            return await self._dispatcher.process(
                batch, cancel_scope, max_concurrency=self._max_concurrency
            )

    async def _run(self, cancel_scope: asyncio.Event) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval

        # first batch goes out immediately instead of after a full interval
        await self._guarded_cycle(cancel_scope)

        while not cancel_scope.is_set():
            delay = next_tick - loop.time()
            if delay > 0 and await self._wait_cancelled(cancel_scope, delay):
                break
            if cancel_scope.is_set():
                break

            missed = int((loop.time() - next_tick) // self._interval)
            if missed > 0:
                logger.debug("Skipped scheduler ticks during long cycle", skipped=missed)
            next_tick += (missed + 1) * self._interval

            await self._guarded_cycle(cancel_scope)

    async def _guarded_cycle(self, cancel_scope: asyncio.Event) -> None:
        # delivery tasks copy this context, so their log lines carry the cycle too
        bind_context(cycle=self.cycles_completed + 1)
        try:
            await self.run_cycle(cancel_scope)
        except Exception as e:
            logger.error("Scheduler cycle failed", error=str(e), exc_info=True)
        finally:
            self.cycles_completed += 1
            clear_context()

    @staticmethod
    async def _wait_cancelled(cancel_scope: asyncio.Event, timeout: float) -> bool:
        try:
            await asyncio.wait_for(cancel_scope.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False
