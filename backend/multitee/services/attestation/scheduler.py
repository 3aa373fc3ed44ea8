"""
Verification Scheduler

Periodically triggers network verification cycles.
"""

import asyncio
import logging
from typing import Optional

from .exceptions import CycleAlreadyRunningError
from .models import VerificationBatch
from .orchestrator import VerificationOrchestrator
from .registry import NodeRegistry
from ..metrics import MetricsService

logger = logging.getLogger(__name__)


class VerificationScheduler:
    """
    Fixed-interval ticker for verification cycles.

    Ticks are not delayed by slow cycles. A tick that arrives while the
    previous cycle is still running is skipped rather than queued, so cycles
    never overlap and no backlog builds up.
    """

    def __init__(
        self,
        orchestrator: VerificationOrchestrator,
        registry: NodeRegistry,
        interval_seconds: int = 15,
        metrics: Optional[MetricsService] = None,
    ):
        """
        Initialize verification scheduler.

        Args:
            orchestrator: Runs a single cycle
            registry: Source of the peer set and local identity
            interval_seconds: Time between ticks
            metrics: Optional metrics sink
        """
        self.orchestrator = orchestrator
        self.registry = registry
        self.interval_seconds = interval_seconds
        self.metrics = metrics
        self._running = False
        self._cycle_running = False
        self._task: Optional[asyncio.Task] = None
        self._cycle_task: Optional[asyncio.Task] = None
        logger.info(f"Initialized verification scheduler with {interval_seconds}s interval")

    @property
    def running(self) -> bool:
        return self._running

    @property
    def cycle_running(self) -> bool:
        return self._cycle_running

    async def start(self):
        """Start the periodic verification loop."""
        if self._running:
            logger.warning("Verification scheduler already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._tick_loop())
        logger.info("Verification scheduler started")

    async def stop(self, grace_seconds: float = 30.0):
        """
        Stop ticking and wait for the in-flight cycle.

        A cycle still running after `grace_seconds` is cancelled.
        """
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.debug("Scheduler loop cancelled successfully")
            self._task = None

        if self._cycle_task and not self._cycle_task.done():
            try:
                await asyncio.wait_for(asyncio.shield(self._cycle_task), timeout=grace_seconds)
            except asyncio.TimeoutError:
                logger.warning("In-flight verification cycle did not finish in time, cancelling")
                self._cycle_task.cancel()
                try:
                    await self._cycle_task
                except asyncio.CancelledError:
                    pass
            except Exception as e:
                logger.error(f"In-flight verification cycle failed during shutdown: {e}")

        logger.info("Verification scheduler stopped")

    async def _tick_loop(self):
        logger.debug("Starting verification loop")
        while self._running:
            if self._cycle_running:
                logger.warning("Previous verification cycle still running, skipping this tick")
                if self.metrics:
                    self.metrics.record_cycle("skipped")
            else:
                self._cycle_task = asyncio.create_task(self._guarded_cycle())
            await asyncio.sleep(self.interval_seconds)

    async def _guarded_cycle(self) -> Optional[VerificationBatch]:
        try:
            return await self.trigger()
        except Exception as e:
            logger.error(f"Error in verification cycle: {e}", exc_info=True)
            if self.metrics:
                self.metrics.record_cycle("failed")
            return None

    async def trigger(self) -> Optional[VerificationBatch]:
        """
        Run one cycle unless one is already in progress.

        Returns:
            The batch, or None when the trigger was skipped
        """
        if self._cycle_running:
            logger.info("Verification cycle already in progress, trigger skipped")
            return None
        return await self._run_cycle()

    async def run_now(self) -> VerificationBatch:
        """
        Run one cycle immediately.

        Raises:
            CycleAlreadyRunningError: If a cycle is in progress
        """
        if self._cycle_running:
            raise CycleAlreadyRunningError("A verification cycle is already running")
        return await self._run_cycle()

    async def _run_cycle(self) -> VerificationBatch:
        # Flag is set before the first await, so no second caller can slip in
        self._cycle_running = True
        try:
            return await self.orchestrator.run_cycle(
                self.registry.nodes, self.registry.self_id
            )
        finally:
            self._cycle_running = False
