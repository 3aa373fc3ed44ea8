"""
Verification Scheduler Tests

Priority: multitee/services/attestation/scheduler.py
Focus: non-overlapping cycles, skipped ticks, graceful stop
"""

import asyncio
import pytest

from multitee.services.attestation import (
    CycleAlreadyRunningError,
    NodeRegistry,
    VerificationBatch,
    VerificationScheduler,
)
from multitee.services.metrics import MetricsService


class BlockingOrchestrator:
    """Orchestrator whose cycles wait until released."""

    def __init__(self):
        self.calls = []
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def run_cycle(self, peers, self_id):
        self.calls.append((tuple(p.id for p in peers), self_id))
        self.started.set()
        await self.release.wait()
        return VerificationBatch()


class CountingOrchestrator:
    def __init__(self, fail: bool = False):
        self.calls = 0
        self.fail = fail

    async def run_cycle(self, peers, self_id):
        self.calls += 1
        if self.fail:
            raise RuntimeError("cycle blew up")
        return VerificationBatch()


@pytest.fixture
def registry(network):
    return NodeRegistry("tee-a", network)


class TestManualTrigger:

    @pytest.mark.asyncio
    async def test_run_now_passes_registry(self, registry):
        orchestrator = CountingOrchestrator()
        scheduler = VerificationScheduler(orchestrator, registry)

        batch = await scheduler.run_now()

        assert isinstance(batch, VerificationBatch)
        assert orchestrator.calls == 1
        assert scheduler.cycle_running is False

    @pytest.mark.asyncio
    async def test_run_now_rejects_overlap(self, registry):
        orchestrator = BlockingOrchestrator()
        scheduler = VerificationScheduler(orchestrator, registry)

        first = asyncio.create_task(scheduler.run_now())
        await orchestrator.started.wait()
        assert scheduler.cycle_running is True

        with pytest.raises(CycleAlreadyRunningError):
            await scheduler.run_now()

        orchestrator.release.set()
        await first
        assert orchestrator.calls == [(("tee-a", "tee-b", "tee-c"), "tee-a")]

    @pytest.mark.asyncio
    async def test_trigger_skips_overlap(self, registry):
        orchestrator = BlockingOrchestrator()
        scheduler = VerificationScheduler(orchestrator, registry)

        first = asyncio.create_task(scheduler.trigger())
        await orchestrator.started.wait()

        assert await scheduler.trigger() is None

        orchestrator.release.set()
        assert isinstance(await first, VerificationBatch)
        assert len(orchestrator.calls) == 1

    @pytest.mark.asyncio
    async def test_flag_cleared_after_failure(self, registry):
        scheduler = VerificationScheduler(CountingOrchestrator(fail=True), registry)

        with pytest.raises(RuntimeError):
            await scheduler.run_now()

        assert scheduler.cycle_running is False


class TestTickLoop:

    @pytest.mark.asyncio
    async def test_ticks_run_cycles(self, registry):
        orchestrator = CountingOrchestrator()
        scheduler = VerificationScheduler(orchestrator, registry, interval_seconds=0.01)

        await scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert orchestrator.calls >= 2
        assert scheduler.running is False

    @pytest.mark.asyncio
    async def test_slow_cycle_skips_ticks(self, registry):
        metrics = MetricsService()
        orchestrator = BlockingOrchestrator()
        scheduler = VerificationScheduler(
            orchestrator, registry, interval_seconds=0.01, metrics=metrics
        )

        await scheduler.start()
        await orchestrator.started.wait()
        await asyncio.sleep(0.05)

        assert len(orchestrator.calls) == 1
        skipped = metrics.registry.get_sample_value(
            "multitee_verification_cycles_total", {"outcome": "skipped"}
        )
        assert skipped >= 1

        orchestrator.release.set()
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_failed_cycle_keeps_loop_alive(self, registry):
        metrics = MetricsService()
        orchestrator = CountingOrchestrator(fail=True)
        scheduler = VerificationScheduler(
            orchestrator, registry, interval_seconds=0.01, metrics=metrics
        )

        await scheduler.start()
        await asyncio.sleep(0.05)
        await scheduler.stop()

        assert orchestrator.calls >= 2
        failed = metrics.registry.get_sample_value(
            "multitee_verification_cycles_total", {"outcome": "failed"}
        )
        assert failed >= 2

    @pytest.mark.asyncio
    async def test_start_twice_is_noop(self, registry):
        scheduler = VerificationScheduler(CountingOrchestrator(), registry, interval_seconds=10)

        await scheduler.start()
        task = scheduler._task
        await scheduler.start()

        assert scheduler._task is task
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, registry):
        scheduler = VerificationScheduler(CountingOrchestrator(), registry)
        await scheduler.stop()
        assert scheduler.running is False


class TestShutdown:

    @pytest.mark.asyncio
    async def test_stop_waits_for_in_flight_cycle(self, registry):
        orchestrator = BlockingOrchestrator()
        scheduler = VerificationScheduler(orchestrator, registry, interval_seconds=10)

        await scheduler.start()
        await orchestrator.started.wait()
        cycle_task = scheduler._cycle_task

        asyncio.get_running_loop().call_later(0.02, orchestrator.release.set)
        await scheduler.stop(grace_seconds=1)

        assert cycle_task.done()
        assert not cycle_task.cancelled()
        assert scheduler.cycle_running is False

    @pytest.mark.asyncio
    async def test_stop_cancels_cycle_after_grace(self, registry):
        orchestrator = BlockingOrchestrator()
        scheduler = VerificationScheduler(orchestrator, registry, interval_seconds=10)

        await scheduler.start()
        await orchestrator.started.wait()
        cycle_task = scheduler._cycle_task

        await scheduler.stop(grace_seconds=0.02)

        assert cycle_task.cancelled()
        assert scheduler.cycle_running is False
