"""
Verification Orchestrator

Runs one network attestation verification cycle:
1. Fetches the attestation quote of every peer except this node
2. Stages the quote in a private scratch space
3. Verifies it with the configured quote verifier
4. Submits all outcomes of the cycle to the ledger as one batch
"""

import asyncio
import logging
import time
from typing import Iterable, List, Optional

from .base import BaseQuoteVerifier
from .exceptions import LedgerSubmissionError, QuoteFetchError
from .fetcher import QuoteFetcher
from .ledger import BaseLedgerReporter
from .models import LedgerReceipt, TeeNode, VerificationBatch, VerificationResult
from .scratch import ScratchSpace
from ..metrics import MetricsService

logger = logging.getLogger(__name__)


class VerificationOrchestrator:
    """
    Drives peer verification with per-peer failure isolation.

    A peer that cannot be fetched or verified yields a negative result and the
    cycle moves on. Only the ledger submission is shared by all peers, and its
    failure is logged and the batch dropped: the next cycle starts clean.
    """

    def __init__(
        self,
        fetcher: QuoteFetcher,
        verifier: BaseQuoteVerifier,
        ledger: BaseLedgerReporter,
        metrics: Optional[MetricsService] = None,
        concurrency: int = 1,
        scratch_root: Optional[str] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            fetcher: Retrieves peer quotes
            verifier: Checks quotes
            ledger: Receives one batch per cycle
            metrics: Optional metrics sink
            concurrency: Peers verified at once (1 = strictly sequential)
            scratch_root: Parent directory for per-peer scratch spaces
        """
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.fetcher = fetcher
        self.verifier = verifier
        self.ledger = ledger
        self.metrics = metrics
        self.concurrency = concurrency
        self.scratch_root = scratch_root

    async def run_cycle(self, peers: Iterable[TeeNode], self_id: str) -> VerificationBatch:
        """
        Verify every peer except `self_id` and submit the batch.

        Args:
            peers: Network nodes, possibly including this node
            self_id: Identity of this node

        Returns:
            The cycle's batch, results in peer order
        """
        started = time.perf_counter()
        targets = []
        for peer in peers:
            if peer.id == self_id:
                logger.debug(f"Skipping self-verification for {self_id}")
                continue
            targets.append(peer)

        batch = VerificationBatch()
        logger.info(f"Starting verification cycle {batch.cycle_id} for {len(targets)} peers")

        for result in await self._verify_all(targets, self_id):
            batch.append(result)

        if batch.is_empty:
            logger.info(f"Nothing to verify in cycle {batch.cycle_id}")
        else:
            await self._submit(batch)

        duration = time.perf_counter() - started
        if self.metrics:
            self.metrics.record_cycle("completed", duration)
        logger.info(
            f"Verification cycle {batch.cycle_id} finished in {duration:.2f}s: "
            f"{sum(r.success for r in batch.results)}/{len(batch)} peers verified"
        )
        return batch

    async def _verify_all(self, targets: List[TeeNode], self_id: str) -> List[VerificationResult]:
        if self.concurrency == 1:
            return [await self.verify_peer(peer, self_id) for peer in targets]

        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(peer: TeeNode) -> VerificationResult:
            async with semaphore:
                return await self.verify_peer(peer, self_id)

        # gather keeps input order, so results still follow peer order
        return list(await asyncio.gather(*(bounded(peer) for peer in targets)))

    async def verify_peer(self, peer: TeeNode, self_id: str) -> VerificationResult:
        """
        Fetch and verify one peer. Never raises for peer-level failures.

        The peer's scratch space is released on every exit path before the
        result is returned.
        """
        logger.info(f"Attestation verification for TEE node: {peer.id}")
        scratch = ScratchSpace(peer.id, root=self.scratch_root)
        success = False
        try:
            quote = await self.fetcher.fetch(peer)
            outcome = await self.verifier.verify(quote, scratch)
            success = outcome.verified
            if not success:
                logger.warning(f"Quote of '{peer.id}' not verified: {outcome.diagnostics[:500]}")
            self._record_peer(peer.id, "verified" if success else "rejected")
        except QuoteFetchError as e:
            logger.warning(str(e))
            self._record_peer(peer.id, "unreachable")
        except Exception as e:
            logger.error(f"Error in attestation process for '{peer.id}': {e}", exc_info=True)
            self._record_peer(peer.id, "rejected")
        finally:
            scratch.release()

        logger.info(f"Verification result for TEE {peer.id}: {'Verified' if success else 'Not Verified'}")
        return VerificationResult(verifier_id=self_id, verified_id=peer.id, success=success)

    async def _submit(self, batch: VerificationBatch) -> Optional[LedgerReceipt]:
        try:
            receipt = await self.ledger.submit_batch(batch)
        except LedgerSubmissionError as e:
            logger.error(f"{e}. {len(batch)} results from this cycle are lost")
            self._record_submission(False)
            return None
        except Exception as e:
            logger.error(
                f"Unexpected ledger error for batch {batch.cycle_id}: {e}. "
                f"{len(batch)} results from this cycle are lost",
                exc_info=True,
            )
            self._record_submission(False)
            return None

        self._record_submission(True)
        return receipt

    def _record_peer(self, peer_id: str, result: str) -> None:
        if self.metrics:
            self.metrics.record_peer_result(peer_id, result)

    def _record_submission(self, success: bool) -> None:
        if self.metrics:
            self.metrics.record_submission(success)
