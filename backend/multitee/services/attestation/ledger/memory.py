"""
In-Memory Ledger Reporter

Append-only ledger kept in process memory, for single-node development and
tests. Mirrors the contract's bookkeeping: every submitted result increments
the verified node's counters and emits one event.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from .base import BaseLedgerReporter
from ..models import LedgerReceipt, VerificationBatch, VerificationCounts, VerificationEvent

logger = logging.getLogger(__name__)


class InMemoryLedgerReporter(BaseLedgerReporter):
    """Process-local ledger. Each accepted batch becomes one 'block'."""

    def __init__(self):
        self._counts: Dict[str, Tuple[int, int]] = {}
        self._events: List[VerificationEvent] = []
        self._block_number = 0
        self._lock = asyncio.Lock()

    async def submit_batch(self, batch: VerificationBatch) -> LedgerReceipt:
        self.ensure_not_empty(batch)

        async with self._lock:
            # Stage every change first so the batch lands all-or-nothing
            staged = dict(self._counts)
            block_number = self._block_number + 1
            tx_hash = f"0x{batch.cycle_id}"
            recorded_at = datetime.now(timezone.utc)
            events = []
            for result in batch.results:
                total, successful = staged.get(result.verified_id, (0, 0))
                staged[result.verified_id] = (
                    total + 1,
                    successful + (1 if result.success else 0),
                )
                events.append(
                    VerificationEvent(
                        verifier_id=result.verifier_id,
                        verified_id=result.verified_id,
                        success=result.success,
                        block_number=block_number,
                        tx_hash=tx_hash,
                        timestamp=recorded_at,
                    )
                )

            self._counts = staged
            self._events.extend(events)
            self._block_number = block_number

        logger.info(f"Recorded batch {batch.cycle_id} with {len(batch)} results in block {block_number}")
        return LedgerReceipt(
            cycle_id=batch.cycle_id,
            submitted=len(batch),
            tx_hash=tx_hash,
            block_number=block_number,
        )

    async def get_counts(self, tee_id: str) -> VerificationCounts:
        total, successful = self._counts.get(tee_id, (0, 0))
        return VerificationCounts(tee_id=tee_id, total=total, successful=successful)

    async def get_all_counts(self) -> List[VerificationCounts]:
        return [
            VerificationCounts(tee_id=tee_id, total=total, successful=successful)
            for tee_id, (total, successful) in self._counts.items()
        ]

    async def get_events(self, from_block: Optional[int] = None) -> List[VerificationEvent]:
        if from_block is None:
            return list(self._events)
        return [e for e in self._events if e.block_number >= from_block]
