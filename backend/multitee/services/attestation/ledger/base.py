"""
Base Ledger Reporter Interface

Write and read contract of the verification ledger.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import LedgerReceipt, VerificationBatch, VerificationCounts, VerificationEvent


class BaseLedgerReporter(ABC):
    """
    Abstract base class for the append-only verification ledger.

    A batch is accepted or rejected as a whole; implementations never split
    it across several ledger writes. There is no retry: a rejected batch is
    the caller's to log and drop.
    """

    @abstractmethod
    async def submit_batch(self, batch: VerificationBatch) -> LedgerReceipt:
        """
        Submit all results of one cycle atomically.

        Raises:
            ValueError: If the batch is empty
            LedgerSubmissionError: If the ledger rejects or never confirms the batch
        """
        pass

    @abstractmethod
    async def get_counts(self, tee_id: str) -> VerificationCounts:
        """
        Read (total, successful) verification counts for one node.

        Raises:
            LedgerReadError: If the ledger cannot be read
        """
        pass

    @abstractmethod
    async def get_all_counts(self) -> List[VerificationCounts]:
        """Read counts for every node the ledger knows."""
        pass

    @abstractmethod
    async def get_events(self, from_block: Optional[int] = None) -> List[VerificationEvent]:
        """Read the per-result audit events, oldest first."""
        pass

    async def close(self) -> None:
        """Release connections held by the reporter."""
        return None

    @staticmethod
    def ensure_not_empty(batch: VerificationBatch) -> None:
        if batch.is_empty:
            raise ValueError(f"Refusing to submit empty batch {batch.cycle_id}")
