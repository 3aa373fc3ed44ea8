"""
Web3 Ledger Reporter

Records verification batches on the AttestationVerificationRecord contract.
One batch becomes one signed `submitBatchVerifications` transaction, so the
contract accepts or reverts the whole cycle at once.
"""

import asyncio
import functools
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from web3 import Web3

from .abi import ATTESTATION_VERIFICATION_RECORD_ABI
from .base import BaseLedgerReporter
from ..exceptions import LedgerReadError, LedgerSubmissionError
from ..models import LedgerReceipt, VerificationBatch, VerificationCounts, VerificationEvent

logger = logging.getLogger(__name__)


class Web3LedgerReporter(BaseLedgerReporter):
    """
    EVM ledger backed by web3.py.

    web3's HTTP provider is blocking, so every chain call runs in the default
    executor to keep the event loop free for peer fetches.
    """

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        private_key: str,
        tx_timeout_seconds: int = 120,
        tee_ids: Iterable[str] = (),
        w3: Optional[Web3] = None,
    ):
        """
        Initialize the ledger reporter.

        Args:
            rpc_url: JSON-RPC endpoint of the chain
            contract_address: Address of the AttestationVerificationRecord contract
            private_key: Key used to sign batch submissions
            tx_timeout_seconds: How long to wait for a receipt
            tee_ids: Known node ids, used to turn event topics back into ids
            w3: Pre-built Web3 instance (mainly for tests)
        """
        self.w3 = w3 or Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": 30}))
        self.contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=ATTESTATION_VERIFICATION_RECORD_ABI,
        )
        self.account = self.w3.eth.account.from_key(private_key)
        self.tx_timeout_seconds = tx_timeout_seconds
        self._topic_ids: Dict[bytes, str] = {
            bytes(Web3.keccak(text=tee_id)): tee_id for tee_id in tee_ids
        }
        # Block timestamps never change once mined
        self._block_times: Dict[int, datetime] = {}
        logger.info(
            f"Initialized web3 ledger reporter for contract {contract_address} "
            f"(signer {self.account.address})"
        )

    async def _run(self, fn, *args, **kwargs) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args, **kwargs))

    async def submit_batch(self, batch: VerificationBatch) -> LedgerReceipt:
        self.ensure_not_empty(batch)
        logger.info(f"Submitting batch {batch.cycle_id} with {len(batch)} results")

        try:
            receipt = await self._run(self._submit_sync, batch)
        except LedgerSubmissionError:
            raise
        except Exception as e:
            raise LedgerSubmissionError(batch.cycle_id, str(e)) from e

        tx_hash = Web3.to_hex(receipt["transactionHash"])
        if receipt.get("status") != 1:
            raise LedgerSubmissionError(batch.cycle_id, f"transaction {tx_hash} reverted")

        logger.info(f"Batch {batch.cycle_id} recorded in tx {tx_hash} (block {receipt['blockNumber']})")
        return LedgerReceipt(
            cycle_id=batch.cycle_id,
            submitted=len(batch),
            tx_hash=tx_hash,
            block_number=receipt["blockNumber"],
        )

    def _submit_sync(self, batch: VerificationBatch):
        verifications = [
            (result.verifier_id, result.verified_id, result.success)
            for result in batch.results
        ]
        tx = self.contract.functions.submitBatchVerifications(verifications).build_transaction(
            {
                "from": self.account.address,
                "nonce": self.w3.eth.get_transaction_count(self.account.address, "pending"),
            }
        )
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.debug(f"Sent batch {batch.cycle_id} as tx {Web3.to_hex(tx_hash)}")
        return self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.tx_timeout_seconds
        )

    async def get_counts(self, tee_id: str) -> VerificationCounts:
        try:
            total, successful = await self._run(
                self.contract.functions.getVerificationCounts(tee_id).call
            )
        except Exception as e:
            raise LedgerReadError(f"Failed to read counts for '{tee_id}': {e}") from e
        return VerificationCounts(tee_id=tee_id, total=total, successful=successful)

    async def get_all_counts(self) -> List[VerificationCounts]:
        try:
            tee_ids, totals, successes = await self._run(
                self.contract.functions.getAllVerificationCounts().call
            )
        except Exception as e:
            raise LedgerReadError(f"Failed to read verification counts: {e}") from e

        return [
            VerificationCounts(tee_id=str(tee_id), total=total, successful=successful)
            for tee_id, total, successful in zip(tee_ids, totals, successes)
        ]

    async def get_events(self, from_block: Optional[int] = None) -> List[VerificationEvent]:
        try:
            return await self._run(self._read_events_sync, from_block)
        except Exception as e:
            raise LedgerReadError(f"Failed to read verification events: {e}") from e

    def _read_events_sync(self, from_block: Optional[int]) -> List[VerificationEvent]:
        if from_block is None:
            # Same look-back window as the trust dashboard
            from_block = max(self.w3.eth.block_number - 10000, 0)
        logs = self.contract.events.VerificationSubmitted().get_logs(
            from_block=from_block, to_block="latest"
        )

        events = []
        for log in logs:
            block_number = log["blockNumber"]
            if block_number not in self._block_times:
                block = self.w3.eth.get_block(block_number)
                self._block_times[block_number] = datetime.fromtimestamp(
                    block["timestamp"], tz=timezone.utc
                )
            events.append(
                VerificationEvent(
                    verifier_id=self._resolve_topic(log["args"]["verifierTeeId"]),
                    verified_id=self._resolve_topic(log["args"]["verifiedTeeId"]),
                    success=log["args"]["success"],
                    block_number=block_number,
                    tx_hash=Web3.to_hex(log["transactionHash"]),
                    timestamp=self._block_times[block_number],
                )
            )
        return events

    def _resolve_topic(self, value: Any) -> str:
        """
        Indexed string arguments only survive as their keccak topic. Topics of
        known nodes map back to the node id; anything else stays hex.
        """
        if isinstance(value, (bytes, bytearray)):
            return self._topic_ids.get(bytes(value), Web3.to_hex(value))
        return str(value)
