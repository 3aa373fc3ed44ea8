"""
Attestation Network Service

Wires registry, fetcher, verifier, ledger, scorer and scheduler together and
owns their lifecycle. One instance lives on `app.state`; nothing here is a
module-level global.
"""

import logging
from typing import Iterable, List, Optional

from multitee.core.config import Settings
from .base import BaseQuoteVerifier, marker_classifier
from .dcap import DcapQuoteVerifier
from .fetcher import QuoteFetcher
from .ledger import BaseLedgerReporter, InMemoryLedgerReporter, Web3LedgerReporter
from .models import TrustRecord, VerificationCounts, VerificationEvent
from .orchestrator import VerificationOrchestrator
from .registry import NodeRegistry
from .report import DstackReportSource, LocalAttestationService, ReportSource
from .scheduler import VerificationScheduler
from .scorer import TrustScorer
from ..metrics import MetricsService

logger = logging.getLogger(__name__)


def build_ledger(settings: Settings, tee_ids: Iterable[str] = ()) -> BaseLedgerReporter:
    if settings.LEDGER_BACKEND == "memory":
        logger.warning("Using in-memory ledger: verification results are not durable")
        return InMemoryLedgerReporter()
    return Web3LedgerReporter(
        rpc_url=settings.LEDGER_RPC_URL,
        contract_address=settings.LEDGER_CONTRACT_ADDRESS,
        private_key=settings.LEDGER_PRIVATE_KEY,
        tx_timeout_seconds=settings.LEDGER_TX_TIMEOUT_SECONDS,
        tee_ids=tee_ids,
    )


class AttestationNetworkService:
    """Explicit context for everything the node runs."""

    def __init__(
        self,
        registry: NodeRegistry,
        local: LocalAttestationService,
        orchestrator: VerificationOrchestrator,
        scheduler: VerificationScheduler,
        scorer: TrustScorer,
        metrics: MetricsService,
        scheduler_enabled: bool = True,
    ):
        self.registry = registry
        self.local = local
        self.orchestrator = orchestrator
        self.scheduler = scheduler
        self.scorer = scorer
        self.metrics = metrics
        self.scheduler_enabled = scheduler_enabled

    @property
    def ledger(self) -> BaseLedgerReporter:
        return self.orchestrator.ledger

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        ledger: Optional[BaseLedgerReporter] = None,
        verifier: Optional[BaseQuoteVerifier] = None,
        report_source: Optional[ReportSource] = None,
    ) -> "AttestationNetworkService":
        """
        Build the service graph from settings.

        Collaborators can be passed in to replace the defaults.
        """
        metrics = MetricsService()
        registry = NodeRegistry.from_entries(settings.APP_ID, settings.peer_entries())
        verifier = verifier or DcapQuoteVerifier(
            binary=settings.DCAP_QVL_BINARY,
            timeout_seconds=settings.VERIFIER_TIMEOUT_SECONDS,
            classifier=marker_classifier(settings.VERIFIER_SUCCESS_MARKER),
        )
        orchestrator = VerificationOrchestrator(
            fetcher=QuoteFetcher(timeout_seconds=settings.QUOTE_FETCH_TIMEOUT_SECONDS),
            verifier=verifier,
            ledger=ledger or build_ledger(settings, [node.id for node in registry.nodes]),
            metrics=metrics,
            concurrency=settings.VERIFICATION_CONCURRENCY,
        )
        scheduler = VerificationScheduler(
            orchestrator,
            registry,
            interval_seconds=settings.VERIFICATION_INTERVAL_SECONDS,
            metrics=metrics,
        )
        local = LocalAttestationService(
            report_source
            or DstackReportSource(
                socket_path=settings.DSTACK_SOCKET_PATH,
                report_data=settings.REPORT_DATA,
                hash_algorithm=settings.REPORT_HASH_ALGORITHM,
            )
        )
        scorer = TrustScorer(
            secure_threshold=settings.TRUST_SECURE_THRESHOLD,
            warning_threshold=settings.TRUST_WARNING_THRESHOLD,
        )
        return cls(
            registry=registry,
            local=local,
            orchestrator=orchestrator,
            scheduler=scheduler,
            scorer=scorer,
            metrics=metrics,
            scheduler_enabled=settings.VERIFICATION_ENABLED,
        )

    async def initialize(self):
        """Generate the local report and start periodic verification."""
        await self.local.generate()
        if self.scheduler_enabled:
            await self.scheduler.start()
        else:
            logger.info("Periodic verification disabled")

    async def shutdown(self):
        await self.scheduler.stop()
        await self.orchestrator.fetcher.close()
        await self.ledger.close()
        logger.info("Attestation network service stopped")

    async def trust_records(self) -> List[TrustRecord]:
        """
        Trust records for every node the ledger has counts for, plus any
        registered node it has never seen (scored as 0 / warning).
        """
        counts = {c.tee_id: c for c in await self.ledger.get_all_counts()}
        records = self.scorer.records(counts.values())
        for node in self.registry.nodes:
            if node.id not in counts:
                records.append(
                    self.scorer.record(VerificationCounts(tee_id=node.id, total=0, successful=0))
                )
        return records

    async def trust_record(self, tee_id: str) -> TrustRecord:
        return self.scorer.record(await self.ledger.get_counts(tee_id))

    async def verification_events(self, from_block: Optional[int] = None) -> List[VerificationEvent]:
        return await self.ledger.get_events(from_block)
