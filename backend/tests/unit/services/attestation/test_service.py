"""
Attestation Network Service Tests

Focus: wiring from settings and lifecycle
"""

import pytest

from multitee.core.config import Settings
from multitee.services.attestation import (
    AttestationNetworkService,
    DcapQuoteVerifier,
    InMemoryLedgerReporter,
    TrustStatus,
    Web3LedgerReporter,
)
from multitee.services.attestation.service import build_ledger
from tests.fakes import FakeQuoteFetcher, StaticReportSource


def make_settings(**overrides):
    values = {
        "APP_ID": "tee-a",
        "LEDGER_BACKEND": "memory",
        "VERIFICATION_ENABLED": False,
        "PEER_NODES": "tee-a,tee-b,tee-c",
    }
    values.update(overrides)
    return Settings(**values)


class TestFromSettings:

    def test_default_graph(self):
        service = AttestationNetworkService.from_settings(
            make_settings(DCAP_QVL_BINARY="/opt/dcap-qvl", VERIFICATION_CONCURRENCY=3)
        )

        assert [n.id for n in service.registry.peers()] == ["tee-b", "tee-c"]
        assert isinstance(service.ledger, InMemoryLedgerReporter)
        assert isinstance(service.orchestrator.verifier, DcapQuoteVerifier)
        assert service.orchestrator.verifier.binary == "/opt/dcap-qvl"
        assert service.orchestrator.concurrency == 3
        assert service.scheduler.interval_seconds == 15

    def test_trust_thresholds_from_settings(self):
        service = AttestationNetworkService.from_settings(
            make_settings(TRUST_WARNING_THRESHOLD=40)
        )
        assert service.scorer.score(10, 4).status == TrustStatus.WARNING

    def test_web3_ledger_selected(self):
        settings = make_settings(
            LEDGER_BACKEND="web3",
            LEDGER_RPC_URL="http://localhost:8545",
            LEDGER_CONTRACT_ADDRESS="0x" + "1f" * 20,
            LEDGER_PRIVATE_KEY="0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
        )
        assert isinstance(build_ledger(settings), Web3LedgerReporter)

        service = AttestationNetworkService.from_settings(settings)
        # Event topics of every registered node can be mapped back to its id
        assert sorted(service.ledger._topic_ids.values()) == ["tee-a", "tee-b", "tee-c"]


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_initialize_without_scheduler(self):
        source = StaticReportSource()
        service = AttestationNetworkService.from_settings(make_settings(), report_source=source)

        await service.initialize()

        assert service.local.available
        assert source.calls == 1
        assert service.scheduler.running is False
        await service.shutdown()

    @pytest.mark.asyncio
    async def test_initialize_starts_and_shutdown_stops_scheduler(self):
        service = AttestationNetworkService.from_settings(
            make_settings(VERIFICATION_ENABLED=True, VERIFICATION_INTERVAL_SECONDS=3600),
            report_source=StaticReportSource(),
        )
        service.orchestrator.fetcher = FakeQuoteFetcher()

        await service.initialize()
        assert service.scheduler.running is True

        await service.shutdown()
        assert service.scheduler.running is False


class TestTrustRecords:

    @pytest.mark.asyncio
    async def test_unseen_registry_nodes_are_included(self):
        service = AttestationNetworkService.from_settings(make_settings())

        records = await service.trust_records()

        assert [(r.tee_id, r.trust_score, r.status) for r in records] == [
            ("tee-a", 0, TrustStatus.WARNING),
            ("tee-b", 0, TrustStatus.WARNING),
            ("tee-c", 0, TrustStatus.WARNING),
        ]
