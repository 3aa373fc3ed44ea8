"""
HTTP API tests

The lifespan is not run by ASGITransport, so each test prepares the service
context itself.
"""

import pytest
import pytest_asyncio
from fastapi import status
from httpx import ASGITransport, AsyncClient

from multitee.core.config import Settings
from multitee.main import create_app
from multitee.services.attestation import (
    AttestationNetworkService,
    LedgerReadError,
)
from multitee.services.attestation.anomaly import CORRUPTED_ATTESTATION_REPORT
from tests.fakes import (
    INVALID_QUOTE,
    VALID_QUOTE,
    FakeQuoteFetcher,
    FakeQuoteVerifier,
    RecordingLedger,
    StaticReportSource,
)


@pytest.fixture
def service():
    settings = Settings(
        APP_ID="tee-a",
        LEDGER_BACKEND="memory",
        VERIFICATION_ENABLED=False,
        PEER_NODES=(
            "tee-a=https://tee-a.example,"
            "tee-b=https://tee-b.example,"
            "tee-c=https://tee-c.example"
        ),
    )
    service = AttestationNetworkService.from_settings(
        settings,
        ledger=RecordingLedger(),
        verifier=FakeQuoteVerifier(verified_quotes={VALID_QUOTE}),
        report_source=StaticReportSource(quote="0400aabb"),
    )
    service.orchestrator.fetcher = FakeQuoteFetcher(
        {"tee-b": VALID_QUOTE, "tee-c": INVALID_QUOTE}
    )
    return service


@pytest_asyncio.fixture
async def client(service):
    app = create_app(service)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestAttestationEndpoints:

    @pytest.mark.asyncio
    async def test_report_not_ready(self, client):
        response = await client.get("/attestation")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["detail"] == "Attestation report not generated yet"

    @pytest.mark.asyncio
    async def test_report_served(self, client, service):
        await service.local.generate()

        response = await client.get("/attestation")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["quote"] == "0400aabb"
        assert data["hash_algorithm"] == "sha256"

    @pytest.mark.asyncio
    async def test_toggle_anomaly(self, client, service):
        await service.local.generate()

        response = await client.get("/toggle-anomaly")
        assert response.json() == {"status": True}
        response = await client.get("/attestation")
        assert response.json()["quote"] == CORRUPTED_ATTESTATION_REPORT.quote

        response = await client.get("/toggle-anomaly")
        assert response.json() == {"status": False}
        response = await client.get("/attestation")
        assert response.json()["quote"] == "0400aabb"


class TestVerificationEndpoints:

    @pytest.mark.asyncio
    async def test_run_cycle(self, client, service):
        response = await client.post("/verification/run")

        assert response.status_code == status.HTTP_200_OK
        results = response.json()["results"]
        assert [(r["verifier_id"], r["verified_id"], r["success"]) for r in results] == [
            ("tee-a", "tee-b", True),
            ("tee-a", "tee-c", False),
        ]
        assert len(service.ledger.submissions) == 1

    @pytest.mark.asyncio
    async def test_run_rejected_while_cycle_running(self, client, service):
        service.scheduler._cycle_running = True

        response = await client.post("/verification/run")

        assert response.status_code == status.HTTP_409_CONFLICT


class TestTrustEndpoints:

    @pytest.mark.asyncio
    async def test_trust_after_cycle(self, client):
        await client.post("/verification/run")

        response = await client.get("/trust")

        assert response.status_code == status.HTTP_200_OK
        records = {r["tee_id"]: r for r in response.json()}
        assert set(records) == {"tee-a", "tee-b", "tee-c"}
        assert (records["tee-b"]["trust_score"], records["tee-b"]["status"]) == (100, "secure")
        assert (records["tee-c"]["trust_score"], records["tee-c"]["status"]) == (0, "anomaly")
        # Never verified by anyone yet
        assert (records["tee-a"]["total_verifications"], records["tee-a"]["status"]) == (0, "warning")

    @pytest.mark.asyncio
    async def test_single_node(self, client):
        await client.post("/verification/run")

        response = await client.get("/trust/tee-b")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "tee_id": "tee-b",
            "total_verifications": 1,
            "successful_verifications": 1,
            "trust_score": 100,
            "status": "secure",
        }

    @pytest.mark.asyncio
    async def test_events(self, client):
        await client.post("/verification/run")
        await client.post("/verification/run")

        response = await client.get("/trust/events")
        assert len(response.json()) == 4
        assert all(e["timestamp"] for e in response.json())

        response = await client.get("/trust/events", params={"from_block": 2})
        assert [e["block_number"] for e in response.json()] == [2, 2]

    @pytest.mark.asyncio
    async def test_ledger_read_failure(self, client, service):
        async def broken():
            raise LedgerReadError("rpc down")

        service.ledger.get_all_counts = broken

        response = await client.get("/trust")

        assert response.status_code == status.HTTP_502_BAD_GATEWAY


class TestOperationalEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, client, service):
        response = await client.get("/health")
        data = response.json()
        assert data["status"] == "degraded"
        assert data["app_id"] == "tee-a"
        assert data["peers"] == 2

        await service.local.generate()
        response = await client.get("/health")
        data = response.json()
        assert data["status"] == "healthy"
        assert data["scheduler_running"] is False
        assert data["anomaly_active"] is False

    @pytest.mark.asyncio
    async def test_metrics(self, client):
        await client.post("/verification/run")

        response = await client.get("/metrics")

        assert response.status_code == status.HTTP_200_OK
        assert "multitee_verification_cycles_total" in response.text
        assert 'peer="tee-b"' in response.text
