"""
Pytest configuration and shared fixtures for all tests.

The settings module is evaluated at import time, so the environment is
prepared before anything from multitee is imported:
- LEDGER_BACKEND=memory avoids requiring chain credentials
- APP_ID gives the test node an identity
"""
import os
import sys
from pathlib import Path

os.environ.setdefault("LEDGER_BACKEND", "memory")
os.environ.setdefault("APP_ID", "tee-a")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("VERIFICATION_ENABLED", "false")

# Add backend directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from multitee.services.attestation import (
    InMemoryLedgerReporter,
    TeeNode,
    TrustScorer,
    VerificationOrchestrator,
)
from tests.fakes import VALID_QUOTE, FakeQuoteFetcher, FakeQuoteVerifier


@pytest.fixture
def self_node() -> TeeNode:
    return TeeNode(id="tee-a", endpoint="https://tee-a.example", is_self=True)


@pytest.fixture
def network(self_node):
    """Three-node network: A (self), B and C."""
    return [
        self_node,
        TeeNode(id="tee-b", endpoint="https://tee-b.example"),
        TeeNode(id="tee-c", endpoint="https://tee-c.example"),
    ]


@pytest.fixture
def fetcher() -> FakeQuoteFetcher:
    return FakeQuoteFetcher()


@pytest.fixture
def verifier() -> FakeQuoteVerifier:
    return FakeQuoteVerifier(verified_quotes={VALID_QUOTE})


@pytest.fixture
def ledger() -> InMemoryLedgerReporter:
    return InMemoryLedgerReporter()


@pytest.fixture
def orchestrator(fetcher, verifier, ledger) -> VerificationOrchestrator:
    return VerificationOrchestrator(fetcher=fetcher, verifier=verifier, ledger=ledger)


@pytest.fixture
def scorer() -> TrustScorer:
    return TrustScorer()
