"""
Attestation Module

Mutual remote attestation across a network of TEE nodes.

This module provides:
- VerificationOrchestrator: One verification cycle over all peers
- VerificationScheduler: Periodic, non-overlapping cycles
- BaseQuoteVerifier / DcapQuoteVerifier: Quote verification backends
- BaseLedgerReporter and implementations: Batch submission and count reads
- TrustScorer: Trust score and health classification
- LocalAttestationService / AnomalyInjector: This node's own report
- AttestationNetworkService: Lifecycle context wiring all of the above
"""

from .models import (
    AttestationQuote,
    AttestationReport,
    LedgerReceipt,
    QuoteEncoding,
    TeeNode,
    TrustRecord,
    TrustScore,
    TrustStatus,
    VerificationBatch,
    VerificationCounts,
    VerificationEvent,
    VerificationOutcome,
    VerificationResult,
)
from .exceptions import (
    AttestationNetworkError,
    AttestationReportUnavailableError,
    CycleAlreadyRunningError,
    LedgerReadError,
    LedgerSubmissionError,
    QuoteFetchError,
    QuoteFormatError,
)
from .base import BaseQuoteVerifier, VerdictClassifier, marker_classifier
from .dcap import DcapQuoteVerifier
from .fetcher import QuoteFetcher
from .registry import NodeRegistry
from .scratch import ScratchSpace
from .ledger import BaseLedgerReporter, InMemoryLedgerReporter, Web3LedgerReporter
from .scorer import TrustScorer
from .anomaly import AnomalyInjector
from .report import DstackReportSource, LocalAttestationService, ReportSource
from .orchestrator import VerificationOrchestrator
from .scheduler import VerificationScheduler
from .service import AttestationNetworkService

__all__ = [
    # Models
    "AttestationQuote",
    "AttestationReport",
    "LedgerReceipt",
    "QuoteEncoding",
    "TeeNode",
    "TrustRecord",
    "TrustScore",
    "TrustStatus",
    "VerificationBatch",
    "VerificationCounts",
    "VerificationEvent",
    "VerificationOutcome",
    "VerificationResult",
    # Exceptions
    "AttestationNetworkError",
    "AttestationReportUnavailableError",
    "CycleAlreadyRunningError",
    "LedgerReadError",
    "LedgerSubmissionError",
    "QuoteFetchError",
    "QuoteFormatError",
    # Verification
    "BaseQuoteVerifier",
    "VerdictClassifier",
    "marker_classifier",
    "DcapQuoteVerifier",
    "QuoteFetcher",
    "NodeRegistry",
    "ScratchSpace",
    # Ledger
    "BaseLedgerReporter",
    "InMemoryLedgerReporter",
    "Web3LedgerReporter",
    # Trust
    "TrustScorer",
    # Local report
    "AnomalyInjector",
    "DstackReportSource",
    "LocalAttestationService",
    "ReportSource",
    # Orchestration
    "VerificationOrchestrator",
    "VerificationScheduler",
    "AttestationNetworkService",
]
