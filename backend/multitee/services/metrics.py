"""
Prometheus Metrics Service for the verification pipeline

Provides metrics collection for:
- Verification cycles (runs, skips, duration)
- Per-peer verification outcomes
- Ledger batch submissions

Each service context owns its own CollectorRegistry, so several instances
(e.g. in tests) never collide on metric names.
"""

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)
from multitee.core.logging import get_logger

logger = get_logger(__name__)


class MetricsService:
    """
    Collects and exposes Prometheus metrics.

    All metrics are prefixed with 'multitee_' to avoid collisions.
    """

    def __init__(self):
        self.registry = CollectorRegistry()

        # Cycle Metrics
        self.cycles_total = Counter(
            "multitee_verification_cycles_total",
            "Verification cycles by outcome",
            ["outcome"],
            registry=self.registry,
        )

        self.cycle_duration_seconds = Histogram(
            "multitee_verification_cycle_duration_seconds",
            "Verification cycle duration in seconds",
            buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
            registry=self.registry,
        )

        # Peer Metrics
        self.peer_verifications_total = Counter(
            "multitee_peer_verifications_total",
            "Peer verification results",
            ["peer", "result"],
            registry=self.registry,
        )

        # Ledger Metrics
        self.ledger_submissions_total = Counter(
            "multitee_ledger_submissions_total",
            "Ledger batch submissions by status",
            ["status"],
            registry=self.registry,
        )

        self.ledger_last_success_timestamp = Gauge(
            "multitee_ledger_last_success_timestamp",
            "Timestamp of the last accepted batch",
            registry=self.registry,
        )

        logger.info("Prometheus metrics service initialized successfully")

    def record_cycle(self, outcome: str, duration_seconds: float = None):
        """
        Record a finished or skipped cycle.

        Args:
            outcome: 'completed', 'skipped' or 'failed'
            duration_seconds: Wall time of the cycle, if it ran
        """
        self.cycles_total.labels(outcome=outcome).inc()
        if duration_seconds is not None:
            self.cycle_duration_seconds.observe(duration_seconds)

    def record_peer_result(self, peer: str, result: str):
        """result is one of 'verified', 'rejected' or 'unreachable'."""
        self.peer_verifications_total.labels(peer=peer, result=result).inc()

    def record_submission(self, success: bool):
        self.ledger_submissions_total.labels(
            status="accepted" if success else "failed"
        ).inc()
        if success:
            self.ledger_last_success_timestamp.set_to_current_time()

    def get_metrics(self) -> bytes:
        """
        Generate Prometheus metrics in text format.

        Returns:
            Metrics data as bytes in Prometheus format
        """
        try:
            return generate_latest(self.registry)
        except Exception as e:
            logger.error(f"Error generating metrics: {e}")
            return b""

    def get_content_type(self) -> str:
        return CONTENT_TYPE_LATEST
