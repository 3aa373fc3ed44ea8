"""
Attestation Anomaly Injector

Lets an operator make this node impersonate a compromised TEE: while active,
the node serves a corrupted report instead of its own. Used to check that
peers record failed verifications and that the trust score drops.
"""

import logging

from .models import AttestationReport

logger = logging.getLogger(__name__)

# Quote bytes and the app-id digest are deliberately broken
CORRUPTED_ATTESTATION_REPORT = AttestationReport(
    quote="CORRUPTED01234567890abcdefe0855a6384fa1c8a6ab36d0dcbfaa11a5753e5a070c08",
    event_log=(
        '[{"imr":3,"event_type":134217729,"digest":"CORRUPTED","event":"app-id",'
        '"event_payload":"d3d457f80a1e5c9f51c27dcc7125ba21f2418e08"}]'
    ),
    hash_algorithm="sha256",
    prefix="app-data",
)


class AnomalyInjector:
    """Toggle that swaps the locally served report for a corrupted one."""

    def __init__(self, active: bool = False):
        self._active = active

    @property
    def active(self) -> bool:
        return self._active

    def toggle(self) -> bool:
        self._active = not self._active
        logger.warning(f"TEE has been marked as anomaly: {self._active}")
        return self._active

    def apply(self, report: AttestationReport) -> AttestationReport:
        if self._active:
            logger.info("TEE is marked as anomaly, returning corrupted attestation")
            return CORRUPTED_ATTESTATION_REPORT
        return report
