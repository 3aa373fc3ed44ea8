"""
Local Attestation Report

Generates and serves this node's own attestation report.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from .anomaly import AnomalyInjector
from .exceptions import AttestationReportUnavailableError
from .models import AttestationReport

logger = logging.getLogger(__name__)


class ReportSource(ABC):
    """Produces a fresh attestation report for the local TEE."""

    @abstractmethod
    async def generate(self) -> AttestationReport:
        pass


class DstackReportSource(ReportSource):
    """
    Requests a TDX quote from the dstack guest agent (tappd).

    The agent listens on a Unix socket inside the CVM and speaks JSON over
    its prpc endpoint.
    """

    QUOTE_PATH = "/prpc/Tappd.TdxQuote?json"

    def __init__(
        self,
        socket_path: str = "/var/run/tappd.sock",
        report_data: str = "user-data",
        hash_algorithm: str = "sha256",
        timeout_seconds: float = 30.0,
    ):
        self.socket_path = socket_path
        self.report_data = report_data
        self.hash_algorithm = hash_algorithm
        self.timeout_seconds = timeout_seconds

    async def generate(self) -> AttestationReport:
        transport = httpx.AsyncHTTPTransport(uds=self.socket_path)
        async with httpx.AsyncClient(
            transport=transport, base_url="http://localhost", timeout=self.timeout_seconds
        ) as client:
            response = await client.post(
                self.QUOTE_PATH,
                json={
                    "report_data": self.report_data.encode().hex(),
                    "hash_algorithm": self.hash_algorithm,
                    "prefix": "app-data",
                },
            )
            response.raise_for_status()
            data = response.json()

        return AttestationReport(
            quote=data["quote"],
            event_log=data.get("event_log", ""),
            hash_algorithm=self.hash_algorithm,
            prefix="app-data",
        )


class LocalAttestationService:
    """
    Owns the local report and the anomaly toggle.

    A failed generation is not fatal: the node keeps verifying its peers and
    answers report requests with AttestationReportUnavailableError until a
    later `generate()` succeeds.
    """

    def __init__(self, source: ReportSource, anomaly: Optional[AnomalyInjector] = None):
        self.source = source
        self.anomaly = anomaly or AnomalyInjector()
        self._report: Optional[AttestationReport] = None

    @property
    def available(self) -> bool:
        return self._report is not None

    async def generate(self) -> Optional[AttestationReport]:
        try:
            report = await self.source.generate()
        except Exception as e:
            logger.error(f"Failed to generate attestation report: {e}", exc_info=True)
            return None

        self._report = report
        logger.info("Attestation report generated successfully")
        return report

    def get_report(self) -> AttestationReport:
        """
        Return the report to serve to peers.

        Raises:
            AttestationReportUnavailableError: If no report has been generated yet
        """
        if self._report is None:
            raise AttestationReportUnavailableError()
        return self.anomaly.apply(self._report)

    def toggle_anomaly(self) -> bool:
        return self.anomaly.toggle()
