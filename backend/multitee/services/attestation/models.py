"""
Attestation Network Models

Data models for peer nodes, quotes, per-cycle verification results and the
trust records derived from ledger counts.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional

from .exceptions import QuoteFormatError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TeeNode(BaseModel):
    """A known TEE in the network. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    endpoint: str
    is_self: bool = False


class QuoteEncoding(str, Enum):
    """Transport form of a quote."""

    HEX = "hex"
    BINARY = "binary"


class AttestationQuote(BaseModel):
    """
    Attestation quote held only for the duration of one verification attempt.

    Peers serve quotes as hex text; the verification tool consumes the raw
    binary form.
    """

    model_config = ConfigDict(frozen=True)

    data: bytes
    encoding: QuoteEncoding

    @classmethod
    def from_hex(cls, text: str) -> "AttestationQuote":
        """Build a hex quote, stripping enclosing quotes, whitespace and 0x."""
        return cls(data=normalize_quote(text).encode("ascii"), encoding=QuoteEncoding.HEX)

    def to_binary(self) -> "AttestationQuote":
        """
        Convert to the canonical binary form.

        Raises:
            QuoteFormatError: If the hex payload is empty or malformed
        """
        if self.encoding == QuoteEncoding.BINARY:
            return self
        try:
            raw = bytes.fromhex(self.data.decode("ascii"))
        except (ValueError, UnicodeDecodeError) as e:
            raise QuoteFormatError(f"Quote is not valid hex: {e}") from e
        if not raw:
            raise QuoteFormatError("Quote is empty")
        return AttestationQuote(data=raw, encoding=QuoteEncoding.BINARY)


def normalize_quote(text: str) -> str:
    """Strip whitespace, any enclosing double quotes and a 0x prefix."""
    cleaned = text.strip()
    while len(cleaned) >= 2 and cleaned[0] == cleaned[-1] == '"':
        cleaned = cleaned[1:-1].strip()
    return cleaned.removeprefix("0x")


class VerificationOutcome(BaseModel):
    """Verdict returned by a quote verifier."""

    verified: bool
    diagnostics: str = ""


class VerificationResult(BaseModel):
    """Outcome of one node verifying one peer in one cycle."""

    verifier_id: str
    verified_id: str
    success: bool
    timestamp: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def check_not_self(self) -> "VerificationResult":
        if self.verifier_id == self.verified_id:
            raise ValueError(f"Node '{self.verifier_id}' cannot verify itself")
        return self


class VerificationBatch(BaseModel):
    """
    Ordered results of one verification cycle.

    Submitted to the ledger as one atomic unit.
    """

    cycle_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    started_at: datetime = Field(default_factory=_utcnow)
    results: List[VerificationResult] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def is_empty(self) -> bool:
        return not self.results

    def append(self, result: VerificationResult) -> None:
        self.results.append(result)


class TrustStatus(str, Enum):
    """Health classification derived from the trust score."""

    SECURE = "secure"
    WARNING = "warning"
    ANOMALY = "anomaly"


class TrustScore(BaseModel):
    trust_score: int = Field(..., ge=0, le=100)
    status: TrustStatus


class VerificationCounts(BaseModel):
    """Aggregate counts for one node as read from the ledger."""

    tee_id: str
    total: int = Field(..., ge=0)
    successful: int = Field(..., ge=0)


class TrustRecord(BaseModel):
    """Trust view of a node. Derived on demand, never stored."""

    tee_id: str
    total_verifications: int = Field(..., ge=0)
    successful_verifications: int = Field(..., ge=0)
    trust_score: int = Field(..., ge=0, le=100)
    status: TrustStatus

    @model_validator(mode="after")
    def check_counts(self) -> "TrustRecord":
        if self.successful_verifications > self.total_verifications:
            raise ValueError("successful_verifications cannot exceed total_verifications")
        return self


class LedgerReceipt(BaseModel):
    """Acknowledgement of an accepted batch."""

    cycle_id: str
    submitted: int
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None


class VerificationEvent(BaseModel):
    """Audit event emitted by the ledger for each submitted result."""

    verifier_id: str
    verified_id: str
    success: bool
    block_number: Optional[int] = None
    tx_hash: Optional[str] = None
    timestamp: Optional[datetime] = None


class AttestationReport(BaseModel):
    """This node's own attestation report as served to peers."""

    quote: str
    event_log: str = ""
    hash_algorithm: str = "sha256"
    prefix: str = "app-data"
