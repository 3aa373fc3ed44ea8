"""Custom exceptions for network attestation."""


class AttestationNetworkError(Exception):
    """Base exception for network attestation."""

    pass


class QuoteFetchError(AttestationNetworkError):
    """Raised when a peer's quote cannot be retrieved."""

    def __init__(self, tee_id: str, message: str):
        self.tee_id = tee_id
        super().__init__(f"Quote fetch from '{tee_id}' failed: {message}")


class QuoteFormatError(AttestationNetworkError):
    """Raised when a quote is not valid hex."""

    pass


class LedgerSubmissionError(AttestationNetworkError):
    """Raised when a verification batch is rejected by the ledger."""

    def __init__(self, cycle_id: str, message: str):
        self.cycle_id = cycle_id
        super().__init__(f"Batch {cycle_id} submission failed: {message}")


class LedgerReadError(AttestationNetworkError):
    """Raised when verification counts cannot be read from the ledger."""

    pass


class AttestationReportUnavailableError(AttestationNetworkError):
    """Raised when the local attestation report has not been generated yet."""

    def __init__(self, message: str = "Attestation report not generated yet"):
        super().__init__(message)


class CycleAlreadyRunningError(AttestationNetworkError):
    """Raised when a manual trigger overlaps a running verification cycle."""

    pass
