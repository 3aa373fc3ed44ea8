"""
Base Quote Verifier Interface

Abstract base class for quote verification backends, plus the verdict
classification strategy they share.
"""

from abc import ABC, abstractmethod
from typing import Callable

from .models import AttestationQuote, VerificationOutcome
from .scratch import ScratchSpace

# Maps the raw diagnostic text of a verification run to a verdict
VerdictClassifier = Callable[[str], bool]

DEFAULT_SUCCESS_MARKER = "Quote verified"


def marker_classifier(marker: str = DEFAULT_SUCCESS_MARKER) -> VerdictClassifier:
    """
    Build a classifier that accepts output containing `marker`.

    Empty output never matches. Swap this out once a backend reports a
    structured verdict.
    """
    if not marker:
        raise ValueError("Success marker must not be empty")

    def classify(diagnostics: str) -> bool:
        return bool(diagnostics) and marker in diagnostics

    return classify


class BaseQuoteVerifier(ABC):
    """
    Abstract base class for quote verification.

    Implementations must never raise: every failure of the underlying
    procedure is reported as `verified=False` with the error text in
    `diagnostics`.
    """

    def __init__(self, classifier: VerdictClassifier = None):
        self.classifier = classifier or marker_classifier()

    @abstractmethod
    async def verify(
        self, quote: AttestationQuote, scratch: ScratchSpace
    ) -> VerificationOutcome:
        """
        Verify a quote.

        Args:
            quote: Quote in hex or binary form
            scratch: Staging area owned by the caller for this verification

        Returns:
            VerificationOutcome with verdict and diagnostic text
        """
        pass

    def classify(self, diagnostics: str) -> VerificationOutcome:
        return VerificationOutcome(
            verified=self.classifier(diagnostics), diagnostics=diagnostics
        )
