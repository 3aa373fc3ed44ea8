"""
Trust Scorer

Turns historical verification counts into a 0-100 trust score and a
secure / warning / anomaly classification.

Score legend with the default boundaries:
- 75 and above: secure
- 51 to 74: warning
- 50 and below: anomaly
- no verifications yet: warning with score 0
"""

from typing import Iterable, List

from .models import TrustRecord, TrustScore, TrustStatus, VerificationCounts

DEFAULT_SECURE_THRESHOLD = 75
DEFAULT_WARNING_THRESHOLD = 51


class TrustScorer:
    """Pure, side-effect-free trust classification."""

    def __init__(
        self,
        secure_threshold: int = DEFAULT_SECURE_THRESHOLD,
        warning_threshold: int = DEFAULT_WARNING_THRESHOLD,
    ):
        if not 0 <= warning_threshold <= secure_threshold <= 100:
            raise ValueError(
                "Thresholds must satisfy 0 <= warning <= secure <= 100, "
                f"got warning={warning_threshold} secure={secure_threshold}"
            )
        self.secure_threshold = secure_threshold
        self.warning_threshold = warning_threshold

    def score(self, total: int, successful: int) -> TrustScore:
        """
        Score a node from its verification counts.

        Raises:
            ValueError: On negative counts or successful > total
        """
        if total < 0 or successful < 0:
            raise ValueError("Verification counts cannot be negative")
        if successful > total:
            raise ValueError(
                f"successful ({successful}) cannot exceed total ({total})"
            )

        if total == 0:
            return TrustScore(trust_score=0, status=TrustStatus.WARNING)

        # Integer half-up rounding of successful / total * 100
        trust_score = (200 * successful + total) // (2 * total)
        return TrustScore(trust_score=trust_score, status=self.classify(trust_score))

    def classify(self, trust_score: int) -> TrustStatus:
        if trust_score >= self.secure_threshold:
            return TrustStatus.SECURE
        if trust_score >= self.warning_threshold:
            return TrustStatus.WARNING
        return TrustStatus.ANOMALY

    def record(self, counts: VerificationCounts) -> TrustRecord:
        result = self.score(counts.total, counts.successful)
        return TrustRecord(
            tee_id=counts.tee_id,
            total_verifications=counts.total,
            successful_verifications=counts.successful,
            trust_score=result.trust_score,
            status=result.status,
        )

    def records(self, all_counts: Iterable[VerificationCounts]) -> List[TrustRecord]:
        return [self.record(counts) for counts in all_counts]
