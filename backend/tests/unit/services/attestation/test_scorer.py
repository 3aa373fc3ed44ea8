"""
Trust Scorer Tests

Priority: multitee/services/attestation/scorer.py
Focus: score arithmetic, status boundaries, configurable thresholds
"""

import pytest

from multitee.services.attestation import TrustScorer, TrustStatus, VerificationCounts


class TestScore:

    def test_partial_success(self, scorer):
        assert scorer.score(10, 7).trust_score == 70

    def test_no_verifications_is_warning(self, scorer):
        result = scorer.score(0, 0)
        assert result.trust_score == 0
        assert result.status == TrustStatus.WARNING

    def test_all_successful_is_secure(self, scorer):
        result = scorer.score(4, 4)
        assert result.trust_score == 100
        assert result.status == TrustStatus.SECURE

    def test_all_failed_is_anomaly(self, scorer):
        result = scorer.score(6, 0)
        assert result.trust_score == 0
        assert result.status == TrustStatus.ANOMALY

    @pytest.mark.parametrize("total, successful, expected", [
        (8, 5, 63),      # 62.5 rounds half up
        (3, 2, 67),      # 66.67
        (3, 1, 33),      # 33.33
        (200, 1, 1),     # 0.5 rounds half up
        (1000, 4, 0),    # 0.4
    ])
    def test_rounding(self, scorer, total, successful, expected):
        assert scorer.score(total, successful).trust_score == expected

    @pytest.mark.parametrize("total, successful", [(-1, 0), (1, -1), (3, 4)])
    def test_invalid_counts(self, scorer, total, successful):
        with pytest.raises(ValueError):
            scorer.score(total, successful)


class TestBoundaries:

    @pytest.mark.parametrize("trust_score, expected", [
        (100, TrustStatus.SECURE),
        (75, TrustStatus.SECURE),
        (74, TrustStatus.WARNING),
        (51, TrustStatus.WARNING),
        (50, TrustStatus.ANOMALY),
        (0, TrustStatus.ANOMALY),
    ])
    def test_default_boundaries(self, scorer, trust_score, expected):
        assert scorer.classify(trust_score) == expected

    def test_alternative_warning_boundary(self):
        scorer = TrustScorer(secure_threshold=75, warning_threshold=40)
        assert scorer.score(10, 4).status == TrustStatus.WARNING
        assert scorer.score(10, 3).status == TrustStatus.ANOMALY
        assert TrustScorer().score(10, 4).status == TrustStatus.ANOMALY

    @pytest.mark.parametrize("secure, warning", [(50, 60), (101, 50), (75, -1)])
    def test_invalid_thresholds(self, secure, warning):
        with pytest.raises(ValueError):
            TrustScorer(secure_threshold=secure, warning_threshold=warning)


class TestRecords:

    def test_record_from_counts(self, scorer):
        record = scorer.record(VerificationCounts(tee_id="tee-b", total=10, successful=7))
        assert record.tee_id == "tee-b"
        assert record.total_verifications == 10
        assert record.successful_verifications == 7
        assert record.trust_score == 70
        assert record.status == TrustStatus.WARNING

    def test_records_keep_order(self, scorer):
        records = scorer.records([
            VerificationCounts(tee_id="tee-c", total=2, successful=0),
            VerificationCounts(tee_id="tee-b", total=2, successful=2),
        ])
        assert [(r.tee_id, r.status) for r in records] == [
            ("tee-c", TrustStatus.ANOMALY),
            ("tee-b", TrustStatus.SECURE),
        ]
