"""Unit tests for Dice similarity and candidate scoring.

Run with: pytest tests/unit/resolution/test_matcher.py -v
"""

import pytest

from samlink.resolution.matcher import CandidateScorer, dice_coefficient
from samlink.resolution.models import RegistryCandidate

from fixtures.registry import ACME_TX_RECORD, UNRELATED_RECORD


class TestDiceCoefficient:
    """Tests for the bigram similarity function."""

    def test_identical_strings_score_one(self):
        assert dice_coefficient("acme", "acme") == 1.0
        # Folding ignores case and punctuation
        assert dice_coefficient("Acme!", "ACME") == 1.0

    def test_single_characters_score_zero(self):
        assert dice_coefficient("a", "b") == 0.0
        assert dice_coefficient("a", "abc") == 0.0
        assert dice_coefficient("", "abc") == 0.0

    def test_known_value(self):
        """Test night/nacht, which share only the "ht" bigram."""
        assert dice_coefficient("night", "nacht") == pytest.approx(0.25)

    def test_repeated_bigrams_count_once_each(self):
        """Test multiset overlap: one "aa" in the short string matches once."""
        assert dice_coefficient("aaaa", "aa") == pytest.approx(0.5)

    @pytest.mark.parametrize(
        "a,b",
        [
            ("honeywell", "honeywell international"),
            ("lockheed martin", "martin marietta"),
            ("acme", "acne"),
        ],
    )
    def test_symmetric_and_bounded(self, a, b):
        score = dice_coefficient(a, b)
        assert score == dice_coefficient(b, a)
        assert 0.0 <= score <= 1.0

    def test_disjoint_strings(self):
        assert dice_coefficient("abc", "xyz") == 0.0


class TestCandidateScorer:
    """Tests for combined candidate scoring."""

    def test_short_brand_name_against_long_legal_name(self, honeywell):
        """Test that "Honeywell" clears the 0.55 auto-link threshold."""
        scorer = CandidateScorer(location_bonus=0.1)

        score = scorer.score("Honeywell", honeywell)

        assert score == pytest.approx(16 / 29)
        assert score >= 0.55

    def test_location_bonus_added(self, honeywell):
        """Test that a matching state adds exactly the bonus."""
        scorer = CandidateScorer(location_bonus=0.1)

        details = scorer.score_details("Honeywell", honeywell, state_hint="nc")

        assert details["state_match"] is True
        assert details["score"] == pytest.approx(16 / 29 + 0.1)

    def test_location_bonus_clamped(self, acme_ca):
        """Test that an exact name plus a state match stays at 1.0."""
        scorer = CandidateScorer(location_bonus=0.1)

        assert scorer.score("Acme Co", acme_ca, state_hint="CA") == 1.0

    def test_state_mismatch_no_bonus(self, acme_ca):
        scorer = CandidateScorer(location_bonus=0.1)

        details = scorer.score_details("Acme", acme_ca, state_hint="TX")

        assert details["state_match"] is False
        assert details["score"] == 1.0

    def test_alternate_name_can_carry_the_match(self):
        """Test that the best of legal and DBA names is used."""
        scorer = CandidateScorer(location_bonus=0.1)
        candidate = RegistryCandidate.from_sam_record(ACME_TX_RECORD)

        details = scorer.score_details("Acme Texas", candidate)

        assert details["name_score"] < 0.6
        assert details["alt_score"] == 1.0
        assert details["score"] == 1.0

    def test_unrelated_candidate_scores_low(self):
        scorer = CandidateScorer(location_bonus=0.1)
        candidate = RegistryCandidate.from_sam_record(UNRELATED_RECORD)

        assert scorer.score("Honeywell", candidate) < 0.5

    def test_score_all_keeps_order(self, honeywell, acme_ca):
        scorer = CandidateScorer(location_bonus=0.1)

        scored = scorer.score_all("Acme", [honeywell, acme_ca])

        assert [s.candidate.uei for s in scored] == [honeywell.uei, acme_ca.uei]
        assert scored[1].score == 1.0
