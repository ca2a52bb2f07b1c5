"""Candidate scoring for SAM.gov entity resolution.

Scores a registry candidate against a CRM company name:
1. Bigram (Dice) similarity of the normalized names
2. Best of legal name and DBA name
3. Bonus when the physical address state matches the company's state

The max-over-names rule means either identifier matching well is enough.
The state bonus corroborates a match without being able to create one.
"""

import re
from collections import Counter
from typing import Any, Iterable

from ..config import get_settings
from .models import RegistryCandidate, ScoredCandidate
from .normalize import normalize_name

_FOLD_RE = re.compile(r"[^a-z0-9]")


def _fold(value: str) -> str:
    return _FOLD_RE.sub("", value.lower())


def _bigrams(value: str) -> Counter[str]:
    return Counter(value[i : i + 2] for i in range(len(value) - 1))


def dice_coefficient(a: str, b: str) -> float:
    """Bigram overlap similarity in [0, 1].

    Both inputs are case-folded and stripped of non-alphanumerics. Each
    bigram occurrence counts at most once toward the overlap.
    """
    s1 = _fold(a or "")
    s2 = _fold(b or "")

    if s1 == s2:
        return 1.0
    if len(s1) < 2 or len(s2) < 2:
        return 0.0

    common = sum((_bigrams(s1) & _bigrams(s2)).values())
    return (2.0 * common) / (len(s1) + len(s2) - 2)


class CandidateScorer:
    """Combines name, DBA and location signals into one match score."""

    def __init__(self, location_bonus: float | None = None):
        """Initialize scorer.

        Args:
            location_bonus: Added when the state hint matches the
                candidate's address state (default from settings)
        """
        if location_bonus is None:
            location_bonus = get_settings().location_bonus
        self.location_bonus = location_bonus

    def score_details(
        self,
        subject_name: str,
        candidate: RegistryCandidate,
        state_hint: str | None = None,
    ) -> dict[str, Any]:
        """Score a candidate and report the individual signals."""
        subject = normalize_name(subject_name)
        name_score = dice_coefficient(subject, normalize_name(candidate.legal_name))

        alt_score = 0.0
        if candidate.alternate_name:
            alt_score = dice_coefficient(
                subject, normalize_name(candidate.alternate_name)
            )

        state_match = bool(
            state_hint
            and candidate.state_code
            and state_hint.strip().lower() == candidate.state_code.strip().lower()
        )
        bonus = self.location_bonus if state_match else 0.0

        return {
            "name_score": name_score,
            "alt_score": alt_score,
            "state_match": state_match,
            "score": min(1.0, max(name_score, alt_score) + bonus),
        }

    def score(
        self,
        subject_name: str,
        candidate: RegistryCandidate,
        state_hint: str | None = None,
    ) -> float:
        """Combined match score in [0, 1]."""
        return self.score_details(subject_name, candidate, state_hint)["score"]

    def score_all(
        self,
        subject_name: str,
        candidates: Iterable[RegistryCandidate],
        state_hint: str | None = None,
    ) -> list[ScoredCandidate]:
        """Score candidates, keeping retrieval order."""
        return [
            ScoredCandidate(
                candidate=candidate,
                score=self.score(subject_name, candidate, state_hint),
            )
            for candidate in candidates
        ]
