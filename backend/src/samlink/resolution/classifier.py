"""Threshold-based classification of scored candidates."""

from ..config import get_settings
from .matcher import CandidateScorer
from .models import (
    Matched,
    NoMatch,
    Pending,
    RegistryCandidate,
    ResolutionOutcome,
    ResolutionQuery,
)


class ResolutionClassifier:
    """Decides the disposition of a resolution from its candidates.

    - best score >= auto_link_threshold: Matched
    - best score >= relevance_floor: Pending (queued for review)
    - otherwise: NoMatch

    The floor only keeps noise out of the review queue.
    """

    def __init__(
        self,
        scorer: CandidateScorer | None = None,
        auto_link_threshold: float | None = None,
        relevance_floor: float | None = None,
        max_review_candidates: int | None = None,
    ):
        settings = get_settings()
        self.scorer = scorer or CandidateScorer()
        self.auto_link_threshold = (
            settings.auto_link_threshold
            if auto_link_threshold is None
            else auto_link_threshold
        )
        self.relevance_floor = (
            settings.relevance_floor if relevance_floor is None else relevance_floor
        )
        self.max_review_candidates = (
            settings.max_review_candidates
            if max_review_candidates is None
            else max_review_candidates
        )

    def should_auto_link(self, score: float) -> bool:
        return score >= self.auto_link_threshold

    def is_relevant(self, score: float) -> bool:
        return score >= self.relevance_floor

    def classify(
        self,
        query: ResolutionQuery,
        candidates: list[RegistryCandidate],
    ) -> ResolutionOutcome:
        """Classify retrieved candidates for a query."""
        if not candidates:
            return NoMatch(subject_name=query.subject_name)

        scored = self.scorer.score_all(
            query.subject_name, candidates, state_hint=query.state_hint
        )
        relevant = [s for s in scored if self.is_relevant(s.score)]

        if not relevant:
            return NoMatch(
                subject_name=query.subject_name,
                sample_raw=candidates[: self.max_review_candidates],
            )

        # sorted() is stable, so equal scores keep retrieval order
        relevant = sorted(relevant, key=lambda s: s.score, reverse=True)
        best = relevant[0]

        if self.should_auto_link(best.score):
            return Matched(candidate=best.candidate, score=best.score)

        return Pending(
            subject_name=query.subject_name,
            top_candidates=relevant[: self.max_review_candidates],
        )
