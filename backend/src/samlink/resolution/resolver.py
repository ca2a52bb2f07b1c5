"""Entity resolver combining retrieval and classification.

Resolution flow:
1. Normalize the company name; an empty name is a NoMatch without any
   registry call
2. Retrieve candidates (cached, multi-strategy)
3. Score and classify into Matched / Pending / NoMatch

The resolver always returns an outcome. Registry failures degrade to fewer
candidates, never to an exception.
"""

import asyncio

from ..logging import get_context_logger, log_resolution_event
from .classifier import ResolutionClassifier
from .models import (
    Matched,
    NoMatch,
    Pending,
    ResolutionOutcome,
    ResolutionQuery,
    ScoredCandidate,
)
from .normalize import normalize_name
from .retriever import CandidateRetriever

logger = get_context_logger(__name__)


class EntityResolver:
    """Resolves CRM companies to SAM.gov entities."""

    def __init__(
        self,
        retriever: CandidateRetriever,
        classifier: ResolutionClassifier | None = None,
    ):
        self.retriever = retriever
        self.classifier = classifier or ResolutionClassifier()

    async def resolve(self, query: ResolutionQuery) -> ResolutionOutcome:
        """Resolve one company.

        Args:
            query: Company name plus optional state and domain hints

        Returns:
            Matched, Pending or NoMatch
        """
        if not normalize_name(query.subject_name):
            logger.info("Company name is empty after normalization, skipping retrieval")
            return NoMatch(subject_name=query.subject_name)

        candidates = await self.retriever.retrieve(
            query.subject_name,
            state_hint=query.state_hint,
            domain_hint=query.domain_hint,
        )
        outcome = self.classifier.classify(query, candidates)

        matched_uei = None
        score = 0.0
        if isinstance(outcome, Matched):
            matched_uei = outcome.candidate.uei
            score = outcome.score
        elif isinstance(outcome, Pending):
            matched_uei = outcome.top_candidates[0].candidate.uei
            score = outcome.best_score

        log_resolution_event(
            subject_name=query.subject_name,
            disposition=outcome.disposition.value,
            matched_uei=matched_uei,
            score=score,
            candidate_count=len(candidates),
        )
        return outcome

    async def resolve_many(self, queries: list[ResolutionQuery]) -> list[ResolutionOutcome]:
        """Resolve several companies concurrently, preserving input order."""
        return list(await asyncio.gather(*(self.resolve(q) for q in queries)))

    async def search(self, query: ResolutionQuery, limit: int = 10) -> list[ScoredCandidate]:
        """Interactive search: relevant candidates, best first.

        Unlike `resolve`, this never decides a disposition; it feeds the
        manual linking UI.
        """
        if not normalize_name(query.subject_name):
            return []

        candidates = await self.retriever.retrieve(
            query.subject_name,
            state_hint=query.state_hint,
            domain_hint=query.domain_hint,
        )
        scored = self.classifier.scorer.score_all(
            query.subject_name, candidates, state_hint=query.state_hint
        )
        relevant = [s for s in scored if self.classifier.is_relevant(s.score)]
        relevant.sort(key=lambda s: s.score, reverse=True)
        return relevant[:limit]
