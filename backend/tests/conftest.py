"""Shared pytest fixtures for samlink tests."""

import pytest

from samlink.cache import InMemoryCache
from samlink.resolution.classifier import ResolutionClassifier
from samlink.resolution.matcher import CandidateScorer
from samlink.resolution.models import RegistryCandidate
from samlink.resolution.resolver import EntityResolver
from samlink.resolution.retriever import CandidateRetriever

from fixtures.registry import (
    ACME_CA_RECORD,
    HONEYWELL_RECORD,
    FakeClock,
    FakeRegistry,
    no_sleep,
)


@pytest.fixture
def clock():
    """Controllable monotonic clock."""
    return FakeClock()


@pytest.fixture
def classifier():
    """Classifier with the production thresholds, independent of env."""
    return ResolutionClassifier(
        scorer=CandidateScorer(location_bonus=0.1),
        auto_link_threshold=0.55,
        relevance_floor=0.5,
        max_review_candidates=5,
    )


@pytest.fixture
def make_retriever(clock):
    """Factory for a retriever over a scripted registry, with no real sleeps."""

    def _make(registry: FakeRegistry, **kwargs) -> CandidateRetriever:
        kwargs.setdefault("cache", InMemoryCache(default_ttl=300.0, clock=clock))
        kwargs.setdefault("cache_ttl", 300.0)
        kwargs.setdefault("strategy_delay", 0.2)
        kwargs.setdefault("rate_limit_retry_delay", 2.0)
        kwargs.setdefault("sleep", no_sleep)
        return CandidateRetriever(registry, **kwargs)

    return _make


@pytest.fixture
def make_resolver(make_retriever, classifier):
    """Factory for a resolver over a scripted registry."""

    def _make(registry: FakeRegistry) -> EntityResolver:
        return EntityResolver(make_retriever(registry), classifier)

    return _make


@pytest.fixture
def honeywell():
    return RegistryCandidate.from_sam_record(HONEYWELL_RECORD)


@pytest.fixture
def acme_ca():
    return RegistryCandidate.from_sam_record(ACME_CA_RECORD)
