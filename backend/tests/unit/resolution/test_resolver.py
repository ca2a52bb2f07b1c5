"""Unit tests for EntityResolver."""

import pytest

from samlink.ingestion.base import RegistryError
from samlink.resolution.models import Matched, NoMatch, Pending, ResolutionQuery

from fixtures.registry import (
    ACME_CA_RECORD,
    ACME_TX_RECORD,
    HONEYWELL_RECORD,
    UNRELATED_RECORD,
    FakeRegistry,
    sam_record,
)


class TestResolve:
    """Tests for single-company resolution."""

    @pytest.mark.asyncio
    async def test_short_name_auto_links(self, make_resolver):
        """Test "Honeywell" resolves to the long incorporated legal name."""
        resolver = make_resolver(FakeRegistry(responses=[[HONEYWELL_RECORD]]))

        outcome = await resolver.resolve(ResolutionQuery(subject_name="Honeywell"))

        assert isinstance(outcome, Matched)
        assert outcome.candidate.legal_name == "Honeywell International Inc"
        assert outcome.score >= 0.55

    @pytest.mark.asyncio
    async def test_state_bonus_clamped(self, make_resolver):
        resolver = make_resolver(FakeRegistry(responses=[[ACME_CA_RECORD]]))

        outcome = await resolver.resolve(
            ResolutionQuery(subject_name="Acme Co", state_hint="CA")
        )

        assert isinstance(outcome, Matched)
        assert outcome.score == 1.0

    @pytest.mark.asyncio
    async def test_malformed_record_still_resolves(self, make_resolver):
        record = sam_record("ACME00000009", "Acme Company", state="CA")
        record["entityRegistration"]["cageCode"] = 12345
        record["coreData"]["physicalAddress"]["zipCode"] = 94105
        resolver = make_resolver(FakeRegistry(responses=[[record]]))

        outcome = await resolver.resolve(
            ResolutionQuery(subject_name="Acme", state_hint="CA")
        )

        assert isinstance(outcome, Matched)
        assert outcome.candidate.address.zip_code == "94105"
        assert outcome.candidate.cage_code == "12345"

    @pytest.mark.asyncio
    async def test_empty_name_skips_registry(self, make_resolver):
        registry = FakeRegistry()
        resolver = make_resolver(registry)

        outcome = await resolver.resolve(ResolutionQuery(subject_name="  LLC  "))

        assert isinstance(outcome, NoMatch)
        assert registry.searches == []

    @pytest.mark.asyncio
    async def test_irrelevant_candidates(self, make_resolver):
        resolver = make_resolver(FakeRegistry(responses=[[UNRELATED_RECORD]]))

        outcome = await resolver.resolve(ResolutionQuery(subject_name="Honeywell"))

        assert isinstance(outcome, NoMatch)
        assert [c.uei for c in outcome.sample_raw] == ["ZZZZ99999999"]

    @pytest.mark.asyncio
    async def test_pending(self, make_resolver):
        """Test a relevant but weak match lands in review."""
        record = sam_record("ACMS00000001", "Acme Systems Group")
        resolver = make_resolver(FakeRegistry(responses=[[record]]))
        resolver.classifier.auto_link_threshold = 0.9

        outcome = await resolver.resolve(ResolutionQuery(subject_name="Acme Systems"))

        assert isinstance(outcome, Pending)
        assert outcome.top_candidates[0].candidate.uei == "ACMS00000001"

    @pytest.mark.asyncio
    async def test_registry_failure_degrades_to_no_match(self, make_resolver):
        registry = FakeRegistry(responses=[RegistryError("down"), RegistryError("down")])
        resolver = make_resolver(registry)

        outcome = await resolver.resolve(ResolutionQuery(subject_name="Honeywell"))

        assert isinstance(outcome, NoMatch)
        assert outcome.sample_raw == []


class TestResolveMany:
    """Tests for concurrent resolution."""

    @pytest.mark.asyncio
    async def test_preserves_input_order(self, make_resolver):
        registry = FakeRegistry(responses=[[HONEYWELL_RECORD]])
        resolver = make_resolver(registry)

        outcomes = await resolver.resolve_many(
            [
                ResolutionQuery(subject_name="Honeywell"),
                ResolutionQuery(subject_name=""),
            ]
        )

        assert isinstance(outcomes[0], Matched)
        assert isinstance(outcomes[1], NoMatch)
        assert outcomes[1].subject_name == ""


class TestSearch:
    """Tests for interactive search."""

    @pytest.mark.asyncio
    async def test_sorted_and_limited(self, make_resolver):
        registry = FakeRegistry(
            responses=[[UNRELATED_RECORD, ACME_CA_RECORD, ACME_TX_RECORD]]
        )
        resolver = make_resolver(registry)
        query = ResolutionQuery(subject_name="Acme Texas", state_hint="CA")

        matches = await resolver.search(query, limit=5)
        top = await resolver.search(query, limit=1)

        # DBA match beats the state bonus on a partial legal name
        assert [m.candidate.uei for m in matches] == ["ACME00000002", "ACME00000001"]
        assert [m.candidate.uei for m in top] == ["ACME00000002"]

    @pytest.mark.asyncio
    async def test_filters_irrelevant(self, make_resolver):
        resolver = make_resolver(FakeRegistry(responses=[[UNRELATED_RECORD]]))

        matches = await resolver.search(ResolutionQuery(subject_name="Honeywell"))

        assert matches == []

    @pytest.mark.asyncio
    async def test_empty_name(self, make_resolver):
        registry = FakeRegistry()
        resolver = make_resolver(registry)

        assert await resolver.search(ResolutionQuery(subject_name="")) == []
        assert registry.searches == []
