"""Unit tests for webhook intake."""

import httpx
import pytest
from pydantic import ValidationError

from samlink.dedup import RequestDeduplicator
from samlink.ingestion.base import CompanyRecord
from samlink.ingestion.hubspot import HubSpotClient
from samlink.resolution.reconcile import LinkStatus, OutcomeSink
from samlink.services.webhook import WebhookEvent, WebhookProcessor, parse_events

from fixtures.registry import HONEYWELL_RECORD, FakeCompanies, FakeRegistry


def _event(object_id: int, subscription_type: str = "object.creation", **extra) -> dict:
    return {
        "subscriptionType": subscription_type,
        "objectId": object_id,
        "portalId": 777,
        **extra,
    }


@pytest.fixture
def companies():
    return FakeCompanies(
        [
            CompanyRecord(id="1", name="Honeywell", state="NC"),
            CompanyRecord(id="2", name="Nobody Holdings"),
            CompanyRecord(id="3", name="   "),
        ]
    )


@pytest.fixture
def make_processor(make_resolver, clock):
    def _make(registry: FakeRegistry, companies: FakeCompanies) -> WebhookProcessor:
        return WebhookProcessor(
            make_resolver(registry),
            companies,
            OutcomeSink(),
            deduplicator=RequestDeduplicator(window_seconds=30, clock=clock),
        )

    return _make


class TestWebhookEvent:
    """Tests for event parsing and filtering."""

    def test_numeric_ids_become_strings(self):
        event = WebhookEvent.model_validate(_event(42))

        assert event.object_id == "42"
        assert event.portal_id == "777"

    @pytest.mark.parametrize(
        "payload,expected",
        [
            (_event(1), True),
            (_event(1, "object.propertyChange", propertyName="name"), True),
            (_event(1, "object.propertyChange", propertyName="domain"), True),
            (_event(1, "object.propertyChange", propertyName="phone"), False),
            (_event(1, "object.deletion"), False),
        ],
    )
    def test_triggers_resolution(self, payload, expected):
        assert WebhookEvent.model_validate(payload).triggers_resolution() is expected

    def test_parse_single_or_list(self):
        assert len(parse_events(_event(1))) == 1
        assert len(parse_events([_event(1), _event(2)])) == 2

    def test_parse_rejects_missing_fields(self):
        with pytest.raises(ValidationError):
            parse_events([{"subscriptionType": "object.creation"}])


class TestWebhookProcessor:
    """Tests for batch processing."""

    def test_keeps_given_deduplicator(self, make_resolver, companies):
        dedup = RequestDeduplicator(window_seconds=5)

        processor = WebhookProcessor(
            make_resolver(FakeRegistry()), companies, OutcomeSink(), deduplicator=dedup
        )

        assert processor.deduplicator is dedup

    @pytest.mark.asyncio
    async def test_processes_and_records(self, make_processor, companies):
        registry = FakeRegistry(responses=[[HONEYWELL_RECORD]])
        processor = make_processor(registry, companies)

        summary = await processor.process(parse_events([_event(1)]))

        assert summary.received == 1
        assert summary.processed == 1
        assert summary.dispositions == {"matched": 1}
        assert processor.sink.status("1") == LinkStatus.MATCHED

    @pytest.mark.asyncio
    async def test_ignored_and_duplicate_events(self, make_processor, companies):
        registry = FakeRegistry(responses=[[HONEYWELL_RECORD]])
        processor = make_processor(registry, companies)

        summary = await processor.process(
            parse_events(
                [
                    _event(1),
                    _event(1, "object.propertyChange", propertyName="name"),
                    _event(1, "object.propertyChange", propertyName="phone"),
                ]
            )
        )

        assert summary.received == 3
        assert summary.ignored == 1
        assert summary.duplicates == 1
        assert summary.processed == 1
        assert companies.lookups == ["1"]

    @pytest.mark.asyncio
    async def test_duplicate_across_deliveries(self, make_processor, companies, clock):
        registry = FakeRegistry(responses=[[HONEYWELL_RECORD]])
        processor = make_processor(registry, companies)

        await processor.process(parse_events([_event(1)]))
        clock.advance(10)
        second = await processor.process(parse_events([_event(1)]))
        clock.advance(30)
        third = await processor.process(parse_events([_event(1)]))

        assert second.duplicates == 1
        assert third.processed == 1

    @pytest.mark.asyncio
    async def test_blank_name_is_skipped(self, make_processor, companies):
        registry = FakeRegistry()
        processor = make_processor(registry, companies)

        summary = await processor.process(parse_events([_event(3)]))

        assert summary.skipped == 1
        assert registry.searches == []
        assert processor.sink.status("3") == LinkStatus.UNKNOWN

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self, make_processor, companies):
        """Test a CRM failure on one event does not affect the others."""
        registry = FakeRegistry(responses=[[HONEYWELL_RECORD]])
        processor = make_processor(registry, companies)

        summary = await processor.process(parse_events([_event(1), _event(404), _event(2)]))

        assert summary.processed == 2
        assert summary.failed == 1
        assert summary.dispositions["matched"] == 1
        assert summary.dispositions["no_match"] == 1
        errors = [e for e in processor.sink.sync_log if e.status == "error"]
        assert [e.company_id for e in errors] == ["404"]
        assert errors[0].action == "webhook_process"

    @pytest.mark.asyncio
    async def test_invalid_crm_reply_is_isolated(self, make_resolver, clock):
        """Test an HTML reply for one company fails only that event."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/1"):
                return httpx.Response(200, text="<html>oops</html>")
            return httpx.Response(
                200, json={"id": "2", "properties": {"name": "Nobody Holdings"}}
            )

        hubspot = HubSpotClient(
            access_token="token",
            base_url="https://api.hubapi.com",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        processor = WebhookProcessor(
            make_resolver(FakeRegistry()),
            hubspot,
            OutcomeSink(),
            deduplicator=RequestDeduplicator(window_seconds=30, clock=clock),
        )

        summary = await processor.process(parse_events([_event(1), _event(2)]))
        await hubspot.close()

        assert summary.failed == 1
        assert summary.dispositions == {"no_match": 1}
        errors = [e for e in processor.sink.sync_log if e.status == "error"]
        assert [e.company_id for e in errors] == ["1"]
