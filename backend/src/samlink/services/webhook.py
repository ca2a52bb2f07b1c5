"""CRM webhook intake.

Turns a batch of HubSpot company events into resolutions:
1. Keep creation events and name/domain property changes
2. Drop repeats of the same company inside the dedup window
3. Fetch the company, resolve it, record the outcome

Every selected event is processed concurrently and `process` returns only
once all of them are done. A failure on one event is logged and recorded;
it does not affect the others.
"""

import asyncio
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..dedup import RequestDeduplicator, dedup_key
from ..ingestion.base import CompanyLookup, SamLinkError
from ..logging import get_context_logger
from ..resolution.models import ResolutionQuery
from ..resolution.reconcile import OutcomeSink
from ..resolution.resolver import EntityResolver

logger = get_context_logger(__name__)

TRIGGER_PROPERTIES = frozenset({"name", "domain"})


class WebhookEvent(BaseModel):
    """One HubSpot webhook event (only the fields we use)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    subscription_type: str = Field(alias="subscriptionType")
    object_id: str = Field(alias="objectId")
    portal_id: str = Field(alias="portalId")
    property_name: str | None = Field(default=None, alias="propertyName")

    @field_validator("object_id", "portal_id", mode="before")
    @classmethod
    def _ids_as_str(cls, value: Any) -> Any:
        # HubSpot sends numeric ids
        return str(value) if isinstance(value, int) else value

    def triggers_resolution(self) -> bool:
        if self.subscription_type == "object.creation":
            return True
        return (
            self.subscription_type == "object.propertyChange"
            and self.property_name in TRIGGER_PROPERTIES
        )


class WebhookSummary(BaseModel):
    """Counts for one webhook delivery."""

    received: int = 0
    ignored: int = 0
    duplicates: int = 0
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    dispositions: dict[str, int] = Field(default_factory=dict)


def parse_events(payload: Any) -> list[WebhookEvent]:
    """Accept a single event object or a list of them."""
    items = payload if isinstance(payload, list) else [payload]
    return [WebhookEvent.model_validate(item) for item in items]


class WebhookProcessor:
    """Processes webhook event batches end to end."""

    def __init__(
        self,
        resolver: EntityResolver,
        companies: CompanyLookup,
        sink: OutcomeSink,
        deduplicator: RequestDeduplicator | None = None,
    ):
        self.resolver = resolver
        self.companies = companies
        self.sink = sink
        self.deduplicator = (
            deduplicator if deduplicator is not None else RequestDeduplicator()
        )

    async def process(self, events: list[WebhookEvent]) -> WebhookSummary:
        summary = WebhookSummary(received=len(events))

        selected: list[WebhookEvent] = []
        for event in events:
            if not event.triggers_resolution():
                summary.ignored += 1
                continue
            if not self.deduplicator.should_process(dedup_key(event.portal_id, event.object_id)):
                summary.duplicates += 1
                continue
            selected.append(event)

        logger.info(
            f"Processing {len(selected)} of {len(events)} webhook events",
            extra={"selected": len(selected), "received": len(events)},
        )

        results = await asyncio.gather(*(self._process_event(e) for e in selected))

        for result in results:
            if result == "failed":
                summary.failed += 1
            elif result == "skipped":
                summary.skipped += 1
            else:
                summary.processed += 1
                summary.dispositions[result] = summary.dispositions.get(result, 0) + 1

        return summary

    async def _process_event(self, event: WebhookEvent) -> str:
        """Resolve one company. Returns the disposition, "skipped" or "failed"."""
        company_id = event.object_id
        try:
            company = await self.companies.get_company(company_id, event.portal_id)

            if not company.name or not company.name.strip():
                logger.info(
                    f"Company {company_id} has no name, skipping registry matching",
                    extra={"company_id": company_id},
                )
                return "skipped"

            outcome = await self.resolver.resolve(
                ResolutionQuery(
                    subject_name=company.name,
                    state_hint=company.state,
                    domain_hint=company.domain,
                )
            )
            await self.sink.record(company_id, outcome, portal_id=event.portal_id)
            return outcome.disposition.value

        except SamLinkError as e:
            logger.error(
                f"Error processing company {company_id}: {e}",
                extra={"company_id": company_id, "portal_id": event.portal_id},
            )
            await self.sink.log_error(company_id, "webhook_process", str(e))
            return "failed"
