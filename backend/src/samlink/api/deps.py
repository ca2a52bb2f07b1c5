"""Service wiring shared by the API and the CLI."""

from dataclasses import dataclass

from fastapi import Request

from ..cache import InMemoryCache
from ..config import Settings, get_settings
from ..dedup import RequestDeduplicator
from ..ingestion.base import CompanyLookup, RegistryBackend
from ..ingestion.hubspot import HubSpotClient
from ..ingestion.sam_gov import SamGovClient
from ..resolution.classifier import ResolutionClassifier
from ..resolution.matcher import CandidateScorer
from ..resolution.reconcile import OutcomeSink
from ..resolution.resolver import EntityResolver
from ..resolution.retriever import CandidateRetriever
from ..services.webhook import WebhookProcessor


@dataclass
class Services:
    """Process-wide components: one cache, one dedup map, one sink."""

    registry: RegistryBackend
    companies: CompanyLookup
    resolver: EntityResolver
    sink: OutcomeSink
    webhooks: WebhookProcessor

    async def close(self) -> None:
        for client in (self.registry, self.companies):
            close = getattr(client, "close", None)
            if close is not None:
                await close()


def build_services(
    settings: Settings | None = None,
    registry: RegistryBackend | None = None,
    companies: CompanyLookup | None = None,
) -> Services:
    """Build the component graph from settings."""
    settings = settings or get_settings()
    if registry is None:
        registry = SamGovClient(
            api_key=settings.sam_api_key,
            base_url=settings.sam_api_base,
            timeout=settings.http_timeout_seconds,
        )
    if companies is None:
        companies = HubSpotClient(
            access_token=settings.hubspot_access_token,
            base_url=settings.hubspot_api_base,
        )

    retriever = CandidateRetriever(
        registry,
        cache=InMemoryCache(default_ttl=settings.cache_ttl_seconds),
        cache_ttl=settings.cache_ttl_seconds,
        strategy_delay=settings.strategy_delay_seconds,
        rate_limit_retry_delay=settings.rate_limit_retry_delay_seconds,
    )
    classifier = ResolutionClassifier(
        scorer=CandidateScorer(location_bonus=settings.location_bonus),
        auto_link_threshold=settings.auto_link_threshold,
        relevance_floor=settings.relevance_floor,
        max_review_candidates=settings.max_review_candidates,
    )
    resolver = EntityResolver(retriever, classifier)
    sink = OutcomeSink()
    webhooks = WebhookProcessor(
        resolver,
        companies,
        sink,
        deduplicator=RequestDeduplicator(window_seconds=settings.dedup_window_seconds),
    )
    return Services(
        registry=registry,
        companies=companies,
        resolver=resolver,
        sink=sink,
        webhooks=webhooks,
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the app's services."""
    return request.app.state.services
