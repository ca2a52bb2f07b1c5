"""Multi-strategy candidate retrieval from the registry.

Strategies run in order, from narrow to broad, and the chain stops at the
first one that returns anything:
1. Legal name + active status + state (state only when a hint is given)
2. Legal name + active status, no state (only when a state hint was given)
3. Entity URL / domain (only when a domain hint is given)
4. Free-text keyword search on the normalized name

Strategies never run in parallel: each one costs registry quota and the
broad ones are only useful when the narrow ones found nothing.
"""

import asyncio
import re
import time
from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from ..cache import CacheBackend, InMemoryCache, search_key
from ..config import get_settings
from ..ingestion.base import (
    RegistryBackend,
    RegistryError,
    RegistryRateLimitError,
    RegistrySearch,
)
from ..logging import get_context_logger, log_strategy_attempt
from .models import RegistryCandidate, ResolutionQuery
from .normalize import normalize_name

logger = get_context_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def normalize_domain(domain: str | None) -> str:
    """Reduce a URL or domain hint to a bare host ("acme.com")."""
    if not domain:
        return ""
    host = domain.strip().lower()
    host = re.sub(r"^[a-z][a-z0-9+.-]*://", "", host)
    host = host.split("/", 1)[0].split("?", 1)[0].split(":", 1)[0]
    if host.startswith("www."):
        host = host[4:]
    return host


# =========================
# Strategies
# =========================


class RetrievalStrategy(ABC):
    """One way of asking the registry for candidates."""

    name: str = "strategy"

    def applies(self, query: ResolutionQuery) -> bool:
        """Whether this strategy should run for the query."""
        return True

    @abstractmethod
    def build_search(self, query: ResolutionQuery, normalized_name: str) -> RegistrySearch:
        """Build the registry search for the query."""
        ...

    async def attempt(
        self,
        backend: RegistryBackend,
        query: ResolutionQuery,
        normalized_name: str,
    ) -> list[dict]:
        """Run this strategy once against the backend.

        Raises whatever the backend raises; retry policy belongs to the caller.
        """
        return await backend.search_entities(self.build_search(query, normalized_name))


class LegalNameStrategy(RetrievalStrategy):
    """Legal business name search restricted to active registrations.

    Args:
        with_state: Filter by the state hint (when there is one)
        prefix_match: Append SAM's "*" wildcard so longer legal names
            ("Honeywell International") are found from short CRM names
    """

    def __init__(self, with_state: bool, prefix_match: bool = True):
        self.with_state = with_state
        self.prefix_match = prefix_match
        self.name = "legal_name_state" if with_state else "legal_name"

    def applies(self, query: ResolutionQuery) -> bool:
        # Without a state hint the stateful search already was the plain one.
        return self.with_state or bool(query.state_hint)

    def build_search(self, query: ResolutionQuery, normalized_name: str) -> RegistrySearch:
        legal_name = f"{normalized_name}*" if self.prefix_match else normalized_name
        return RegistrySearch(
            legal_name=legal_name,
            state_code=query.state_hint if self.with_state else None,
            active_only=True,
        )


class DomainStrategy(RetrievalStrategy):
    """Search by the company's website domain."""

    name = "domain"

    def applies(self, query: ResolutionQuery) -> bool:
        return bool(normalize_domain(query.domain_hint))

    def build_search(self, query: ResolutionQuery, normalized_name: str) -> RegistrySearch:
        return RegistrySearch(domain=normalize_domain(query.domain_hint), active_only=True)


class KeywordStrategy(RetrievalStrategy):
    """Unrestricted free-text search, the last resort."""

    name = "keyword"

    def build_search(self, query: ResolutionQuery, normalized_name: str) -> RegistrySearch:
        return RegistrySearch(keyword=normalized_name, active_only=False)


def default_strategies() -> list[RetrievalStrategy]:
    return [
        LegalNameStrategy(with_state=True),
        LegalNameStrategy(with_state=False),
        DomainStrategy(),
        KeywordStrategy(),
    ]


# =========================
# Retriever
# =========================


class CandidateRetriever:
    """Runs the strategy chain against a registry backend, with caching.

    Transport and HTTP failures never escape: a rate-limited strategy is
    retried once after `rate_limit_retry_delay` seconds, and any other
    failure counts as "no results" for that strategy.
    """

    def __init__(
        self,
        backend: RegistryBackend,
        cache: CacheBackend | None = None,
        strategies: list[RetrievalStrategy] | None = None,
        cache_ttl: float | None = None,
        strategy_delay: float | None = None,
        rate_limit_retry_delay: float | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        settings = get_settings()
        self.backend = backend
        self.cache_ttl = settings.cache_ttl_seconds if cache_ttl is None else cache_ttl
        self.cache = cache if cache is not None else InMemoryCache(default_ttl=self.cache_ttl)
        self.strategies = strategies if strategies is not None else default_strategies()
        self.strategy_delay = (
            settings.strategy_delay_seconds if strategy_delay is None else strategy_delay
        )
        self.rate_limit_retry_delay = (
            settings.rate_limit_retry_delay_seconds
            if rate_limit_retry_delay is None
            else rate_limit_retry_delay
        )
        self._sleep = sleep

    async def retrieve(
        self,
        name: str,
        state_hint: str | None = None,
        domain_hint: str | None = None,
    ) -> list[RegistryCandidate]:
        """Retrieve candidates for a company name.

        Returns:
            Candidates from the first strategy that found any, or []
        """
        normalized = normalize_name(name)
        if not normalized:
            return []

        query = ResolutionQuery(
            subject_name=name, state_hint=state_hint, domain_hint=domain_hint
        )
        key = search_key(normalized, query.state_hint, normalize_domain(query.domain_hint))
        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return list(cached)

        candidates = await self._run_chain(query, normalized)

        await self.cache.set(key, candidates, self.cache_ttl)
        return list(candidates)

    async def _run_chain(
        self, query: ResolutionQuery, normalized: str
    ) -> list[RegistryCandidate]:
        attempted = 0
        for strategy in self.strategies:
            if not strategy.applies(query):
                continue

            if attempted and self.strategy_delay > 0:
                await self._sleep(self.strategy_delay)
            attempted += 1

            started = time.monotonic()
            records = await self._attempt(strategy, query, normalized)
            log_strategy_attempt(
                strategy.name,
                normalized,
                len(records),
                (time.monotonic() - started) * 1000,
            )

            if records:
                logger.info(
                    f"Strategy {strategy.name} found {len(records)} candidates for {normalized!r}"
                )
                return [RegistryCandidate.from_sam_record(r) for r in records]

        logger.info(f"No registry candidates for {normalized!r}")
        return []

    async def _attempt(
        self, strategy: RetrievalStrategy, query: ResolutionQuery, normalized: str
    ) -> list[dict]:
        """Run one strategy with the retry-once-on-rate-limit policy."""
        for retry in range(2):
            try:
                return await strategy.attempt(self.backend, query, normalized)
            except RegistryRateLimitError:
                if retry == 0:
                    logger.warning(
                        f"Rate limited on {strategy.name}, "
                        f"retrying in {self.rate_limit_retry_delay}s"
                    )
                    await self._sleep(self.rate_limit_retry_delay)
                    continue
                logger.warning(f"Rate limited again on {strategy.name}, skipping")
            except RegistryError as e:
                logger.warning(f"Strategy {strategy.name} failed: {e}")
            break
        return []
