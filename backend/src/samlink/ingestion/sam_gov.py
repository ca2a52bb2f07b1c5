"""SAM.gov Entity Management API client.

Provides entity search and by-UEI lookup against the public SAM.gov
Entity API (v3). Retrying is left to the caller: rate limits surface as
RegistryRateLimitError so the retrieval layer can apply its own policy.

API Documentation: https://open.gsa.gov/api/entity-api/
"""

from typing import Any

import httpx

from ..config import get_settings
from ..logging import get_context_logger
from .base import (
    RegistryBackend,
    RegistryError,
    RegistryRateLimitError,
    RegistrySearch,
)

logger = get_context_logger(__name__)


def build_search_params(search: RegistrySearch) -> dict[str, str]:
    """Map a registry search onto SAM Entity API query parameters."""
    params: dict[str, str] = {}

    if search.legal_name:
        params["legalBusinessName"] = search.legal_name
    if search.state_code:
        params["physicalAddressStateCode"] = search.state_code.upper()
    if search.domain:
        params["entityURL"] = search.domain
    if search.keyword:
        params["q"] = search.keyword
    if search.active_only:
        params["registrationStatus"] = "A"

    return params


class SamGovClient(RegistryBackend):
    """Async client for the SAM.gov Entity API.

    Rate limits (per API key):
    - Non-federal users without a role: 10 requests/day
    - Non-federal users with a role: 1,000 requests/day

    Keep an eye on the per-day budget when resolving large batches.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: SAM.gov API key (default from settings)
            base_url: Entity API endpoint (default from settings)
            timeout: Request timeout in seconds
            http_client: Pre-built client, mainly for tests
        """
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.sam_api_key
        self.base_url = base_url or settings.sam_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=10.0),
                headers={
                    "Accept": "application/json",
                    "User-Agent": "samlink/0.1 (CRM registry resolution)",
                },
            )
        return self._http_client

    async def close(self):
        """Close the client connections."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "SamGovClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get(self, params: dict[str, str]) -> dict[str, Any]:
        """GET the entity endpoint.

        Raises:
            RegistryRateLimitError: On HTTP 429
            RegistryError: On other HTTP errors, transport errors or bad JSON
        """
        query = dict(params)
        if self.api_key:
            query["api_key"] = self.api_key

        try:
            response = await self.http_client.get(self.base_url, params=query)
        except httpx.HTTPError as e:
            logger.warning(f"SAM.gov request failed: {e}")
            raise RegistryError(f"SAM.gov request failed: {e}") from e

        if response.status_code == 429:
            logger.warning("SAM.gov rate limited the request")
            raise RegistryRateLimitError("SAM.gov rate limit exceeded", status_code=429)

        if response.is_error:
            logger.warning(
                f"SAM.gov API error: {response.status_code} {response.reason_phrase}",
                extra={"status_code": response.status_code},
            )
            raise RegistryError(
                f"SAM.gov API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RegistryError("SAM.gov returned invalid JSON") from e

        return data if isinstance(data, dict) else {}

    async def search_entities(self, search: RegistrySearch) -> list[dict[str, Any]]:
        """Search entities and return the raw `entityData` records."""
        data = await self._get(build_search_params(search))
        records = data.get("entityData") or []
        return [r for r in records if isinstance(r, dict)]

    async def get_entity(self, uei: str) -> dict[str, Any] | None:
        """Fetch one entity by UEI, or None when SAM.gov has no record."""
        data = await self._get({"ueiSAM": uei.strip().upper()})
        records = data.get("entityData") or []
        return records[0] if records else None
