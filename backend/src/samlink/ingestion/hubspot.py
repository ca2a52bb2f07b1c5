"""Read-only HubSpot company lookup.

Only reads the fields needed to build a resolution query. Token exchange
and CRM property writes belong to the hosting app.
"""

from typing import Any

import httpx

from ..config import get_settings
from ..logging import get_context_logger
from .base import CompanyLookup, CompanyRecord, CRMError

logger = get_context_logger(__name__)

COMPANY_PROPERTIES = ("name", "domain", "address", "city", "state", "zip", "country")


class HubSpotClient(CompanyLookup):
    """Fetches companies from the HubSpot CRM v3 objects API."""

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self.access_token = (
            access_token if access_token is not None else settings.hubspot_access_token
        )
        self.base_url = (base_url or settings.hubspot_api_base).rstrip("/")
        self.timeout = settings.http_timeout_seconds
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=10.0),
            )
        return self._http_client

    async def close(self):
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def get_company(self, company_id: str, portal_id: str | None = None) -> CompanyRecord:
        url = f"{self.base_url}/crm/v3/objects/companies/{company_id}"
        try:
            response = await self.http_client.get(
                url,
                params={"properties": ",".join(COMPANY_PROPERTIES)},
                headers={
                    "Authorization": f"Bearer {self.access_token}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as e:
            raise CRMError(f"HubSpot request failed: {e}") from e

        if response.is_error:
            raise CRMError(
                f"HubSpot API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise CRMError("HubSpot returned invalid JSON") from e
        if not isinstance(payload, dict):
            raise CRMError("HubSpot returned an unexpected company payload")

        props: dict[str, Any] = payload.get("properties") or {}
        if not isinstance(props, dict):
            props = {}
        return CompanyRecord(
            id=str(payload.get("id") or company_id),
            name=_text(props.get("name")),
            domain=_text(props.get("domain")),
            state=_text(props.get("state")),
            properties=props,
        )


def _text(value: Any) -> str | None:
    return str(value) if value not in (None, "") else None
