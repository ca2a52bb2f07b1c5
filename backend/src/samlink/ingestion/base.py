"""Abstract interfaces for upstream data sources.

The resolution engine only talks to these interfaces, so the SAM.gov and
HubSpot clients can be swapped for fakes in tests or for a local extract.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


class SamLinkError(Exception):
    """Base class for samlink errors."""


class UpstreamError(SamLinkError):
    """An upstream HTTP service failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RegistryError(UpstreamError):
    """The registry returned an error response or could not be reached."""


class RegistryRateLimitError(RegistryError):
    """The registry rejected the request with HTTP 429."""


class CRMError(UpstreamError):
    """The CRM returned an error response or could not be reached."""


class RegistrySearch(BaseModel):
    """One registry query, independent of the backend's wire format."""

    legal_name: str | None = None
    state_code: str | None = None
    domain: str | None = None
    keyword: str | None = None
    active_only: bool = True


class CompanyRecord(BaseModel):
    """CRM company fields used for resolution."""

    id: str
    name: str | None = None
    domain: str | None = None
    state: str | None = None
    properties: dict[str, Any] = {}


class RegistryBackend(ABC):
    """Registry search backend."""

    @abstractmethod
    async def search_entities(self, search: RegistrySearch) -> list[dict[str, Any]]:
        """Run one search.

        Returns:
            Raw entity records (possibly empty)

        Raises:
            RegistryRateLimitError: On HTTP 429
            RegistryError: On any other failure
        """
        ...

    @abstractmethod
    async def get_entity(self, uei: str) -> dict[str, Any] | None:
        """Fetch a single raw entity record by UEI."""
        ...


class CompanyLookup(ABC):
    """Read access to CRM companies."""

    @abstractmethod
    async def get_company(self, company_id: str, portal_id: str | None = None) -> CompanyRecord:
        """Fetch a company.

        Raises:
            CRMError: If the company cannot be read
        """
        ...
