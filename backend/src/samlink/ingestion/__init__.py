"""Upstream clients for samlink.

Provides the SAM.gov registry backend and the read-only CRM lookup used
by the webhook intake.
"""

from .base import (
    CompanyLookup,
    CompanyRecord,
    CRMError,
    RegistryBackend,
    RegistryError,
    RegistryRateLimitError,
    RegistrySearch,
    SamLinkError,
    UpstreamError,
)
from .hubspot import HubSpotClient
from .sam_gov import SamGovClient, build_search_params

__all__ = [
    "CompanyLookup",
    "CompanyRecord",
    "CRMError",
    "HubSpotClient",
    "RegistryBackend",
    "RegistryError",
    "RegistryRateLimitError",
    "RegistrySearch",
    "SamGovClient",
    "SamLinkError",
    "UpstreamError",
    "build_search_params",
]
