"""Persistence of resolution outcomes and the manual review queue.

Matched outcomes become company/entity associations. Pending and NoMatch
outcomes land in a review queue where an analyst can link a company by
hand. The store here is in-memory; a database-backed sink only has to
provide the same methods.
"""

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ..logging import get_context_logger
from .models import Matched, NoMatch, Pending, RegistryCandidate, ResolutionOutcome

logger = get_context_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =========================
# Data Models
# =========================


class MatchType(str, Enum):
    """How an association was created."""

    AUTOMATIC = "automatic"
    MANUAL = "manual"


class ReviewStatus(str, Enum):
    """Status of a review queue item."""

    PENDING = "pending"
    NO_MATCH = "no_match"


class LinkStatus(str, Enum):
    """What the sink knows about a company."""

    MATCHED = "matched"
    PENDING = "pending"
    NO_MATCH = "no_match"
    UNKNOWN = "unknown"


class Association(BaseModel):
    """A CRM company linked to a SAM.gov entity."""

    company_id: str
    uei: str
    entity: RegistryCandidate
    match_type: MatchType
    match_score: float
    linked_at: datetime = Field(default_factory=_utcnow)


class ReviewItem(BaseModel):
    """A company waiting for a human decision."""

    company_id: str
    portal_id: str | None = None
    company_name: str
    status: ReviewStatus
    search_results: list[dict[str, Any]] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


class SyncLogEntry(BaseModel):
    """Audit record of an action taken for a company."""

    company_id: str
    uei: str | None = None
    action: str
    status: str
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)


# =========================
# CRM projection
# =========================

CRM_PROPERTY_KEYS = (
    "sam_uei",
    "sam_cage_code",
    "sam_registration_status",
    "sam_registration_expiration",
    "sam_legal_name",
    "sam_business_types",
    "sam_naics_codes",
    "sam_sba_certifications",
    "sam_last_synced",
)


def crm_properties(entity: RegistryCandidate, synced_at: datetime | None = None) -> dict[str, str]:
    """Project a linked entity onto the CRM company's `sam_*` properties."""
    synced_at = synced_at or _utcnow()
    return {
        "sam_uei": entity.uei,
        "sam_cage_code": entity.cage_code or "",
        "sam_registration_status": entity.status_code,
        "sam_registration_expiration": entity.expiration_date or "",
        "sam_legal_name": entity.legal_name,
        "sam_business_types": "; ".join(entity.business_types),
        "sam_naics_codes": ", ".join(entity.naics_codes),
        "sam_sba_certifications": "; ".join(entity.sba_certifications),
        "sam_last_synced": synced_at.isoformat(),
    }


def cleared_crm_properties() -> dict[str, str]:
    """Blank `sam_*` properties, written when a company is unlinked."""
    return {key: "" for key in CRM_PROPERTY_KEYS}


# =========================
# Outcome Sink
# =========================


class OutcomeSink:
    """In-memory store for associations, the review queue and the sync log."""

    def __init__(self):
        self.associations: dict[str, Association] = {}
        self.review_queue: dict[str, ReviewItem] = {}
        self.sync_log: list[SyncLogEntry] = []
        self._lock = asyncio.Lock()

    async def record(
        self,
        company_id: str,
        outcome: ResolutionOutcome,
        portal_id: str | None = None,
    ) -> None:
        """Persist a resolution outcome for a company."""
        async with self._lock:
            if isinstance(outcome, Matched):
                self.associations[company_id] = Association(
                    company_id=company_id,
                    uei=outcome.candidate.uei,
                    entity=outcome.candidate,
                    match_type=MatchType.AUTOMATIC,
                    match_score=outcome.score,
                )
                self.review_queue.pop(company_id, None)
                self.sync_log.append(
                    SyncLogEntry(
                        company_id=company_id,
                        uei=outcome.candidate.uei,
                        action="auto_match",
                        status="success",
                        details={"match_score": outcome.score},
                    )
                )
                logger.info(
                    f"Auto-linked company {company_id} to {outcome.candidate.uei}",
                    extra={"company_id": company_id, "match_score": outcome.score},
                )

            elif isinstance(outcome, Pending):
                self.review_queue[company_id] = ReviewItem(
                    company_id=company_id,
                    portal_id=portal_id,
                    company_name=outcome.subject_name,
                    status=ReviewStatus.PENDING,
                    search_results=[
                        {"entity": s.candidate.model_dump(mode="json"), "score": s.score}
                        for s in outcome.top_candidates
                    ],
                )
                logger.info(
                    f"Queued company {company_id} for review "
                    f"({len(outcome.top_candidates)} candidates)",
                    extra={"company_id": company_id},
                )

            elif isinstance(outcome, NoMatch):
                self.review_queue[company_id] = ReviewItem(
                    company_id=company_id,
                    portal_id=portal_id,
                    company_name=outcome.subject_name,
                    status=ReviewStatus.NO_MATCH,
                    search_results=[
                        c.raw or c.model_dump(mode="json") for c in outcome.sample_raw
                    ],
                )
                logger.info(
                    f"No registry match for company {company_id}",
                    extra={"company_id": company_id},
                )

    async def link(self, company_id: str, entity: RegistryCandidate) -> Association:
        """Manually link a company; removes it from the review queue."""
        async with self._lock:
            association = Association(
                company_id=company_id,
                uei=entity.uei,
                entity=entity,
                match_type=MatchType.MANUAL,
                match_score=1.0,
            )
            self.associations[company_id] = association
            self.review_queue.pop(company_id, None)
            self.sync_log.append(
                SyncLogEntry(
                    company_id=company_id,
                    uei=entity.uei,
                    action="manual_link",
                    status="success",
                )
            )
            return association

    async def unlink(self, company_id: str) -> bool:
        """Remove a company's association. Returns False if there was none."""
        async with self._lock:
            association = self.associations.pop(company_id, None)
            if association is None:
                return False
            self.sync_log.append(
                SyncLogEntry(
                    company_id=company_id,
                    uei=association.uei,
                    action="unlink",
                    status="success",
                )
            )
            return True

    async def refresh(self, company_id: str, entity: RegistryCandidate) -> Association | None:
        """Replace a linked company's entity data with a fresh registry copy.

        Returns None when the company is not linked. Match type and score
        are kept.
        """
        async with self._lock:
            current = self.associations.get(company_id)
            if current is None:
                return None
            association = current.model_copy(
                update={"uei": entity.uei, "entity": entity, "linked_at": _utcnow()}
            )
            self.associations[company_id] = association
            self.sync_log.append(
                SyncLogEntry(
                    company_id=company_id,
                    uei=entity.uei,
                    action="refresh",
                    status="success",
                )
            )
            return association

    async def log_error(self, company_id: str, action: str, error: str) -> None:
        async with self._lock:
            self.sync_log.append(
                SyncLogEntry(
                    company_id=company_id,
                    action=action,
                    status="error",
                    details={"error": error},
                )
            )

    def status(self, company_id: str) -> LinkStatus:
        """Current link status of a company."""
        if company_id in self.associations:
            return LinkStatus.MATCHED
        item = self.review_queue.get(company_id)
        if item is None:
            return LinkStatus.UNKNOWN
        if item.status == ReviewStatus.PENDING:
            return LinkStatus.PENDING
        return LinkStatus.NO_MATCH
