"""SAM.gov entity search and company linking endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..ingestion.base import RegistryError
from ..logging import get_context_logger
from ..resolution.models import RegistryCandidate, ResolutionQuery
from ..resolution.reconcile import cleared_crm_properties, crm_properties
from . import NotFoundError, UpstreamServiceError
from .deps import Services, get_services

logger = get_context_logger(__name__)

router = APIRouter()


# =========================
# Request / Response Models
# =========================


class SearchRequest(BaseModel):
    """Interactive entity search."""

    name: str = Field(min_length=1)
    state: str | None = None
    domain: str | None = None
    limit: int = Field(default=10, ge=1, le=50)


class MatchResponse(BaseModel):
    entity: RegistryCandidate
    score: float


class SearchResponse(BaseModel):
    searched_name: str
    matches: list[MatchResponse]
    message: str | None = None


class LinkRequest(BaseModel):
    uei: str = Field(min_length=1)


class LinkResponse(BaseModel):
    company_id: str
    entity: RegistryCandidate
    match_type: str
    match_score: float
    crm_properties: dict[str, str]


class StatusResponse(BaseModel):
    company_id: str
    match_status: str
    entity: RegistryCandidate | None = None
    match_score: float = 0.0


async def _fetch_entity(services: Services, uei: str) -> RegistryCandidate:
    try:
        raw = await services.registry.get_entity(uei)
    except RegistryError as e:
        raise UpstreamServiceError(f"SAM.gov lookup failed: {e}")
    if raw is None:
        raise NotFoundError("SAM.gov entity", uei)
    return RegistryCandidate.from_sam_record(raw)


# =========================
# Endpoints
# =========================


@router.post("/search", response_model=SearchResponse)
async def search_entities(
    request: SearchRequest,
    services: Services = Depends(get_services),
):
    """Search SAM.gov for entities matching a company name."""
    matches = await services.resolver.search(
        ResolutionQuery(
            subject_name=request.name,
            state_hint=request.state,
            domain_hint=request.domain,
        ),
        limit=request.limit,
    )
    return SearchResponse(
        searched_name=request.name,
        matches=[MatchResponse(entity=m.candidate, score=m.score) for m in matches],
        message=None if matches else "No matching entities found",
    )


@router.get("/entities/{uei}", response_model=RegistryCandidate)
async def get_entity(uei: str, services: Services = Depends(get_services)):
    """Look up a single SAM.gov entity by UEI."""
    return await _fetch_entity(services, uei)


@router.get("/companies/{company_id}/status", response_model=StatusResponse)
async def company_status(company_id: str, services: Services = Depends(get_services)):
    """Link status of a CRM company."""
    association = services.sink.associations.get(company_id)
    return StatusResponse(
        company_id=company_id,
        match_status=services.sink.status(company_id).value,
        entity=association.entity if association else None,
        match_score=association.match_score if association else 0.0,
    )


@router.post("/companies/{company_id}/link", response_model=LinkResponse)
async def link_company(
    company_id: str,
    request: LinkRequest,
    services: Services = Depends(get_services),
):
    """Manually link a company to a SAM.gov entity."""
    entity = await _fetch_entity(services, request.uei)
    association = await services.sink.link(company_id, entity)
    logger.info(
        f"Manually linked company {company_id} to {entity.uei}",
        extra={"company_id": company_id},
    )
    return LinkResponse(
        company_id=company_id,
        entity=entity,
        match_type=association.match_type.value,
        match_score=association.match_score,
        crm_properties=crm_properties(entity, association.linked_at),
    )


@router.post("/companies/{company_id}/refresh", response_model=LinkResponse)
async def refresh_company(company_id: str, services: Services = Depends(get_services)):
    """Re-fetch a linked company's entity from SAM.gov."""
    association = services.sink.associations.get(company_id)
    if association is None:
        raise NotFoundError("Company association", company_id)

    entity = await _fetch_entity(services, association.uei)
    refreshed = await services.sink.refresh(company_id, entity)
    if refreshed is None:
        raise NotFoundError("Company association", company_id)

    return LinkResponse(
        company_id=company_id,
        entity=entity,
        match_type=refreshed.match_type.value,
        match_score=refreshed.match_score,
        crm_properties=crm_properties(entity, refreshed.linked_at),
    )


@router.post("/companies/{company_id}/unlink")
async def unlink_company(company_id: str, services: Services = Depends(get_services)):
    """Remove a company's SAM.gov link."""
    removed = await services.sink.unlink(company_id)
    if not removed:
        raise NotFoundError("Company association", company_id)
    return {
        "status": "unlinked",
        "company_id": company_id,
        "crm_properties": cleared_crm_properties(),
    }
