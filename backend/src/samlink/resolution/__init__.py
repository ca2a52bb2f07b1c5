"""Entity resolution module for samlink.

Resolves CRM companies to SAM.gov registry entities: name normalization,
multi-strategy retrieval, bigram scoring and threshold classification.
"""

from .classifier import ResolutionClassifier
from .matcher import CandidateScorer, dice_coefficient
from .models import (
    Disposition,
    Matched,
    NoMatch,
    Pending,
    PhysicalAddress,
    RegistryCandidate,
    ResolutionOutcome,
    ResolutionQuery,
    ScoredCandidate,
)
from .normalize import normalize_name
from .reconcile import (
    Association,
    LinkStatus,
    MatchType,
    OutcomeSink,
    ReviewItem,
    ReviewStatus,
    SyncLogEntry,
    cleared_crm_properties,
    crm_properties,
)
from .resolver import EntityResolver
from .retriever import (
    CandidateRetriever,
    DomainStrategy,
    KeywordStrategy,
    LegalNameStrategy,
    RetrievalStrategy,
    default_strategies,
    normalize_domain,
)

__all__ = [
    "Association",
    "LinkStatus",
    "MatchType",
    "OutcomeSink",
    "ReviewItem",
    "ReviewStatus",
    "SyncLogEntry",
    "cleared_crm_properties",
    "crm_properties",
    "CandidateRetriever",
    "CandidateScorer",
    "Disposition",
    "DomainStrategy",
    "EntityResolver",
    "KeywordStrategy",
    "LegalNameStrategy",
    "Matched",
    "NoMatch",
    "Pending",
    "PhysicalAddress",
    "RegistryCandidate",
    "ResolutionClassifier",
    "ResolutionOutcome",
    "ResolutionQuery",
    "RetrievalStrategy",
    "ScoredCandidate",
    "default_strategies",
    "dice_coefficient",
    "normalize_domain",
    "normalize_name",
]
