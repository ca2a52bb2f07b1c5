"""Data models for SAM.gov entity resolution.

Raw SAM.gov records arrive as loosely shaped JSON. They are validated once,
at `RegistryCandidate.from_sam_record`, where every optional field gets an
explicit absent value. Scoring and classification never inspect raw dicts.
"""

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Disposition(str, Enum):
    """Classification outcome of a resolution attempt."""

    MATCHED = "matched"
    PENDING = "pending"
    NO_MATCH = "no_match"


class ResolutionQuery(BaseModel):
    """A request to resolve one CRM company."""

    subject_name: str
    state_hint: str | None = None
    domain_hint: str | None = None

    @field_validator("state_hint", mode="before")
    @classmethod
    def _normalize_state(cls, value: Any) -> Any:
        # Two-letter codes are sent upper-case; blank means no hint
        if isinstance(value, str):
            return value.strip().upper() or None
        return value

    @field_validator("domain_hint", mode="before")
    @classmethod
    def _blank_domain(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value


class PhysicalAddress(BaseModel):
    """Registered physical address of a SAM.gov entity."""

    model_config = ConfigDict(frozen=True)

    line1: str = ""
    city: str = ""
    state_code: str = ""
    zip_code: str = ""
    country_code: str = "USA"


def _as_list(items: Any, *keys: str) -> list[str]:
    """Pull the first present key out of each item in a SAM list field."""
    values: list[str] = []
    if not isinstance(items, list):
        return values
    for item in items:
        if isinstance(item, dict):
            for key in keys:
                if item.get(key):
                    values.append(str(item[key]))
                    break
        elif item:
            values.append(str(item))
    return values


def _text(value: Any, default: str | None = None) -> str | None:
    """Coerce a raw scalar to text. Empty values and nested objects give the default."""
    if value is None or value == "" or isinstance(value, (dict, list)):
        return default
    return str(value)


def _section(raw: dict[str, Any], *path: str) -> dict[str, Any]:
    node: Any = raw
    for key in path:
        if not isinstance(node, dict):
            return {}
        node = node.get(key)
    return node if isinstance(node, dict) else {}


class RegistryCandidate(BaseModel):
    """A SAM.gov entity under evaluation as a possible match.

    Optional scalars are None when absent. Address parts default to ""
    and status to "Unknown".
    """

    model_config = ConfigDict(frozen=True)

    uei: str
    legal_name: str
    alternate_name: str | None = None
    status_code: str = "Unknown"
    expiration_date: str | None = None
    cage_code: str | None = None
    address: PhysicalAddress = Field(default_factory=PhysicalAddress)
    business_types: list[str] = Field(default_factory=list)
    naics_codes: list[str] = Field(default_factory=list)
    sba_certifications: list[str] = Field(default_factory=list)
    entity_url: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)

    @property
    def state_code(self) -> str:
        return self.address.state_code

    @property
    def sam_url(self) -> str:
        """Public SAM.gov page for the entity."""
        return f"https://sam.gov/entity/{self.uei}"

    @classmethod
    def from_sam_record(cls, raw: dict[str, Any]) -> "RegistryCandidate":
        """Map a raw SAM Entity API record, tolerating missing sections.

        Accepts both the nested API shape (entityRegistration/coreData/...)
        and flat records where the registration fields sit at the top level.
        """
        registration = _section(raw, "entityRegistration")
        core = _section(raw, "coreData")
        address = _section(raw, "coreData", "physicalAddress")
        goods = _section(raw, "assertions", "goodsAndServices")
        certifications = _section(raw, "certifications")
        entity_info = _section(raw, "coreData", "entityInformation")

        def pick(key: str) -> Any:
            return registration.get(key) or raw.get(key)

        return cls(
            uei=_text(pick("ueiSAM"), ""),
            legal_name=_text(pick("legalBusinessName"), ""),
            alternate_name=_text(pick("dbaName")),
            status_code=_text(pick("registrationStatus"), "Unknown"),
            expiration_date=_text(pick("registrationExpirationDate")),
            cage_code=_text(pick("cageCode")),
            address=PhysicalAddress(
                line1=_text(address.get("addressLine1"), ""),
                city=_text(address.get("city"), ""),
                state_code=_text(address.get("stateOrProvinceCode"), ""),
                zip_code=_text(address.get("zipCode"), ""),
                country_code=_text(address.get("countryCode"), "USA"),
            ),
            business_types=_as_list(
                _section(core, "businessTypes").get("businessTypeList"),
                "businessTypeDesc",
                "businessType",
            ),
            naics_codes=_as_list(goods.get("naicsList"), "naicsCode"),
            sba_certifications=_as_list(
                certifications.get("sbaBusinessTypes"),
                "sbaBusinessTypeDesc",
                "sbaBusinessType",
            ),
            entity_url=_text(entity_info.get("entityURL") or raw.get("entityURL")),
            raw=raw,
        )


class ScoredCandidate(BaseModel):
    """A candidate with its combined match score."""

    candidate: RegistryCandidate
    score: float = Field(ge=0.0, le=1.0)


class Matched(BaseModel):
    """Best candidate cleared the auto-link threshold."""

    disposition: Literal[Disposition.MATCHED] = Disposition.MATCHED
    candidate: RegistryCandidate
    score: float = Field(ge=0.0, le=1.0)


class Pending(BaseModel):
    """Relevant candidates exist but none is good enough to link."""

    disposition: Literal[Disposition.PENDING] = Disposition.PENDING
    subject_name: str
    top_candidates: list[ScoredCandidate] = Field(default_factory=list)

    @property
    def best_score(self) -> float:
        return self.top_candidates[0].score if self.top_candidates else 0.0


class NoMatch(BaseModel):
    """Nothing retrieved, or nothing cleared the relevance floor."""

    disposition: Literal[Disposition.NO_MATCH] = Disposition.NO_MATCH
    subject_name: str
    sample_raw: list[RegistryCandidate] = Field(default_factory=list)


ResolutionOutcome = Annotated[
    Matched | Pending | NoMatch,
    Field(discriminator="disposition"),
]
