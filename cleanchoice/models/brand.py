from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClaimTier(str, Enum):
    """Strength of a "Made in USA" style assertion."""

    none = "none"
    qualified = "qualified"
    unqualified = "unqualified"


class Evidence(BaseModel):
    url: str
    quote: str


class BrandRecord(BaseModel):
    """One tracked brand/domain pair as persisted in the record store.

    Unknown keys coming from the store are kept so that a crawl round-trips
    columns it does not know about.
    """

    model_config = ConfigDict(extra="allow")

    brand: str = Field("", description="Display name of the brand")
    domain: str = Field("", description="Bare hostname, no scheme or path")
    hq_country: Optional[str] = Field(None, description="Two-letter HQ country code")
    hq_address: Optional[str] = Field(None, description="Free-text address or ZIP fragment")
    musa_claim: ClaimTier = Field(ClaimTier.none, description="Strongest claim tier found this run")
    musa_verified: bool = False
    country_of_origin: List[str] = Field(default_factory=list, description="Accumulated origin values")
    evidence_musa: List[Evidence] = Field(default_factory=list)
    updated_at: Optional[str] = Field(None, description="ISO8601 time of the last crawl pass")
    note: Optional[str] = Field(None, description="Annotation, e.g. 'no domain'")

    @field_validator("brand", "domain", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("musa_claim", mode="before")
    @classmethod
    def _blank_claim(cls, v):
        return v or ClaimTier.none

    @field_validator("country_of_origin", mode="before")
    @classmethod
    def _dedupe_origins(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        seen: List[str] = []
        for item in v:
            s = str(item)
            if s not in seen:
                seen.append(s)
        return seen

    def key(self) -> str:
        return record_key(self.brand, self.domain)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


def record_key(brand: Optional[str], domain: Optional[str]) -> str:
    """Identity key used by the store and the merger."""
    return f"{(brand or '').strip().lower()}|{(domain or '').strip().lower()}"
