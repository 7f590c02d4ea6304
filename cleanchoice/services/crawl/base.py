from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional, Set

from cleanchoice.models.brand import BrandRecord, ClaimTier, Evidence

from . import classifier
from .miner import MinedPage


def canonical_json(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


@dataclass
class PageResult:
    """Outcome of one page fetch. Transport errors are reported, never raised."""

    ok: bool
    status: int
    body: str = ""
    url: Optional[str] = None
    error: Optional[str] = None


@dataclass
class BrandAccumulator:
    """Running evidence for one brand across its candidate pages.

    The domestic flag is sticky and the first non-none claim tier wins, so the
    order in which pages are absorbed matters only for which snippet is kept.
    """

    origins: Set[str] = field(default_factory=set)
    domestic: bool = False
    address: Optional[str] = None
    claim: ClaimTier = ClaimTier.none
    evidence: List[Evidence] = field(default_factory=list)
    pages_ok: int = 0
    pages_failed: int = 0

    @classmethod
    def from_record(cls, record: BrandRecord) -> "BrandAccumulator":
        return cls(origins=set(record.country_of_origin or []))

    def absorb(self, url: str, page: MinedPage) -> None:
        self.pages_ok += 1
        text = page.plain_text

        if not self.domestic and classifier.has_domestic_address(text, page.structured):
            self.domestic = True
            self.address = self.address or classifier.find_zip_fragment(text) or "United States"

        tier = classifier.classify_claim(text)
        if tier is not ClaimTier.none and self.claim is ClaimTier.none:
            self.claim = tier
            quote = classifier.find_claim_snippet(text)
            if quote:
                self.evidence.append(Evidence(url=url, quote=quote))

        self.origins.update(classifier.extract_origins(page.structured))

    def verified(self) -> bool:
        if self.claim is not ClaimTier.unqualified:
            return False
        return self.domestic or any(classifier.is_us_origin(o) for o in self.origins)

    def apply_to(self, record: BrandRecord, *, updated_at: Optional[str] = None) -> BrandRecord:
        """Return a copy of ``record`` carrying this run's findings."""
        prior_origins = list(record.country_of_origin or [])
        origins = prior_origins + sorted(o for o in self.origins if o not in prior_origins)
        return record.model_copy(
            update={
                "hq_country": "US" if self.domestic else record.hq_country,
                "hq_address": record.hq_address or self.address,
                "musa_claim": self.claim,
                "musa_verified": self.verified(),
                "country_of_origin": origins,
                "evidence_musa": list(self.evidence),
                "updated_at": updated_at or now_iso(),
                "note": None,
            },
            deep=True,
        )


class Spider:
    """Minimal spider contract.

    Subclasses implement fetch() to return a list of records (models or dicts).
    """

    name: str = "base"

    def fetch(self, *args, **kwargs) -> List[Any]:
        raise NotImplementedError
