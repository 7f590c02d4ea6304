from typing import Optional

from fastapi import APIRouter, HTTPException

from cleanchoice.config import get_settings
from cleanchoice.models.brand import ClaimTier
from cleanchoice.services.crawl.pipeline import RecordStoreError, load_records
from cleanchoice.services.crawl.spiders.brand_site_spider import normalize_domain

router = APIRouter(tags=["brands"])


def _load():
    try:
        return load_records(get_settings().store_path)
    except RecordStoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/brands")
def api_list_brands(musa_claim: Optional[ClaimTier] = None, limit: int = 100, offset: int = 0):
    records = _load()
    if musa_claim is not None:
        records = [r for r in records if r.musa_claim == musa_claim]
    offset = max(0, offset)
    items = records[offset:offset + max(0, limit)]
    return {"count": len(items), "total": len(records), "items": [r.to_dict() for r in items]}


@router.get("/brands/{domain}")
def api_get_brand(domain: str):
    wanted = normalize_domain(domain).lower()
    matches = [r.to_dict() for r in _load() if normalize_domain(r.domain).lower() == wanted]
    if not wanted or not matches:
        raise HTTPException(status_code=404, detail="Brand not found")
    return {"domain": wanted, "count": len(matches), "items": matches}
