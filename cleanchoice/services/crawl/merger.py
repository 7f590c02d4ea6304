from __future__ import annotations

from typing import Dict, Iterable, List

from cleanchoice.models.brand import BrandRecord


def merge_records(existing: Iterable[BrandRecord], updated: Iterable[BrandRecord]) -> List[BrandRecord]:
    """Fold a crawl batch into the full record set.

    Records are keyed by ``brand|domain`` (lower-cased). An updated record fully
    replaces the existing one with the same key; field carry-forward already
    happened in the spider. Untouched records pass through as-is, new keys are
    appended after the existing ones.
    """
    by_key: Dict[str, BrandRecord] = {}
    for rec in existing:
        by_key[rec.key()] = rec
    for rec in updated:
        by_key[rec.key()] = rec
    return list(by_key.values())
