"""CSV projection of the JSONL collections.

Three collections live side by side in the data directory, each keyed by brand:
``companies`` (brand records), ``certs`` (certification records) and ``sites``
(site-location records). Every export puts the collection's preferred columns
first and appends any other keys in the order they are first seen.
"""
from __future__ import annotations

import csv
import io
import logging
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from cleanchoice.services.crawl.base import canonical_json
from cleanchoice.services.crawl.pipeline import ensure_dir, read_jsonl

logger = logging.getLogger(__name__)

COMPANY_COLUMNS = [
    "brand", "domain", "hq_country", "hq_address", "musa_claim", "musa_verified",
    "country_of_origin", "updated_at",
]
CERT_COLUMNS = ["brand", "registry", "cert_id", "scope", "country", "valid_to", "source_url", "evidence_quote"]
SITE_COLUMNS = ["brand", "site_country", "site_address", "source_url", "evidence_quote"]

COLLECTIONS: Dict[str, List[str]] = {
    "companies": COMPANY_COLUMNS,
    "certs": CERT_COLUMNS,
    "sites": SITE_COLUMNS,
}


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set)):
        return "; ".join(format_cell(v) for v in value)
    if isinstance(value, dict):
        return canonical_json(value)
    return str(value)


def header_for(rows: Iterable[Mapping[str, Any]], preferred: Sequence[str] = ()) -> List[str]:
    header = list(preferred)
    seen = set(header)
    for row in rows:
        for k in row.keys():
            if k not in seen:
                seen.add(k)
                header.append(k)
    return header


def to_table(rows: Sequence[Mapping[str, Any]], column_order: Sequence[str] = ()) -> List[List[str]]:
    """Header row followed by one formatted row per record; [] when there are no records."""
    if not rows:
        return []
    header = header_for(rows, column_order)
    table = [header]
    for row in rows:
        table.append([format_cell(row.get(k)) for k in header])
    return table


def to_csv(rows: Sequence[Mapping[str, Any]], column_order: Sequence[str] = ()) -> str:
    table = to_table(rows, column_order)
    if not table:
        return ""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(table)
    return buf.getvalue()


def source_path(name: str, *, data_dir: str, store_path: Optional[str] = None) -> str:
    """JSONL file backing a collection; companies live in the record store."""
    if name == "companies" and store_path:
        return store_path
    return os.path.join(data_dir, f"{name}.jsonl")


def export_collection(
    name: str,
    *,
    data_dir: str,
    out_dir: str,
    column_order: Sequence[str] = (),
    store_path: Optional[str] = None,
) -> str:
    rows = read_jsonl(source_path(name, data_dir=data_dir, store_path=store_path))
    ensure_dir(out_dir)
    out_path = os.path.join(out_dir, f"{name}.csv")
    with open(out_path, "w", encoding="utf-8", newline="") as f:
        f.write(to_csv(rows, column_order))
    logger.info("exported %s.csv (%d rows)", name, len(rows))
    return out_path


def export_all(*, data_dir: str, out_dir: str, store_path: Optional[str] = None) -> Dict[str, str]:
    return {
        name: export_collection(name, data_dir=data_dir, out_dir=out_dir, column_order=order, store_path=store_path)
        for name, order in COLLECTIONS.items()
    }
