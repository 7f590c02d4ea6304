from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterable, List

from cleanchoice.models.brand import BrandRecord

logger = logging.getLogger(__name__)


class RecordStoreError(RuntimeError):
    """The JSONL store could not be read or written. Fatal for a run."""


def ensure_dir(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def read_jsonl(path: str) -> List[Dict[str, Any]]:
    """Read every object of a JSONL file. A missing file reads as empty."""
    if not os.path.exists(path):
        return []
    rows: List[Dict[str, Any]] = []
    try:
        with open(path, "r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                s = line.strip()
                if not s:
                    continue
                try:
                    rows.append(json.loads(s))
                except ValueError as exc:
                    raise RecordStoreError(f"{path}:{lineno}: malformed JSON line ({exc})") from exc
    except OSError as exc:
        raise RecordStoreError(f"Cannot read {path}: {exc}") from exc
    return rows


def write_jsonl(records: Iterable[Dict[str, Any]], path: str) -> str:
    """Replace ``path`` with one JSON object per line; the swap is atomic."""
    ensure_dir(os.path.dirname(path))
    tmp = path + ".tmp"
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            for rec in records:
                f.write(json.dumps(rec, ensure_ascii=False) + "\n")
        os.replace(tmp, path)
    except OSError as exc:
        raise RecordStoreError(f"Cannot write {path}: {exc}") from exc
    return path


def load_records(path: str) -> List[BrandRecord]:
    rows = read_jsonl(path)
    try:
        return [BrandRecord.model_validate(r) for r in rows]
    except ValueError as exc:
        raise RecordStoreError(f"{path}: invalid brand record ({exc})") from exc


def save_records(path: str, records: Iterable[BrandRecord]) -> str:
    out = write_jsonl((r.to_dict() for r in records), path)
    logger.debug("Wrote %s", out)
    return out


def select_window(records: List[BrandRecord], offset: int = 0, limit: int = 50) -> List[BrandRecord]:
    """Contiguous crawl window ``records[offset:offset + limit]``."""
    offset = max(0, int(offset or 0))
    limit = max(0, int(limit or 0))
    return records[offset:offset + limit]
