"""Heuristic claim detection over mined page content.

All functions are pure. Text is the whitespace-normalized plain text produced
by ``miner.mine``; ``structured`` is its list of JSON-LD objects.

The "Made in USA" tiering is evaluated over the whole page, not per sentence:
a disqualifying phrase anywhere on the page keeps the page out of the
unqualified tier even if it refers to a different product line.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, Iterator, Optional, Set

from cleanchoice.models.brand import ClaimTier

# Two-letter state followed by a ZIP or ZIP+4, e.g. "CA 94107" or "NY 10001-1234".
STATE_ZIP_RE = re.compile(r"\b[A-Z]{2}\s\d{5}(?:-\d{4})?\b")
_COUNTRY_TOKEN_RE = re.compile(r"\bUnited States\b|\bUSA\b")
_CONTACT_WORD_RE = re.compile(r"\b(?:address|phone|contact)\b", re.IGNORECASE)

# Matched against lower-cased text.
_UNQUALIFIED_RE = re.compile(r"\bmade in (?:the )?u\.?s\.?a?\.?\b|\bmanufactured in usa\b")
_IMPORTED_RE = re.compile(r"\bwith imported (?:parts|materials)\b")
_ASSEMBLED_RE = re.compile(r"\bassembled in usa\b")
_QUALIFIED_RE = re.compile(r"\bassembled in usa\b|\bmade in usa with imported (?:parts|materials)\b")

_SNIPPET_RE = re.compile(
    r".{0,60}(?:Made in(?: the)? U\.?S\.?A?\.?|Manufactured in USA|Assembled in USA).{0,60}",
    re.IGNORECASE,
)

_US_COUNTRY_VALUES = {"us", "united states"}
_US_ORIGIN_VALUES = {"us", "usa", "u.s.", "u.s.a.", "u.s", "u.s.a", "united states", "united states of america"}

ADDRESS_COUNTRY_FIELD = "addressCountry"
ORIGIN_FIELD = "countryOfOrigin"


def _walk(nodes: Iterable[Any]) -> Iterator[dict]:
    """Yield every dict reachable from ``nodes``, depth first."""
    stack = list(nodes or [])[::-1]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            yield node
            stack.extend(list(node.values())[::-1])
        elif isinstance(node, list):
            stack.extend(node[::-1])


def _name_of(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("name"), str):
        return value["name"]
    return None


def has_domestic_address(text: str, structured: Iterable[Any] = ()) -> bool:
    for obj in _walk(structured):
        country = _name_of(obj.get(ADDRESS_COUNTRY_FIELD))
        if country and country.strip().lower() in _US_COUNTRY_VALUES:
            return True
    text = text or ""
    if STATE_ZIP_RE.search(text):
        return True
    if _COUNTRY_TOKEN_RE.search(text) and _CONTACT_WORD_RE.search(text):
        return True
    return False


def classify_claim(text: str) -> ClaimTier:
    t = (text or "").lower()
    if _UNQUALIFIED_RE.search(t) and not _IMPORTED_RE.search(t) and not _ASSEMBLED_RE.search(t):
        return ClaimTier.unqualified
    if _QUALIFIED_RE.search(t):
        return ClaimTier.qualified
    return ClaimTier.none


def find_claim_snippet(text: str) -> Optional[str]:
    m = _SNIPPET_RE.search(text or "")
    return m.group(0) if m else None


def find_zip_fragment(text: str) -> Optional[str]:
    m = STATE_ZIP_RE.search(text or "")
    return m.group(0) if m else None


def extract_origins(structured: Iterable[Any]) -> Set[str]:
    origins: Set[str] = set()
    for obj in _walk(structured):
        if ORIGIN_FIELD not in obj:
            continue
        value = obj[ORIGIN_FIELD]
        for item in value if isinstance(value, list) else [value]:
            name = _name_of(item)
            if name and name.strip():
                origins.add(name.strip())
    return origins


def is_us_origin(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _US_ORIGIN_VALUES
