"""Turn a raw HTML body into plain text plus embedded JSON-LD objects.

Both outputs are best-effort: malformed markup degrades the result but never
raises.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, List

from selectolax.parser import HTMLParser

logger = logging.getLogger(__name__)

# An unclosed block swallows the rest of the document.
_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?(?:</script\s*>|$)", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b[^>]*>.*?(?:</style\s*>|$)", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_ANGLE_RE = re.compile(r"[<>]")
_WS_RE = re.compile(r"\s+")

LD_JSON_TYPE = "application/ld+json"


@dataclass
class MinedPage:
    plain_text: str = ""
    structured: List[Any] = field(default_factory=list)


def strip_html(html: str) -> str:
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = _ANGLE_RE.sub(" ", text)
    return _WS_RE.sub(" ", text).strip()


def extract_json_ld(html: str) -> List[Any]:
    out: List[Any] = []
    try:
        doc = HTMLParser(html)
        nodes = doc.css("script") or []
    except Exception as exc:
        logger.debug("HTML parse failed, no JSON-LD extracted: %s", exc)
        return out
    for node in nodes:
        type_ = (node.attributes.get("type") or "").strip().lower()
        if type_ != LD_JSON_TYPE:
            continue
        raw = node.text(deep=True) or ""
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            logger.debug("Skipping malformed JSON-LD block (%d chars)", len(raw))
            continue
        if isinstance(data, list):
            out.extend(data)
        else:
            out.append(data)
    return out


def mine(raw_html: str) -> MinedPage:
    if not isinstance(raw_html, str) or not raw_html:
        return MinedPage()
    return MinedPage(plain_text=strip_html(raw_html), structured=extract_json_ld(raw_html))
