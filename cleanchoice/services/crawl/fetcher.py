from __future__ import annotations

import logging
import threading
from typing import Dict, Optional
from urllib.parse import urlparse
from urllib.robotparser import RobotFileParser

import httpx

from .base import PageResult

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "CleanChoiceBot/1.0 (+github repo crawler)"


class RobotsGate:
    """Per-host robots.txt cache.

    An unreachable robots.txt or a 4xx answer allows everything; a 5xx answer
    disallows the whole host, following the usual crawler convention.
    """

    def __init__(self, client: httpx.Client, user_agent: str) -> None:
        self._client = client
        self.user_agent = user_agent
        self._parsers: Dict[str, Optional[RobotFileParser]] = {}
        self._lock = threading.Lock()

    def allowed(self, url: str) -> bool:
        parts = urlparse(url)
        origin = f"{parts.scheme}://{parts.netloc}"
        with self._lock:
            cached = origin in self._parsers
            parser = self._parsers.get(origin)
        if not cached:
            # fetched unlocked so a slow host does not stall the others
            loaded = self._load(origin)
            with self._lock:
                parser = self._parsers.setdefault(origin, loaded)
        if parser is None:
            return True
        return parser.can_fetch(self.user_agent, url)

    def _load(self, origin: str) -> Optional[RobotFileParser]:
        rp = RobotFileParser()
        try:
            r = self._client.get(f"{origin}/robots.txt")
        except Exception as exc:
            logger.debug("robots.txt unreachable for %s: %s", origin, exc)
            return None
        if r.status_code >= 500:
            rp.disallow_all = True
            return rp
        if r.status_code >= 400:
            return None
        rp.parse(r.text.splitlines())
        return rp


class PageFetcher:
    """HTTP fetch contract used by the brand spider.

    fetch_page() never raises on network problems; they come back as
    ``PageResult(ok=False, status=0)``.
    """

    def __init__(
        self,
        *,
        timeout: float = 12.0,
        user_agent: str = DEFAULT_USER_AGENT,
        respect_robots: bool = True,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.timeout = float(timeout)
        self.headers = {"User-Agent": user_agent}
        self._client = client or httpx.Client(timeout=self.timeout, headers=self.headers, follow_redirects=True)
        self.robots = RobotsGate(self._client, user_agent) if respect_robots else None

    def fetch_page(self, url: str) -> PageResult:
        if self.robots is not None and not self.robots.allowed(url):
            return PageResult(ok=False, status=0, url=url, error="disallowed by robots.txt")
        try:
            r = self._client.get(url)
        except Exception as exc:
            return PageResult(ok=False, status=0, url=url, error=str(exc) or exc.__class__.__name__)
        if not r.is_success:
            return PageResult(ok=False, status=r.status_code, url=str(r.url))
        return PageResult(ok=True, status=r.status_code, body=r.text, url=str(r.url))

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
