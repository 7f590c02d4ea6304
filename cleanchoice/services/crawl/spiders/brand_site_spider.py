from __future__ import annotations

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence

from cleanchoice.models.brand import BrandRecord

from ..base import BrandAccumulator, PageResult, Spider, now_iso
from ..miner import mine

logger = logging.getLogger(__name__)

CANDIDATE_PATHS = ("/", "/about", "/contact", "/privacy")
NO_DOMAIN_NOTE = "no domain"

FetchFn = Callable[[str], PageResult]


def normalize_domain(domain: Optional[str]) -> str:
    """Strip scheme, path, query and fragment: 'https://Acme.com/shop?x' -> 'Acme.com'."""
    d = (domain or "").strip()
    d = re.sub(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", "", d)
    return re.split(r"[/?#]", d, maxsplit=1)[0].strip()


def candidate_urls(domain: str) -> List[str]:
    return [f"https://{domain}{path}" for path in CANDIDATE_PATHS]


class BrandSiteSpider(Spider):
    """Re-crawls the fixed page set of each brand and rebuilds its record.

    Pages of one brand are fetched strictly in order, one at a time, with a delay
    after every attempt. Distinct domains may run on a thread pool; brands that
    share a domain are crawled back to back by one worker.
    """

    name = "brand_site"

    def __init__(
        self,
        fetch_page: FetchFn,
        *,
        page_delay: float = 0.4,
        failure_delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], str] = now_iso,
    ) -> None:
        self.fetch_page = fetch_page
        self.page_delay = float(page_delay)
        self.failure_delay = float(failure_delay)
        self.sleep = sleep
        self.clock = clock

    # --- Public API ---
    def fetch(self, records: Sequence[BrandRecord], *, workers: int = 1) -> List[BrandRecord]:
        """Crawl every record; results keep the input order.

        Records sharing a domain run one after another in the same task, so a
        host never sees more than one request in flight.
        """
        workers = max(1, int(workers or 1))
        if workers == 1 or len(records) <= 1:
            return [self.safe_crawl(r) for r in records]

        groups: Dict[str, List[int]] = {}
        for i, rec in enumerate(records):
            groups.setdefault(normalize_domain(rec.domain).lower(), []).append(i)

        results: List[Optional[BrandRecord]] = [None] * len(records)

        def crawl_group(indexes: List[int]) -> None:
            for i in indexes:
                results[i] = self.safe_crawl(records[i])

        with ThreadPoolExecutor(max_workers=workers) as executor:
            list(executor.map(crawl_group, groups.values()))
        return results

    def safe_crawl(self, record: BrandRecord) -> BrandRecord:
        """crawl_brand() that keeps the prior record if something unexpected breaks."""
        try:
            return self.crawl_brand(record)
        except Exception:
            logger.exception("Crawl of %s (%s) failed; keeping prior record", record.brand, record.domain)
            return record

    def crawl_brand(self, record: BrandRecord) -> BrandRecord:
        domain = normalize_domain(record.domain)
        if not domain:
            logger.info("Skipping %r: %s", record.brand, NO_DOMAIN_NOTE)
            return record.model_copy(update={"note": NO_DOMAIN_NOTE}, deep=True)

        acc = BrandAccumulator.from_record(record)
        for url in candidate_urls(domain):
            res = self.fetch_page(url)
            if not res.ok:
                acc.pages_failed += 1
                logger.info("Fetch failed %s (status=%s %s)", url, res.status, res.error or "")
                self.sleep(self.failure_delay)
                continue
            acc.absorb(url, mine(res.body))
            self.sleep(self.page_delay)

        logger.debug(
            "%s: %d pages ok, %d failed, claim=%s, domestic=%s",
            domain, acc.pages_ok, acc.pages_failed, acc.claim.value, acc.domestic,
        )
        return acc.apply_to(record, updated_at=self.clock())


def crawl_brand(record: BrandRecord, fetch_page: FetchFn, **kwargs) -> BrandRecord:
    return BrandSiteSpider(fetch_page, **kwargs).crawl_brand(record)
