from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional

from cleanchoice.config import CrawlSettings, get_settings
from cleanchoice.services.export_service import export_all

from .fetcher import PageFetcher
from .merger import merge_records
from .pipeline import RecordStoreError, load_records, save_records, select_window
from .spiders.brand_site_spider import BrandSiteSpider

logger = logging.getLogger(__name__)


def run_crawl(
    store_path: str,
    *,
    limit: int = 50,
    offset: int = 0,
    workers: int = 1,
    spider: Optional[BrandSiteSpider] = None,
    settings: Optional[CrawlSettings] = None,
) -> Dict[str, int]:
    """Re-crawl one window of the store and write the merged set back.

    Raises RecordStoreError when the store cannot be read or written.
    """
    records = load_records(store_path)
    window = select_window(records, offset=offset, limit=limit)
    logger.info("Crawling %d of %d records (offset=%d)", len(window), len(records), offset)

    fetcher: Optional[PageFetcher] = None
    if spider is None:
        settings = settings or get_settings()
        fetcher = PageFetcher(
            timeout=settings.timeout,
            user_agent=settings.user_agent,
            respect_robots=settings.respect_robots,
        )
        spider = BrandSiteSpider(
            fetcher.fetch_page,
            page_delay=settings.page_delay,
            failure_delay=settings.failure_delay,
        )
    try:
        updated = spider.fetch(window, workers=workers)
    finally:
        if fetcher is not None:
            fetcher.close()

    merged = merge_records(records, updated)
    save_records(store_path, merged)
    logger.info("Refreshed %d / %d records", len(updated), len(records))
    return {"refreshed": len(updated), "total": len(records), "stored": len(merged)}


def main(argv: Optional[list] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Re-crawl brand sites and export the record store")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, ...)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    crawl = sub.add_parser("crawl", help="Re-crawl one window of brand records")
    crawl.add_argument("--store", default=settings.store_path, help="JSONL record store")
    crawl.add_argument("--limit", type=int, default=settings.limit, help="Max brands to crawl this run")
    crawl.add_argument("--offset", type=int, default=settings.offset, help="Index of the first brand to crawl")
    crawl.add_argument("--workers", type=int, default=settings.workers, help="Brands crawled in parallel")
    crawl.add_argument("--no-robots", action="store_true", help="Do not consult robots.txt")

    export = sub.add_parser("export", help="Write CSV exports of companies, certs and sites")
    export.add_argument("--data-dir", default=settings.data_dir, help="Directory holding the JSONL collections")
    export.add_argument("--out-dir", default=settings.export_dir, help="Output directory for CSV files")
    export.add_argument("--store", default=None, help="JSONL record store exported as companies")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.cmd == "crawl":
            if args.no_robots:
                settings.respect_robots = False
            summary = run_crawl(
                args.store,
                limit=args.limit,
                offset=args.offset,
                workers=args.workers,
                settings=settings,
            )
            print(f"Refreshed {summary['refreshed']} / {summary['total']} records")
            return 0
        if args.cmd == "export":
            store = args.store or (settings.store_path if args.data_dir == settings.data_dir else None)
            paths = export_all(data_dir=args.data_dir, out_dir=args.out_dir, store_path=store)
            for path in paths.values():
                print(path)
            return 0
    except RecordStoreError as exc:
        logger.error("Record store failure: %s", exc)
        return 1
    except Exception:
        logger.exception("Run aborted")
        return 1

    parser.error("unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
