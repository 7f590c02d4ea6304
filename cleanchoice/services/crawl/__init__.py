"""Brand site crawling subsystem.

Structure:
- base.py: fetch result, per-brand evidence accumulator, spider contract
- miner.py: HTML -> plain text + JSON-LD objects
- classifier.py: HQ / "Made in USA" / country-of-origin heuristics
- fetcher.py: httpx fetch contract with robots.txt gate
- spiders/brand_site_spider.py: fixed page set crawl per brand
- merger.py: fold re-crawled records into the full set
- pipeline.py: JSONL record store and crawl window
- runner.py: CLI entrypoint for crawl and export runs
"""

__all__ = [
    "base",
    "classifier",
    "miner",
]
