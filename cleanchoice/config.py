"""Runtime settings read from the environment.

A ``.env`` file at the project root is applied first; variables already set in
the process environment win.

- CRAWL_DATA_DIR (default: data)
- CRAWL_STORE_PATH (default: <data dir>/companies.jsonl)
- CRAWL_EXPORT_DIR (default: exports)
- CRAWL_LIMIT / CRAWL_OFFSET: crawl window (default 50 / 0)
- CRAWL_PAGE_DELAY / CRAWL_FAILURE_DELAY: seconds to wait after a fetch (0.4 / 0.5)
- CRAWL_TIMEOUT: per-request timeout in seconds (12)
- CRAWL_USER_AGENT
- CRAWL_RESPECT_ROBOTS: "0" disables the robots.txt check
- CRAWL_WORKERS: brands crawled in parallel (1)
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from cleanchoice.services.crawl.fetcher import DEFAULT_USER_AGENT


def _load_env_from_file(root_dir: Optional[str] = None) -> None:
    try:
        root_dir = root_dir or os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
        env_path = os.path.join(root_dir, ".env")
        if not os.path.isfile(env_path):
            return
        with open(env_path, "r", encoding="utf-8") as f:
            for line in f:
                s = line.strip()
                if not s or s.startswith("#") or "=" not in s:
                    continue
                key, val = s.split("=", 1)
                key = key.strip()
                val = val.strip().strip('"').strip("'")
                if key and not os.environ.get(key):
                    os.environ[key] = val
    except OSError:
        # .env is optional
        pass


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name) or default)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name) or default)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


@dataclass
class CrawlSettings:
    data_dir: str = "data"
    store_path: str = os.path.join("data", "companies.jsonl")
    export_dir: str = "exports"
    limit: int = 50
    offset: int = 0
    page_delay: float = 0.4
    failure_delay: float = 0.5
    timeout: float = 12.0
    user_agent: str = DEFAULT_USER_AGENT
    respect_robots: bool = True
    workers: int = 1


def get_settings() -> CrawlSettings:
    _load_env_from_file()
    data_dir = os.getenv("CRAWL_DATA_DIR") or "data"
    return CrawlSettings(
        data_dir=data_dir,
        store_path=os.getenv("CRAWL_STORE_PATH") or os.path.join(data_dir, "companies.jsonl"),
        export_dir=os.getenv("CRAWL_EXPORT_DIR") or "exports",
        limit=_env_int("CRAWL_LIMIT", 50),
        offset=_env_int("CRAWL_OFFSET", 0),
        page_delay=_env_float("CRAWL_PAGE_DELAY", 0.4),
        failure_delay=_env_float("CRAWL_FAILURE_DELAY", 0.5),
        timeout=_env_float("CRAWL_TIMEOUT", 12.0),
        user_agent=os.getenv("CRAWL_USER_AGENT") or DEFAULT_USER_AGENT,
        respect_robots=_env_bool("CRAWL_RESPECT_ROBOTS", True),
        workers=_env_int("CRAWL_WORKERS", 1),
    )
