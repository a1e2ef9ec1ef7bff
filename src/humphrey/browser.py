"""
Browser fetching module for humphrey.

Renders pages in a headless browser through Crawl4AI, for pages that build
their content with scripts.
"""

import asyncio
import logging
from typing import Optional

from crawl4ai import AsyncWebCrawler, BrowserConfig, CacheMode, CrawlerRunConfig

from .errors import FetchFailure
from .fetcher import Fetcher

logger = logging.getLogger(__name__)


class BrowserFetcher(Fetcher):
    """
    Fetches pages with a Crawl4AI AsyncWebCrawler.

    One browser is started on entry and closed on exit. Pages are fetched
    one at a time on a private event loop.
    """

    def __init__(self, user_agent: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize BrowserFetcher.

        Args:
            user_agent: User-Agent reported by the browser
            timeout: Page load timeout in seconds, None for the Crawl4AI default
        """
        self.browser_config = self._build_browser_config(user_agent)
        self.run_config = self._build_run_config(timeout)
        self.crawler: Optional[AsyncWebCrawler] = None
        self.loop: Optional[asyncio.AbstractEventLoop] = None

    def _build_browser_config(self, user_agent: Optional[str]) -> BrowserConfig:
        """Build browser configuration with performance optimizations."""
        kwargs = {}
        if user_agent:
            kwargs["user_agent"] = user_agent
        return BrowserConfig(
            headless=True,
            verbose=False,
            extra_args=[
                "--disable-gpu",
                "--disable-dev-shm-usage",
                "--no-sandbox",
            ],
            **kwargs
        )

    def _build_run_config(self, timeout: Optional[float]) -> CrawlerRunConfig:
        kwargs = {}
        if timeout is not None:
            kwargs["page_timeout"] = int(timeout * 1000)
        return CrawlerRunConfig(cache_mode=CacheMode.BYPASS, **kwargs)

    def __enter__(self):
        logger.info("Starting AsyncWebCrawler")
        self.loop = asyncio.new_event_loop()
        self.crawler = AsyncWebCrawler(config=self.browser_config)
        try:
            self.loop.run_until_complete(self.crawler.start())
        except BaseException:
            self.close()
            raise
        return self

    def fetch(self, target: str) -> str:
        if self.crawler is None or self.loop is None:
            raise RuntimeError("BrowserFetcher must be used as a context manager")

        logger.debug(f"Rendering {target}")
        try:
            result = self.loop.run_until_complete(self.crawler.arun(url=target, config=self.run_config))
        except Exception as e:
            raise FetchFailure(target, str(e) or type(e).__name__) from e

        if not result.success:
            raise FetchFailure(target, result.error_message or "crawl failed")
        if result.status_code is not None and result.status_code != 200:
            raise FetchFailure(target, f"got http {result.status_code} instead of 200")
        return result.html or ""

    def close(self) -> None:
        try:
            if self.crawler is not None and self.loop is not None:
                logger.info("Closing AsyncWebCrawler")
                self.loop.run_until_complete(self.crawler.close())
        finally:
            self.crawler = None
            if self.loop is not None:
                self.loop.close()
                self.loop = None
