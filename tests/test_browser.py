from types import SimpleNamespace
from unittest import mock

import pytest

pytest.importorskip("crawl4ai")

from humphrey import Config, FetchFailure, create_fetcher
from humphrey.browser import BrowserFetcher


def crawl_result(success=True, html="<p>rendered</p>", status_code=200, error_message=None):
    return SimpleNamespace(success=success, html=html, status_code=status_code, error_message=error_message)


@pytest.fixture
def crawler_class():
    with mock.patch("humphrey.browser.AsyncWebCrawler") as crawler_class:
        crawler = crawler_class.return_value
        crawler.start = mock.AsyncMock()
        crawler.close = mock.AsyncMock()
        crawler.arun = mock.AsyncMock(return_value=crawl_result())
        yield crawler_class


class TestBrowserFetcher:
    """Test suite for headless browser fetching."""

    def test_lifecycle(self, crawler_class):
        crawler = crawler_class.return_value
        with BrowserFetcher(user_agent="ua") as fetcher:
            crawler.start.assert_awaited_once()
            assert fetcher.fetch("https://example.com") == "<p>rendered</p>"
        crawler.close.assert_awaited_once()
        assert fetcher.loop is None
        assert crawler.arun.call_args.kwargs["url"] == "https://example.com"

    def test_failed_crawl(self, crawler_class):
        crawler_class.return_value.arun.return_value = crawl_result(success=False, error_message="net::ERR")
        with BrowserFetcher() as fetcher:
            with pytest.raises(FetchFailure) as excinfo:
                fetcher.fetch("https://example.com")
        assert "net::ERR" in str(excinfo.value)

    def test_bad_status(self, crawler_class):
        crawler_class.return_value.arun.return_value = crawl_result(status_code=404)
        with BrowserFetcher() as fetcher:
            with pytest.raises(FetchFailure) as excinfo:
                fetcher.fetch("https://example.com")
        assert "404" in str(excinfo.value)

    def test_crawler_exception(self, crawler_class):
        crawler_class.return_value.arun.side_effect = RuntimeError("browser crashed")
        with BrowserFetcher() as fetcher:
            with pytest.raises(FetchFailure):
                fetcher.fetch("https://example.com")
        crawler_class.return_value.close.assert_awaited_once()

    def test_fetch_outside_context(self):
        with pytest.raises(RuntimeError):
            BrowserFetcher().fetch("https://example.com")

    def test_timeout_in_milliseconds(self):
        assert BrowserFetcher(timeout=2.5).run_config.page_timeout == 2500

    def test_create_fetcher_uses_browser(self):
        fetcher = create_fetcher(Config(browser=True))
        assert isinstance(fetcher.web, BrowserFetcher)
