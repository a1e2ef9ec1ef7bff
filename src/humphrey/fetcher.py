"""
Fetching module for humphrey.

Downloads pages over HTTP with requests, or reads them from local files.
Fetchers are context managers that release their resources on exit.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests
from bs4.dammit import EncodingDetector

from .config import Config
from .errors import FetchFailure

logger = logging.getLogger(__name__)


def is_web_url(target: str) -> bool:
    """Check whether a target is an http(s) URL rather than a local file."""
    return urlparse(target).scheme in ("http", "https")


def local_path(target: str) -> Path:
    """Filesystem path of a ``file://`` URL or plain path."""
    parsed = urlparse(target)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(target)


def decode_markup(content: bytes, declared: Optional[str] = None) -> str:
    """
    Decode page bytes.

    A byte order mark wins, then the charset declared by the server, then
    the one declared in the page (<meta charset>), then UTF-8.

    Args:
        content: Raw page bytes
        declared: Charset from the Content-Type header, if any

    Returns:
        Decoded markup
    """
    content, bom_encoding = EncodingDetector.strip_byte_order_mark(content)
    encoding = (
        bom_encoding
        or declared
        or EncodingDetector.find_declared_encoding(content, is_html=True)
        or "utf-8"
    )
    try:
        return content.decode(encoding, errors="replace")
    except LookupError:
        logger.debug(f"Unknown encoding {encoding!r}, decoding as utf-8")
        return content.decode("utf-8", errors="replace")


class Fetcher(ABC):
    """Abstract base class for page fetchers."""

    @abstractmethod
    def fetch(self, target: str) -> str:
        """
        Fetch the HTML of a target.

        Args:
            target: URL or local path

        Returns:
            Page markup

        Raises:
            FetchFailure: If the page can't be retrieved
        """
        pass

    def close(self) -> None:
        """Release resources held by the fetcher."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class HttpFetcher(Fetcher):
    """Fetches pages with a shared requests session."""

    def __init__(self, user_agent: str, timeout: Optional[float] = None):
        """
        Initialize HttpFetcher.

        Args:
            user_agent: User-Agent header sent with every request
            timeout: Request timeout in seconds, None for the client default
        """
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["User-Agent"] = user_agent

    def fetch(self, target: str) -> str:
        logger.debug(f"Downloading {target}")
        try:
            with self.session.get(target, timeout=self.timeout) as response:
                if response.status_code != 200:
                    raise FetchFailure(target, f"got http {response.status_code} instead of 200")
                # requests assumes ISO-8859-1 for text/* without a charset
                declared = response.encoding if "charset" in response.headers.get("Content-Type", "").lower() else None
                return decode_markup(response.content, declared)
        except requests.RequestException as e:
            raise FetchFailure(target, str(e)) from e

    def close(self) -> None:
        self.session.close()


class FileFetcher(Fetcher):
    """Reads pages from the local filesystem."""

    def fetch(self, target: str) -> str:
        path = local_path(target)
        logger.debug(f"Reading {path}")
        try:
            return decode_markup(path.read_bytes())
        except OSError as e:
            raise FetchFailure(target, e.strerror or str(e)) from e


class DispatchingFetcher(Fetcher):
    """Sends web URLs to one fetcher and local files to another."""

    def __init__(self, web: Fetcher, files: Optional[Fetcher] = None):
        self.web = web
        self.files = files or FileFetcher()

    def fetch(self, target: str) -> str:
        if is_web_url(target):
            return self.web.fetch(target)
        return self.files.fetch(target)

    def __enter__(self):
        self.web.__enter__()
        return self

    def close(self) -> None:
        try:
            self.web.close()
        finally:
            self.files.close()

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            self.web.__exit__(exc_type, exc_val, exc_tb)
        finally:
            self.files.close()


def create_fetcher(config: Config) -> Fetcher:
    """
    Create the fetcher selected by the configuration.

    Args:
        config: Run configuration

    Returns:
        Fetcher handling both web URLs and local files
    """
    if config.browser:
        # crawl4ai pulls in a browser stack, only load it when asked for
        from .browser import BrowserFetcher
        web: Fetcher = BrowserFetcher(user_agent=config.user_agent, timeout=config.timeout)
    else:
        web = HttpFetcher(user_agent=config.user_agent, timeout=config.timeout)
    return DispatchingFetcher(web)
