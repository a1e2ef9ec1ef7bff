import pytest

from humphrey import Config, FetchFailure, Fetcher


HEADLINES_HTML = """
<html>
  <body>
    <a class="headline" href="/foo">Foo</a>
    <a class="headline" href="/bar"> Bar </a>
    <a class="other" href="/baz">Baz</a>
  </body>
</html>
"""

LINK_HTML = '<html><body><a href="/x">Y</a></body></html>'


class FakeFetcher(Fetcher):
    """Serves pages from a dict; missing targets fail like a 404."""

    def __init__(self, pages):
        self.pages = pages
        self.fetched = []
        self.closed = False

    def fetch(self, target):
        self.fetched.append(target)
        if target not in self.pages:
            raise FetchFailure(target, "got http 404 instead of 200")
        return self.pages[target]

    def close(self):
        self.closed = True


@pytest.fixture
def headlines_html():
    return HEADLINES_HTML


@pytest.fixture
def link_html():
    return LINK_HTML


@pytest.fixture
def fake_fetcher():
    return FakeFetcher({
        "https://example.com/headlines": HEADLINES_HTML,
        "https://example.com/link": LINK_HTML,
    })


@pytest.fixture
def config():
    return Config()
