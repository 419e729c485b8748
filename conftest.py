# conftest.py
import json

import pytest

from scrapers.dom import DomDocument
from scrapers.errors import FetchError
from scrapers.fetcher import RawHtmlDocument

PAGE_URL = 'https://www.example.com/recipes/pancakes/'


class FakeFetcher:
    """In-memory stand-in for Fetcher, keyed by URL; unknown URLs are 404s"""

    def __init__(self, pages=None):
        self.pages = {}
        self.requested = []
        for url, html in (pages or {}).items():
            self.add(url, html)

    def add(self, url, html, status=200, final_url=None):
        self.pages[url] = (html, status, final_url or url)

    def fetch(self, url):
        self.requested.append(url)
        if url not in self.pages:
            raise FetchError(url, 404, 'Not Found')

        html, status, final_url = self.pages[url]
        if not 200 <= status < 300:
            raise FetchError(url, status, 'Error')
        return RawHtmlDocument(html, final_url, status)


def jsonld_script(data):
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


def page(body, head=''):
    return f"<html><head><title>Test page</title>{head}</head><body>{body}</body></html>"


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def make_dom():
    def _make_dom(html, url=PAGE_URL):
        return DomDocument(html, url)
    return _make_dom
