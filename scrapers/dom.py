# scrapers/dom.py
import re
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

HEADING_TAGS = ('h1', 'h2', 'h3', 'h4', 'h5', 'h6')


class DomDocument:
    """
    Queryable view of a fetched page.

    Strategies only talk to the page through this class (CSS selection, text,
    attributes, sibling and parent navigation), so the HTML parser stays an
    implementation detail of the loader.
    """

    def __init__(self, html, url):
        self.url = url
        self.soup = BeautifulSoup(html or '', 'lxml')

    def select(self, selector, root=None):
        """All elements matching a CSS selector, in document order"""
        return (root or self.soup).select(selector)

    def select_one(self, selector, root=None):
        """First element matching a CSS selector, or None"""
        return (root or self.soup).select_one(selector)

    @staticmethod
    def text(node):
        """Trimmed text content of a node ('' for None)"""
        if node is None:
            return ''
        return node.get_text().strip()

    @staticmethod
    def attr(node, name):
        """Attribute value as a string, or None"""
        if node is None:
            return None
        value = node.get(name)
        if isinstance(value, list):
            value = ' '.join(value)
        return value

    @staticmethod
    def tag_name(node):
        return node.name.lower() if isinstance(node, Tag) and node.name else ''

    @classmethod
    def is_heading(cls, node):
        return cls.tag_name(node) in HEADING_TAGS

    @staticmethod
    def has_class(node, class_name):
        return class_name in (node.get('class') or [])

    @staticmethod
    def next_siblings(node):
        """Following element siblings (text nodes skipped)"""
        for sibling in node.next_siblings:
            if isinstance(sibling, Tag):
                yield sibling

    @staticmethod
    def next_sibling(node):
        for sibling in node.next_siblings:
            if isinstance(sibling, Tag):
                return sibling
        return None

    @staticmethod
    def closest(node, selector):
        """The node itself or its nearest ancestor matching the selector"""
        current = node
        while isinstance(current, Tag) and current.name != '[document]':
            if current.css.match(selector):
                return current
            current = current.parent
        return None

    def find_all_with_self(self, node, selector):
        """Matching descendants of node, plus node itself when it matches"""
        found = []
        if node.css.match(selector):
            found.append(node)
        found.extend(node.select(selector))
        return found

    def resolve(self, maybe_url):
        return make_absolute_url(maybe_url, self.url)


def make_absolute_url(maybe_url, base_url):
    """Resolve a possibly relative URL against base_url"""
    if not maybe_url:
        return None
    try:
        return urljoin(base_url or '', str(maybe_url).strip())
    except ValueError:
        return str(maybe_url)


def source_name(url):
    """Hostname without a leading www., used as the recipe's source name"""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        hostname = None
    if not hostname:
        return 'Unknown Source'
    return re.sub(r'^www\.', '', hostname)
