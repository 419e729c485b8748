# scrapers/fetcher.py
import logging
from collections import namedtuple

import requests

import config
from scrapers.errors import FetchError

logger = logging.getLogger(__name__)

# Fetched page content plus the final (post-redirect) URL
RawHtmlDocument = namedtuple('RawHtmlDocument', ['html', 'url', 'status_code'])


class Fetcher:
    """Retrieve raw HTML for a URL with an identifying user agent"""

    def __init__(self, session=None, timeout=None):
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT

        self.headers = {
            'User-Agent': config.USER_AGENT,
            'Accept': config.ACCEPT,
            'Accept-Language': config.ACCEPT_LANGUAGE,
        }

    def fetch(self, url):
        """
        Fetch a page

        Args:
            url (str): Absolute URL to fetch

        Returns:
            RawHtmlDocument: Page HTML and the URL it was finally served from

        Raises:
            FetchError: On network failure or a non-2xx response
        """
        logger.info(f"Fetching {url}")

        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Error fetching {url}: {str(e)}")
            raise FetchError(url, None, str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Error accessing URL: {url} - Status: {response.status_code}")
            raise FetchError(url, response.status_code, response.reason or '')

        final_url = response.url or url
        if final_url != url:
            logger.info(f"Redirected {url} -> {final_url}")

        return RawHtmlDocument(response.text, final_url, response.status_code)
