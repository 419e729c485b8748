# scrapers/print_scraper.py
import logging
from urllib.parse import urldefrag, urlparse

from processors.candidates import add_merged_candidates, build_candidate, rank_candidates
from scrapers import BaseScraper
from scrapers.dom import DomDocument, source_name
from scrapers.errors import FetchError, PrintFetchError
from scrapers.heuristic_scraper import HeuristicScraper
from scrapers.jsonld_scraper import JsonLdScraper
from scrapers.plugins import RecipePluginScraper
from scrapers.wprm_scraper import WPRM_CONTAINER

logger = logging.getLogger(__name__)

PRINT_LINKS = 'a[href*="print"], link[rel="print"]'

# Conventional print URLs, tried in order after an explicit print link.
# Each entry is (pattern name, template); {origin}, {path} and {slug} come
# from the page URL.
PRINT_URL_PATTERNS = [
    ('print_path', '{origin}{path}/print/'),
    ('print_query', '{origin}{path}?print=1'),
    ('wprm_print', '{origin}/wprm_print/{slug}'),
]


def same_page(url, other_url):
    """True when two URLs differ at most by fragment"""
    return urldefrag(url or '')[0] == urldefrag(other_url or '')[0]


class PrintVersionScraper(BaseScraper):
    """
    Re-run the page strategies against the site's printer-friendly page

    Print views drop comments, ads and related-post widgets, so the plugin,
    JSON-LD and heuristic strategies often recover cleaner content there.
    """

    name = 'print'

    def __init__(self, fetcher, plugin_scraper=None, jsonld_scraper=None, heuristic_scraper=None):
        self.fetcher = fetcher
        self.plugin_scraper = plugin_scraper or RecipePluginScraper()
        self.jsonld_scraper = jsonld_scraper or JsonLdScraper()
        self.heuristic_scraper = heuristic_scraper or HeuristicScraper()

    def find_print_urls(self, dom, url):
        """
        Candidate print URLs for a page, best guess first

        Args:
            dom (DomDocument): Parsed page
            url (str): Fetched page URL

        Returns:
            list: Absolute URLs, never including the page itself
        """
        urls = []

        link = dom.select_one(PRINT_LINKS)
        href = dom.attr(link, 'href')
        if href:
            urls.append(dom.resolve(href))

        parsed = urlparse(url)
        if parsed.scheme and parsed.netloc:
            path = parsed.path.rstrip('/')
            values = {
                'origin': f"{parsed.scheme}://{parsed.netloc}",
                'path': path,
                'slug': path.split('/')[-1],
            }
            has_wprm = dom.select_one(WPRM_CONTAINER) is not None

            for pattern_name, template in PRINT_URL_PATTERNS:
                if pattern_name == 'wprm_print' and (not has_wprm or not values['slug']):
                    continue
                urls.append(template.format(**values))

        unique = []
        for print_url in urls:
            if same_page(print_url, url):
                logger.debug(f"Skipping print URL {print_url}: same as page")
                continue
            if print_url not in unique:
                unique.append(print_url)
        return unique

    def extract(self, dom, url, warnings=None):
        """
        Extract from the first print page that can be fetched

        Args:
            dom (DomDocument): Parsed primary page
            url (str): Fetched page URL
            warnings (list): Collects print fetch failures

        Returns:
            tuple: (recipe, print_url), or None when no print page helped
        """
        for print_url in self.find_print_urls(dom, url):
            try:
                print_dom = self._load_print_page(print_url, url)
            except PrintFetchError as e:
                logger.info(str(e))
                if warnings is not None:
                    warnings.append(f"print: {str(e)}")
                continue

            if print_dom is None:
                continue

            recipe = self._best_recipe(print_dom, warnings)
            if recipe is None:
                logger.info(f"Print version not helpful: {print_url}")
                return None

            # The print page is a rendition of the page, not its source
            recipe['source_url'] = url
            recipe['source_name'] = source_name(url)
            return recipe, print_url

        return None

    def _load_print_page(self, print_url, page_url):
        """Parsed print page, or None when it redirected back to the page itself"""
        logger.info(f"Trying print version: {print_url}")
        try:
            page = self.fetcher.fetch(print_url)
        except FetchError as e:
            raise PrintFetchError(print_url, e) from e

        if same_page(page.url, page_url):
            logger.info(f"Skipping print URL {print_url}: redirects to the page")
            return None

        try:
            return DomDocument(page.html, page.url)
        except Exception as e:
            raise PrintFetchError(print_url, e) from e

    def _best_recipe(self, dom, warnings):
        """Best candidate from the plugin, JSON-LD and heuristic strategies on a print page"""
        results = [
            (self.plugin_scraper.name, lambda: self.plugin_scraper.extract(dom, dom.url)),
            (self.jsonld_scraper.name, lambda: self.jsonld_scraper.extract(dom, dom.url, warnings=warnings)),
            (self.heuristic_scraper.name, lambda: self.heuristic_scraper.extract(dom, dom.url)),
        ]

        candidates = []
        for name, run in results:
            try:
                recipe = run()
            except Exception as e:
                logger.warning(f"{name} failed on print page {dom.url}: {str(e)}")
                continue
            if recipe:
                candidates.append(build_candidate(name, recipe, dom.url))

        add_merged_candidates(candidates, dom.url)

        ranked = rank_candidates(candidates)
        if not ranked:
            return None

        best = ranked[0]
        logger.info(f"Print page best candidate: {best['name']} (score {best['score']})")
        return dict(best['recipe'])
