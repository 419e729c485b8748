# scrapers/recipe_extractor.py
"""
Extraction entry point.

A page is fetched once, every strategy runs over the same parsed document,
each result is normalized and scored, JSON-LD is merged with the other
strategies, and the best usable candidate is returned.
"""
import time
import logging
from datetime import datetime

from processors.candidates import (
    add_merged_candidates,
    build_candidate,
    rank_candidates,
    summarize_candidate,
)
from scrapers.dom import DomDocument
from scrapers.errors import NoRecipeFoundError, StrategyError
from scrapers.fetcher import Fetcher
from scrapers.heuristic_scraper import HeuristicScraper
from scrapers.jsonld_scraper import JsonLdScraper
from scrapers.plugins import RecipePluginScraper
from scrapers.print_scraper import PrintVersionScraper

logger = logging.getLogger(__name__)

STRATEGY_EVENT = 'strategy_attempt'
OUTCOME_CANDIDATE = 'candidate'
OUTCOME_EMPTY = 'empty'
OUTCOME_ERROR = 'error'


def _elapsed_ms(started):
    return int(round((time.perf_counter() - started) * 1000))


class RecipeExtractor:
    """Run every extraction strategy against a page and pick the best recipe"""

    def __init__(self, fetcher=None, logger=None, plugin_scraper=None, jsonld_scraper=None,
                 heuristic_scraper=None, print_scraper=None):
        self.fetcher = fetcher or Fetcher()
        self.logger = logger or logging.getLogger(__name__)

        self.plugin_scraper = plugin_scraper or RecipePluginScraper()
        self.jsonld_scraper = jsonld_scraper or JsonLdScraper()
        self.heuristic_scraper = heuristic_scraper or HeuristicScraper()
        self.print_scraper = print_scraper or PrintVersionScraper(
            self.fetcher,
            plugin_scraper=self.plugin_scraper,
            jsonld_scraper=self.jsonld_scraper,
            heuristic_scraper=self.heuristic_scraper
        )

    def extract(self, url, include_debug=False):
        """
        Extract a recipe from a URL

        Args:
            url (str): Absolute URL of the recipe page
            include_debug (bool): Attach the per-strategy debug report

        Returns:
            dict: {'recipe': ...} plus 'debug' when include_debug is set

        Raises:
            FetchError: The page could not be fetched
            NoRecipeFoundError: No strategy produced a usable recipe
        """
        started = time.perf_counter()
        debug = {
            'requested_url': url,
            'fetched_url': url,
            'started_at': datetime.now().isoformat(),
            'strategies': [],
            'chosen': None,
            'warnings': [],
        }

        self.logger.info(f"Extracting recipe from {url}")
        page = self.fetcher.fetch(url)
        page_url = page.url or url
        debug['fetched_url'] = page_url

        dom = DomDocument(page.html, page_url)
        warnings = debug['warnings']

        # Sequential: the print strategy makes its own fetch
        strategies = [
            ('plugin', lambda: (self.plugin_scraper.extract(dom, page_url), {})),
            ('jsonld', lambda: (self.jsonld_scraper.extract(dom, page_url, warnings=warnings), {})),
            ('print', lambda: self._run_print(dom, page_url, warnings)),
            ('heuristic', lambda: (self.heuristic_scraper.extract(dom, page_url), {})),
        ]

        candidates = []
        for name, run in strategies:
            candidate = self._attempt(name, run, page_url, warnings)
            if candidate is not None:
                candidates.append(candidate)

        add_merged_candidates(candidates, page_url)
        debug['strategies'] = [summarize_candidate(candidate) for candidate in candidates]

        ranked = rank_candidates(candidates)
        if not ranked:
            self.logger.warning(f"No usable recipe candidate for {url}")
            raise NoRecipeFoundError(url)

        chosen = ranked[0]
        recipe = chosen['recipe']

        # Final guardrails
        if not recipe.get('title'):
            recipe['title'] = 'Untitled Recipe'
        if not recipe.get('source_url'):
            recipe['source_url'] = page_url

        duration_ms = _elapsed_ms(started)
        debug['chosen'] = {
            'name': chosen['name'],
            'score': chosen['score'],
            'metrics': chosen['metrics'],
            'finished_at': datetime.now().isoformat(),
            'duration_ms': duration_ms,
        }

        self.logger.info(
            f"Chose {chosen['name']} for {url}: {len(recipe['ingredients'])} ingredients, "
            f"{len(recipe['steps'])} steps",
            extra={
                'event': 'extraction_complete',
                'strategy': chosen['name'],
                'score': chosen['score'],
                'duration_ms': duration_ms,
            }
        )

        result = {'recipe': recipe}
        if include_debug:
            result['debug'] = debug
        return result

    def _run_print(self, dom, url, warnings):
        result = self.print_scraper.extract(dom, url, warnings=warnings)
        if result is None:
            return None, {}
        recipe, print_url = result
        return recipe, {'print_url': print_url}

    def _attempt(self, name, run, base_url, warnings):
        """
        Run one strategy, never letting its failure abort the extraction

        Returns:
            dict: Scored candidate, or None if the strategy raised or found nothing
        """
        started = time.perf_counter()
        try:
            recipe, meta = run()
            # Normalizing and scoring a malformed result fails the same way
            candidate = build_candidate(name, recipe, base_url, meta) if recipe else None
        except Exception as e:
            error = StrategyError(name, e)
            warnings.append(str(error))
            self.logger.warning(
                str(error),
                exc_info=True,
                extra={
                    'event': STRATEGY_EVENT,
                    'strategy': name,
                    'outcome': OUTCOME_ERROR,
                    'duration_ms': _elapsed_ms(started),
                }
            )
            return None

        if candidate is None:
            self.logger.info(
                f"{name}: no candidate",
                extra={
                    'event': STRATEGY_EVENT,
                    'strategy': name,
                    'outcome': OUTCOME_EMPTY,
                    'duration_ms': _elapsed_ms(started),
                }
            )
            return None

        self.logger.info(
            f"{name}: {len(candidate['recipe']['ingredients'])} ingredients, "
            f"{len(candidate['recipe']['steps'])} steps",
            extra={
                'event': STRATEGY_EVENT,
                'strategy': name,
                'outcome': OUTCOME_CANDIDATE,
                'score': candidate['score'],
                'duration_ms': _elapsed_ms(started),
            }
        )
        return candidate


def extract(url, options=None, fetcher=None):
    """
    Extract a recipe with default settings

    Args:
        url (str): Absolute URL of the recipe page
        options (dict): Supports 'include_debug' (or 'includeDebug', default False)
        fetcher: Object with a fetch(url) method, defaults to an HTTP Fetcher

    Returns:
        dict: {'recipe': ...} plus 'debug' when requested
    """
    options = options or {}
    include_debug = options.get('include_debug', options.get('includeDebug', False))
    extractor = RecipeExtractor(fetcher=fetcher)
    return extractor.extract(url, include_debug=bool(include_debug))
