# scrapers/plugins.py
import logging

from scrapers import BaseScraper
from scrapers.cooked_scraper import CookedDetector
from scrapers.legacy_plugins_scraper import LegacyPluginDetector
from scrapers.tasty_recipes_scraper import TastyRecipesDetector
from scrapers.wprm_scraper import WPRMDetector

logger = logging.getLogger(__name__)


class RecipePluginScraper(BaseScraper):
    """Try each recipe-plugin detector, most popular plugin first"""

    name = 'plugin'

    def __init__(self, detectors=None):
        self.detectors = detectors or [
            WPRMDetector(),
            TastyRecipesDetector(),
            CookedDetector(),
            LegacyPluginDetector(),
        ]

    def extract(self, dom, url):
        """
        Run detectors in priority order

        A detector that raises is logged and skipped so the next plugin still
        gets a chance.

        Returns:
            dict: First detector's raw recipe, or None
        """
        for detector in self.detectors:
            try:
                recipe = detector.detect(dom, url)
            except Exception as e:
                logger.warning(f"{detector.plugin_name} detector failed: {str(e)}", exc_info=True)
                continue

            if recipe:
                return recipe

        logger.info("No recipe plugins detected")
        return None
