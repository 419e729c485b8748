# scrapers/legacy_plugins_scraper.py
import logging

from scrapers.plugin_base import PluginDetector

logger = logging.getLogger(__name__)

# Older WordPress recipe plugins, tried in order
LEGACY_PLUGINS = [
    {
        'name': 'EasyRecipe',
        'container': '.easyrecipe',
        'title': '.ERSName',
    },
    {
        'name': 'Ziplist',
        'container': '.ziplist-recipe, .zlrecipe-container',
        'title': '.zlrecipe-title',
    },
    {
        'name': 'WP Ultimate Recipe',
        'container': '.wpurp-container',
        'title': '.wpurp-recipe-name',
    },
]

# First selector that yields anything wins
LEGACY_INGREDIENT_SELECTORS = [
    '.ERSIngredients li',
    '.zlrecipe-ingredient',
    '.ingredients li',
    '.wpurp-recipe-ingredient',
    '.ingredient',
]

LEGACY_STEP_SELECTORS = [
    '.ERSInstructions li',
    '.ERSInstructions p',
    '.zlrecipe-instruction',
    '.instructions li',
    '.instructions p',
    '.wpurp-recipe-instruction',
    '.instruction',
]

# schema.org microdata these plugins emit for times and yield
LEGACY_TIME_PROPS = {'prep': 'prepTime', 'cook': 'cookTime', 'total': 'totalTime'}
LEGACY_NUTRITION_BLOCK = '.ERSNutrition, .zlrecipe-nutrition, .wpurp-recipe-nutrition, [itemprop="nutrition"]'


class LegacyPluginDetector(PluginDetector):
    """EasyRecipe, Ziplist and WP Ultimate Recipe cards"""

    plugin_name = 'Legacy recipe plugin'

    def detect(self, dom, url):
        container = None
        plugin_name = self.plugin_name
        title_selector = 'h1, h2'
        for plugin in LEGACY_PLUGINS:
            container = dom.select_one(plugin['container'])
            if container is not None:
                plugin_name = plugin['name']
                title_selector = f"{plugin['title']}, h1, h2"
                break

        if container is None:
            return None

        logger.info(f"Detected {plugin_name}")

        recipe = self._new_recipe(url)
        recipe['title'] = self._title(dom, container, title_selector)

        image = self._first_image(dom, container)
        if image:
            recipe['image'] = image

        ingredients = self._first_matching(dom, container, LEGACY_INGREDIENT_SELECTORS)
        recipe['ingredients'] = self._ingredient_tokens(ingredients)
        recipe['steps'] = self._first_matching(dom, container, LEGACY_STEP_SELECTORS, min_length=10)

        times = self._extract_times(dom, container)
        if times:
            recipe['times'] = times

        yield_node = dom.select_one('[itemprop="recipeYield"]', container)
        if yield_node is not None:
            self._servings(recipe, dom.attr(yield_node, 'content') or dom.text(yield_node))

        nutrition_block = dom.select_one(LEGACY_NUTRITION_BLOCK, container)
        if nutrition_block is not None:
            nutrition = self._nutrition_from_labels(dom, nutrition_block)
            if nutrition:
                recipe['nutrition'] = nutrition

        return self._finish(recipe, plugin_name)

    def _first_matching(self, dom, container, selectors, min_length=0):
        for selector in selectors:
            texts = self._texts(dom, selector, container, min_length=min_length)
            if texts:
                return texts
        return []

    def _extract_times(self, dom, container):
        times = {}
        for key, prop in LEGACY_TIME_PROPS.items():
            node = dom.select_one(f'[itemprop="{prop}"]', container)
            if node is None:
                continue
            value = dom.attr(node, 'datetime') or dom.attr(node, 'content')
            minutes = self._parse_iso_duration(value) if value else None
            if minutes is None:
                minutes = self._parse_time_value(dom.text(node))
            times[key] = minutes
        return times
