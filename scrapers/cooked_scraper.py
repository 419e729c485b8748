# scrapers/cooked_scraper.py
import re
import logging

from scrapers.plugin_base import PluginDetector, group_header

logger = logging.getLogger(__name__)

COOKED_MARKERS = '.cooked-recipe-ingredients, .cooked-recipe-directions, .cooked-single-ingredient'
COOKED_DIRECTIONS = '.cooked-recipe-directions .cooked-single-direction, .cooked-recipe-directions .cooked-direction'

# Direction blocks start with their step number on its own line ("1\n\nPreheat…")
LEADING_STEP_NUMBER_RE = re.compile(r'^\d+\s*\n+\s*')


class CookedDetector(PluginDetector):
    """Extractor for the Cooked WordPress plugin, including its print pages"""

    plugin_name = 'Cooked'

    def detect(self, dom, url):
        markers = dom.select(COOKED_MARKERS)
        if not markers:
            return None

        # Print pages may not wrap the recipe in an article
        section = dom.select_one('.cooked-recipe-ingredients, .cooked-recipe-directions')
        container = dom.closest(section, 'article, .cooked-recipe') if section is not None else None
        if container is None:
            container = dom.select_one('body') or dom.soup

        logger.info("Detected Cooked WordPress Plugin")

        recipe = self._new_recipe(url)
        recipe['title'] = (
            dom.text(dom.select_one('.cooked-recipe-name, h1.entry-title', container))
            or dom.text(dom.select_one('#printTitle'))
            or dom.text(dom.select_one('h1'))
            or 'Untitled Recipe'
        )

        image = self._first_image(dom, container, '.cooked-recipe-image img, .cooked-recipe-thumb img')
        if not image:
            image = dom.attr(dom.select_one('meta[property="og:image"]'), 'content')
        if image:
            recipe['image'] = image

        recipe['ingredients'] = self._ingredient_tokens(self._extract_ingredients(dom, container))
        recipe['steps'] = self._extract_steps(dom, container)

        times = self._extract_times(dom, container)
        if times:
            recipe['times'] = times

        nutrition_block = dom.select_one('.cooked-nutrition, .nutrition-info', container)
        if nutrition_block is not None:
            nutrition = self._nutrition_from_labels(dom, nutrition_block)
            if nutrition:
                recipe['nutrition'] = nutrition

        self._servings(recipe, dom.text(dom.select_one('.cooked-yield, .cooked-servings', container)))

        return self._finish(recipe)

    def _extract_ingredients(self, dom, container):
        lines = []
        for node in dom.select('.cooked-recipe-ingredients .cooked-single-ingredient', container):
            if dom.has_class(node, 'cooked-heading'):
                header = group_header(dom.text(node))
                if header:
                    lines.append(header)
            elif dom.has_class(node, 'cooked-ingredient'):
                parts = [
                    dom.text(dom.select_one(selector, node))
                    for selector in ('.cooked-ing-amount', '.cooked-ing-measurement', '.cooked-ing-name')
                ]
                line = ' '.join(part for part in parts if part)
                description = dom.text(dom.select_one('.cooked-ing-description', node))
                if description:
                    line = f"{line} {description}"
                if line.strip():
                    lines.append(line.strip())
        return lines

    def _direction_text(self, dom, node):
        return LEADING_STEP_NUMBER_RE.sub('', dom.text(node))

    def _extract_steps(self, dom, container):
        steps = []
        for node in dom.select(COOKED_DIRECTIONS, container):
            if dom.has_class(node, 'cooked-heading'):
                header = group_header(dom.text(node))
                if header:
                    steps.append(header)
                continue

            text = self._direction_text(dom, node)
            if text and len(text) > 10:
                steps.append(text)

        # Fallback: any paragraphs or list items in the directions block
        if not steps:
            for node in dom.select('.cooked-recipe-directions p, .cooked-recipe-directions li', container):
                text = self._direction_text(dom, node)
                if text and len(text) > 10:
                    steps.append(text)
        return steps

    def _extract_times(self, dom, container):
        times = {}
        for meta in dom.select('.cooked-meta-title', container):
            title = dom.text(meta).lower()
            value = dom.text(dom.next_sibling(meta))
            if not value:
                continue

            if 'prep' in title:
                times['prep'] = self._parse_time_value(value)
            elif 'cook' in title:
                times['cook'] = self._parse_time_value(value)
            elif 'total' in title:
                times['total'] = self._parse_time_value(value)
        return times
