# scrapers/tasty_recipes_scraper.py
import logging

from scrapers.plugin_base import PluginDetector, group_header, merge_label_lines

logger = logging.getLogger(__name__)

TASTY_CONTAINER = '.tasty-recipes, .tasty-recipe-card, div[id^="tasty-recipes-"]'
TASTY_INGREDIENTS_BODY = '.tasty-recipes-ingredients-body, .tasty-recipes-ingredients, .tasty-recipe-ingredients'
TASTY_INSTRUCTIONS_BODY = '.tasty-recipes-instructions-body, .tasty-recipes-instructions, .tasty-recipe-instructions'

# Group headings inside the ingredient and instruction bodies
TASTY_GROUP_HEADINGS = ('h3', 'h4', 'h5')

# Detail classes used by older card templates when label/value pairs are absent
TASTY_TIME_CLASSES = {
    'prep': '.tasty-recipes-prep-time',
    'cook': '.tasty-recipes-cook-time',
    'total': '.tasty-recipes-total-time',
}


class TastyRecipesDetector(PluginDetector):
    """Extractor for recipe cards rendered by the Tasty Recipes plugin"""

    plugin_name = 'Tasty Recipes'

    def detect(self, dom, url):
        container = dom.select_one(TASTY_CONTAINER)
        if container is None:
            return None

        logger.info("Detected Tasty Recipes")

        recipe = self._new_recipe(url)
        recipe['title'] = self._title(dom, container, '.tasty-recipes-title, h2')

        description = dom.text(dom.select_one('.tasty-recipes-description', container))
        if description:
            recipe['description'] = description

        times = self._extract_times_and_servings(dom, container, recipe)
        if times:
            recipe['times'] = times

        image = self._first_image(dom, container, '.tasty-recipes-image img')
        if image:
            recipe['image'] = image

        recipe['ingredients'] = self._ingredient_tokens(self._extract_ingredients(dom, container))
        recipe['steps'] = self._extract_instructions(dom, container)

        tips = self._notes(dom, container, '.tasty-recipes-notes-body, .tasty-recipes-notes')
        if tips:
            recipe['tips'] = tips

        nutrition = self._extract_nutrition(dom, container)
        if nutrition:
            recipe['nutrition'] = nutrition

        return self._finish(recipe)

    def _extract_times_and_servings(self, dom, container, recipe):
        """Times from the details block; servings/yield are set on the recipe"""
        times = {}

        for item in dom.select('.tasty-recipes-details-item, .tasty-recipes-details li', container):
            label = dom.text(dom.select_one('.tasty-recipes-label', item)).lower()
            value = dom.text(dom.select_one('.tasty-recipes-value, span:not(.tasty-recipes-label)', item))
            if not label or not value:
                continue

            if 'prep' in label:
                times['prep'] = self._parse_time_value(value)
            elif 'cook' in label:
                times['cook'] = self._parse_time_value(value)
            elif 'total' in label:
                times['total'] = self._parse_time_value(value)
            elif 'serving' in label or 'yield' in label:
                self._servings(recipe, value)

        # If times are missing, look for the dedicated time classes
        for key, selector in TASTY_TIME_CLASSES.items():
            if key not in times:
                value = dom.text(dom.select_one(selector, container))
                if value:
                    times[key] = self._parse_time_value(value)

        if 'yield' not in recipe:
            self._servings(recipe, dom.text(dom.select_one('.tasty-recipes-yield', container)))

        return times

    def _grouped_lines(self, dom, body, item_selector):
        """Walk a body in order, emitting group headers before their items"""
        lines = []
        for node in body.find_all(True):
            tag = dom.tag_name(node)
            if tag in TASTY_GROUP_HEADINGS:
                header = group_header(dom.text(node))
                if header:
                    lines.append(header)
            elif node.css.match(item_selector):
                text = dom.text(node)
                if text:
                    lines.append(text)
        return lines

    def _extract_ingredients(self, dom, container):
        body = dom.select_one(TASTY_INGREDIENTS_BODY, container)
        if body is None:
            # Modern checkbox items outside a recognised body
            checkbox_items = dom.select('li[data-tr-ingredient-checkbox]', container)
            return [dom.text(item) for item in checkbox_items if dom.text(item)]

        lines = self._grouped_lines(dom, body, 'li')
        if not any(not line.startswith('**') for line in lines):
            # Some cards use paragraphs instead of lists
            lines = self._texts(dom, 'p', body, min_length=2)
        return lines

    def _extract_instructions(self, dom, container):
        body = dom.select_one(TASTY_INSTRUCTIONS_BODY, container)
        if body is None:
            return []

        lines = self._grouped_lines(dom, body, 'li')
        if not any(not line.startswith('**') for line in lines):
            lines = self._texts(dom, 'p', body)

        steps = [
            line for line in merge_label_lines(lines)
            if line.startswith('**') or len(line) > 10
        ]
        return steps

    def _extract_nutrition(self, dom, container):
        block = dom.select_one('.tasty-recipes-nutrition', container)
        if block is None:
            return {}

        pairs = []
        for item in dom.select('li, .tasty-recipes-nutrition-item', block):
            label_node = dom.select_one('.tasty-recipes-label', item)
            if label_node is None:
                continue
            label = dom.text(label_node)
            value = dom.text(item)[len(label):] if dom.text(item).startswith(label) else dom.text(item)
            pairs.append((label, value))

        if pairs:
            return self._nutrition_from_pairs(pairs)
        return self._nutrition_from_labels(dom, block)
