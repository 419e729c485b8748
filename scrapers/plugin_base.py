# scrapers/plugin_base.py
import re
import logging
from abc import abstractmethod

from bs4 import Tag

from processors.ingredient_parser import parse_ingredients
from scrapers import BaseScraper

logger = logging.getLogger(__name__)

# Free-text nutrition labels mapped to canonical nutrient keys, checked in order
NUTRIENT_LABELS = [
    (re.compile(r'saturated', re.I), 'saturatedFat'),
    (re.compile(r'trans', re.I), 'transFat'),
    (re.compile(r'\bfat\b', re.I), 'totalFat'),
    (re.compile(r'cholesterol', re.I), 'cholesterol'),
    (re.compile(r'sodium', re.I), 'sodium'),
    (re.compile(r'fib(?:er|re)', re.I), 'dietaryFiber'),
    (re.compile(r'sugars?', re.I), 'sugars'),
    (re.compile(r'carb', re.I), 'totalCarbohydrates'),
    (re.compile(r'protein', re.I), 'protein'),
    (re.compile(r'calorie|kcal', re.I), 'calories'),
]

# Display labels searched for in unstructured nutrition blocks
NUTRIENT_DISPLAY_LABELS = [
    ('Calories', 'calories'),
    ('Total Fat', 'totalFat'),
    ('Saturated Fat', 'saturatedFat'),
    ('Trans Fat', 'transFat'),
    ('Cholesterol', 'cholesterol'),
    ('Sodium', 'sodium'),
    ('Total Carbohydrate', 'totalCarbohydrates'),
    ('Dietary Fiber', 'dietaryFiber'),
    ('Sugars', 'sugars'),
    ('Protein', 'protein'),
]

NUMBER_RE = re.compile(r'\d+(?:\.\d+)?')
LABEL_LINE_MAX_LENGTH = 40
IMAGE_SOURCE_ATTRIBUTES = ('src', 'data-src', 'data-lazy-src')


def canonical_nutrient(label):
    """Canonical nutrient key for a free-text label, or None"""
    for pattern, key in NUTRIENT_LABELS:
        if pattern.search(label or ''):
            return key
    return None


def parse_number(text):
    match = NUMBER_RE.search(text or '')
    return float(match.group(0)) if match else None


def merge_label_lines(lines):
    """
    Join label-only lines ("Mix:") with the line that follows them

    Some themes render a sub-step label in its own node, which would otherwise
    become a meaningless step of its own.
    """
    merged = []
    i = 0
    while i < len(lines):
        line = lines[i]
        is_label = line.endswith(':') and len(line) <= LABEL_LINE_MAX_LENGTH
        if is_label and i + 1 < len(lines):
            merged.append(f"{line} {lines[i + 1]}".strip())
            i += 2
            continue
        merged.append(line)
        i += 1
    return merged


def group_header(name):
    """"**Name:**" marker for an ingredient or instruction group"""
    name = re.sub(r'\s*:+\s*$', '', name or '').strip()
    return f"**{name}:**" if name else None


class PluginDetector(BaseScraper):
    """Base class for detectors keyed to a recipe plugin's markup"""

    name = 'plugin'
    plugin_name = 'Recipe plugin'

    def extract(self, dom, url):
        return self.detect(dom, url)

    @abstractmethod
    def detect(self, dom, url):
        """
        Extract a recipe if the plugin's container is on the page

        Returns:
            dict: Raw recipe candidate, or None when the markup is absent or
            yields neither ingredients nor steps
        """

    def _title(self, dom, container, selector):
        return (
            dom.text(dom.select_one(selector, container))
            or dom.text(dom.select_one('h1'))
            or 'Untitled Recipe'
        )

    def _first_image(self, dom, container, selector=None):
        """First meaningful <img> source, skipping lazy-load placeholders"""
        images = []
        if selector:
            images.extend(dom.select(selector, container))
        images.extend(dom.select('img', container))

        for img in images:
            for attribute in IMAGE_SOURCE_ATTRIBUTES:
                src = dom.attr(img, attribute)
                if src and not src.strip().startswith('data:'):
                    return src.strip()
        return None

    def _ingredient_tokens(self, lines):
        """Header lines become group tokens, everything else is parsed"""
        tokens = []
        for line in lines:
            if line.startswith('**') and line.endswith(':**'):
                tokens.append({'raw': line, 'is_group_header': True})
            else:
                tokens.extend(parse_ingredients([line]))
        return tokens

    def _texts(self, dom, selector, root, min_length=0):
        texts = []
        for node in dom.select(selector, root):
            text = dom.text(node)
            if text and len(text) > min_length:
                texts.append(text)
        return texts

    def _notes(self, dom, container, selector):
        """Plugin notes as a list of tips"""
        notes = dom.select_one(selector, container)
        if notes is None:
            return []
        tips = self._texts(dom, 'p, li', notes)
        if not tips:
            text = dom.text(notes)
            tips = [text] if text else []
        return tips

    def _servings(self, recipe, text):
        if not text:
            return
        leading = re.match(r'^\s*(\d+)', text)
        if leading:
            recipe['servings'] = int(leading.group(1))
        recipe['yield'] = text

    def _nutrition_from_pairs(self, pairs):
        """Nutrition map from (label, value) text pairs"""
        nutrition = {}
        for label, value in pairs:
            key = canonical_nutrient(label)
            number = parse_number(value)
            if key and number is not None and key not in nutrition:
                nutrition[key] = number
        return nutrition

    def _nutrition_from_labels(self, dom, container):
        """Nutrition map from an unstructured block of "Label value" text"""
        nutrition = {}
        elements = [container] + container.find_all(True)

        for label, key in NUTRIENT_DISPLAY_LABELS:
            lowered = label.lower()
            matches = [el for el in elements if lowered in el.get_text().lower()]
            if not matches:
                continue

            # Innermost element carrying the label
            innermost = matches[-1]
            text = innermost.get_text()
            after_label = text[text.lower().index(lowered) + len(lowered):]
            number = parse_number(after_label)
            if number is None:
                sibling = dom.next_sibling(innermost)
                number = parse_number(dom.text(sibling)) if isinstance(sibling, Tag) else None
            if number is not None:
                nutrition[key] = number

        return nutrition

    def _finish(self, recipe, plugin_name=None):
        """Reject a detection that produced no ingredients or no steps"""
        plugin_name = plugin_name or self.plugin_name
        if not recipe['ingredients'] or not recipe['steps']:
            logger.info(f"{plugin_name} container found but missing ingredients/steps")
            return None

        logger.info(
            f"{plugin_name} extraction successful: "
            f"{len(recipe['ingredients'])} ingredients, {len(recipe['steps'])} steps"
        )
        return recipe
