# scrapers/heuristic_scraper.py
"""
Fallback extraction for pages without recipe markup.

Sections are located by heading text and collected by walking the heading's
following siblings. The pattern tables below decide what counts as an
ingredients or instructions heading and where a section ends.
"""
import re
import logging

import config
from scrapers import BaseScraper
from scrapers.plugin_base import IMAGE_SOURCE_ATTRIBUTES

logger = logging.getLogger(__name__)

INGREDIENT_HEADINGS = 'h1, h2, h3, h4, h5'
INSTRUCTION_HEADINGS = 'h1, h2, h3, h4, h5, h6'

INGREDIENT_HEADING_RE = re.compile(r'\b(?:ingredient|shopping|grocery)', re.IGNORECASE)
INSTRUCTION_HEADING_RE = re.compile(
    r'instruction|method|direction|\bsteps?\b|preparation|how to|overnight|same day',
    re.IGNORECASE
)

# Headings that end the ingredient section without being instructions
INGREDIENT_STOP_RE = re.compile(
    r'\b(?:tips?|notes?|servings?|must try|shop|nutrition|storage|substitutions?|'
    r'variations?|faqs?|videos?|equipments?|tools?)\b',
    re.IGNORECASE
)
INGREDIENT_PARAGRAPH_SKIP_RE = re.compile(r'^(?:description|instructions|method|notes)', re.IGNORECASE)
MAX_INGREDIENT_PARAGRAPH = 200
MAX_GROUP_HEADING = 60

# Instruction headings kept as "**Header:**" markers
PHASE_HEADING_RE = re.compile(r'overnight|same day|preparation|method', re.IGNORECASE)
MIN_PHASE_HEADING = 6
MIN_STEP_TEXT = 26
STEP_NOISE_SUBSTRINGS = ('★', 'Find it online:')
STEP_NOISE_PREFIX_RE = re.compile(r'^(?:print|share|save|rate|review|comment)', re.IGNORECASE)

CONTENT_IMAGES = 'article img, main img, .recipe img, .post-content img'


class HeuristicScraper(BaseScraper):
    """Ingredients and instructions located by heading text"""

    name = 'heuristic'

    def __init__(self, max_steps=None):
        self.max_steps = max_steps or config.HEURISTIC_MAX_STEPS

    def extract(self, dom, url):
        title = (
            dom.text(dom.select_one('h1'))
            or dom.text(dom.select_one('title'))
            or 'Untitled Recipe'
        )

        ingredients = self.extract_ingredients(dom)
        steps = self.extract_instructions(dom)

        if not ingredients or not any(not step.startswith('**') for step in steps):
            logger.info(f"Heuristic failed: {len(ingredients)} ingredients, {len(steps)} steps")
            return None

        logger.info(f"Heuristic success: {len(ingredients)} ingredients, {len(steps)} steps")

        recipe = self._new_recipe(url)
        recipe['title'] = title
        recipe['ingredients'] = ingredients
        recipe['steps'] = steps

        image = self.extract_best_image(dom)
        if image:
            recipe['image'] = image

        return recipe

    def extract_ingredients(self, dom):
        """
        Ingredient lines, with sub-headings as "**Name:**" group markers

        Returns:
            list: Raw lines in page order, duplicates removed
        """
        header = None
        for heading in dom.select(INGREDIENT_HEADINGS):
            if INGREDIENT_HEADING_RE.search(dom.text(heading)):
                header = heading
                break

        if header is None:
            return []

        lines = []
        for guard, node in enumerate(dom.next_siblings(header)):
            if guard >= config.HEURISTIC_SIBLING_GUARD:
                break

            if dom.is_heading(node):
                heading_text = dom.text(node)
                if INSTRUCTION_HEADING_RE.search(heading_text) or INGREDIENT_STOP_RE.search(heading_text):
                    break

                # Sub-section such as "For the dough"
                if heading_text and len(heading_text) < MAX_GROUP_HEADING:
                    lines.append(f"**{heading_text.rstrip(':').strip()}:**")
                continue

            for item in dom.find_all_with_self(node, 'li'):
                text = dom.text(item)
                if text:
                    lines.append(text)

            for paragraph in dom.find_all_with_self(node, 'p'):
                text = dom.text(paragraph)
                if text and len(text) <= MAX_INGREDIENT_PARAGRAPH and not INGREDIENT_PARAGRAPH_SKIP_RE.match(text):
                    lines.append(text)

        return _unique(lines)

    def extract_instructions(self, dom):
        """
        Steps collected under every instructions-like heading

        Recipes are often split into several phases ("Overnight Preparation",
        "Same Day"), so all matching headings are walked, not just the first.
        """
        steps = []
        seen = set()

        headings = [
            heading for heading in dom.select(INSTRUCTION_HEADINGS)
            if INSTRUCTION_HEADING_RE.search(dom.text(heading))
            and not INGREDIENT_HEADING_RE.search(dom.text(heading))
        ]
        logger.debug(f"Found {len(headings)} instruction headers")

        for heading in headings:
            section = []
            for guard, node in enumerate(dom.next_siblings(heading)):
                if guard >= config.HEURISTIC_STEP_SIBLING_GUARD or dom.is_heading(node):
                    break

                for element in dom.find_all_with_self(node, 'p, li'):
                    text = dom.text(element)
                    if text in seen or not self._looks_like_step(text):
                        continue
                    section.append(text)
                    seen.add(text)

            if not section:
                continue

            heading_text = dom.text(heading)
            if len(heading_text) >= MIN_PHASE_HEADING and PHASE_HEADING_RE.search(heading_text):
                marker = f"**{heading_text.rstrip(':').strip()}:**"
                if marker not in seen:
                    steps.append(marker)
                    seen.add(marker)
            steps.extend(section)

        return steps[:self.max_steps]

    def _looks_like_step(self, text):
        if not text or len(text) < MIN_STEP_TEXT:
            return False
        if any(fragment in text for fragment in STEP_NOISE_SUBSTRINGS):
            return False
        return not STEP_NOISE_PREFIX_RE.match(text)

    def extract_best_image(self, dom):
        """og:image, else the largest content image, else the first image"""
        og_image = dom.attr(dom.select_one('meta[property="og:image"]'), 'content')
        if og_image:
            return dom.resolve(og_image)

        best_image = None
        best_size = 0
        for img in dom.select(CONTENT_IMAGES):
            src = dom.attr(img, 'src') or dom.attr(img, 'data-src')
            size = _int_attr(dom.attr(img, 'width')) * _int_attr(dom.attr(img, 'height'))
            if src and size > best_size:
                best_image = src
                best_size = size
        if best_image:
            return dom.resolve(best_image)

        for img in dom.select('img'):
            for attribute in IMAGE_SOURCE_ATTRIBUTES:
                src = dom.attr(img, attribute)
                if src and not src.startswith('data:'):
                    return dom.resolve(src)
        return None


def _int_attr(value):
    match = re.match(r'^\s*(\d+)', value or '')
    return int(match.group(1)) if match else 0


def _unique(lines):
    unique = []
    for line in lines:
        line = line.strip()
        if line and line not in unique:
            unique.append(line)
    return unique
