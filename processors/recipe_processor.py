# processors/recipe_processor.py
import re
import logging
from datetime import datetime

import config
from processors.ingredient_parser import parse_ingredients
from scrapers.dom import make_absolute_url

logger = logging.getLogger(__name__)

SECTION_HEADER_RE = re.compile(r'^\*\*[^*]+:\*\*$')
MARKDOWN_HEADER_RE = re.compile(r'^\*\*.+\*\*$')

# Title suffixes such as " | Site Name", " • Blog" or " - Site Name"
TITLE_SUFFIX_RE = re.compile(
    r'(?:\s*[|•]\s*|\s+[-–—]\s+)(?:(?!\s[-–—]\s)[^|•]){2,}$'
)

# Step lines that are page chrome rather than instructions
NOISE_STEP_PREFIX_RE = re.compile(r'^(?:print|share|save|rate|review|comment)\b')
NOISE_STEP_DATE_RE = re.compile(r'^(?:last\s+updated|updated|published)\b')
NOISE_STEP_SUBSTRINGS = ('★', '☆', 'facebook', 'pinterest', 'instagram', 'sign up', 'newsletter')
MIN_STEP_LENGTH = 10

# A short line still counts as a step when it is a whole sentence ("Mix.")
SHORT_SENTENCE_RE = re.compile(r'^[A-Za-z][A-Za-z ,\'-]*[A-Za-z][.!]$')


def is_section_header(text):
    """True for "**Label:**" pseudo-entries marking a subsection"""
    if not isinstance(text, str):
        return False
    return bool(SECTION_HEADER_RE.match(text.strip()))


def normalize_whitespace(text):
    """Collapse whitespace (including non-breaking spaces) and trim"""
    return re.sub(r'\s+', ' ', str(text).replace('\u00a0', ' ')).strip()


def header_token(raw):
    """Canonical group header token: {"raw": "**Name:**", "is_group_header": True}"""
    text = normalize_whitespace(raw)

    # Remove any existing markdown wrapper, then trailing colons
    text = re.sub(r'^\*\*\s*', '', text)
    text = re.sub(r'\s*\*\*$', '', text)
    text = re.sub(r'\s*:+\s*$', '', text).strip()

    return {'raw': f"**{text}:**", 'is_group_header': True}


def looks_like_noise_step(text):
    lowered = text.lower()
    if len(lowered) < MIN_STEP_LENGTH and not SHORT_SENTENCE_RE.match(text):
        return True
    if NOISE_STEP_PREFIX_RE.match(lowered) or NOISE_STEP_DATE_RE.match(lowered):
        return True
    return any(fragment in lowered for fragment in NOISE_STEP_SUBSTRINGS)


class RecipeProcessor:
    """Canonicalize raw strategy output into the uniform recipe shape"""

    def __init__(self, max_steps=None):
        self.max_steps = max_steps or config.MAX_NORMALIZED_STEPS

    def process_recipe(self, raw_recipe, base_url=None):
        """
        Normalize a raw recipe candidate

        Args:
            raw_recipe (dict): Candidate produced by any strategy
            base_url (str): Fetched (post-redirect) page URL

        Returns:
            dict: Normalized copy; the input is left untouched
        """
        if not isinstance(raw_recipe, dict):
            return raw_recipe

        recipe = dict(raw_recipe)
        base = base_url or recipe.get('source_url')

        recipe['title'] = self._clean_title(recipe.get('title'))

        image = recipe.get('image')
        if image:
            if isinstance(image, str) and image.strip().startswith('data:'):
                # Lazy-load placeholder, not a real image
                recipe['image'] = None
            else:
                recipe['image'] = make_absolute_url(image, base)

        recipe['ingredients'] = self._process_ingredients(recipe.get('ingredients'))
        recipe['steps'] = self._process_steps(recipe.get('steps'))

        if recipe.get('tips') is not None:
            recipe['tips'] = self._process_tips(recipe.get('tips'))

        if base:
            recipe['source_url'] = make_absolute_url(recipe.get('source_url') or base, base)

        if not recipe.get('created_at'):
            recipe['created_at'] = datetime.now().isoformat()
        if not recipe.get('updated_at'):
            recipe['updated_at'] = recipe['created_at']

        return recipe

    def _clean_title(self, title):
        """Trim, strip site-name suffixes, default to "Untitled Recipe" """
        title = normalize_whitespace(title or '')

        match = TITLE_SUFFIX_RE.search(title)
        while match and match.start() > 0:
            title = title[:match.start()].strip()
            match = TITLE_SUFFIX_RE.search(title)

        return title or 'Untitled Recipe'

    def _process_ingredients(self, ingredients):
        """Mixed strings/tokens to de-duplicated tokens, order preserved"""
        if not isinstance(ingredients, (list, tuple)):
            return []

        processed = []
        seen = set()

        def add(token):
            key = (bool(token.get('is_group_header')), token['raw'])
            if key not in seen:
                seen.add(key)
                processed.append(token)

        for item in ingredients:
            if item is None:
                continue

            # Already a token
            if isinstance(item, dict) and isinstance(item.get('raw'), str):
                raw = normalize_whitespace(item['raw'])
                if not raw:
                    continue
                if item.get('is_group_header') or is_section_header(raw):
                    add(header_token(raw))
                else:
                    add({**item, 'raw': raw, 'is_group_header': False})
                continue

            line = normalize_whitespace(item)
            if not line:
                continue

            if is_section_header(line) or MARKDOWN_HEADER_RE.match(line) or line.endswith(':'):
                add(header_token(line))
                continue

            parsed = parse_ingredients([line])
            token = parsed[0] if parsed else {'raw': line}
            token['raw'] = normalize_whitespace(token.get('raw') or line)
            token['is_group_header'] = False
            add(token)

        return processed

    def _process_steps(self, steps):
        """Drop noise and duplicates, keep section headers, cap the list"""
        if not isinstance(steps, (list, tuple)):
            return []

        processed = []
        seen = set()

        for step in steps:
            if step is None:
                continue
            text = normalize_whitespace(step)
            if not text or text in seen:
                continue

            if not is_section_header(text) and looks_like_noise_step(text):
                continue

            processed.append(text)
            seen.add(text)

        # Article-extraction misfires can produce huge lists
        return processed[:self.max_steps]

    def _process_tips(self, tips):
        if isinstance(tips, str):
            tips = [tips]
        processed = []
        for tip in tips:
            text = normalize_whitespace(tip or '')
            if text and text not in processed:
                processed.append(text)
        return processed


def normalize_recipe(raw_recipe, base_url=None):
    """Normalize a candidate with the default processor settings"""
    return RecipeProcessor().process_recipe(raw_recipe, base_url)
