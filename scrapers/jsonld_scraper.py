# scrapers/jsonld_scraper.py
import json
import logging

from bs4 import BeautifulSoup

from processors.ingredient_parser import parse_ingredients
from scrapers import BaseScraper
from scrapers.errors import JsonParseError
from scrapers.plugin_base import parse_number

logger = logging.getLogger(__name__)

JSONLD_SCRIPTS = 'script[type="application/ld+json"]'

# Kinds of node found in recipeInstructions
INSTRUCTION_STRING = 'string'
INSTRUCTION_LIST = 'list'
INSTRUCTION_STEP = 'step'
INSTRUCTION_SECTION = 'section'
INSTRUCTION_GENERIC = 'generic'

TEXT_FIELDS = ('text', 'name', 'description')
SECTION_CHILD_FIELDS = ('itemListElement', 'steps', 'instructions')

# schema.org NutritionInformation property -> canonical nutrient key
JSONLD_NUTRITION_FIELDS = {
    'calories': 'calories',
    'fatContent': 'totalFat',
    'saturatedFatContent': 'saturatedFat',
    'transFatContent': 'transFat',
    'cholesterolContent': 'cholesterol',
    'sodiumContent': 'sodium',
    'carbohydrateContent': 'totalCarbohydrates',
    'fiberContent': 'dietaryFiber',
    'sugarContent': 'sugars',
    'proteinContent': 'protein',
}


def node_types(node):
    """@type of a JSON-LD object as a list of strings"""
    node_type = node.get('@type') if isinstance(node, dict) else None
    if isinstance(node_type, str):
        return [node_type]
    if isinstance(node_type, list):
        return [t for t in node_type if isinstance(t, str)]
    return []


def find_recipe_nodes(data):
    """Every object typed Recipe anywhere in a parsed JSON-LD document"""
    recipes = []

    def walk(obj):
        if isinstance(obj, list):
            for item in obj:
                walk(item)
        elif isinstance(obj, dict):
            if 'Recipe' in node_types(obj):
                recipes.append(obj)
            for value in obj.values():
                walk(value)

    walk(data)
    return recipes


def classify_instruction_node(node):
    """Tag an instruction node as string, list, section, step or generic"""
    if isinstance(node, str):
        return INSTRUCTION_STRING
    if isinstance(node, list):
        return INSTRUCTION_LIST
    if isinstance(node, dict):
        types = node_types(node)
        if 'HowToSection' in types or 'itemListElement' in node:
            return INSTRUCTION_SECTION
        if 'HowToStep' in types:
            return INSTRUCTION_STEP
        return INSTRUCTION_GENERIC
    return None


def _clean_text(value):
    """Instruction text with any embedded HTML removed"""
    if not isinstance(value, str):
        return ''
    text = value.strip()
    if '<' in text and '>' in text:
        text = BeautifulSoup(text, 'lxml').get_text(' ')
    return ' '.join(text.split())


def _first_text(node):
    for field in TEXT_FIELDS:
        text = _clean_text(node.get(field))
        if text:
            return text
    return ''


class InstructionFlattener:
    """Flatten recipeInstructions into an ordered list of step strings"""

    def __init__(self):
        self.handlers = {
            INSTRUCTION_STRING: self._visit_string,
            INSTRUCTION_LIST: self._visit_list,
            INSTRUCTION_STEP: self._visit_step,
            INSTRUCTION_SECTION: self._visit_section,
            INSTRUCTION_GENERIC: self._visit_generic,
        }

    def flatten(self, instructions):
        self.steps = []
        self._visit(instructions)

        # Deduplicate, first occurrence wins
        seen = set()
        unique = []
        for step in self.steps:
            if step not in seen:
                seen.add(step)
                unique.append(step)
        return unique

    def _visit(self, node):
        if not node:
            return
        handler = self.handlers.get(classify_instruction_node(node))
        if handler:
            handler(node)

    def _push(self, text):
        if text:
            self.steps.append(text)

    def _visit_string(self, node):
        self._push(_clean_text(node))

    def _visit_list(self, node):
        for item in node:
            self._visit(item)

    def _visit_step(self, node):
        self._push(_first_text(node))

    def _visit_section(self, node):
        header = _clean_text(node.get('name') or node.get('title'))
        if header:
            self._push(f"**{header.rstrip(':').strip()}:**")

        for field in SECTION_CHILD_FIELDS:
            if node.get(field):
                self._visit(node[field])
                return

    def _visit_generic(self, node):
        text = _first_text(node)
        self._push(text)

        children = node.get('steps') or node.get('instructions')
        if children:
            self._visit(children)
        elif not text:
            # Last resort: any array-valued field
            for key, value in node.items():
                if not key.startswith('@') and isinstance(value, list):
                    self._visit(value)


def flatten_instructions(instructions):
    return InstructionFlattener().flatten(instructions)


class JsonLdScraper(BaseScraper):
    """Recipe data from schema.org JSON-LD script blocks"""

    name = 'jsonld'

    def extract(self, dom, url, warnings=None):
        """
        Convert the most complete Recipe node on the page

        Args:
            dom (DomDocument): Parsed page
            url (str): Fetched page URL
            warnings (list): Collects messages for malformed blocks

        Returns:
            dict: Raw recipe candidate, or None if no Recipe node exists
        """
        best_node = None
        best_score = 0

        for script in dom.select(JSONLD_SCRIPTS):
            try:
                data = self._parse_block(script.string or script.get_text())
            except JsonParseError as e:
                logger.warning(f"Failed to parse JSON-LD in {url}: {str(e)}")
                if warnings is not None:
                    warnings.append(f"jsonld: {str(e)}")
                continue

            for node in find_recipe_nodes(data):
                score = self._score_node(node)
                if score > best_score:
                    best_node = node
                    best_score = score

        if best_node is None:
            logger.info(f"No JSON-LD recipe found in {url}")
            return None

        return self._convert(best_node, url)

    def _parse_block(self, content):
        if not content or not content.strip():
            return None
        try:
            return json.loads(content, strict=False)
        except ValueError as e:
            raise JsonParseError(str(e)) from e

    def _score_node(self, node):
        """Completeness score used to choose between Recipe nodes"""
        score = 0

        if node.get('name'):
            score += 10
        if node.get('recipeIngredient'):
            score += 30
        if node.get('recipeInstructions'):
            score += 30

        instructions = flatten_instructions(node.get('recipeInstructions') or [])
        if instructions:
            avg_length = sum(len(step) for step in instructions) / len(instructions)
            has_substantial = any(len(step) > 50 for step in instructions)
            if len(instructions) >= 3 and avg_length > 40 and has_substantial:
                score += 20
            else:
                score += 5

        if node.get('image'):
            score += 5
        if node.get('author'):
            score += 3
        if node.get('prepTime') or node.get('cookTime'):
            score += 3
        if node.get('recipeYield'):
            score += 2

        return score

    def _convert(self, node, url):
        recipe = self._new_recipe(url)
        recipe['title'] = _clean_text(node.get('name')) or 'Untitled Recipe'

        description = _clean_text(node.get('description'))
        if description:
            recipe['description'] = description

        author = self._author(node.get('author'))
        if author:
            recipe['author'] = author

        image = self._image(node.get('image'))
        if image:
            recipe['image'] = image

        lines = node.get('recipeIngredient') or node.get('ingredients') or []
        if isinstance(lines, str):
            lines = [lines]
        recipe['ingredients'] = parse_ingredients(
            _clean_text(line) for line in lines if isinstance(line, str)
        )

        recipe['steps'] = flatten_instructions(node.get('recipeInstructions') or [])

        times = {}
        for key, field in (('prep', 'prepTime'), ('cook', 'cookTime'), ('total', 'totalTime')):
            if node.get(field):
                times[key] = self._parse_duration(node[field])
        if times:
            recipe['times'] = times

        self._apply_yield(recipe, node.get('recipeYield'))

        nutrition = self._nutrition(node.get('nutrition'))
        if nutrition:
            recipe['nutrition'] = nutrition

        logger.info(
            f"JSON-LD found: {len(recipe['ingredients'])} ingredients, {len(recipe['steps'])} steps"
        )
        return recipe

    def _author(self, author):
        if isinstance(author, list):
            author = author[0] if author else None
        if isinstance(author, str):
            return author.strip() or None
        if isinstance(author, dict):
            name = author.get('name')
            return name.strip() if isinstance(name, str) and name.strip() else None
        return None

    def _image(self, image):
        if isinstance(image, list):
            image = image[0] if image else None
        if isinstance(image, dict):
            image = image.get('url')
        return image if isinstance(image, str) and image.strip() else None

    def _apply_yield(self, recipe, recipe_yield):
        """Numeric yield sets servings, text yield is kept verbatim"""
        values = recipe_yield if isinstance(recipe_yield, list) else [recipe_yield]
        for value in values:
            if isinstance(value, bool) or value is None:
                continue
            if isinstance(value, (int, float)):
                recipe.setdefault('servings', int(value))
                recipe.setdefault('yield', str(value))
            elif isinstance(value, str) and value.strip():
                recipe.setdefault('yield', value.strip())

    def _nutrition(self, nutrition):
        if not isinstance(nutrition, dict):
            return {}
        result = {}
        for field, key in JSONLD_NUTRITION_FIELDS.items():
            value = nutrition.get(field)
            number = value if isinstance(value, (int, float)) and not isinstance(value, bool) else parse_number(str(value or ''))
            if number is not None:
                result[key] = float(number)
        return result
