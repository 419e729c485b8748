# processors/ingredient_parser.py
import re
import logging
from fractions import Fraction

logger = logging.getLogger(__name__)

# Common units of measurement
UNITS = {
    'cup': ['cup', 'cups', 'c', 'c.'],
    'tablespoon': ['tablespoon', 'tablespoons', 'tbsp', 'tbsp.', 'tbs', 'tbs.', 'T'],
    'teaspoon': ['teaspoon', 'teaspoons', 'tsp', 'tsp.', 't'],
    'pound': ['pound', 'pounds', 'lb', 'lb.', 'lbs', 'lbs.'],
    'ounce': ['ounce', 'ounces', 'oz', 'oz.'],
    'gram': ['gram', 'grams', 'g', 'g.'],
    'kilogram': ['kilogram', 'kilograms', 'kg', 'kg.'],
    'liter': ['liter', 'liters', 'litre', 'litres', 'l', 'l.'],
    'milliliter': ['milliliter', 'milliliters', 'millilitre', 'millilitres', 'ml', 'ml.'],
    'quart': ['quart', 'quarts', 'qt', 'qt.'],
    'pint': ['pint', 'pints', 'pt', 'pt.'],
    'clove': ['clove', 'cloves'],
    'piece': ['piece', 'pieces'],
    'pinch': ['pinch', 'pinches'],
    'dash': ['dash', 'dashes'],
    'slice': ['slice', 'slices'],
    'can': ['can', 'cans'],
    'stick': ['stick', 'sticks'],
    'package': ['package', 'packages', 'pkg', 'pkg.']
}

# Reverse mapping for unit identification
UNIT_LOOKUP = {}
for standard, variants in UNITS.items():
    for variant in variants:
        UNIT_LOOKUP[variant] = standard

UNICODE_FRACTIONS = {
    '½': '1/2', '⅓': '1/3', '⅔': '2/3', '¼': '1/4', '¾': '3/4',
    '⅕': '1/5', '⅖': '2/5', '⅗': '3/5', '⅘': '4/5', '⅙': '1/6',
    '⅚': '5/6', '⅛': '1/8', '⅜': '3/8', '⅝': '5/8', '⅞': '7/8'
}

NUMBER_PATTERN = r'\d+\s+\d+\s*/\s*\d+|\d+\s*/\s*\d+|\d+(?:\.\d+)?'
QUANTITY_RE = re.compile(
    rf'^({NUMBER_PATTERN})(?:\s*(?:-|–|to)\s*({NUMBER_PATTERN}))?'
)
MIXED_NUMBER_RE = re.compile(r'(\d+)\s+(\d+\s*/\s*\d+)$')
UNIT_RE = re.compile(r'^([A-Za-z]+\.?)(?=\s|$|\))')
NOTE_RE = re.compile(r'\((.*?)\)')


def _replace_unicode_fractions(text):
    for char, fraction in UNICODE_FRACTIONS.items():
        # "1½" reads as "1 1/2"
        text = re.sub(rf'(\d){char}', rf'\1 {fraction}', text)
        text = text.replace(char, fraction)
    return text


def _to_number(quantity_text):
    """Convert "1 1/2", "3/4", "2.5" or "2" to a float"""
    mixed = MIXED_NUMBER_RE.match(quantity_text.strip())
    if mixed:
        whole, fraction = mixed.groups()
        return float(whole) + _to_number(fraction)

    compact = quantity_text.replace(' ', '')
    if '/' in compact:
        num, denom = compact.split('/')
        if float(denom) == 0:
            raise ValueError(f"zero denominator in {quantity_text!r}")
        return float(num) / float(denom)
    return float(compact)


def format_amount(amount):
    """
    Render an amount as a friendly fraction string

    Args:
        amount (float): Parsed amount, e.g. 1.5

    Returns:
        str: Display string, e.g. "1 1/2"
    """
    fraction = Fraction(amount).limit_denominator(16)
    whole = fraction.numerator // fraction.denominator
    remainder = fraction - whole

    if remainder == 0:
        return str(whole)
    if whole == 0:
        return f"{remainder.numerator}/{remainder.denominator}"
    return f"{whole} {remainder.numerator}/{remainder.denominator}"


def parse_ingredient(ingredient_text):
    """
    Parse an ingredient string into a structured token

    Args:
        ingredient_text (str): Raw ingredient text (e.g., "2 cups flour, sifted")

    Returns:
        dict: Token with raw, amount, amount_display, unit, item and note
    """
    raw = ingredient_text.strip()
    result = {'raw': raw, 'is_group_header': False}

    try:
        text = _replace_unicode_fractions(raw)

        quantity_match = QUANTITY_RE.search(text)
        if quantity_match:
            low = _to_number(quantity_match.group(1))
            result['amount'] = low

            display = format_amount(low)
            if quantity_match.group(2):
                display = f"{display}-{format_amount(_to_number(quantity_match.group(2)))}"
            result['amount_display'] = display

            text = text[quantity_match.end():].strip()

            # Look for units directly after the quantity
            unit_match = UNIT_RE.search(text)
            if unit_match:
                unit_text = unit_match.group(1)
                unit = UNIT_LOOKUP.get(unit_text) or UNIT_LOOKUP.get(unit_text.lower())
                if unit:
                    result['unit'] = unit
                    text = text[unit_match.end():].strip()

        # Extract notes in parentheses, else anything after the first comma
        notes_match = NOTE_RE.search(text)
        if notes_match:
            result['note'] = notes_match.group(1).strip()
            text = text.replace(notes_match.group(0), '').strip()
        elif ',' in text:
            text, note = text.split(',', 1)
            if note.strip():
                result['note'] = note.strip()

        # Remove any trailing commas, periods and a dangling "of"
        text = re.sub(r'^of\s+', '', text.strip())
        text = re.sub(r'\s+', ' ', re.sub(r'[,\.]+$', '', text)).strip()

        if text:
            result['item'] = text

        return result

    except (ValueError, ZeroDivisionError) as e:
        logger.warning(f"Error parsing ingredient '{raw}': {str(e)}")
        return {'raw': raw, 'is_group_header': False}


def parse_ingredients(lines):
    """
    Parse a list of raw ingredient lines

    Args:
        lines (list): Raw ingredient strings

    Returns:
        list: One token per non-empty line, in input order
    """
    tokens = []
    for line in lines or []:
        if line is None:
            continue
        line = str(line)
        if not line.strip():
            continue
        tokens.append(parse_ingredient(line))
    return tokens
