# processors/quality.py
"""
Candidate scoring.

The weights below decide which strategy wins an extraction, so they are kept
exactly as tuned: changing one changes which candidate is chosen on real pages.
"""
import math

from processors.recipe_processor import is_section_header, normalize_whitespace

TITLE_MIN_LENGTH = 4
TITLE_POINTS = 15
POINTS_PER_ENTRY = 3.5
MAX_COUNT_POINTS = 35

# (minimum average step length, bonus), checked in order
STEP_LENGTH_BONUSES = ((45, 10), (30, 7), (20, 4))
TERSE_STEPS_PENALTY = -5
STEP_QUALITY_MIN_STEPS = 3

SPARSE_PENALTY = -25
RUNAWAY_STEPS = 80
RUNAWAY_PENALTY = -10


def compute_recipe_metrics(recipe):
    """
    Completeness metrics for a normalized recipe

    Args:
        recipe (dict): Normalized recipe candidate

    Returns:
        dict: title_len, ingredients_count, steps_count, avg_step_length and
        has_image / has_author / has_times / has_yield flags
    """
    recipe = recipe or {}
    title = recipe.get('title')
    ingredients = recipe.get('ingredients') or []
    steps = recipe.get('steps') or []

    non_header_steps = [step for step in steps if not is_section_header(step)]
    avg_step_length = 0
    if non_header_steps:
        avg_step_length = sum(len(str(step)) for step in non_header_steps) / len(non_header_steps)

    return {
        'title_len': len(normalize_whitespace(title)) if title else 0,
        'ingredients_count': len(ingredients),
        # Raw length, section headers included
        'steps_count': len(steps),
        'non_header_steps_count': len(non_header_steps),
        'avg_step_length': avg_step_length,
        'has_image': bool(recipe.get('image')),
        'has_author': bool(recipe.get('author')),
        'has_times': bool(recipe.get('times')),
        'has_yield': bool(recipe.get('yield')) or _is_number(recipe.get('servings')),
    }


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def score_recipe_candidate(recipe):
    """
    Score a normalized candidate from 0 to 100

    Args:
        recipe (dict): Normalized recipe candidate

    Returns:
        tuple: (score, metrics)
    """
    metrics = compute_recipe_metrics(recipe)
    score = 0

    if metrics['title_len'] >= TITLE_MIN_LENGTH:
        score += TITLE_POINTS

    score += min(MAX_COUNT_POINTS, metrics['ingredients_count'] * POINTS_PER_ENTRY)
    score += min(MAX_COUNT_POINTS, metrics['steps_count'] * POINTS_PER_ENTRY)

    if metrics['steps_count'] >= STEP_QUALITY_MIN_STEPS:
        for min_length, bonus in STEP_LENGTH_BONUSES:
            if metrics['avg_step_length'] >= min_length:
                score += bonus
                break
        else:
            score += TERSE_STEPS_PENALTY

    if metrics['has_image']:
        score += 3
    if metrics['has_author']:
        score += 2
    if metrics['has_times']:
        score += 2
    if metrics['has_yield']:
        score += 1

    if metrics['ingredients_count'] < 2:
        score += SPARSE_PENALTY
    if metrics['steps_count'] < 2:
        score += SPARSE_PENALTY
    if metrics['steps_count'] > RUNAWAY_STEPS:
        score += RUNAWAY_PENALTY

    score = max(0, min(100, _round_half_up(score)))
    return score, metrics


def is_usable(recipe):
    """A usable recipe has ingredients and at least one real (non-header) step"""
    if not recipe:
        return False
    steps = recipe.get('steps') or []
    return bool(recipe.get('ingredients')) and any(not is_section_header(step) for step in steps)
