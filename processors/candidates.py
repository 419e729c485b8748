# processors/candidates.py
"""
Scored candidates and the ranking that picks a winner among them.

A candidate is one strategy's normalized recipe with its score:
{'name', 'recipe', 'score', 'metrics', 'meta', 'usable'}.
"""
import logging

from processors.quality import is_usable, score_recipe_candidate
from processors.recipe_merger import merge_recipe_data
from processors.recipe_processor import normalize_recipe

logger = logging.getLogger(__name__)

# Preferred strategy when scores tie, best first
STRATEGY_PRIORITY = [
    'plugin',
    'jsonld+plugin',
    'jsonld+print',
    'jsonld+heuristic',
    'jsonld',
    'print',
    'heuristic',
]
UNRANKED_PRIORITY = 999

# (merged name, strategy combined with JSON-LD)
MERGE_PAIRS = [
    ('jsonld+plugin', 'plugin'),
    ('jsonld+print', 'print'),
    ('jsonld+heuristic', 'heuristic'),
]


def strategy_priority(name):
    try:
        return STRATEGY_PRIORITY.index(name)
    except ValueError:
        return UNRANKED_PRIORITY


def build_candidate(name, recipe, base_url, meta=None):
    """
    Normalize and score a raw strategy result

    Args:
        name (str): Strategy identifier
        recipe (dict): Raw recipe candidate
        base_url (str): Fetched (post-redirect) page URL
        meta (dict): Strategy-specific details kept for debugging

    Returns:
        dict: Scored candidate
    """
    normalized = normalize_recipe(recipe, base_url)
    score, metrics = score_recipe_candidate(normalized)
    return {
        'name': name,
        'recipe': normalized,
        'score': score,
        'metrics': metrics,
        'meta': dict(meta or {}),
        'usable': is_usable(normalized),
    }


def add_merged_candidates(candidates, base_url):
    """
    Append a merged candidate for JSON-LD paired with each other strategy

    Returns:
        list: The merged candidates that were appended
    """
    by_name = {candidate['name']: candidate for candidate in candidates}
    jsonld = by_name.get('jsonld')
    if jsonld is None:
        return []

    merged = []
    for merged_name, other_name in MERGE_PAIRS:
        other = by_name.get(other_name)
        if other is None:
            continue

        meta = dict(other['meta'])
        meta['merged_from'] = ['jsonld', other_name]
        candidate = build_candidate(
            merged_name,
            merge_recipe_data(jsonld['recipe'], other['recipe']),
            base_url,
            meta
        )
        logger.debug(f"Built {merged_name} candidate with score {candidate['score']}")
        merged.append(candidate)

    candidates.extend(merged)
    return merged


def rank_candidates(candidates):
    """Usable candidates ordered by score (highest first), then strategy priority"""
    usable = [candidate for candidate in candidates if candidate['usable']]
    return sorted(usable, key=lambda c: (-c['score'], strategy_priority(c['name'])))


def summarize_candidate(candidate):
    """Debug-report view of a candidate (everything but the recipe itself)"""
    return {
        'name': candidate['name'],
        'score': candidate['score'],
        'metrics': candidate['metrics'],
        'meta': candidate['meta'],
        'usable': candidate['usable'],
    }
