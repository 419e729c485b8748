# processors/recipe_merger.py
import logging

logger = logging.getLogger(__name__)

# Fields where structured data is usually the accurate source
METADATA_FIELDS = ('title', 'author', 'image', 'times', 'yield', 'servings')
CONTENT_FIELDS = ('ingredients', 'steps')


def merge_recipe_data(jsonld_recipe, other_recipe):
    """
    Combine JSON-LD metadata with another strategy's content

    JSON-LD instructions are often cut down to section headers, while plugin,
    print and heuristic strategies tend to recover the full text.

    Args:
        jsonld_recipe (dict): Candidate from the JSON-LD extractor
        other_recipe (dict): Candidate from any other strategy

    Returns:
        dict: Merged candidate
    """
    if not jsonld_recipe:
        return other_recipe
    if not other_recipe:
        return jsonld_recipe

    merged = dict(other_recipe)

    for field in METADATA_FIELDS:
        merged[field] = jsonld_recipe.get(field) or other_recipe.get(field)

    for field in CONTENT_FIELDS:
        jsonld_entries = jsonld_recipe.get(field) or []
        other_entries = other_recipe.get(field) or []
        merged[field] = other_entries if len(other_entries) > len(jsonld_entries) else jsonld_entries

    logger.debug(
        f"Merged recipe: {len(merged['ingredients'])} ingredients, {len(merged['steps'])} steps"
    )
    return merged
