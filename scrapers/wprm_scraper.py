# scrapers/wprm_scraper.py
import logging

from scrapers.plugin_base import PluginDetector, group_header, merge_label_lines, parse_number

logger = logging.getLogger(__name__)

WPRM_CONTAINER = '.wprm-recipe, [data-recipe-id]'
WPRM_INSTRUCTION_TEXT = '.wprm-recipe-instruction-text, .wprm-recipe-instruction'

# WPRM nutrition field slug -> canonical nutrient key
WPRM_NUTRITION_FIELDS = {
    'calories': 'calories',
    'fat': 'totalFat',
    'saturated_fat': 'saturatedFat',
    'trans_fat': 'transFat',
    'cholesterol': 'cholesterol',
    'sodium': 'sodium',
    'carbohydrates': 'totalCarbohydrates',
    'fiber': 'dietaryFiber',
    'sugar': 'sugars',
    'protein': 'protein',
}


class WPRMDetector(PluginDetector):
    """WordPress Recipe Maker, the most common recipe card plugin"""

    plugin_name = 'WordPress Recipe Maker'

    def detect(self, dom, url):
        container = dom.select_one(WPRM_CONTAINER)
        if container is None:
            return None

        logger.info("Detected WordPress Recipe Maker (WPRM)")

        recipe = self._new_recipe(url)
        recipe['title'] = self._title(dom, container, '.wprm-recipe-name')

        summary = dom.text(dom.select_one('.wprm-recipe-summary', container))
        if summary:
            recipe['description'] = summary

        times = self._extract_times(dom, container)
        if times:
            recipe['times'] = times

        self._servings(recipe, dom.text(dom.select_one('.wprm-recipe-servings', container)))

        image = self._first_image(dom, container, '.wprm-recipe-image img')
        if image:
            recipe['image'] = image

        recipe['ingredients'] = self._ingredient_tokens(self._extract_ingredients(dom, container))
        recipe['steps'] = self._extract_steps(dom, container)

        tips = self._notes(dom, container, '.wprm-recipe-notes')
        if tips:
            recipe['tips'] = tips

        nutrition = self._extract_nutrition(dom, container)
        if nutrition:
            recipe['nutrition'] = nutrition

        return self._finish(recipe)

    def _extract_times(self, dom, container):
        times = {}
        for key in ('prep', 'cook', 'total'):
            hours = dom.text(dom.select_one(f'.wprm-recipe-{key}_time-hours', container))
            minutes = dom.text(dom.select_one(f'.wprm-recipe-{key}_time-minutes', container))

            total = 0
            if hours and parse_number(hours) is not None:
                total += int(parse_number(hours)) * 60
            if minutes and parse_number(minutes) is not None:
                total += int(parse_number(minutes))
            if hours or minutes:
                times[key] = total
        return times

    def _extract_ingredients(self, dom, container):
        lines = []
        for group in dom.select('.wprm-recipe-ingredient-group', container):
            header = group_header(dom.text(dom.select_one('.wprm-recipe-ingredient-group-name', group)))
            if header:
                lines.append(header)

            for ingredient in dom.select('.wprm-recipe-ingredient', group):
                parts = [
                    dom.text(dom.select_one(f'.wprm-recipe-ingredient-{part}', ingredient))
                    for part in ('amount', 'unit', 'name')
                ]
                line = ' '.join(part for part in parts if part)
                notes = dom.text(dom.select_one('.wprm-recipe-ingredient-notes', ingredient))
                if notes:
                    line = f"{line} ({notes})"
                if line.strip():
                    lines.append(line.strip())

        # Fallback if no groups
        if not any(not line.startswith('**') for line in lines):
            lines = [
                dom.text(ingredient)
                for ingredient in dom.select('.wprm-recipe-ingredient', container)
                if dom.text(ingredient)
            ]
        return lines

    def _extract_steps(self, dom, container):
        steps = []
        for group in dom.select('.wprm-recipe-instruction-group', container):
            header = group_header(dom.text(dom.select_one('.wprm-recipe-instruction-group-name', group)))
            if header:
                steps.append(header)
            steps.extend(merge_label_lines(self._instruction_lines(dom, group)))

        # Fallback if no groups
        if not steps:
            steps = merge_label_lines(self._instruction_lines(dom, container))
        return steps

    def _instruction_lines(self, dom, root):
        lines = []
        for node in dom.select(WPRM_INSTRUCTION_TEXT, root):
            # The text span sits inside the instruction <li>; read it once
            if dom.has_class(node, 'wprm-recipe-instruction') and dom.select_one('.wprm-recipe-instruction-text', node):
                continue
            text = dom.text(node)
            if text:
                lines.append(text)
        return lines

    def _extract_nutrition(self, dom, container):
        nutrition_container = dom.select_one('.wprm-nutrition-label-container, #wprm-recipe-nutrition', container)
        if nutrition_container is None:
            return {}

        nutrition = {}
        for field, key in WPRM_NUTRITION_FIELDS.items():
            value = dom.text(dom.select_one(
                f'.wprm-nutrition-label-text-nutrition-container-{field} '
                '.wprm-nutrition-label-text-nutrition-value',
                nutrition_container
            ))
            number = parse_number(value)
            if number is not None:
                nutrition[key] = number
        return nutrition
