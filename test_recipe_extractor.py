#!/usr/bin/env python3
"""End-to-end tests for the extraction pipeline, with fetching faked"""

import logging

import pytest

from conftest import PAGE_URL, FakeFetcher, jsonld_script, page
from processors.candidates import rank_candidates, strategy_priority
from scrapers import BaseScraper
from scrapers.errors import FetchError, NoRecipeFoundError
from scrapers.recipe_extractor import RecipeExtractor, extract

PANCAKES = {
    '@context': 'https://schema.org',
    '@type': 'Recipe',
    'name': 'Pancakes',
    'recipeIngredient': ['1 cup flour', '2 eggs'],
    'recipeInstructions': ['Mix.', 'Cook on a skillet for 3 minutes.'],
}

PANCAKES_PAGE = page('<p>Our family favourite.</p>', head=jsonld_script(PANCAKES))

COOKIES_PAGE = page("""
<h1>Chewy Cookies</h1>
<h2>Ingredients</h2>
<ul><li>2 cups flour</li><li>1 cup sugar</li><li>1 egg</li><li>1 tsp vanilla</li></ul>
<h2>Instructions</h2>
<p>Preheat the oven to 350 degrees F.</p>
<p>Cream the butter and sugar until fluffy.</p>
<p>Fold in the flour until just combined.</p>
<p>Bake for 12 minutes until golden at the edges.</p>
""")

SALAD_JSONLD = {
    '@type': 'Recipe',
    'name': 'Garden Salad',
    'image': '/salad.jpg',
    'recipeIngredient': ['1 head lettuce'],
    'recipeInstructions': [{'@type': 'HowToSection', 'name': 'Assemble'}],
}

SALAD_PAGE = page("""
<h1>Salad page</h1>
<h2>Ingredients</h2>
<ul><li>1 head lettuce</li><li>2 tomatoes</li><li>1 cucumber</li></ul>
<h2>Instructions</h2>
<p>Wash the lettuce thoroughly and spin it completely dry.</p>
<p>Slice the tomatoes and cucumber into thin even rounds.</p>
<p>Toss everything together with the dressing in a big bowl.</p>
<p>Serve immediately so the leaves stay crisp and fresh.</p>
""", head=jsonld_script(SALAD_JSONLD))


def _extractor(pages, **kwargs):
    return RecipeExtractor(fetcher=FakeFetcher(pages), **kwargs)


def _content(recipe):
    return {key: value for key, value in recipe.items() if key not in ('created_at', 'updated_at')}


def test_jsonld_page():
    result = _extractor({PAGE_URL: PANCAKES_PAGE}).extract(PAGE_URL, include_debug=True)
    recipe = result['recipe']

    assert result['debug']['chosen']['name'] == 'jsonld'
    assert recipe['title'] == 'Pancakes'
    assert [token['raw'] for token in recipe['ingredients']] == ['1 cup flour', '2 eggs']
    assert recipe['steps'] == ['Mix.', 'Cook on a skillet for 3 minutes.']
    assert recipe['source_url'] == PAGE_URL


def test_heuristic_page():
    result = _extractor({PAGE_URL: COOKIES_PAGE}).extract(PAGE_URL, include_debug=True)
    recipe = result['recipe']

    assert result['debug']['chosen']['name'] == 'heuristic'
    assert recipe['title'] == 'Chewy Cookies'
    assert len(recipe['ingredients']) == 4
    assert len(recipe['steps']) == 4


def test_http_error_is_fatal():
    fetcher = FakeFetcher()
    fetcher.add(PAGE_URL, '<html></html>', status=404)

    with pytest.raises(FetchError) as excinfo:
        RecipeExtractor(fetcher=fetcher).extract(PAGE_URL)

    assert excinfo.value.status == 404


def test_page_without_recipe():
    html = page('<h1>About us</h1><p>We write about food every single day.</p>')

    with pytest.raises(NoRecipeFoundError):
        _extractor({PAGE_URL: html}).extract(PAGE_URL)


def test_jsonld_metadata_merged_with_heuristic_content():
    result = _extractor({PAGE_URL: SALAD_PAGE}).extract(PAGE_URL, include_debug=True)
    recipe = result['recipe']
    debug = result['debug']

    assert debug['chosen']['name'] == 'jsonld+heuristic'
    assert recipe['title'] == 'Garden Salad'
    assert recipe['image'] == 'https://www.example.com/salad.jpg'
    assert [token['raw'] for token in recipe['ingredients']] == ['1 head lettuce', '2 tomatoes', '1 cucumber']
    assert len(recipe['steps']) == 4

    by_name = {summary['name']: summary for summary in debug['strategies']}
    assert set(by_name) == {'jsonld', 'heuristic', 'jsonld+heuristic'}
    # Section header only, so not usable on its own
    assert by_name['jsonld']['usable'] is False


def test_print_version_candidate():
    main_page = page('<h1>Pancakes</h1><a href="/recipes/pancakes/print/">Print</a><p>A story.</p>')
    print_url = 'https://www.example.com/recipes/pancakes/print/'
    pages = {
        PAGE_URL: main_page,
        print_url: COOKIES_PAGE,
    }

    result = _extractor(pages).extract(PAGE_URL, include_debug=True)

    assert result['debug']['chosen']['name'] == 'print'
    assert result['recipe']['source_url'] == PAGE_URL
    summary = next(s for s in result['debug']['strategies'] if s['name'] == 'print')
    assert summary['meta'] == {'print_url': print_url}


def test_redirected_page_uses_final_url():
    fetcher = FakeFetcher()
    fetcher.add(PAGE_URL, PANCAKES_PAGE, final_url='https://recipes.example.org/pancakes')

    result = RecipeExtractor(fetcher=fetcher).extract(PAGE_URL, include_debug=True)

    assert result['recipe']['source_url'] == 'https://recipes.example.org/pancakes'
    assert result['recipe']['source_name'] == 'recipes.example.org'
    assert result['debug']['requested_url'] == PAGE_URL
    assert result['debug']['fetched_url'] == 'https://recipes.example.org/pancakes'


class ExplodingScraper(BaseScraper):
    name = 'plugin'

    def extract(self, dom, url):
        raise RuntimeError('boom')


def test_strategy_failure_is_not_fatal():
    result = _extractor({PAGE_URL: PANCAKES_PAGE}, plugin_scraper=ExplodingScraper()).extract(
        PAGE_URL, include_debug=True
    )

    assert result['recipe']['title'] == 'Pancakes'
    assert "Strategy 'plugin' failed: boom" in result['debug']['warnings']


class MalformedScraper(BaseScraper):
    name = 'heuristic'

    def extract(self, dom, url):
        return {'title': 'Broken', 'ingredients': ['1 egg'], 'steps': ['Whisk the egg well.'], 'tips': 5}


def test_malformed_strategy_result_is_not_fatal():
    result = _extractor({PAGE_URL: PANCAKES_PAGE}, heuristic_scraper=MalformedScraper()).extract(
        PAGE_URL, include_debug=True
    )

    assert result['recipe']['title'] == 'Pancakes'
    assert any(w.startswith("Strategy 'heuristic' failed:") for w in result['debug']['warnings'])


def test_debug_report_is_optional():
    result = _extractor({PAGE_URL: PANCAKES_PAGE}).extract(PAGE_URL)
    assert 'debug' not in result


def test_debug_report_contents():
    debug = _extractor({PAGE_URL: PANCAKES_PAGE}).extract(PAGE_URL, include_debug=True)['debug']

    assert debug['requested_url'] == PAGE_URL
    assert debug['started_at']
    assert debug['chosen']['score'] == debug['strategies'][0]['score']
    assert 'metrics' in debug['chosen']
    assert debug['chosen']['duration_ms'] >= 0
    # Both print URL guesses were tried and failed
    assert len([w for w in debug['warnings'] if w.startswith('print:')]) == 2


def test_extraction_is_deterministic():
    html = COOKIES_PAGE.replace('</head>', jsonld_script(PANCAKES) + '</head>')

    first = _extractor({PAGE_URL: html}).extract(PAGE_URL, include_debug=True)
    second = _extractor({PAGE_URL: html}).extract(PAGE_URL, include_debug=True)

    assert first['debug']['chosen']['name'] == second['debug']['chosen']['name']
    assert _content(first['recipe']) == _content(second['recipe'])


def test_strategy_attempts_are_logged(caplog):
    with caplog.at_level(logging.INFO):
        _extractor({PAGE_URL: PANCAKES_PAGE}).extract(PAGE_URL)

    attempts = {
        record.strategy: record.outcome
        for record in caplog.records
        if getattr(record, 'event', None) == 'strategy_attempt'
    }
    assert attempts == {
        'plugin': 'empty',
        'jsonld': 'candidate',
        'print': 'empty',
        'heuristic': 'empty',
    }


def test_module_level_extract():
    fetcher = FakeFetcher({PAGE_URL: PANCAKES_PAGE})

    plain = extract(PAGE_URL, fetcher=fetcher)
    with_debug = extract(PAGE_URL, {'include_debug': True}, fetcher=fetcher)

    assert 'debug' not in plain
    assert with_debug['debug']['chosen']['name'] == 'jsonld'


def test_module_level_extract_accepts_camel_case_option():
    fetcher = FakeFetcher({PAGE_URL: PANCAKES_PAGE})

    result = extract(PAGE_URL, {'includeDebug': True}, fetcher=fetcher)

    assert result['debug']['chosen']['name'] == 'jsonld'


def test_ties_break_on_strategy_priority():
    candidates = [
        {'name': 'heuristic', 'score': 42, 'usable': True},
        {'name': 'plugin', 'score': 42, 'usable': True},
        {'name': 'custom', 'score': 42, 'usable': True},
        {'name': 'jsonld', 'score': 90, 'usable': False},
    ]

    ranked = rank_candidates(candidates)

    assert [candidate['name'] for candidate in ranked] == ['plugin', 'heuristic', 'custom']
    assert strategy_priority('custom') == 999


def test_higher_score_beats_priority():
    candidates = [
        {'name': 'plugin', 'score': 40, 'usable': True},
        {'name': 'heuristic', 'score': 41, 'usable': True},
    ]
    assert rank_candidates(candidates)[0]['name'] == 'heuristic'
