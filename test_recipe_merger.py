#!/usr/bin/env python3
"""Tests for merging JSON-LD metadata with other strategies' content"""

from processors.recipe_merger import merge_recipe_data


def test_jsonld_metadata_with_fuller_heuristic_content():
    jsonld = {
        'title': 'A',
        'image': 'imgA',
        'ingredients': ['1 cup flour'],
        'steps': ['**Make the batter:**'],
    }
    heuristic = {
        'title': 'B',
        'image': None,
        'ingredients': ['1 cup flour', '2 eggs', '1 cup milk'],
        'steps': ['one', 'two', 'three', 'four', 'five'],
    }

    merged = merge_recipe_data(jsonld, heuristic)

    assert merged['title'] == 'A'
    assert merged['image'] == 'imgA'
    assert merged['ingredients'] == heuristic['ingredients']
    assert merged['steps'] == heuristic['steps']


def test_metadata_falls_back_to_other():
    jsonld = {'title': 'A', 'ingredients': [], 'steps': []}
    other = {'title': 'B', 'author': 'Sam', 'times': {'prep': 5}, 'servings': 4,
             'ingredients': [], 'steps': []}

    merged = merge_recipe_data(jsonld, other)

    assert merged['author'] == 'Sam'
    assert merged['times'] == {'prep': 5}
    assert merged['servings'] == 4


def test_content_ties_prefer_jsonld():
    jsonld = {'title': 'A', 'ingredients': ['x', 'y'], 'steps': ['jsonld step']}
    other = {'title': 'B', 'ingredients': ['p', 'q'], 'steps': []}

    merged = merge_recipe_data(jsonld, other)

    assert merged['ingredients'] == ['x', 'y']
    assert merged['steps'] == ['jsonld step']


def test_other_fields_come_from_other_candidate():
    jsonld = {'title': 'A', 'ingredients': [], 'steps': []}
    other = {'title': 'B', 'tips': ['Chill first'], 'source_url': 'https://example.com/b',
             'ingredients': [], 'steps': []}

    merged = merge_recipe_data(jsonld, other)

    assert merged['tips'] == ['Chill first']
    assert merged['source_url'] == 'https://example.com/b'


def test_missing_side_returns_the_other():
    recipe = {'title': 'A', 'ingredients': [], 'steps': []}
    assert merge_recipe_data(None, recipe) is recipe
    assert merge_recipe_data(recipe, None) is recipe
