#!/usr/bin/env python3
"""Tests for the HTTP fetcher, with requests mocked out"""

from unittest import mock

import pytest
import requests

import config
from scrapers.errors import FetchError
from scrapers.fetcher import Fetcher

URL = 'https://www.example.com/recipes/pancakes/'


def _response(status_code=200, text='<html></html>', url=URL, reason='OK'):
    response = mock.Mock()
    response.status_code = status_code
    response.text = text
    response.url = url
    response.reason = reason
    return response


def test_fetch_returns_html_and_final_url():
    session = mock.Mock()
    session.get.return_value = _response(text='<h1>Hi</h1>', url='https://www.example.com/final/')

    document = Fetcher(session=session).fetch(URL)

    assert document.html == '<h1>Hi</h1>'
    assert document.url == 'https://www.example.com/final/'
    assert document.status_code == 200


def test_fetch_sends_identifying_headers_and_timeout():
    session = mock.Mock()
    session.get.return_value = _response()

    Fetcher(session=session, timeout=5).fetch(URL)

    _, kwargs = session.get.call_args
    assert kwargs['headers']['User-Agent'] == config.USER_AGENT
    assert 'text/html' in kwargs['headers']['Accept']
    assert kwargs['headers']['Accept-Language'] == config.ACCEPT_LANGUAGE
    assert kwargs['timeout'] == 5


def test_non_2xx_raises_fetch_error():
    session = mock.Mock()
    session.get.return_value = _response(status_code=404, reason='Not Found')

    with pytest.raises(FetchError) as excinfo:
        Fetcher(session=session).fetch(URL)

    assert excinfo.value.status == 404
    assert excinfo.value.status_text == 'Not Found'
    assert excinfo.value.url == URL


def test_network_error_raises_fetch_error():
    session = mock.Mock()
    session.get.side_effect = requests.ConnectionError('connection refused')

    with pytest.raises(FetchError) as excinfo:
        Fetcher(session=session).fetch(URL)

    assert excinfo.value.status is None
    assert 'connection refused' in excinfo.value.status_text


def test_default_session_uses_requests():
    with mock.patch('scrapers.fetcher.requests.Session') as session_class:
        session_class.return_value.get.return_value = _response()
        Fetcher().fetch(URL)

    session_class.return_value.get.assert_called_once()
    assert Fetcher().timeout == config.REQUEST_TIMEOUT
