#!/usr/bin/env python3
"""
Tests for catalog_client.RawgCatalogClient (HTTP fully mocked).

Run with:
    python -m pytest tests/test_catalog_client.py
"""
import os
import sys
import unittest
from datetime import date
from unittest.mock import MagicMock

import requests

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catalog_client import CatalogClient, RawgCatalogClient


# ===========================================================================
# Helpers
# ===========================================================================

def _ok_resp(body):
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = body
    resp.raise_for_status.return_value = None
    return resp


def _err_resp():
    resp = MagicMock()
    resp.status_code = 500
    resp.raise_for_status.side_effect = requests.HTTPError(response=resp)
    return resp


def _client():
    client = RawgCatalogClient('TEST_KEY', timeout=3)
    client.session = MagicMock()
    return client


GAME = {'id': 3498, 'name': 'Grand Theft Auto V', 'released': '2013-09-17',
        'background_image': 'https://img/gta.jpg', 'rating': 4.47,
        'ratings_count': 6000, 'genres': [{'id': 4, 'name': 'Action'}]}


class TestRawgCatalogClient(unittest.TestCase):

    def test_popular_passes_key_and_ordering(self):
        client = _client()
        client.session.get.return_value = _ok_resp({'results': [GAME]})
        self.assertEqual(client.get_popular(), [GAME])
        url = client.session.get.call_args[0][0]
        params = client.session.get.call_args[1]['params']
        self.assertEqual(url, 'https://api.rawg.io/api/games')
        self.assertEqual(params['key'], 'TEST_KEY')
        self.assertEqual(params['ordering'], '-rating')
        self.assertEqual(client.session.get.call_args[1]['timeout'], 3)

    def test_trending_uses_past_year(self):
        client = _client()
        client.session.get.return_value = _ok_resp({'results': []})
        client.get_trending(today=date(2024, 6, 1))
        params = client.session.get.call_args[1]['params']
        self.assertEqual(params['dates'], '2023-06-02,2024-06-01')
        self.assertEqual(params['ordering'], '-added')

    def test_search_without_criteria_skips_request(self):
        client = _client()
        self.assertEqual(client.search(''), [])
        client.session.get.assert_not_called()

    def test_search_builds_filters(self):
        client = _client()
        client.session.get.return_value = _ok_resp({'results': [GAME]})
        client.search('gta', genre='action', platform='1', year='2013')
        params = client.session.get.call_args[1]['params']
        self.assertEqual(params['search'], 'gta')
        self.assertEqual(params['genres'], 'action')
        self.assertEqual(params['parent_platforms'], '1')
        self.assertEqual(params['dates'], '2013-01-01,2013-12-31')

    def test_http_error_returns_empty(self):
        client = _client()
        client.session.get.return_value = _err_resp()
        self.assertEqual(client.get_popular(), [])

    def test_network_error_returns_empty(self):
        client = _client()
        client.session.get.side_effect = requests.ConnectionError('offline')
        self.assertEqual(client.search('gta'), [])
        self.assertIsNone(client.get_game_details(3498))

    def test_details_attach_screenshots_and_cache(self):
        client = _client()
        shots = {'results': [{'id': 1, 'image': 'https://img/1.jpg'}]}
        client.session.get.side_effect = [_ok_resp(dict(GAME)), _ok_resp(shots)]
        details = client.get_game_details(3498)
        self.assertEqual(details['screenshots'], shots['results'])
        self.assertIs(client.get_game_details('3498'), details)
        self.assertEqual(client.session.get.call_count, 2)

    def test_details_invalid_id(self):
        client = _client()
        self.assertIsNone(client.get_game_details('abc'))
        client.session.get.assert_not_called()

    def test_details_not_found(self):
        client = _client()
        client.session.get.return_value = _ok_resp({'detail': 'Not found.'})
        self.assertIsNone(client.get_game_details(1))

    def test_genres_sorted_by_name(self):
        client = _client()
        client.session.get.return_value = _ok_resp(
            {'results': [{'id': 2, 'name': 'Shooter'}, {'id': 1, 'name': 'Action'}]})
        self.assertEqual([g['name'] for g in client.get_genres()], ['Action', 'Shooter'])

    def test_available_years(self):
        years = RawgCatalogClient.available_years(first_year=2020, today=date(2023, 1, 1))
        self.assertEqual(years, ['2023', '2022', '2021', '2020'])


class TestGetMany(unittest.TestCase):

    class FakeCatalog(CatalogClient):
        def get_game_details(self, game_id):
            return None if game_id == 2 else {'id': game_id}

    def test_keeps_order_and_drops_misses(self):
        self.assertEqual(self.FakeCatalog().get_many([3, 2, 1]), [{'id': 3}, {'id': 1}])

    def test_empty(self):
        self.assertEqual(self.FakeCatalog().get_many([]), [])


if __name__ == '__main__':
    unittest.main()
