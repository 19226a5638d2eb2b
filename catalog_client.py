#!/usr/bin/env python3
"""
Read-only client for the RAWG game catalog API.

The ledgers only ever store catalog item ids and display names; everything
else about a game (artwork, genres, screenshots) is fetched live through
this module.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from typing import Dict, List, Optional

import requests

logger = logging.getLogger('gamezone.catalog')


class CatalogClient(ABC):
    """Abstract base class for game catalog clients"""

    @abstractmethod
    def get_game_details(self, game_id: int) -> Optional[Dict]:
        """
        Get detailed information about a specific game.
        Returns dict with game details or None if not found
        """
        pass

    def get_many(self, game_ids: List[int], max_workers: int = 4) -> List[Dict]:
        """Fetch details for several games concurrently, dropping misses.

        Results keep the order of *game_ids*.
        """
        if not game_ids:
            return []
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(self.get_game_details, game_ids))
        return [game for game in results if game is not None]


class RawgCatalogClient(CatalogClient):
    """Client for the RAWG Video Games Database API"""

    BASE_URL = "https://api.rawg.io/api"

    def __init__(self, api_key: str, base_url: Optional[str] = None,
                 timeout: int = 10):
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.details_cache: Dict[int, Dict] = {}

    def _get(self, endpoint: str, params: Optional[Dict] = None):
        """GET *endpoint* and return decoded JSON, or ``None`` on failure."""
        query = dict(params or {})
        query['key'] = self.api_key
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error("Catalog request to %s failed: %s", endpoint, e)
            return None
        except ValueError as e:
            logger.error("Catalog response from %s was not JSON: %s", endpoint, e)
            return None

    def _results(self, endpoint: str, params: Optional[Dict] = None) -> List[Dict]:
        data = self._get(endpoint, params)
        if isinstance(data, dict):
            return data.get('results', [])
        return []

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def get_popular(self, page_size: int = 6) -> List[Dict]:
        """Highest-rated games."""
        return self._results('/games', {'ordering': '-rating',
                                        'page_size': page_size, 'page': 1})

    def get_trending(self, page_size: int = 6, today: Optional[date] = None) -> List[Dict]:
        """Most-added games released in the past year."""
        today = today or date.today()
        start = today - timedelta(days=365)
        return self._results('/games', {
            'dates': f"{start.isoformat()},{today.isoformat()}",
            'ordering': '-added',
            'page_size': page_size,
            'page': 1,
        })

    def search(self, query: str = '', genre: Optional[str] = None,
               platform: Optional[str] = None,
               year: Optional[str] = None) -> List[Dict]:
        """Search by text and optional genre / parent-platform / release year.

        Returns an empty list without calling the API when no criterion is set.
        """
        if not query and not genre and not platform and not year:
            return []
        params: Dict = {}
        if query:
            params['search'] = query
        if genre:
            params['genres'] = genre
        if platform:
            params['parent_platforms'] = platform
        if year:
            params['dates'] = f"{year}-01-01,{year}-12-31"
        return self._results('/games', params)

    # ------------------------------------------------------------------
    # Details
    # ------------------------------------------------------------------

    def get_game_details(self, game_id: int) -> Optional[Dict]:
        """Get a game's details with its ``screenshots`` list attached."""
        try:
            game_id_int = int(game_id)
        except (ValueError, TypeError):
            return None

        if game_id_int in self.details_cache:
            return self.details_cache[game_id_int]

        details = self._get(f"/games/{game_id_int}")
        if not isinstance(details, dict) or 'id' not in details:
            return None
        details['screenshots'] = self._results(f"/games/{game_id_int}/screenshots")
        self.details_cache[game_id_int] = details
        return details

    # ------------------------------------------------------------------
    # Filter data
    # ------------------------------------------------------------------

    def get_genres(self) -> List[Dict]:
        genres = self._results('/genres', {'page_size': 40})
        return sorted(genres, key=lambda g: g.get('name', ''))

    def get_platforms(self) -> List[Dict]:
        platforms = self._results('/platforms/lists/parents', {'page_size': 20})
        return sorted(platforms, key=lambda p: p.get('name', ''))

    @staticmethod
    def available_years(first_year: int = 1990, today: Optional[date] = None) -> List[str]:
        """Release years offered as a filter, newest first."""
        current = (today or date.today()).year
        return [str(y) for y in range(current, first_year - 1, -1)]
