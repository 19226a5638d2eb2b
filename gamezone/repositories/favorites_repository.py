"""Repository for per-user favourites ({user_id: [item_id, ...]})."""
from typing import Dict, Iterable, List

from .base import BaseRepository


class FavoritesRepository(BaseRepository):
    """Persists every user's favourites under the ``favorites`` key.

    Schema::

        {"<user id>": [<item id>, ...]}

    Item ids are integers; numeric strings are normalised on load and
    duplicates collapsed.  Users with no favourites have no entry.
    """

    KEY = 'favorites'

    def _empty(self) -> Dict[str, List[int]]:
        return {}

    def _normalise(self, raw) -> Dict[str, List[int]]:
        if not isinstance(raw, dict):
            self._log.warning("Stored favorites are not a mapping; starting empty")
            return {}
        result = {}
        for user_id, items in raw.items():
            if not isinstance(items, list):
                continue
            cleaned = _dedupe(_as_item_ids(items))
            if cleaned:
                result[str(user_id)] = cleaned
        return result

    def get(self, user_id: str) -> List[int]:
        """Return a copy of *user_id*'s favourites (empty if none)."""
        return list(self.data.get(str(user_id), []))

    def put(self, user_id: str, items: Iterable[int]) -> bool:
        """Replace *user_id*'s favourites and persist.

        An empty *items* removes the user's entry.
        """
        cleaned = _dedupe(_as_item_ids(items))
        if cleaned:
            self.data[str(user_id)] = cleaned
        else:
            self.data.pop(str(user_id), None)
        return self.save()


def _as_item_ids(items: Iterable) -> List[int]:
    ids = []
    for item in items:
        try:
            ids.append(int(item))
        except (TypeError, ValueError):
            continue
    return ids


def _dedupe(items: List[int]) -> List[int]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
