"""Repository for reviews ([{id, item_id, author_id, rating, ...}, ...])."""
from typing import Dict, List, Optional

from .base import BaseRepository


class ReviewRepository(BaseRepository):
    """Persists review records under the ``reviews`` key.

    Schema::

        [
            {
                "id":          "<review id>",
                "item_id":     <int>,
                "item_name":   <str>,
                "author_id":   "<user id>",
                "author_name": <str>,
                "rating":      <int 1-5>,
                "comment":     <str>,
                "created_at":  <ISO-8601 str>
            }
        ]

    Newest records are stored first; readers should still sort.
    """

    KEY = 'reviews'

    def _empty(self) -> List[Dict]:
        return []

    def _normalise(self, raw) -> List[Dict]:
        if not isinstance(raw, list):
            self._log.warning("Stored reviews are not a list; starting empty")
            return []
        records = []
        for entry in raw:
            if not _is_well_formed(entry):
                self._log.warning("Dropping malformed review entry: %r", entry)
                continue
            records.append(entry)
        return records

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def all(self) -> List[Dict]:
        return list(self.data)

    def find(self, review_id: str) -> Optional[Dict]:
        """Return the review dict for *review_id*, or ``None``."""
        return next((r for r in self.data if r['id'] == review_id), None)

    def prepend(self, review: Dict) -> bool:
        """Insert *review* at the front, then persist."""
        self.data.insert(0, review)
        return self.save()

    def replace(self, review: Dict) -> bool:
        """Swap the stored review with the same id for *review*, then persist.

        Returns ``False`` if no review has that id.
        """
        for index, existing in enumerate(self.data):
            if existing['id'] == review['id']:
                self.data[index] = review
                self.save()
                return True
        return False

    def delete(self, review_id: str) -> bool:
        """Remove the review for *review_id*.  Returns ``True`` if it existed."""
        before = len(self.data)
        self._data = [r for r in self.data if r['id'] != review_id]
        if len(self._data) == before:
            return False
        self.save()
        return True


def _is_well_formed(entry) -> bool:
    """A review needs an id plus integer ``item_id`` and ``rating``."""
    if not isinstance(entry, dict) or 'id' not in entry:
        return False
    for field in ('item_id', 'rating'):
        value = entry.get(field)
        if isinstance(value, bool):
            return False
        try:
            int(value)
        except (TypeError, ValueError):
            return False
    return True
