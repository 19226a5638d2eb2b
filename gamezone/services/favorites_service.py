"""Business logic for per-user favourites (the favourites registry)."""
import asyncio
import logging
from typing import Dict, List, Optional, Set

from ..exceptions import ValidationError
from ..repositories.favorites_repository import FavoritesRepository
from .latency import Latency

logger = logging.getLogger('gamezone.favorites')


class FavoritesService:
    """Manages each user's set of favourite catalog items, delegating
    persistence to
    :class:`~gamezone.repositories.favorites_repository.FavoritesRepository`.

    ``add`` and ``remove`` are idempotent and always return the user's full
    set as stored, which callers should adopt as-is.
    """

    def __init__(self, repository: FavoritesRepository,
                 latency: Optional[Latency] = None) -> None:
        self._repo = repository
        self._latency = latency or Latency()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _normalise(item_id) -> int:
        try:
            return int(item_id)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid item id: {item_id!r}") from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def list(self, user_id: str) -> Set[int]:
        """Return *user_id*'s favourites (empty set if none)."""
        await self._latency.wait('favorites_read')
        self._repo.reload()
        return set(self._repo.get(user_id))

    async def contains(self, user_id: str, item_id) -> bool:
        return self._normalise(item_id) in await self.list(user_id)

    async def add(self, user_id: str, item_id) -> Set[int]:
        """Add *item_id*; adding a present item changes nothing."""
        item = self._normalise(item_id)
        await self._latency.wait('favorites_write')
        self._repo.reload()
        items = self._repo.get(user_id)
        if item not in items:
            items.append(item)
            self._repo.put(user_id, items)
            logger.debug("User %s favourited %s", user_id, item)
        return set(items)

    async def remove(self, user_id: str, item_id) -> Set[int]:
        """Remove *item_id*; removing an absent item changes nothing."""
        item = self._normalise(item_id)
        await self._latency.wait('favorites_write')
        self._repo.reload()
        items = self._repo.get(user_id)
        if item in items:
            items.remove(item)
            self._repo.put(user_id, items)
            logger.debug("User %s unfavourited %s", user_id, item)
        return set(items)

    async def favorite_games(self, user_id: str, catalog) -> List[Dict]:
        """Return catalog details for each of *user_id*'s favourites.

        One catalog request per favourite; the lookups run in a worker
        thread so the event loop is never blocked.  Items the catalog cannot
        resolve are skipped.
        """
        ids = sorted(await self.list(user_id))
        if not ids:
            return []
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, catalog.get_many, ids)
