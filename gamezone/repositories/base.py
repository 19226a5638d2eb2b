"""Repository base class used by all concrete repositories."""
import logging
from typing import Any

from ..exceptions import StorageUnavailableError


class BaseRepository:
    """Mirrors one top-level store key in memory.

    ``self.data`` hydrates from the store on first access.  :meth:`reload`
    re-derives it from the store (callers do this before every read and
    every read-modify-write so other contexts' writes are seen), and
    :meth:`save` is the single write path: callers mutate ``data`` and
    immediately write it through.

    If the medium becomes unreadable, :meth:`reload` keeps the last mirror
    rather than replacing it with an empty value.
    """

    KEY = ''

    def __init__(self, store, seed: Any = None) -> None:
        """
        Args:
            store: The :class:`~gamezone.repositories.store.DurableStore`.
            seed:  First-run value (or zero-argument factory) written when the
                   key does not exist yet.  ``None`` seeds an empty value.
        """
        self._store = store
        self._seed = seed
        self._data: Any = None
        self._log = logging.getLogger(f'gamezone.repository.{type(self).__name__}')

    def _empty(self) -> Any:
        raise NotImplementedError

    def _normalise(self, raw: Any) -> Any:
        """Return *raw* coerced to the repository's schema."""
        return raw

    @property
    def data(self) -> Any:
        if self._data is None:
            self.reload()
        return self._data

    def reload(self) -> Any:
        """Re-read the key from the store and return the fresh mirror."""
        default = self._seed if self._seed is not None else self._empty
        try:
            raw = self._store.initialize(self.KEY, default, strict=True)
        except StorageUnavailableError as exc:
            self._log.warning("%s; keeping in-memory copy", exc)
            if self._data is None:
                self._data = self._empty()
            return self._data
        data = self._normalise(raw)
        self._data = data
        if data != raw:
            self._log.info("Normalised stored %r; writing back", self.KEY)
            self.save()
        return self._data

    def save(self) -> bool:
        """Persist the current in-memory data to the store."""
        persisted = self._store.write(self.KEY, self._data)
        if not persisted:
            self._log.warning("Changes to %r kept in memory only", self.KEY)
        return persisted
