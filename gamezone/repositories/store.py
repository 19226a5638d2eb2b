"""Origin-scoped durable key/value store used as the application's database."""
import json
import logging
import os
import tempfile
import uuid
from typing import Any, Callable, Dict, List, Optional

from ..exceptions import StorageUnavailableError
from .broadcast import Signature, StorageBroadcast, StorageEvent

_ABSENT = object()


class DurableStore:
    """JSON-backed persistence for a set of top-level keys.

    Each key lives in its own ``<origin>/<key>.json`` file.  A store instance
    is one execution context: any number of instances (in this process or in
    others) may share an origin, and every successful :meth:`write` or
    :meth:`remove` is broadcast to the *other* in-process contexts.

    Failures never propagate to callers: reads degrade to the supplied
    default and writes return ``False``, both with a logged warning.  The one
    exception is ``initialize(..., strict=True)``, which repositories use to
    tell "empty" apart from "unreadable".

    The atomic write uses a write-then-rename strategy so a key file is never
    left in a partially-written state.
    """

    SUFFIX = '.json'

    def __init__(self, origin: str, context_id: Optional[str] = None) -> None:
        self.origin = os.path.abspath(origin)
        self.context_id = context_id or uuid.uuid4().hex
        self._log = logging.getLogger('gamezone.store')
        try:
            os.makedirs(self.origin, exist_ok=True)
        except OSError as exc:
            self._log.warning("Storage origin %s unavailable: %s", self.origin, exc)
        self.broadcast = StorageBroadcast.for_origin(self.origin)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _path(self, key: str) -> str:
        if not key or os.sep in key or key.startswith('.'):
            raise ValueError(f"Invalid storage key: {key!r}")
        return os.path.join(self.origin, key + self.SUFFIX)

    def _load(self, key: str) -> Any:
        """Return the decoded value, ``_ABSENT``, or raise StorageUnavailableError."""
        path = self._path(key)
        if not os.path.exists(path):
            return _ABSENT
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                return json.load(fh)
        except (ValueError, OSError) as exc:
            # ValueError covers JSONDecodeError and UnicodeDecodeError.
            raise StorageUnavailableError(f"Could not read {key!r}: {exc}") from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read(self, key: str, default: Any = None) -> Any:
        """Return the stored value for *key*, or *default* if absent/unreadable."""
        try:
            value = self._load(key)
        except StorageUnavailableError as exc:
            self._log.warning("%s; using default", exc)
            return default
        return default if value is _ABSENT else value

    def initialize(self, key: str, default: Any, strict: bool = False) -> Any:
        """Return the existing value for *key*, seeding *default* if absent.

        Args:
            key:     Storage key.
            default: Value to seed, or a zero-argument callable producing it
                     (only called when seeding is needed).
            strict:  Raise instead of degrading when the medium is unreadable.

        Raises:
            StorageUnavailableError: Only when *strict* and the key cannot be read.
        """
        try:
            value = self._load(key)
        except StorageUnavailableError as exc:
            if strict:
                raise
            self._log.warning("%s; using default", exc)
            return default() if callable(default) else default
        if value is not _ABSENT:
            return value
        seeded = default() if callable(default) else default
        self.write(key, seeded)
        return seeded

    def write(self, key: str, value: Any) -> bool:
        """Atomically persist *value* under *key* and broadcast the change.

        Returns:
            ``True`` if persisted; ``False`` if the medium refused the write.
        """
        path = self._path(key)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.origin, suffix='.tmp')
        except OSError as exc:
            self._log.warning("Storage unavailable, could not write %r: %s", key, exc)
            return False
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(value, fh, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            self._log.warning("Storage unavailable, could not write %r: %s", key, exc)
            return False
        self.broadcast.publish(
            StorageEvent(key, value, self.origin, self.context_id),
            self.signature(key),
        )
        return True

    def remove(self, key: str) -> bool:
        """Delete *key*.  Returns ``True`` if it existed and was removed."""
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            return False
        except OSError as exc:
            self._log.warning("Storage unavailable, could not remove %r: %s", key, exc)
            return False
        self.broadcast.publish(StorageEvent(key, None, self.origin, self.context_id), None)
        return True

    def keys(self) -> List[str]:
        """Return all stored keys, sorted."""
        return sorted(self.signatures())

    def signature(self, key: str) -> Signature:
        """Return ``(inode, mtime_ns, size)`` for *key*, or ``None`` if absent."""
        try:
            st = os.stat(self._path(key))
        except OSError:
            return None
        return (st.st_ino, st.st_mtime_ns, st.st_size)

    def signatures(self) -> Dict[str, Signature]:
        try:
            names = os.listdir(self.origin)
        except OSError as exc:
            self._log.warning("Could not list %s: %s", self.origin, exc)
            return {}
        result = {}
        for name in names:
            if name.endswith(self.SUFFIX) and not name.startswith('.'):
                key = name[:-len(self.SUFFIX)]
                signature = self.signature(key)
                if signature is not None:
                    result[key] = signature
        return result

    def subscribe(self, listener: Callable[[StorageEvent], None]) -> Callable[[], None]:
        """Listen for changes made by *other* contexts on this origin."""
        return self.broadcast.subscribe(self.context_id, listener)
