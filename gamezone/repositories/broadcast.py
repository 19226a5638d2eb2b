"""Change broadcast for a storage origin.

Every :class:`~gamezone.repositories.store.DurableStore` that shares an origin
directory inside one process shares one :class:`StorageBroadcast`.  A write
in one context is delivered to the listeners of every *other* context on the
same origin; the writer never hears its own writes.

Writes made by other OS processes never reach the in-process broadcast, so a
:class:`FileChangeWatcher` polls the origin directory and hands such changes
to its own context only.
"""
import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger('gamezone.broadcast')

# ``source`` of events detected on disk rather than published in-process.
EXTERNAL_SOURCE = 'external'

Signature = Optional[Tuple[int, int, int]]

_UNKNOWN = object()


@dataclass(frozen=True)
class StorageEvent:
    """One change to one key.  ``new_value`` is ``None`` when the key was removed."""

    key: str
    new_value: Any
    origin: str
    source: str


Listener = Callable[[StorageEvent], None]


class StorageBroadcast:
    """Publish/subscribe channel scoped to one origin directory."""

    _registry: Dict[str, 'StorageBroadcast'] = {}
    _registry_lock = threading.Lock()

    def __init__(self, origin: str) -> None:
        self.origin = origin
        self._lock = threading.Lock()
        self._listeners: List[Tuple[str, Listener]] = []
        # Last file signature produced by an in-process write, per key.
        self._signatures: Dict[str, Signature] = {}

    @classmethod
    def for_origin(cls, origin: str) -> 'StorageBroadcast':
        """Return the process-wide broadcast for *origin*, creating it once."""
        key = os.path.realpath(origin)
        with cls._registry_lock:
            channel = cls._registry.get(key)
            if channel is None:
                channel = cls(key)
                cls._registry[key] = channel
            return channel

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def subscribe(self, context_id: str, listener: Listener) -> Callable[[], None]:
        """Register *listener* for *context_id*; returns an unsubscribe callable."""
        entry = (context_id, listener)
        with self._lock:
            self._listeners.append(entry)

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._listeners:
                    self._listeners.remove(entry)

        return unsubscribe

    def publish(self, event: StorageEvent, signature: Signature = None) -> int:
        """Deliver *event* to every context except ``event.source``.

        Returns:
            Number of listeners called.
        """
        with self._lock:
            self._signatures[event.key] = signature
            targets = [fn for ctx, fn in self._listeners if ctx != event.source]
        for listener in targets:
            self._call(listener, event)
        return len(targets)

    def deliver(self, context_id: str, event: StorageEvent) -> int:
        """Deliver *event* to the listeners of *context_id* only."""
        with self._lock:
            targets = [fn for ctx, fn in self._listeners if ctx == context_id]
        for listener in targets:
            self._call(listener, event)
        return len(targets)

    def is_own_write(self, key: str, signature: Signature) -> bool:
        """Return ``True`` if *signature* is the result of an in-process write."""
        with self._lock:
            known = self._signatures.get(key, _UNKNOWN)
        return known is not _UNKNOWN and known == signature

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    @staticmethod
    def _call(listener: Listener, event: StorageEvent) -> None:
        try:
            listener(event)
        except Exception:
            # A broken subscriber must never fail the writer.
            logger.exception("Storage listener failed for key %r", event.key)


class FileChangeWatcher:
    """Background poller that surfaces writes made by other processes.

    Compares each key file's ``(inode, mtime_ns, size)`` against the last scan.
    Changes that match the broadcast's record of an in-process write are
    skipped, since those were already published.
    """

    def __init__(self, store, interval: float = 1.0) -> None:
        self._store = store
        self.interval = interval
        self._seen: Dict[str, Signature] = store.signatures()
        self._stop = threading.Event()
        self.thread: Optional[threading.Thread] = None

    def poll_once(self) -> List[str]:
        """Scan the origin once and deliver events; returns the changed keys."""
        current = self._store.signatures()
        changed = []
        for key in sorted(set(current) | set(self._seen)):
            signature = current.get(key)
            if signature == self._seen.get(key):
                continue
            self._seen[key] = signature
            if self._store.broadcast.is_own_write(key, signature):
                continue
            value = self._store.read(key) if signature is not None else None
            event = StorageEvent(key, value, self._store.origin, EXTERNAL_SOURCE)
            self._store.broadcast.deliver(self._store.context_id, event)
            changed.append(key)
        return changed

    def run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.poll_once()
            except Exception as exc:
                logger.error("Error while watching %s: %s", self._store.origin, exc)

    def start(self) -> None:
        if self.thread is not None and self.thread.is_alive():
            return
        self._stop.clear()
        self.thread = threading.Thread(target=self.run, daemon=True)
        self.thread.start()
        logger.info("Watching %s every %.2fs", self._store.origin, self.interval)

    def stop(self) -> None:
        self._stop.set()
        if self.thread:
            self.thread.join(timeout=5)
        logger.info("Stopped watching %s", self._store.origin)
