"""Turns storage-change broadcasts into refresh calls in this context."""
import asyncio
import inspect
import logging
from typing import Any, Callable, Optional, Set

from ..repositories.broadcast import StorageEvent

logger = logging.getLogger('gamezone.notifier')


class ChangeNotifier:
    """Calls *callback* whenever another context changes *key*.

    The store's broadcast never delivers a context's own writes, and events
    for other keys are ignored here.  *callback* receives the
    :class:`~gamezone.repositories.broadcast.StorageEvent` and may be a plain
    function or a coroutine function.  Coroutines are scheduled on the
    running loop, or on *loop* when the event arrives from a watcher thread.

    Events are not debounced; callbacks must tolerate overlapping calls.
    """

    def __init__(self, store, key: str, callback: Callable[[StorageEvent], Any],
                 loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._store = store
        self.key = key
        self._callback = callback
        self._loop = loop
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._pending: Set[asyncio.Future] = set()

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._store.subscribe(self.handle)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def handle(self, event: StorageEvent) -> None:
        if event.key != self.key or event.source == self._store.context_id:
            return
        logger.debug("Key %r changed by %s; refreshing", event.key, event.source)
        result = self._callback(event)
        if inspect.isawaitable(result):
            self._schedule(result)

    async def wait_idle(self) -> None:
        """Wait until every refresh scheduled on this loop has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _schedule(self, awaitable) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None and (self._loop is None or running is self._loop):
            self._track(awaitable)
        elif self._loop is not None and not self._loop.is_closed():
            # Hand over to the loop's thread; _pending is only touched there.
            self._loop.call_soon_threadsafe(self._track, awaitable)
        else:
            logger.warning("No event loop to run refresh for %r; dropped", self.key)
            if inspect.iscoroutine(awaitable):
                awaitable.close()

    def _track(self, awaitable) -> None:
        future = asyncio.ensure_future(awaitable)
        self._pending.add(future)
        future.add_done_callback(self._finished)

    def _finished(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if not future.cancelled() and future.exception() is not None:
            logger.error("Refresh for %r failed: %s", self.key, future.exception())
