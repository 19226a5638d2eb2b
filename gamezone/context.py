"""Wiring for one execution context (a tab, a CLI run, a worker)."""
import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from . import seed
from .repositories import (
    DurableStore, FavoritesRepository, FileChangeWatcher, ReviewRepository,
    UserRepository,
)
from .services import (
    AuthService, ChangeNotifier, FavoritesService, IdentityService, Latency,
    ReviewBoard, ReviewService, SessionService,
)

logger = logging.getLogger('gamezone.context')


class GameZoneContext:
    """Creates the store, repositories, and services for one context and
    exposes them as public attributes (e.g. ``ctx.review_service``).

    Two contexts built on the same *data_dir* behave like two browser tabs
    on one origin: they share data and hear each other's writes.
    """

    def __init__(self, data_dir: str, latency: Optional[Latency] = None,
                 seed_defaults: bool = True,
                 sso_user_id: str = 'google-user-007',
                 context_id: Optional[str] = None,
                 watch_interval: float = 1.0) -> None:
        self.store = DurableStore(data_dir, context_id)
        self.watch_interval = watch_interval
        latency = latency or Latency()

        self.user_repository = UserRepository(
            self.store, seed.default_users if seed_defaults else None)
        self.review_repository = ReviewRepository(
            self.store, seed.default_reviews if seed_defaults else None)
        self.favorites_repository = FavoritesRepository(
            self.store, seed.default_favorites if seed_defaults else None)

        self.identity_service = IdentityService(self.user_repository, latency, sso_user_id)
        self.session_service = SessionService(self.identity_service)
        self.favorites_service = FavoritesService(self.favorites_repository, latency)
        self.review_service = ReviewService(self.review_repository, latency)
        self.auth = AuthService(self.identity_service, self.session_service,
                                self.favorites_service, self.store)
        logger.debug("Context %s opened on %s", self.store.context_id, self.store.origin)

    @classmethod
    def from_settings(cls, settings: Dict, context_id: Optional[str] = None) -> 'GameZoneContext':
        return cls(
            settings['data_dir'],
            latency=Latency(settings.get('latency')),
            seed_defaults=settings.get('seed_defaults', True),
            sso_user_id=settings.get('sso_user_id', 'google-user-007'),
            context_id=context_id,
            watch_interval=settings.get('watch_interval', 1.0),
        )

    @property
    def context_id(self) -> str:
        return self.store.context_id

    def review_board(self, item_id: int, item_name: str,
                     loop: Optional[asyncio.AbstractEventLoop] = None) -> ReviewBoard:
        return ReviewBoard(item_id, item_name, self.review_service, self.auth,
                           self.store, loop=loop)

    def notifier(self, key: str, callback: Callable[[Any], Any],
                 loop: Optional[asyncio.AbstractEventLoop] = None) -> ChangeNotifier:
        return ChangeNotifier(self.store, key, callback, loop=loop)

    def watcher(self, interval: Optional[float] = None) -> FileChangeWatcher:
        """Return a watcher for writes made by other processes (not started)."""
        return FileChangeWatcher(self.store, interval or self.watch_interval)
