"""Repository package - expose the store and all concrete repositories from one import."""
from .broadcast import EXTERNAL_SOURCE, FileChangeWatcher, StorageBroadcast, StorageEvent
from .store import DurableStore
from .user_repository import UserRepository
from .review_repository import ReviewRepository
from .favorites_repository import FavoritesRepository

__all__ = [
    'EXTERNAL_SOURCE',
    'FileChangeWatcher',
    'StorageBroadcast',
    'StorageEvent',
    'DurableStore',
    'UserRepository',
    'ReviewRepository',
    'FavoritesRepository',
]
