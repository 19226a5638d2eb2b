"""Services package - expose all concrete services from one import."""
from .latency import Latency
from .identity_service import IdentityService
from .session_service import SessionService
from .favorites_service import FavoritesService
from .review_service import ReviewService, sort_newest_first
from .notifier import ChangeNotifier
from .auth_service import AuthService
from .review_board import ReviewBoard

__all__ = [
    'Latency',
    'IdentityService',
    'SessionService',
    'FavoritesService',
    'ReviewService',
    'sort_newest_first',
    'ChangeNotifier',
    'AuthService',
    'ReviewBoard',
]
