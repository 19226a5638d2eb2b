"""The signed-in principal of one context: login, signup, restore, logout."""
import logging
from typing import Optional, Set

from ..exceptions import GameZoneError, NotAuthenticatedError
from ..models import UserRecord
from .favorites_service import FavoritesService
from .identity_service import IdentityService
from .session_service import SessionService

logger = logging.getLogger('gamezone.auth')

TOKEN_KEY = 'auth_token'


class AuthService:
    """Tracks who is signed in and their favourites.

    Only the session token is persisted (under :data:`TOKEN_KEY`).  The
    profile and favourites are always re-derived from the ledgers, never
    cached in the store.
    """

    def __init__(self, identity: IdentityService, sessions: SessionService,
                 favorites: FavoritesService, store) -> None:
        self._identity = identity
        self._sessions = sessions
        self._favorites = favorites
        self._store = store
        self.user: Optional[UserRecord] = None
        self.token: Optional[str] = None
        self.favorites: Set[int] = set()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def require_user(self) -> UserRecord:
        if self.user is None:
            raise NotAuthenticatedError("You must be signed in to do that.")
        return self.user

    # ------------------------------------------------------------------
    # Sign in / out
    # ------------------------------------------------------------------

    async def login(self, email: str, secret: str) -> UserRecord:
        user = await self._identity.find_by_credentials(email, secret)
        await self._on_authenticated(user)
        return user

    async def login_with_sso(self) -> UserRecord:
        user = await self._identity.find_sso_user()
        await self._on_authenticated(user)
        return user

    async def signup(self, username: str, email: str, secret: str) -> UserRecord:
        user = await self._identity.create(username, email, secret)
        # A brand-new account has no favourites to fetch.
        self._set(user, self._sessions.issue(user), set())
        return user

    async def restore(self) -> Optional[UserRecord]:
        """Sign back in from the stored token, if there is a valid one.

        The profile is resolved first and the favourites are then fetched
        with the resolved id; the two lookups are never run concurrently.
        An unusable token is discarded.
        """
        token = self._store.read(TOKEN_KEY)
        if not token or not isinstance(token, str):
            return None
        try:
            user = await self._sessions.resolve(token)
            favorites = await self._favorites.list(user.id)
        except GameZoneError as exc:
            logger.warning("Authentication check failed, token might be invalid: %s", exc)
            self.logout()
            return None
        self.user, self.token, self.favorites = user, token, favorites
        return user

    def logout(self) -> None:
        self.user = None
        self.token = None
        self.favorites = set()
        self._store.remove(TOKEN_KEY)

    # ------------------------------------------------------------------
    # Favourites
    # ------------------------------------------------------------------

    def is_favorite(self, item_id) -> bool:
        try:
            return int(item_id) in self.favorites
        except (TypeError, ValueError):
            return False

    async def toggle_favorite(self, item_id) -> Set[int]:
        """Flip *item_id* and adopt the registry's returned set."""
        user = self.require_user()
        if self.is_favorite(item_id):
            updated = await self._favorites.remove(user.id, item_id)
        else:
            updated = await self._favorites.add(user.id, item_id)
        if self.user is not None and self.user.id == user.id:
            self.favorites = set(updated)
        return set(updated)

    async def reload_favorites(self) -> Set[int]:
        user = self.require_user()
        favorites = await self._favorites.list(user.id)
        if self.user is not None and self.user.id == user.id:
            self.favorites = favorites
        return set(favorites)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _on_authenticated(self, user: UserRecord) -> None:
        token = self._sessions.issue(user)
        favorites = await self._favorites.list(user.id)
        self._set(user, token, favorites)

    def _set(self, user: UserRecord, token: str, favorites: Set[int]) -> None:
        self.user = user
        self.token = token
        self.favorites = set(favorites)
        self._store.write(TOKEN_KEY, token)
        logger.info("Signed in as %s", user.username)
