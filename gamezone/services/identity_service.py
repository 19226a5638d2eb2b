"""Business logic for user accounts (the identity ledger)."""
import logging
import uuid
from typing import Optional

from ..credentials import hash_secret, verify_secret
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..models import UserRecord
from ..repositories.user_repository import UserRepository
from .latency import Latency

logger = logging.getLogger('gamezone.identity')


class IdentityService:
    """Looks up, verifies, and registers users, delegating persistence to
    :class:`~gamezone.repositories.user_repository.UserRepository`.

    Rules
    -----
    * Emails are unique (case-insensitive); usernames are unique.
    * Uniqueness is checked against a fresh read of the store.  Two contexts
      signing up the same email at the same instant can still both succeed;
      the last write wins.
    * Secrets are stored only as salted hashes.
    """

    def __init__(self, repository: UserRepository,
                 latency: Optional[Latency] = None,
                 sso_user_id: str = 'google-user-007') -> None:
        self._repo = repository
        self._latency = latency or Latency()
        self._sso_user_id = sso_user_id

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def find_by_credentials(self, email: str, secret: str) -> UserRecord:
        """Return the user whose email and secret match.

        Raises:
            NotFoundError: If no user matches.  The message does not reveal
                whether the email or the secret was wrong.
        """
        await self._latency.wait('auth')
        self._repo.reload()
        raw = self._repo.find_by_email(email or '')
        if raw is None or not verify_secret(secret or '', raw.get('credential', '')):
            logger.info("Failed login for %s", email)
            raise NotFoundError("Invalid email or password.")
        return UserRecord.from_dict(raw)

    async def find_by_identity(self, user_id: str) -> UserRecord:
        """Return the user with *user_id*, or raise :class:`NotFoundError`."""
        await self._latency.wait('profile')
        self._repo.reload()
        raw = self._repo.find_by_id(user_id)
        if raw is None:
            raise NotFoundError(f"User {user_id!r} not found.")
        return UserRecord.from_dict(raw)

    async def find_sso_user(self) -> UserRecord:
        """Return the account used for single-sign-on logins."""
        await self._latency.wait('auth')
        self._repo.reload()
        raw = self._repo.find_by_id(self._sso_user_id)
        if raw is None:
            raise NotFoundError("Single sign-on account is not available.")
        return UserRecord.from_dict(raw)

    async def create(self, username: str, email: str, secret: str) -> UserRecord:
        """Register a new user.

        Raises:
            ValidationError: If a field is empty.
            ConflictError:   If the email (checked first) or username is taken.
        """
        username = (username or '').strip()
        email = (email or '').strip()
        if not username or not email or not secret:
            raise ValidationError("Username, email and password are all required.")

        await self._latency.wait('auth')
        self._repo.reload()
        if self._repo.find_by_email(email) is not None:
            raise ConflictError("An account with this email already exists.")
        if self._repo.find_by_username(username) is not None:
            raise ConflictError("This username is already taken.")

        record = UserRecord(
            id=f"user{uuid.uuid4().hex[:12]}",
            username=username,
            email=email,
            credential=hash_secret(secret),
        )
        self._repo.append(record.to_dict())
        logger.info("Registered user %s (%s)", record.username, record.id)
        return record
