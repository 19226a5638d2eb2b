"""Issues and resolves opaque session tokens."""
import base64
import binascii
import json
import threading
import time
from typing import Tuple

from ..exceptions import MalformedTokenError, NotFoundError
from ..models import UserRecord
from .identity_service import IdentityService

TOKEN_PREFIX = 'gz1.'


class SessionService:
    """Session tokens bind a user id to an issue time.

    Token format: ``gz1.`` followed by the unpadded base64url encoding of
    ``{"iat": <ns>, "sub": "<user id>"}``.  Tokens carry no signature and
    never expire; a token is valid while its user exists.  Issue times are
    strictly increasing per issuer, so two tokens for the same user never
    collide.
    """

    def __init__(self, identity: IdentityService) -> None:
        self._identity = identity
        self._lock = threading.Lock()
        self._last_issued = 0

    def issue(self, user: UserRecord) -> str:
        with self._lock:
            issued_at = max(time.time_ns(), self._last_issued + 1)
            self._last_issued = issued_at
        payload = json.dumps({'sub': user.id, 'iat': issued_at},
                             separators=(',', ':'), sort_keys=True)
        body = base64.urlsafe_b64encode(payload.encode('utf-8')).rstrip(b'=')
        return TOKEN_PREFIX + body.decode('ascii')

    @staticmethod
    def decode(token: str) -> Tuple[str, int]:
        """Return ``(user_id, issued_at_ns)`` without touching the store.

        Raises:
            MalformedTokenError: If *token* is not one this issuer produces.
        """
        if not isinstance(token, str) or not token.startswith(TOKEN_PREFIX):
            raise MalformedTokenError("Invalid token format.")
        body = token[len(TOKEN_PREFIX):]
        padded = body + '=' * (-len(body) % 4)
        try:
            payload = json.loads(base64.urlsafe_b64decode(padded.encode('ascii')))
            user_id = payload['sub']
            issued_at = int(payload['iat'])
        except (binascii.Error, ValueError, KeyError, TypeError) as exc:
            raise MalformedTokenError("Invalid token format.") from exc
        if not isinstance(user_id, str) or not user_id:
            raise MalformedTokenError("Invalid token format.")
        return user_id, issued_at

    async def resolve(self, token: str) -> UserRecord:
        """Return the user *token* was issued to.

        Raises:
            MalformedTokenError: If the token does not decode, or its user no
                longer exists.
        """
        user_id, _ = self.decode(token)
        try:
            return await self._identity.find_by_identity(user_id)
        except NotFoundError as exc:
            raise MalformedTokenError("Invalid token: User not found.") from exc
