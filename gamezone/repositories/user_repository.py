"""Repository for user accounts ([{id, username, email, credential}, ...])."""
from typing import Dict, List, Optional

from ..credentials import hash_secret
from .base import BaseRepository


class UserRepository(BaseRepository):
    """Persists user records under the ``users`` key.

    Schema::

        [
            {
                "id":         "<user id>",
                "username":   "<display name>",
                "email":      "<email>",
                "credential": "pbkdf2_sha256$..."
            }
        ]

    Legacy records carrying a ``password_plaintext`` field are re-hashed on
    load and written back, so plaintext never survives a read.
    """

    KEY = 'users'

    def _empty(self) -> List[Dict]:
        return []

    def _normalise(self, raw) -> List[Dict]:
        if not isinstance(raw, list):
            self._log.warning("Stored users are not a list; starting empty")
            return []
        records = []
        for entry in raw:
            if not isinstance(entry, dict) or 'id' not in entry:
                self._log.warning("Dropping malformed user entry: %r", entry)
                continue
            if 'password_plaintext' in entry:
                secret = str(entry['password_plaintext'])
                entry = {k: v for k, v in entry.items()
                         if k not in ('password_plaintext', 'favorites')}
                entry['credential'] = hash_secret(secret)
            records.append(entry)
        return records

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def all(self) -> List[Dict]:
        return list(self.data)

    def find_by_id(self, user_id: str) -> Optional[Dict]:
        return next((u for u in self.data if u['id'] == str(user_id)), None)

    def find_by_email(self, email: str) -> Optional[Dict]:
        wanted = email.strip().lower()
        return next((u for u in self.data
                     if str(u.get('email') or '').strip().lower() == wanted), None)

    def find_by_username(self, username: str) -> Optional[Dict]:
        return next((u for u in self.data if u.get('username') == username), None)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append(self, record: Dict) -> bool:
        """Add *record* and persist.  Returns ``False`` if not persisted."""
        self.data.append(record)
        return self.save()

