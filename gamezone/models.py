"""Record types persisted by the repositories.

Records travel as plain dicts on disk; these dataclasses are what the
services hand back to callers.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Dict


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class UserRecord:
    """A registered account.

    ``credential`` holds a salted one-way hash (see
    :mod:`gamezone.credentials`), never the secret itself.
    """

    id: str
    username: str
    email: str
    credential: str = ''

    @classmethod
    def from_dict(cls, raw: Dict) -> 'UserRecord':
        return cls(
            id=str(raw['id']),
            username=raw.get('username', ''),
            email=raw.get('email', ''),
            credential=raw.get('credential', ''),
        )

    def to_dict(self) -> Dict:
        return asdict(self)

    def to_public(self) -> Dict:
        """Serialise without the credential, for display and API output."""
        return {'id': self.id, 'username': self.username, 'email': self.email}


@dataclass(frozen=True)
class ReviewDraft:
    """Caller-supplied fields of a new review.

    ``item_name`` and ``author_name`` are snapshots taken now; they are not
    updated if the game or the author is renamed later.
    """

    item_id: int
    item_name: str
    author_id: str
    author_name: str
    rating: int
    comment: str = ''


@dataclass(frozen=True)
class ReviewRecord:
    """A stored review.  Only ``rating`` and ``comment`` ever change."""

    id: str
    item_id: int
    item_name: str
    author_id: str
    author_name: str
    rating: int
    comment: str
    created_at: str

    @classmethod
    def from_draft(cls, review_id: str, draft: ReviewDraft,
                   created_at: str) -> 'ReviewRecord':
        return cls(
            id=review_id,
            item_id=int(draft.item_id),
            item_name=draft.item_name,
            author_id=str(draft.author_id),
            author_name=draft.author_name,
            rating=int(draft.rating),
            comment=draft.comment,
            created_at=created_at,
        )

    @classmethod
    def from_dict(cls, raw: Dict) -> 'ReviewRecord':
        return cls(
            id=str(raw['id']),
            item_id=int(raw['item_id']),
            item_name=raw.get('item_name', ''),
            author_id=str(raw.get('author_id', '')),
            author_name=raw.get('author_name', ''),
            rating=int(raw.get('rating', 0)),
            comment=raw.get('comment', ''),
            created_at=raw.get('created_at', ''),
        )

    def to_dict(self) -> Dict:
        return asdict(self)
