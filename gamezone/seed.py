"""First-run demo data written into an empty origin.

Seed users are declared with plaintext demo passwords and hashed on the way
in; nothing here is ever persisted in plaintext.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, List

from .credentials import hash_secret

DEMO_PASSWORD = 'password123'

_SEED_USERS = [
    ('user123', 'GamerGod', 'gamer@god.com', DEMO_PASSWORD),
    ('user456', 'WitcherFan', 'fan@witcher.com', DEMO_PASSWORD),
    ('user789', 'CasualPlayer', 'player@casual.com', DEMO_PASSWORD),
    # Single-sign-on account; its secret is random and never typed.
    ('google-user-007', 'Agent007', 'google@user.com', None),
]

# (id, item_id, item_name, author_id, author_name, rating, comment, days_ago)
_SEED_REVIEWS = [
    ('rev1', 3498, 'Grand Theft Auto V', 'user123', 'GamerGod', 5,
     'An absolute masterpiece. The world is huge and there is so much to do!', 5),
    ('rev2', 3328, 'The Witcher 3: Wild Hunt', 'user456', 'WitcherFan', 5,
     'Best RPG ever made. The story and characters are unforgettable.', 3),
    ('rev3', 3498, 'Grand Theft Auto V', 'user789', 'CasualPlayer', 4,
     'Online mode is fun with friends, but can be grindy.', 2),
    ('rev4', 4286, 'Half-Life 2', 'user123', 'GamerGod', 5,
     'A timeless classic that changed FPS games forever.', 10),
]


def default_users() -> List[Dict]:
    users = []
    for user_id, username, email, password in _SEED_USERS:
        secret = password if password is not None else secrets.token_urlsafe(24)
        users.append({
            'id': user_id,
            'username': username,
            'email': email,
            'credential': hash_secret(secret),
        })
    return users


def default_reviews() -> List[Dict]:
    now = datetime.now(timezone.utc)
    return [
        {
            'id': review_id,
            'item_id': item_id,
            'item_name': item_name,
            'author_id': author_id,
            'author_name': author_name,
            'rating': rating,
            'comment': comment,
            'created_at': (now - timedelta(days=days_ago)).isoformat(),
        }
        for (review_id, item_id, item_name, author_id, author_name,
             rating, comment, days_ago) in _SEED_REVIEWS
    ]


def default_favorites() -> Dict[str, List[int]]:
    return {'user123': [3498, 4200, 28, 4286]}
